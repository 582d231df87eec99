# activity_sessions/api/v1/endpoints/activities.py
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy.orm import Session

from activity_sessions.api import deps
from activity_sessions.api.errors import to_http_exception
from activity_sessions.background_tasks.session_tasks import dispatch_notifications_task
from activity_sessions.core.exceptions import ActivityServiceError, NotActivityOwnerError
from activity_sessions.schemas.activity import (
    Activity,
    ActivityCreate,
    ActivityDetail,
    ActivityPage,
    ActivityUpdate,
    JoinByCodeRequest,
)
from activity_sessions.schemas.session import (
    ActivitySession as ActivitySessionSchema,
    GenerateSessionsRequest,
    ParticipationsView,
)
from activity_sessions.schemas.subscription import Subscription, UnsubscribeResponse
from activity_sessions.schemas.token import TokenPayload
from activity_sessions.services import activity_service, session_materializer, upcoming

router = APIRouter(prefix="/activities", tags=["Activities"])
logger = logging.getLogger(__name__)


@router.post("", response_model=ActivityDetail, status_code=status.HTTP_201_CREATED)
def create_activity(
    activity_in: ActivityCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Create an activity. The creator is subscribed automatically and the
    first weeks of sessions are generated right away.
    """
    try:
        activity = activity_service.create_activity(
            db, user_id=current_user.user_id, obj_in=activity_in
        )
        session_materializer.generate_sessions(db, activity_id=activity.id)
        result = activity_service.get_activity(
            db, activity_id=activity.id, user_id=current_user.user_id
        )
    except ActivityServiceError as e:
        raise to_http_exception(e)

    background_tasks.add_task(dispatch_notifications_task)
    return result


@router.get("", response_model=ActivityPage)
def list_activities(
    sport: Optional[str] = None,
    created_by: Optional[str] = None,
    recurring_type: Optional[Literal["weekly", "monthly"]] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return activity_service.list_activities(
        db,
        user_id=current_user.user_id,
        sport=sport,
        created_by=created_by,
        recurring_type=recurring_type,
        page=page,
        limit=limit,
    )


@router.get("/my-created", response_model=List[Activity])
def list_my_created_activities(
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return activity_service.list_created_activities(db, user_id=current_user.user_id)


@router.get("/my-participations", response_model=ParticipationsView)
def list_my_participations(
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return upcoming.find_user_participations(db, user_id=current_user.user_id)


@router.post("/join-by-code", response_model=ActivityDetail)
def join_by_code(
    join_in: JoinByCodeRequest,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Subscribe to an activity from its 8-character share code."""
    try:
        activity = activity_service.subscribe_by_code(
            db, code=join_in.code, user_id=current_user.user_id
        )
        return activity_service.get_activity(
            db, activity_id=activity.id, user_id=current_user.user_id
        )
    except ActivityServiceError as e:
        raise to_http_exception(e)


@router.get("/{activity_id}", response_model=ActivityDetail)
def get_activity(
    activity_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    try:
        return activity_service.get_activity(
            db, activity_id=activity_id, user_id=current_user.user_id
        )
    except ActivityServiceError as e:
        raise to_http_exception(e)


@router.put("/{activity_id}", response_model=Activity)
def update_activity(
    activity_id: str,
    activity_in: ActivityUpdate,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    try:
        return activity_service.update_activity(
            db, activity_id=activity_id, user_id=current_user.user_id, obj_in=activity_in
        )
    except ActivityServiceError as e:
        raise to_http_exception(e)


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity(
    activity_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    try:
        activity_service.delete_activity(
            db, activity_id=activity_id, user_id=current_user.user_id
        )
    except ActivityServiceError as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{activity_id}/subscribe",
    response_model=Subscription,
    status_code=status.HTTP_201_CREATED,
)
def subscribe(
    activity_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    try:
        return activity_service.subscribe(
            db, activity_id=activity_id, user_id=current_user.user_id
        )
    except ActivityServiceError as e:
        raise to_http_exception(e)


@router.delete("/{activity_id}/subscribe", response_model=UnsubscribeResponse)
def unsubscribe(
    activity_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Unsubscribe and leave every future session of the activity."""
    removed = activity_service.unsubscribe(
        db, activity_id=activity_id, user_id=current_user.user_id
    )
    return UnsubscribeResponse(
        message="Unsubscribed from activity",
        removed_participations=removed,
    )


@router.post("/{activity_id}/generate-sessions", response_model=List[ActivitySessionSchema])
def generate_sessions(
    activity_id: str,
    generate_in: GenerateSessionsRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Materialize sessions for the activity. Safe to repeat: days that already
    have a session are skipped. Owner only.
    """
    try:
        activity = activity_service.get_activity(db, activity_id=activity_id)
        if activity.created_by != current_user.user_id:
            raise NotActivityOwnerError(activity_id, current_user.user_id)

        created = session_materializer.generate_sessions(
            db,
            activity_id=activity_id,
            from_date=generate_in.from_date,
            weeks_ahead=generate_in.weeks_ahead,
        )
    except ActivityServiceError as e:
        raise to_http_exception(e)

    logger.info(f"User {current_user.user_id} generated {len(created)} session(s) for {activity_id}")
    background_tasks.add_task(dispatch_notifications_task)
    return created
