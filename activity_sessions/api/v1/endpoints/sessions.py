# activity_sessions/api/v1/endpoints/sessions.py
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from activity_sessions.api import deps
from activity_sessions.api.errors import to_http_exception
from activity_sessions.background_tasks.session_tasks import dispatch_notifications_task
from activity_sessions.constants.status import ParticipantStatus
from activity_sessions.core.config import settings
from activity_sessions.core.exceptions import ActivityServiceError
from activity_sessions.core.limiter import MEMBERSHIP_RATE_LIMIT, limiter
from activity_sessions.schemas.participant import (
    JoinSessionResponse,
    LeaveSessionResponse,
    Participant,
)
from activity_sessions.schemas.session import (
    ActivitySession as ActivitySessionSchema,
    SessionDetail,
    SessionUpdate,
    SessionView,
)
from activity_sessions.schemas.token import TokenPayload
from activity_sessions.services import admission, upcoming

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("/upcoming", response_model=List[SessionView])
def list_upcoming_sessions(
    limit: int = Query(default=settings.UPCOMING_SESSIONS_LIMIT, ge=1, le=100),
    db: Session = Depends(deps.get_db),
    current_user: Optional[TokenPayload] = Depends(deps.get_current_user_optional),
):
    """
    Upcoming sessions, earliest first.

    Authenticated callers only see sessions of activities they subscribe to,
    minus sessions they already joined.
    """
    user_id = current_user.user_id if current_user else None
    return upcoming.get_upcoming_sessions(db, limit=limit, user_id=user_id)


@router.get("/{session_id}", response_model=SessionDetail)
def get_session(
    session_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    try:
        return upcoming.find_session_by_id(db, session_id=session_id)
    except ActivityServiceError as e:
        raise to_http_exception(e)


@router.put("/{session_id}", response_model=ActivitySessionSchema)
def update_session(
    session_id: str,
    session_in: SessionUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Change capacity or cancel a session. Only the activity owner may do this.
    Cancelling notifies every participant.
    """
    try:
        session_obj = admission.update_session(
            db, session_id=session_id, obj_in=session_in, user_id=current_user.user_id
        )
    except ActivityServiceError as e:
        raise to_http_exception(e)

    background_tasks.add_task(dispatch_notifications_task)
    return session_obj


@router.post("/{session_id}/join", response_model=JoinSessionResponse)
@limiter.limit(MEMBERSHIP_RATE_LIMIT)
def join_session(
    session_id: str,
    request: Request,  # Required for rate limiting
    background_tasks: BackgroundTasks,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Join a session: confirmed while spots remain, otherwise waitlisted.

    **Errors**:
    - 404: Session not found
    - 409: Session cancelled, already participating, or capacity conflict
    """
    try:
        participant = admission.join_session(
            db, session_id=session_id, user_id=current_user.user_id
        )
    except ActivityServiceError as e:
        raise to_http_exception(e)

    background_tasks.add_task(dispatch_notifications_task)

    if participant.status == ParticipantStatus.CONFIRMED:
        message = "You have joined the session"
    else:
        message = "You are on the waiting list for this session"
    return JoinSessionResponse(participant=Participant.model_validate(participant), message=message)


@router.post("/{session_id}/leave", response_model=LeaveSessionResponse)
@limiter.limit(MEMBERSHIP_RATE_LIMIT)
def leave_session(
    session_id: str,
    request: Request,  # Required for rate limiting
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    try:
        promoted = admission.leave_session(
            db, session_id=session_id, user_id=current_user.user_id
        )
    except ActivityServiceError as e:
        raise to_http_exception(e)

    return LeaveSessionResponse(
        message="You have left the session",
        promoted_user_id=promoted.user_id if promoted else None,
    )
