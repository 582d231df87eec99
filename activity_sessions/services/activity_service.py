# activity_sessions/services/activity_service.py
"""
Activity management and subscriptions.

Owner-only mutation, join codes, and unsubscribe cleanup of a user's
future participations.
"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from activity_sessions import crud
from activity_sessions.constants.status import (
    MAX_PLAYERS_CEILING,
    MIN_PLAYERS_FLOOR,
    ParticipantStatus,
)
from activity_sessions.core.exceptions import (
    ActivityNotFoundError,
    InvalidActivityError,
    NotActivityOwnerError,
)
from activity_sessions.models.activity import Activity
from activity_sessions.models.activity_subscription import ActivitySubscription
from activity_sessions.schemas.activity import (
    ActivityCreate,
    ActivityDetail,
    ActivityListItem,
    ActivityPage,
    ActivityUpdate,
    Pagination,
)
from activity_sessions.services.admission import promote_next_waiting
from activity_sessions.utils.activity_code import (
    generate_unique_activity_code,
    is_valid_activity_code,
    sanitize_activity_code,
)

logger = logging.getLogger(__name__)

UPCOMING_PREVIEW_SIZE = 5

NULLABLE_FIELDS = {"description"}


def _validate_rules(data: Dict[str, Any]) -> None:
    """Cross-field business rules; single-field bounds are left to the schemas."""
    if not data.get("recurring_days"):
        raise InvalidActivityError("At least one weekday must be selected", field="recurring_days")

    min_players = data["min_players"]
    max_players = data["max_players"]
    if not MIN_PLAYERS_FLOOR <= min_players <= max_players <= MAX_PLAYERS_CEILING:
        raise InvalidActivityError(
            f"Players must satisfy {MIN_PLAYERS_FLOOR} <= min <= max <= {MAX_PLAYERS_CEILING}",
            field="min_players",
        )

    # Zero-padded "HH:MM" compares correctly as text
    if data["start_time"] >= data["end_time"]:
        raise InvalidActivityError("Start time must be before end time", field="start_time")


def _get_or_404(db: Session, activity_id: str) -> Activity:
    activity = crud.activity.get(db, id=activity_id)
    if not activity:
        raise ActivityNotFoundError(activity_id)
    return activity


def _get_owned(db: Session, activity_id: str, user_id: str) -> Activity:
    activity = _get_or_404(db, activity_id)
    if activity.created_by != user_id:
        raise NotActivityOwnerError(activity_id, user_id)
    return activity


def _is_subscribed(db: Session, activity_id: str, user_id: Optional[str]) -> bool:
    if not user_id:
        return False
    return crud.activity_subscription.get(db, user_id=user_id, activity_id=activity_id) is not None


def create_activity(db: Session, *, user_id: str, obj_in: ActivityCreate) -> Activity:
    """Create an activity with a fresh join code; the creator is subscribed to it."""
    _validate_rules(obj_in.model_dump())

    try:
        code = generate_unique_activity_code(db)
        activity = crud.activity.create_with_owner(db, obj_in=obj_in, owner_id=user_id, code=code)
        crud.activity_subscription.create(db, user_id=user_id, activity_id=activity.id)
        db.commit()
        db.refresh(activity)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create activity for user {user_id}: {e}", exc_info=True)
        raise

    logger.info(f"Activity {activity.id} ({activity.code}) created by user {user_id}")
    return activity


def list_activities(
    db: Session,
    *,
    user_id: Optional[str] = None,
    sport: Optional[str] = None,
    created_by: Optional[str] = None,
    recurring_type: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    now: Optional[datetime] = None,
) -> ActivityPage:
    now = now or datetime.now()
    activities, total_count = crud.activity.get_multi_filtered(
        db,
        sport=sport,
        created_by=created_by,
        recurring_type=recurring_type,
        skip=(page - 1) * limit,
        limit=limit,
    )

    subscribed_ids = set()
    if user_id:
        subscribed_ids = set(crud.activity_subscription.get_activity_ids_for_user(db, user_id=user_id))

    items = []
    for activity in activities:
        upcoming = crud.activity_session.get_upcoming_for_activity(
            db, activity_id=activity.id, now=now, limit=UPCOMING_PREVIEW_SIZE
        )
        item = ActivityListItem.model_validate(activity)
        item.upcoming_sessions_count = len(upcoming)
        item.total_sessions_count = crud.activity_session.count_for_activity(
            db, activity_id=activity.id
        )
        item.next_session_date = upcoming[0].date if upcoming else None
        item.is_subscribed = activity.id in subscribed_ids
        items.append(item)

    return ActivityPage(
        activities=items,
        pagination=Pagination(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=math.ceil(total_count / limit) if limit else 0,
        ),
    )


def get_activity(db: Session, *, activity_id: str, user_id: Optional[str] = None) -> ActivityDetail:
    activity = _get_or_404(db, activity_id)
    detail = ActivityDetail.model_validate(activity)
    detail.is_subscribed = _is_subscribed(db, activity_id, user_id)
    return detail


def update_activity(
    db: Session, *, activity_id: str, user_id: str, obj_in: ActivityUpdate
) -> Activity:
    """
    Owner-only patch. Existing sessions keep their max_players snapshot.
    """
    activity = _get_owned(db, activity_id, user_id)
    # An explicit null only clears nullable columns
    update_data = {
        k: v
        for k, v in obj_in.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }

    merged = {
        "recurring_days": activity.recurring_days,
        "min_players": activity.min_players,
        "max_players": activity.max_players,
        "start_time": activity.start_time,
        "end_time": activity.end_time,
    }
    merged.update({k: v for k, v in update_data.items() if k in merged})
    _validate_rules(merged)

    try:
        activity = crud.activity.update(db, db_obj=activity, obj_in=update_data)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to update activity {activity_id}: {e}", exc_info=True)
        raise

    logger.info(f"Activity {activity_id} updated by user {user_id}")
    return activity


def delete_activity(db: Session, *, activity_id: str, user_id: str) -> None:
    """Owner-only delete; sessions, participants and subscriptions go with it."""
    _get_owned(db, activity_id, user_id)
    try:
        crud.activity.remove(db, id=activity_id)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete activity {activity_id}: {e}", exc_info=True)
        raise
    logger.info(f"Activity {activity_id} deleted by user {user_id}")


def list_created_activities(db: Session, *, user_id: str) -> List[Activity]:
    return crud.activity.get_by_creator(db, user_id=user_id)


def subscribe(db: Session, *, activity_id: str, user_id: str) -> ActivitySubscription:
    """Subscribe a user; subscribing twice returns the existing row."""
    _get_or_404(db, activity_id)

    existing = crud.activity_subscription.get(db, user_id=user_id, activity_id=activity_id)
    if existing:
        return existing

    try:
        subscription = crud.activity_subscription.create(
            db, user_id=user_id, activity_id=activity_id
        )
        db.commit()
        db.refresh(subscription)
    except IntegrityError:
        # Concurrent subscribe by the same user
        db.rollback()
        return crud.activity_subscription.get(db, user_id=user_id, activity_id=activity_id)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to subscribe user {user_id} to {activity_id}: {e}", exc_info=True)
        raise

    logger.info(f"User {user_id} subscribed to activity {activity_id}")
    return subscription


def subscribe_by_code(db: Session, *, code: str, user_id: str) -> Activity:
    """Resolve a user-typed join code ("abcd efgh" is accepted) and subscribe."""
    clean_code = sanitize_activity_code(code)
    if not is_valid_activity_code(clean_code):
        raise InvalidActivityError(f"Invalid activity code: {code!r}", field="code")

    activity = crud.activity.get_by_code(db, code=clean_code)
    if not activity:
        raise ActivityNotFoundError(clean_code)

    subscribe(db, activity_id=activity.id, user_id=user_id)
    return activity


def unsubscribe(
    db: Session, *, activity_id: str, user_id: str, now: Optional[datetime] = None
) -> int:
    """
    Drop a subscription and the user's participations in future sessions of
    the activity. Past participations are kept. A confirmed departure
    promotes that session's waitlist head, as a leave would.

    Returns: Number of participations removed
    """
    now = now or datetime.now()
    removed = 0

    try:
        subscription = crud.activity_subscription.get(db, user_id=user_id, activity_id=activity_id)
        if subscription:
            crud.activity_subscription.delete(db, subscription=subscription)

        future_sessions = crud.activity_session.get_upcoming_for_activity(
            db, activity_id=activity_id, now=now
        )
        for session_obj in future_sessions:
            crud.activity_session.get_for_update(db, session_id=session_obj.id)
            participant = crud.activity_participant.get_by_session_and_user(
                db, session_id=session_obj.id, user_id=user_id
            )
            if not participant:
                continue

            was_confirmed = participant.status == ParticipantStatus.CONFIRMED
            crud.activity_participant.delete_participant(db, participant=participant)
            removed += 1
            if was_confirmed:
                promote_next_waiting(db, session_id=session_obj.id)

        db.commit()

    except Exception as e:
        db.rollback()
        logger.error(f"Failed to unsubscribe user {user_id} from {activity_id}: {e}", exc_info=True)
        raise

    logger.info(
        f"User {user_id} unsubscribed from activity {activity_id}, "
        f"left {removed} future session(s)"
    )
    return removed
