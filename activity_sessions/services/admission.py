# activity_sessions/services/admission.py
"""
Capacity & admission control for session membership.

Every write here holds a row lock on the session for the whole
check-then-write sequence, so concurrent joins cannot both take the last
confirmed slot and concurrent leaves cannot promote the same waiting
participant twice. Notifications are queued only after the commit.
"""

import logging
from typing import Any, Dict, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from activity_sessions import crud
from activity_sessions.constants.status import ParticipantStatus
from activity_sessions.core.exceptions import (
    ActivityServiceError,
    AlreadyParticipatingError,
    CapacityConflictError,
    NotActivityOwnerError,
    NotParticipatingError,
    SessionCancelledError,
    SessionNotFoundError,
)
from activity_sessions.models.activity_participant import ActivityParticipant
from activity_sessions.models.activity_session import ActivitySession
from activity_sessions.schemas.session import SessionUpdate
from activity_sessions.services.notification_trigger import (
    NotificationTrigger,
    notification_trigger,
)

logger = logging.getLogger(__name__)


def _count_confirmed(db: Session, session_id: str) -> int:
    return crud.activity_participant.count_by_status(
        db, session_id=session_id, status=ParticipantStatus.CONFIRMED
    )


def join_session(
    db: Session,
    *,
    session_id: str,
    user_id: str,
    notifier: NotificationTrigger = notification_trigger,
) -> ActivityParticipant:
    """
    Admit a user to a session as confirmed, or waiting when it is full.

    When this join brings the confirmed count exactly to the activity's
    min_players, a confirmation notification is queued.

    Raises:
        SessionNotFoundError, SessionCancelledError,
        AlreadyParticipatingError, CapacityConflictError
    """
    try:
        session_obj = crud.activity_session.get_for_update(db, session_id=session_id)
        if not session_obj:
            raise SessionNotFoundError(session_id)
        if session_obj.is_cancelled:
            raise SessionCancelledError(session_id)

        existing = crud.activity_participant.get_by_session_and_user(
            db, session_id=session_id, user_id=user_id
        )
        if existing:
            raise AlreadyParticipatingError(session_id, user_id)

        max_players = session_obj.max_players
        min_players = session_obj.activity.min_players

        confirmed_count = _count_confirmed(db, session_id)
        status = (
            ParticipantStatus.CONFIRMED
            if confirmed_count < max_players
            else ParticipantStatus.WAITING
        )

        participant = crud.activity_participant.insert_participant(
            db, session_id=session_id, user_id=user_id, status=status
        )

        if status == ParticipantStatus.CONFIRMED:
            confirmed_count = _count_confirmed(db, session_id)
            if confirmed_count > max_players:
                raise CapacityConflictError(session_id, confirmed_count, max_players)

        db.commit()
        db.refresh(participant)

    except ActivityServiceError as e:
        db.rollback()
        logger.warning(f"Join rejected for user {user_id} on session {session_id}: {e.message}")
        raise
    except IntegrityError:
        # Lost a race against the same user's concurrent join.
        db.rollback()
        logger.warning(f"Duplicate join for user {user_id} on session {session_id}")
        raise AlreadyParticipatingError(session_id, user_id)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to join session {session_id} for user {user_id}: {e}", exc_info=True)
        raise

    if status == ParticipantStatus.CONFIRMED:
        logger.info(
            f"User {user_id} confirmed for session {session_id} "
            f"({confirmed_count}/{max_players})"
        )
        if confirmed_count == min_players:
            notifier.notify_session_confirmed(db, session_id=session_id)
    else:
        logger.info(f"User {user_id} added to waitlist for session {session_id}")

    return participant


def promote_next_waiting(db: Session, *, session_id: str) -> Optional[ActivityParticipant]:
    """
    Confirm the longest-waiting participant, if any.

    Does not commit; the caller must hold the session lock. The
    min_players confirmation is not re-evaluated on promotion.
    """
    next_in_line = crud.activity_participant.get_first_waiting(db, session_id=session_id)
    if not next_in_line:
        return None

    crud.activity_participant.update_participant_status(
        db, participant=next_in_line, status=ParticipantStatus.CONFIRMED
    )
    return next_in_line


def leave_session(db: Session, *, session_id: str, user_id: str) -> Optional[ActivityParticipant]:
    """
    Remove a user from a session, promoting the waitlist head when a
    confirmed slot frees up.

    Returns: The promoted participant, or None

    Raises:
        SessionNotFoundError, NotParticipatingError
    """
    try:
        session_obj = crud.activity_session.get_for_update(db, session_id=session_id)
        if not session_obj:
            raise SessionNotFoundError(session_id)

        participant = crud.activity_participant.get_by_session_and_user(
            db, session_id=session_id, user_id=user_id
        )
        if not participant:
            raise NotParticipatingError(session_id, user_id)

        was_confirmed = participant.status == ParticipantStatus.CONFIRMED
        crud.activity_participant.delete_participant(db, participant=participant)

        promoted = None
        if was_confirmed:
            promoted = promote_next_waiting(db, session_id=session_id)

        db.commit()

    except ActivityServiceError as e:
        db.rollback()
        logger.warning(f"Leave rejected for user {user_id} on session {session_id}: {e.message}")
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to leave session {session_id} for user {user_id}: {e}", exc_info=True)
        raise

    logger.info(f"User {user_id} left session {session_id}")
    if promoted:
        logger.info(f"Promoted user {promoted.user_id} from waitlist in session {session_id}")
    return promoted


def update_session(
    db: Session,
    *,
    session_id: str,
    obj_in: Union[SessionUpdate, Dict[str, Any]],
    user_id: Optional[str] = None,
    notifier: NotificationTrigger = notification_trigger,
) -> ActivitySession:
    """
    Change a session's capacity and/or cancellation flag.

    When user_id is given it must be the activity's owner. Lowering
    capacity below the current confirmed count is rejected; raising it does
    not promote anyone. Cancelling queues a notification to every
    participant with the optional reason.

    Raises:
        SessionNotFoundError, NotActivityOwnerError, CapacityConflictError
    """
    if isinstance(obj_in, dict):
        update_data = dict(obj_in)
    else:
        update_data = obj_in.model_dump(exclude_unset=True)
    reason = update_data.pop("reason", None)

    try:
        session_obj = crud.activity_session.get_for_update(db, session_id=session_id)
        if not session_obj:
            raise SessionNotFoundError(session_id)
        if user_id is not None and session_obj.activity.created_by != user_id:
            raise NotActivityOwnerError(session_obj.activity_id, user_id)

        was_cancelled = session_obj.is_cancelled

        new_capacity = update_data.get("max_players")
        if new_capacity is not None:
            confirmed_count = _count_confirmed(db, session_id)
            if new_capacity < confirmed_count:
                raise CapacityConflictError(session_id, confirmed_count, new_capacity)
            session_obj.max_players = new_capacity

        if update_data.get("is_cancelled") is not None:
            session_obj.is_cancelled = update_data["is_cancelled"]

        db.commit()
        db.refresh(session_obj)

    except ActivityServiceError as e:
        db.rollback()
        logger.warning(f"Update rejected for session {session_id}: {e.message}")
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to update session {session_id}: {e}", exc_info=True)
        raise

    if session_obj.is_cancelled and not was_cancelled:
        logger.info(f"Session {session_id} cancelled")
        notifier.notify_session_cancelled(db, session_id=session_id, reason=reason)

    return session_obj
