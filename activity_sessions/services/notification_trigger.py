# activity_sessions/services/notification_trigger.py
"""
Notification trigger: turns session state changes into outbox events.

Each notify_* method resolves recipients and the human-readable text, then
appends one OutboxEvent in its own commit. Callers invoke these only after
their own state change is committed. Failures never propagate: they are
rolled back, logged and swallowed, so a broken notification path cannot
fail a join, leave or materialization.
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from activity_sessions import crud
from activity_sessions.constants.status import NotificationType, ParticipantStatus
from activity_sessions.models.notification import OutboxEvent

logger = logging.getLogger(__name__)

ATTENDING_STATUSES = [ParticipantStatus.CONFIRMED, ParticipantStatus.INTERESTED]


def _format_day(value: datetime) -> str:
    return value.strftime("%A %d %B")


def _format_day_time(value: datetime) -> str:
    return value.strftime("%A %d %B at %H:%M")


class NotificationTrigger:
    """Best-effort emitter of session notifications into the outbox."""

    def _emit(
        self,
        db: Session,
        *,
        event_type: str,
        user_ids: List[str],
        title: str,
        message: str,
        activity_id: str,
        session_id: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> OutboxEvent:
        payload = {
            "type": event_type,
            "user_ids": user_ids,
            "title": title,
            "message": message,
            "activity_id": activity_id,
            "session_id": session_id,
            "data": data,
        }
        event = crud.outbox_event.add_event(
            db,
            event_type=event_type,
            payload=payload,
            activity_id=activity_id,
            session_id=session_id,
        )
        logger.info(
            f"Queued {event_type} notification {event.id} for {len(user_ids)} recipient(s)"
        )
        return event

    def notify_new_sessions(
        self, db: Session, *, activity_id: str, session_ids: Sequence[str]
    ) -> Optional[OutboxEvent]:
        """Tell the activity's subscribers that sessions were materialized."""
        try:
            activity = crud.activity.get(db, id=activity_id)
            if not activity or not session_ids:
                return None

            user_ids = crud.activity_subscription.get_user_ids_for_activity(
                db, activity_id=activity_id
            )
            if not user_ids:
                return None

            sessions = [crud.activity_session.get(db, id=session_id) for session_id in session_ids]
            sessions = sorted((s for s in sessions if s is not None), key=lambda s: s.date)
            if not sessions:
                return None
            if len(sessions) == 1:
                message = (
                    f"A new {activity.name} session is available on "
                    f"{_format_day(sessions[0].date)}"
                )
            else:
                message = f"{len(sessions)} new {activity.name} sessions are available"

            return self._emit(
                db,
                event_type=NotificationType.NEW_SESSIONS_AVAILABLE,
                user_ids=user_ids,
                title="New sessions available",
                message=message,
                activity_id=activity_id,
                data={"session_ids": list(session_ids)},
            )
        except Exception as e:
            db.rollback()
            logger.error(
                f"Failed to queue new sessions notification for activity {activity_id}: {e}",
                exc_info=True,
            )
            return None

    def notify_session_confirmed(self, db: Session, *, session_id: str) -> Optional[OutboxEvent]:
        """A session just reached its activity's minimum player count."""
        try:
            session_obj = crud.activity_session.get_with_details(db, session_id=session_id)
            if not session_obj:
                return None

            user_ids = crud.activity_participant.get_user_ids(
                db, session_id=session_id, statuses=ATTENDING_STATUSES
            )
            if not user_ids:
                return None

            return self._emit(
                db,
                event_type=NotificationType.SESSION_CONFIRMED,
                user_ids=user_ids,
                title="Session confirmed!",
                message=(
                    f"The {session_obj.activity.name} session on "
                    f"{_format_day_time(session_obj.date)} is confirmed. See you there!"
                ),
                activity_id=session_obj.activity_id,
                session_id=session_id,
            )
        except Exception as e:
            db.rollback()
            logger.error(
                f"Failed to queue confirmation notification for session {session_id}: {e}",
                exc_info=True,
            )
            return None

    def notify_session_cancelled(
        self, db: Session, *, session_id: str, reason: Optional[str] = None
    ) -> Optional[OutboxEvent]:
        try:
            session_obj = crud.activity_session.get_with_details(db, session_id=session_id)
            if not session_obj:
                return None

            user_ids = crud.activity_participant.get_user_ids(db, session_id=session_id)
            if not user_ids:
                return None

            message = (
                f"The {session_obj.activity.name} session on "
                f"{_format_day(session_obj.date)} has been cancelled."
            )
            if reason:
                message = f"{message} Reason: {reason}"

            return self._emit(
                db,
                event_type=NotificationType.SESSION_CANCELLED,
                user_ids=user_ids,
                title="Session cancelled",
                message=message,
                activity_id=session_obj.activity_id,
                session_id=session_id,
                data={"reason": reason} if reason else None,
            )
        except Exception as e:
            db.rollback()
            logger.error(
                f"Failed to queue cancellation notification for session {session_id}: {e}",
                exc_info=True,
            )
            return None

    def notify_session_reminder(self, db: Session, *, session_id: str) -> Optional[OutboxEvent]:
        try:
            session_obj = crud.activity_session.get_with_details(db, session_id=session_id)
            if not session_obj:
                return None

            user_ids = crud.activity_participant.get_user_ids(
                db, session_id=session_id, statuses=ATTENDING_STATUSES
            )
            if not user_ids:
                return None

            return self._emit(
                db,
                event_type=NotificationType.SESSION_REMINDER,
                user_ids=user_ids,
                title="Session reminder",
                message=(
                    f"Don't forget: {session_obj.activity.name} on "
                    f"{_format_day_time(session_obj.date)}"
                ),
                activity_id=session_obj.activity_id,
                session_id=session_id,
            )
        except Exception as e:
            db.rollback()
            logger.error(
                f"Failed to queue reminder for session {session_id}: {e}",
                exc_info=True,
            )
            return None


# Singleton instance
notification_trigger = NotificationTrigger()
