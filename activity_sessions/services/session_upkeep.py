# activity_sessions/services/session_upkeep.py
"""
Periodic upkeep over all sessions: rolling materialization, completion,
retention cleanup and reminders.

Each function takes an open db session and returns a count; the APScheduler
jobs in background_tasks and the internal sweep endpoints both call these.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from activity_sessions import crud
from activity_sessions.constants.status import NotificationType
from activity_sessions.core.config import settings
from activity_sessions.services.notification_trigger import (
    NotificationTrigger,
    notification_trigger,
)
from activity_sessions.services.session_materializer import generate_sessions

logger = logging.getLogger(__name__)

REMINDER_DEDUPE_WINDOW = timedelta(hours=24)


def generate_all_upcoming_sessions(
    db: Session,
    *,
    weeks_ahead: Optional[int] = None,
    now: Optional[datetime] = None,
    notifier: NotificationTrigger = notification_trigger,
) -> int:
    """
    Materialize every public activity from now. One failing activity is
    logged and skipped.

    Returns: Total number of sessions created
    """
    now = now or datetime.now()
    total_created = 0

    for activity in crud.activity.get_all_public(db):
        activity_id = activity.id
        try:
            created = generate_sessions(
                db,
                activity_id=activity_id,
                from_date=now,
                weeks_ahead=weeks_ahead,
                now=now,
                notifier=notifier,
            )
            total_created += len(created)
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to generate sessions for activity {activity_id}: {e}", exc_info=True)

    logger.info(f"Rolling materialization created {total_created} session(s)")
    return total_created


def update_completed_sessions(db: Session, *, now: Optional[datetime] = None) -> int:
    """Mark active sessions dated before now as completed."""
    now = now or datetime.now()
    count = crud.activity_session.mark_completed_before(db, before=now)
    if count:
        logger.info(f"Marked {count} session(s) as completed")
    return count


def cleanup_old_sessions(
    db: Session, *, retention_days: Optional[int] = None, now: Optional[datetime] = None
) -> int:
    """Delete completed sessions older than the retention window."""
    now = now or datetime.now()
    if retention_days is None:
        retention_days = settings.OLD_SESSION_RETENTION_DAYS

    count = crud.activity_session.delete_completed_before(
        db, cutoff=now - timedelta(days=retention_days)
    )
    if count:
        logger.info(f"Deleted {count} completed session(s) older than {retention_days} days")
    return count


def create_session_reminders(
    db: Session,
    *,
    lookahead_hours: Optional[int] = None,
    now: Optional[datetime] = None,
    notifier: NotificationTrigger = notification_trigger,
) -> int:
    """
    Queue one reminder per session starting within the lookahead window,
    skipping sessions already reminded in the last 24 hours.

    Returns: Number of reminders queued
    """
    now = now or datetime.now()
    if lookahead_hours is None:
        lookahead_hours = settings.REMINDER_LOOKAHEAD_HOURS

    sessions = crud.activity_session.get_starting_between(
        db, start=now, end=now + timedelta(hours=lookahead_hours)
    )
    session_ids = [s.id for s in sessions]

    queued = 0
    for session_id in session_ids:
        already_sent = crud.outbox_event.exists_since(
            db,
            session_id=session_id,
            event_type=NotificationType.SESSION_REMINDER,
            since=now - REMINDER_DEDUPE_WINDOW,
        )
        if already_sent:
            continue
        if notifier.notify_session_reminder(db, session_id=session_id):
            queued += 1

    if queued:
        logger.info(f"Queued {queued} session reminder(s)")
    return queued
