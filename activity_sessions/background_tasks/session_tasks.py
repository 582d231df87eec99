# activity_sessions/background_tasks/session_tasks.py
"""
Background tasks for session upkeep.

Each task opens its own database session, so it can run from APScheduler,
from a FastAPI BackgroundTasks hook, or from the internal sweep endpoints:
- generate_upcoming_sessions_task(): daily
- complete_past_sessions_task(): hourly
- cleanup_old_sessions_task(): daily
- session_reminders_task(): hourly
- dispatch_notifications_task(): every minute and after notifying requests
"""

import logging

from activity_sessions.core.kafka_producer import create_kafka_producer
from activity_sessions.db.session import SessionLocal
from activity_sessions.services import session_upkeep
from activity_sessions.services.notification_dispatcher import dispatch_pending_notifications

logger = logging.getLogger(__name__)


def generate_upcoming_sessions_task() -> int:
    db = SessionLocal()
    try:
        return session_upkeep.generate_all_upcoming_sessions(db)
    except Exception as e:
        logger.error(f"Error in generate_upcoming_sessions_task: {e}", exc_info=True)
        db.rollback()
        return 0
    finally:
        db.close()


def complete_past_sessions_task() -> int:
    db = SessionLocal()
    try:
        return session_upkeep.update_completed_sessions(db)
    except Exception as e:
        logger.error(f"Error in complete_past_sessions_task: {e}", exc_info=True)
        db.rollback()
        return 0
    finally:
        db.close()


def cleanup_old_sessions_task() -> int:
    db = SessionLocal()
    try:
        return session_upkeep.cleanup_old_sessions(db)
    except Exception as e:
        logger.error(f"Error in cleanup_old_sessions_task: {e}", exc_info=True)
        db.rollback()
        return 0
    finally:
        db.close()


def session_reminders_task() -> int:
    db = SessionLocal()
    try:
        return session_upkeep.create_session_reminders(db)
    except Exception as e:
        logger.error(f"Error in session_reminders_task: {e}", exc_info=True)
        db.rollback()
        return 0
    finally:
        db.close()


def dispatch_notifications_task() -> int:
    """
    Drain the notification outbox. Kafka is optional: without a broker the
    events still land in the users' inboxes.
    """
    db = SessionLocal()
    producer = create_kafka_producer()
    try:
        return dispatch_pending_notifications(db, producer=producer)
    except Exception as e:
        logger.error(f"Error in dispatch_notifications_task: {e}", exc_info=True)
        db.rollback()
        return 0
    finally:
        if producer is not None:
            producer.flush()
            producer.close()
        db.close()
