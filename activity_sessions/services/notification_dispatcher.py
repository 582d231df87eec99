# activity_sessions/services/notification_dispatcher.py
"""
Outbox dispatcher: drains pending OutboxEvents into user inboxes and Kafka.
"""

import logging
from datetime import datetime
from typing import Optional

from kafka import KafkaProducer
from sqlalchemy.orm import Session

from activity_sessions import crud
from activity_sessions.core.config import settings

logger = logging.getLogger(__name__)


def dispatch_pending_notifications(
    db: Session,
    producer: Optional[KafkaProducer] = None,
    limit: Optional[int] = None,
) -> int:
    """
    Fan out undispatched outbox events, oldest first.

    Each event becomes one Notification row per recipient and, when a
    producer is available, one message on NOTIFICATIONS_TOPIC. A failing
    event is rolled back, its attempt recorded, and left pending for the
    next run.

    Returns: Number of events dispatched
    """
    events = crud.outbox_event.get_pending(
        db, limit=limit or settings.NOTIFICATION_DISPATCH_BATCH
    )
    dispatched = 0

    for event in events:
        event_id = event.id
        try:
            payload = event.payload or {}
            crud.notification.add_many(
                db,
                user_ids=payload.get("user_ids", []),
                type=event.event_type,
                title=payload.get("title", ""),
                message=payload.get("message", ""),
                activity_id=event.activity_id,
                session_id=event.session_id,
                data=payload.get("data"),
            )

            if producer is not None:
                producer.send(
                    settings.NOTIFICATIONS_TOPIC,
                    value={"event_id": event_id, **payload},
                )

            event.dispatched_at = datetime.now()
            db.commit()
            dispatched += 1

        except Exception as e:
            db.rollback()
            logger.error(f"Failed to dispatch notification event {event_id}: {e}", exc_info=True)
            crud.outbox_event.record_failure(db, event_id=event_id, error=str(e))

    if dispatched:
        logger.info(f"Dispatched {dispatched} notification event(s)")
    return dispatched
