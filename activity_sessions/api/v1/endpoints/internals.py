# activity_sessions/api/v1/endpoints/internals.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from kafka import KafkaProducer
from sqlalchemy.orm import Session

from activity_sessions.api import deps
from activity_sessions.core.kafka_producer import get_kafka_producer
from activity_sessions.scheduler import get_scheduler_status
from activity_sessions.services import session_upkeep
from activity_sessions.services.notification_dispatcher import dispatch_pending_notifications

# The key is checked before any endpoint dependency runs.
router = APIRouter(
    prefix="/internal",
    tags=["Internal"],
    dependencies=[Depends(deps.get_internal_api_key)],
)

SWEEPS = {
    "generate-sessions": session_upkeep.generate_all_upcoming_sessions,
    "complete-sessions": session_upkeep.update_completed_sessions,
    "cleanup-sessions": session_upkeep.cleanup_old_sessions,
    "session-reminders": session_upkeep.create_session_reminders,
}


@router.post("/sweeps/{name}")
def run_sweep(
    name: str,
    db: Session = Depends(deps.get_db),
    producer: Optional[KafkaProducer] = Depends(get_kafka_producer),
):
    """
    Run one upkeep sweep now, for external cron callers.
    `dispatch-notifications` drains the outbox.
    """
    if name == "dispatch-notifications":
        count = dispatch_pending_notifications(db, producer=producer)
    elif name in SWEEPS:
        count = SWEEPS[name](db)
    else:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown sweep: {name}")
    return {"sweep": name, "count": count}


@router.get("/scheduler")
def scheduler_status():
    return get_scheduler_status()
