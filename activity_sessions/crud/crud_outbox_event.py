# activity_sessions/crud/crud_outbox_event.py
from typing import Any, Dict, List, Optional
from datetime import datetime
from sqlalchemy.orm import Session

from .base import CRUDBase
from activity_sessions.models.notification import OutboxEvent
from activity_sessions.schemas.notification import OutboxEvent as OutboxEventSchema


class CRUDOutboxEvent(CRUDBase[OutboxEvent, OutboxEventSchema, OutboxEventSchema]):

    def add_event(
        self,
        db: Session,
        *,
        event_type: str,
        payload: Dict[str, Any],
        activity_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> OutboxEvent:
        db_obj = self.model(
            event_type=event_type,
            activity_id=activity_id,
            session_id=session_id,
            payload=payload,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_pending(self, db: Session, *, limit: int = 100) -> List[OutboxEvent]:
        """Undispatched events, oldest first."""
        return (
            db.query(self.model)
            .filter(self.model.dispatched_at.is_(None))
            .order_by(self.model.created_at.asc())
            .limit(limit)
            .all()
        )

    def exists_since(
        self, db: Session, *, session_id: str, event_type: str, since: datetime
    ) -> bool:
        return (
            db.query(self.model.id)
            .filter(
                self.model.session_id == session_id,
                self.model.event_type == event_type,
                self.model.created_at >= since,
            )
            .first()
            is not None
        )

    def record_failure(self, db: Session, *, event_id: str, error: str) -> None:
        db.query(self.model).filter(self.model.id == event_id).update(
            {
                self.model.attempts: self.model.attempts + 1,
                self.model.last_error: error[:2000],
            },
            synchronize_session=False,
        )
        db.commit()


outbox_event = CRUDOutboxEvent(OutboxEvent)
