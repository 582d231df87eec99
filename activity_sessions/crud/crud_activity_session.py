# activity_sessions/crud/crud_activity_session.py
"""
Session store for materialized activity sessions.

Write helpers only flush; the calling service owns commit/rollback so that
check-then-write sequences stay inside one transaction.
"""

from typing import List, Optional, Sequence
from datetime import date, datetime, time, timedelta
from sqlalchemy.orm import Session, joinedload, selectinload

from .base import CRUDBase
from activity_sessions.constants.status import SessionStatus
from activity_sessions.models.activity_session import ActivitySession
from activity_sessions.schemas.session import ActivitySession as ActivitySessionSchema, SessionUpdate


class CRUDActivitySession(CRUDBase[ActivitySession, ActivitySessionSchema, SessionUpdate]):

    def find_session_on_day(
        self, db: Session, *, activity_id: str, day: date
    ) -> Optional[ActivitySession]:
        """Existing session of this activity on the given calendar day, if any."""
        start_of_day = datetime.combine(day, time.min)
        end_of_day = start_of_day + timedelta(days=1)
        return (
            db.query(self.model)
            .filter(
                self.model.activity_id == activity_id,
                self.model.date >= start_of_day,
                self.model.date < end_of_day,
            )
            .first()
        )

    def create_session(
        self, db: Session, *, activity_id: str, session_date: datetime, max_players: int
    ) -> ActivitySession:
        db_obj = self.model(
            activity_id=activity_id,
            date=session_date,
            session_day=session_date.date(),
            max_players=max_players,
            status=SessionStatus.ACTIVE,
            is_cancelled=False,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def get_for_update(self, db: Session, *, session_id: str) -> Optional[ActivitySession]:
        """Load a session holding a row lock; serializes join/leave per session."""
        return (
            db.query(self.model)
            .filter(self.model.id == session_id)
            .with_for_update()
            .first()
        )

    def get_with_details(self, db: Session, *, session_id: str) -> Optional[ActivitySession]:
        return (
            db.query(self.model)
            .options(joinedload(self.model.activity), selectinload(self.model.participants))
            .filter(self.model.id == session_id)
            .first()
        )

    def get_upcoming(
        self,
        db: Session,
        *,
        now: datetime,
        limit: int,
        activity_ids: Optional[Sequence[str]] = None,
    ) -> List[ActivitySession]:
        """Active sessions dated from `now`, earliest first, capped at `limit`."""
        query = (
            db.query(self.model)
            .options(joinedload(self.model.activity), selectinload(self.model.participants))
            .filter(self.model.date >= now, self.model.status == SessionStatus.ACTIVE)
        )
        if activity_ids is not None:
            query = query.filter(self.model.activity_id.in_(activity_ids))
        return query.order_by(self.model.date.asc()).limit(limit).all()

    def get_upcoming_for_activity(
        self, db: Session, *, activity_id: str, now: datetime, limit: Optional[int] = None
    ) -> List[ActivitySession]:
        query = (
            db.query(self.model)
            .filter(self.model.activity_id == activity_id, self.model.date >= now)
            .order_by(self.model.date.asc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_for_activity(self, db: Session, *, activity_id: str) -> int:
        return db.query(self.model).filter(self.model.activity_id == activity_id).count()

    def get_starting_between(
        self, db: Session, *, start: datetime, end: datetime
    ) -> List[ActivitySession]:
        """Active, non-cancelled sessions dated within [start, end]."""
        return (
            db.query(self.model)
            .options(joinedload(self.model.activity), selectinload(self.model.participants))
            .filter(
                self.model.date >= start,
                self.model.date <= end,
                self.model.status == SessionStatus.ACTIVE,
                self.model.is_cancelled == False,  # noqa: E712
            )
            .order_by(self.model.date.asc())
            .all()
        )

    def mark_completed_before(self, db: Session, *, before: datetime) -> int:
        count = (
            db.query(self.model)
            .filter(self.model.date < before, self.model.status == SessionStatus.ACTIVE)
            .update({self.model.status: SessionStatus.COMPLETED}, synchronize_session=False)
        )
        db.commit()
        return count

    def delete_completed_before(self, db: Session, *, cutoff: datetime) -> int:
        sessions = (
            db.query(self.model)
            .filter(self.model.date < cutoff, self.model.status == SessionStatus.COMPLETED)
            .all()
        )
        # Participant rows go with them through ON DELETE CASCADE
        for session_obj in sessions:
            db.delete(session_obj)
        db.commit()
        return len(sessions)


activity_session = CRUDActivitySession(ActivitySession)
