# activity_sessions/crud/crud_activity_participant.py
"""
Participant queries and writes.

Ordering is always (joined_at, position): position is the per-session
insertion counter, so ties on joined_at fall back to insertion order.
Write helpers only flush; services commit.
"""

from typing import List, Optional, Sequence
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from activity_sessions.constants.status import ParticipantStatus
from activity_sessions.models.activity_participant import ActivityParticipant
from activity_sessions.models.activity_session import ActivitySession


class CRUDActivityParticipant:
    """CRUD operations for session participants."""

    def get_by_session_and_user(
        self, db: Session, *, session_id: str, user_id: str
    ) -> Optional[ActivityParticipant]:
        return (
            db.query(ActivityParticipant)
            .filter(
                ActivityParticipant.session_id == session_id,
                ActivityParticipant.user_id == user_id,
            )
            .first()
        )

    def list_participants(
        self, db: Session, *, session_id: str, status: Optional[str] = None
    ) -> List[ActivityParticipant]:
        """Participants of a session in join order, optionally filtered by status."""
        query = db.query(ActivityParticipant).filter(ActivityParticipant.session_id == session_id)
        if status:
            query = query.filter(ActivityParticipant.status == status)
        return query.order_by(
            ActivityParticipant.joined_at.asc(), ActivityParticipant.position.asc()
        ).all()

    def count_by_status(self, db: Session, *, session_id: str, status: str) -> int:
        return db.query(func.count(ActivityParticipant.id)).filter(
            ActivityParticipant.session_id == session_id,
            ActivityParticipant.status == status,
        ).scalar() or 0

    def get_user_ids(
        self, db: Session, *, session_id: str, statuses: Optional[Sequence[str]] = None
    ) -> List[str]:
        query = db.query(ActivityParticipant.user_id).filter(
            ActivityParticipant.session_id == session_id
        )
        if statuses:
            query = query.filter(ActivityParticipant.status.in_(statuses))
        rows = query.order_by(
            ActivityParticipant.joined_at.asc(), ActivityParticipant.position.asc()
        ).all()
        return [user_id for (user_id,) in rows]

    def insert_participant(
        self, db: Session, *, session_id: str, user_id: str, status: str
    ) -> ActivityParticipant:
        next_position = (
            db.query(func.max(ActivityParticipant.position))
            .filter(ActivityParticipant.session_id == session_id)
            .scalar()
            or 0
        ) + 1
        participant = ActivityParticipant(
            session_id=session_id,
            user_id=user_id,
            status=status,
            position=next_position,
        )
        db.add(participant)
        db.flush()
        return participant

    def delete_participant(self, db: Session, *, participant: ActivityParticipant) -> None:
        db.delete(participant)
        db.flush()

    def update_participant_status(
        self, db: Session, *, participant: ActivityParticipant, status: str
    ) -> ActivityParticipant:
        participant.status = status
        db.flush()
        return participant

    def get_first_waiting(self, db: Session, *, session_id: str) -> Optional[ActivityParticipant]:
        """Head of the waitlist: earliest joined_at, then insertion order."""
        return (
            db.query(ActivityParticipant)
            .filter(
                ActivityParticipant.session_id == session_id,
                ActivityParticipant.status == ParticipantStatus.WAITING,
            )
            .order_by(ActivityParticipant.joined_at.asc(), ActivityParticipant.position.asc())
            .first()
        )

    def get_by_user(self, db: Session, *, user_id: str) -> List[ActivityParticipant]:
        """All of a user's participations with their sessions, by session date."""
        return (
            db.query(ActivityParticipant)
            .join(ActivitySession, ActivitySession.id == ActivityParticipant.session_id)
            .options(
                joinedload(ActivityParticipant.session).joinedload(ActivitySession.activity),
                joinedload(ActivityParticipant.session).selectinload(ActivitySession.participants),
            )
            .filter(ActivityParticipant.user_id == user_id)
            .order_by(ActivitySession.date.asc())
            .all()
        )


# Singleton instance
activity_participant = CRUDActivityParticipant()
