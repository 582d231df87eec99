# activity_sessions/models/activity_participant.py

import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from activity_sessions.db.base_class import Base


class ActivityParticipant(Base):
    """
    A user's membership in one session.

    Status: confirmed, waiting, interested. `position` is the per-session
    insertion counter used to break joined_at ties in the waitlist.
    """
    __tablename__ = "activity_participants"

    id = Column(String, primary_key=True, default=lambda: f"apt_{uuid.uuid4().hex[:12]}")
    session_id = Column(
        String, ForeignKey("activity_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String, nullable=False, index=True)  # No FK - users live in the auth service
    status = Column(String(20), nullable=False)
    position = Column(Integer, nullable=False)
    joined_at = Column(DateTime, nullable=False, default=datetime.now)

    session = relationship("ActivitySession", back_populates="participants")

    __table_args__ = (
        UniqueConstraint("session_id", "user_id", name="unique_session_participant"),
    )
