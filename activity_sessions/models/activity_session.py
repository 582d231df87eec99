# activity_sessions/models/activity_session.py

import uuid
from datetime import datetime
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from activity_sessions.db.base_class import Base


class ActivitySession(Base):
    """
    One dated occurrence of an Activity.

    max_players is a snapshot of the activity's capacity at creation time and
    is not re-synced when the activity changes. is_cancelled is independent
    of status.
    """
    __tablename__ = "activity_sessions"

    id = Column(String, primary_key=True, default=lambda: f"ases_{uuid.uuid4().hex[:12]}")
    activity_id = Column(
        String, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(DateTime, nullable=False, index=True)
    # Calendar day of `date`; backs the one-session-per-day constraint.
    session_day = Column(Date, nullable=False)
    max_players = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, server_default="active", default="active")  # active, completed
    is_cancelled = Column(Boolean, nullable=False, server_default=text("false"), default=False)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    activity = relationship("Activity", back_populates="sessions")
    participants = relationship(
        "ActivityParticipant",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ActivityParticipant.position",
    )

    __table_args__ = (
        UniqueConstraint("activity_id", "session_day", name="unique_activity_session_day"),
    )
