# activity_sessions/models/activity.py
"""
Activity model: the recurring-session template.

An activity carries the recurrence rule (weekdays + weekly/monthly cadence)
and the capacity bounds that sessions snapshot when they are materialized.
"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    JSON,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from activity_sessions.db.base_class import Base


class Activity(Base):
    __tablename__ = "activities"

    id = Column(String, primary_key=True, default=lambda: f"act_{uuid.uuid4().hex[:12]}")
    code = Column(String(8), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    sport = Column(String(50), nullable=False, index=True)

    min_players = Column(Integer, nullable=False)
    max_players = Column(Integer, nullable=False)

    # e.g. ["tuesday", "thursday"]
    recurring_days = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    recurring_type = Column(String(10), nullable=False)  # weekly, monthly
    start_time = Column(String(5), nullable=False)  # local "HH:MM"
    end_time = Column(String(5), nullable=False)

    created_by = Column(String, nullable=False, index=True)  # No FK - users live in the auth service
    is_public = Column(Boolean, nullable=False, server_default=text("true"), default=True)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    sessions = relationship(
        "ActivitySession",
        back_populates="activity",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    subscriptions = relationship(
        "ActivitySubscription",
        back_populates="activity",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("min_players >= 2", name="check_activity_min_players"),
        CheckConstraint("max_players <= 100", name="check_activity_max_players"),
        CheckConstraint("min_players <= max_players", name="check_activity_player_bounds"),
    )
