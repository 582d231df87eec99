# activity_sessions/models/notification.py
import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB

from activity_sessions.db.base_class import Base

_json = JSON().with_variant(JSONB(), "postgresql")


class OutboxEvent(Base):
    """
    Outbound notification events.

    Written by the notification trigger after the state change that caused
    them has been committed, drained by the dispatcher.

    Event types:
    - new_sessions_available
    - session_confirmed
    - session_cancelled
    - session_reminder
    """
    __tablename__ = "notification_outbox"

    id = Column(String, primary_key=True, default=lambda: f"obx_{uuid.uuid4().hex[:12]}")
    event_type = Column(String(50), nullable=False, index=True)
    activity_id = Column(String, nullable=True, index=True)
    session_id = Column(String, nullable=True, index=True)
    # {"user_ids": [...], "title": ..., "message": ..., plus event specific keys}
    payload = Column(_json, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    dispatched_at = Column(DateTime, nullable=True)
    attempts = Column(Integer, nullable=False, server_default="0", default=0)
    last_error = Column(Text, nullable=True)


class Notification(Base):
    """Per-user inbox entry produced when an outbox event is dispatched."""
    __tablename__ = "notifications"

    id = Column(String, primary_key=True, default=lambda: f"ntf_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    activity_id = Column(String, nullable=True)
    session_id = Column(String, nullable=True)
    data = Column(_json, nullable=True)
    read = Column(Boolean, nullable=False, server_default=text("false"), default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
