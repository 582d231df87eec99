# activity_sessions/models/activity_subscription.py

import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from activity_sessions.db.base_class import Base


class ActivitySubscription(Base):
    __tablename__ = "activity_subscriptions"

    id = Column(String, primary_key=True, default=lambda: f"asub_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False, index=True)
    activity_id = Column(
        String, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    activity = relationship("Activity", back_populates="subscriptions")

    __table_args__ = (
        UniqueConstraint("user_id", "activity_id", name="unique_user_activity_subscription"),
    )
