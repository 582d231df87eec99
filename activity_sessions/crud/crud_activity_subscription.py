# activity_sessions/crud/crud_activity_subscription.py
from typing import List, Optional
from sqlalchemy.orm import Session

from activity_sessions.models.activity_subscription import ActivitySubscription


class CRUDActivitySubscription:
    """CRUD operations for activity subscriptions."""

    def get(self, db: Session, *, user_id: str, activity_id: str) -> Optional[ActivitySubscription]:
        return (
            db.query(ActivitySubscription)
            .filter(
                ActivitySubscription.user_id == user_id,
                ActivitySubscription.activity_id == activity_id,
            )
            .first()
        )

    def create(self, db: Session, *, user_id: str, activity_id: str) -> ActivitySubscription:
        """Stage a subscription; the caller commits."""
        subscription = ActivitySubscription(user_id=user_id, activity_id=activity_id)
        db.add(subscription)
        db.flush()
        return subscription

    def delete(self, db: Session, *, subscription: ActivitySubscription) -> None:
        db.delete(subscription)
        db.flush()

    def get_activity_ids_for_user(self, db: Session, *, user_id: str) -> List[str]:
        rows = (
            db.query(ActivitySubscription.activity_id)
            .filter(ActivitySubscription.user_id == user_id)
            .all()
        )
        return [activity_id for (activity_id,) in rows]

    def get_user_ids_for_activity(self, db: Session, *, activity_id: str) -> List[str]:
        rows = (
            db.query(ActivitySubscription.user_id)
            .filter(ActivitySubscription.activity_id == activity_id)
            .order_by(ActivitySubscription.created_at.asc())
            .all()
        )
        return [user_id for (user_id,) in rows]


# Singleton instance
activity_subscription = CRUDActivitySubscription()
