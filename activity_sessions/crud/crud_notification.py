# activity_sessions/crud/crud_notification.py
from typing import Any, Dict, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session

from activity_sessions.models.notification import Notification


class CRUDNotification:
    """Per-user notification inbox. Every query is scoped to the owning user."""

    def add_many(
        self,
        db: Session,
        *,
        user_ids: Sequence[str],
        type: str,
        title: str,
        message: str,
        activity_id: Optional[str] = None,
        session_id: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> List[Notification]:
        """Stage one inbox row per recipient; the caller commits."""
        rows = [
            Notification(
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                activity_id=activity_id,
                session_id=session_id,
                data=data,
            )
            for user_id in user_ids
        ]
        db.add_all(rows)
        db.flush()
        return rows

    def get_multi_for_user(
        self,
        db: Session,
        *,
        user_id: str,
        limit: int = 20,
        offset: int = 0,
        unread_only: bool = False,
    ) -> Tuple[List[Notification], int]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.read == False)  # noqa: E712
        total = query.count()
        notifications = (
            query.order_by(Notification.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return notifications, total

    def get_unread_count(self, db: Session, *, user_id: str) -> int:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.read == False)  # noqa: E712
            .count()
        )

    def mark_as_read(self, db: Session, *, notification_id: str, user_id: str) -> int:
        count = (
            db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .update({Notification.read: True}, synchronize_session=False)
        )
        db.commit()
        return count

    def mark_all_as_read(self, db: Session, *, user_id: str) -> int:
        count = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.read == False)  # noqa: E712
            .update({Notification.read: True}, synchronize_session=False)
        )
        db.commit()
        return count

    def delete(self, db: Session, *, notification_id: str, user_id: str) -> int:
        return self.delete_multiple(db, notification_ids=[notification_id], user_id=user_id)

    def delete_multiple(self, db: Session, *, notification_ids: Sequence[str], user_id: str) -> int:
        count = (
            db.query(Notification)
            .filter(Notification.id.in_(notification_ids), Notification.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return count

    def delete_all(self, db: Session, *, user_id: str) -> int:
        count = (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return count


notification = CRUDNotification()
