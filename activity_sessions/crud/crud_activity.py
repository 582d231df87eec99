# activity_sessions/crud/crud_activity.py
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from .base import CRUDBase
from activity_sessions.models.activity import Activity
from activity_sessions.schemas.activity import ActivityCreate, ActivityUpdate


class CRUDActivity(CRUDBase[Activity, ActivityCreate, ActivityUpdate]):

    def get_by_code(self, db: Session, *, code: str) -> Optional[Activity]:
        return db.query(self.model).filter(self.model.code == code).first()

    def code_exists(self, db: Session, *, code: str) -> bool:
        return db.query(self.model.id).filter(self.model.code == code).first() is not None

    def create_with_owner(
        self, db: Session, *, obj_in: ActivityCreate, owner_id: str, code: str
    ) -> Activity:
        """Stage a new activity without committing; the caller owns the transaction."""
        db_obj = self.model(**obj_in.model_dump(), created_by=owner_id, code=code, is_public=True)
        db.add(db_obj)
        db.flush()
        return db_obj

    def get_multi_filtered(
        self,
        db: Session,
        *,
        sport: Optional[str] = None,
        created_by: Optional[str] = None,
        recurring_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Activity], int]:
        """Activities matching the filters, newest first, plus the total count."""
        query = db.query(self.model)
        if sport:
            query = query.filter(self.model.sport == sport)
        if created_by:
            query = query.filter(self.model.created_by == created_by)
        if recurring_type:
            query = query.filter(self.model.recurring_type == recurring_type)

        total_count = query.count()
        activities = (
            query.order_by(self.model.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return activities, total_count

    def get_by_creator(self, db: Session, *, user_id: str) -> List[Activity]:
        return (
            db.query(self.model)
            .filter(self.model.created_by == user_id)
            .order_by(self.model.created_at.desc())
            .all()
        )

    def get_all_public(self, db: Session) -> List[Activity]:
        return db.query(self.model).filter(self.model.is_public == True).all()  # noqa: E712


activity = CRUDActivity(Activity)
