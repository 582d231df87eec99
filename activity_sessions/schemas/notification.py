# activity_sessions/schemas/notification.py
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime


class Notification(BaseModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    activity_id: Optional[str] = None
    session_id: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationPage(BaseModel):
    notifications: List[Notification]
    total: int


class UnreadCount(BaseModel):
    count: int


class NotificationIds(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class OutboxEvent(BaseModel):
    id: str
    event_type: str
    activity_id: Optional[str] = None
    session_id: Optional[str] = None
    payload: Dict[str, Any]
    created_at: datetime
    dispatched_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
