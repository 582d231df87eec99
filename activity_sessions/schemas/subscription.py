# activity_sessions/schemas/subscription.py
from pydantic import BaseModel
from datetime import datetime


class Subscription(BaseModel):
    id: str
    user_id: str
    activity_id: str
    created_at: datetime

    model_config = {"from_attributes": True}


class UnsubscribeResponse(BaseModel):
    message: str
    removed_participations: int
