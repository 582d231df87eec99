# activity_sessions/schemas/participant.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class Participant(BaseModel):
    id: str
    session_id: str
    user_id: str
    status: str
    joined_at: datetime

    model_config = {"from_attributes": True}


class JoinSessionResponse(BaseModel):
    participant: Participant
    message: str


class LeaveSessionResponse(BaseModel):
    message: str
    # Waitlisted user confirmed into the freed slot, if any
    promoted_user_id: Optional[str] = None
