# activity_sessions/schemas/session.py
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime

from .activity import Activity
from .participant import Participant


class ActivitySession(BaseModel):
    id: str
    activity_id: str
    date: datetime
    max_players: int
    status: str
    is_cancelled: bool

    model_config = {"from_attributes": True}


class SessionUpdate(BaseModel):
    max_players: Optional[int] = Field(default=None, ge=2, le=100)
    is_cancelled: Optional[bool] = None
    # Human-readable reason forwarded to participants on cancellation
    reason: Optional[str] = Field(default=None, max_length=500)


class GenerateSessionsRequest(BaseModel):
    # Defaults to "now" when omitted
    from_date: Optional[date] = None
    weeks_ahead: int = Field(default=2, ge=0, le=52)


class SessionStats(BaseModel):
    confirmed_count: int
    waiting_count: int
    interested_count: int
    available_spots: int


class UserSessionStatus(BaseModel):
    is_participant: bool
    can_join: bool
    participant_status: Optional[str] = None


class SessionView(ActivitySession):
    """A session annotated with capacity statistics and the caller's status."""
    activity: Activity
    stats: SessionStats
    user_status: UserSessionStatus


class SessionDetail(ActivitySession):
    activity: Activity
    participants: List[Participant] = []


class ParticipationsView(BaseModel):
    upcoming: List[SessionView]
    past: List[SessionView]
