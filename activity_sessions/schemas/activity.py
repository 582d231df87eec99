# activity_sessions/schemas/activity.py
from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

Weekday = Literal[
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
]


class ActivityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, json_schema_extra={"example": "Thursday five-a-side"})
    description: Optional[str] = None
    sport: str = Field(..., min_length=1, max_length=50)
    min_players: int = Field(..., ge=2, le=100)
    max_players: int = Field(..., ge=2, le=100)
    recurring_days: List[Weekday]
    recurring_type: Literal["weekly", "monthly"]
    start_time: str = Field(..., pattern=_TIME_PATTERN)
    end_time: str = Field(..., pattern=_TIME_PATTERN)


class ActivityUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    sport: Optional[str] = Field(default=None, min_length=1, max_length=50)
    min_players: Optional[int] = Field(default=None, ge=2, le=100)
    max_players: Optional[int] = Field(default=None, ge=2, le=100)
    recurring_days: Optional[List[Weekday]] = None
    recurring_type: Optional[Literal["weekly", "monthly"]] = None
    start_time: Optional[str] = Field(default=None, pattern=_TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=_TIME_PATTERN)


class Activity(BaseModel):
    id: str
    code: str
    name: str
    description: Optional[str] = None
    sport: str
    min_players: int
    max_players: int
    recurring_days: List[str]
    recurring_type: str
    start_time: str
    end_time: str
    created_by: str
    is_public: bool = True
    created_at: datetime

    model_config = {"from_attributes": True}


class ActivityDetail(Activity):
    is_subscribed: bool = False


class ActivityListItem(Activity):
    upcoming_sessions_count: int = 0
    total_sessions_count: int = 0
    next_session_date: Optional[datetime] = None
    is_subscribed: bool = False


class Pagination(BaseModel):
    page: int
    limit: int
    total_count: int
    total_pages: int


class ActivityPage(BaseModel):
    activities: List[ActivityListItem]
    pagination: Pagination


class JoinByCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
