# activity_sessions/services/upcoming.py
"""
Read-side views over sessions: the upcoming feed, session detail and a
user's own participations.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from activity_sessions import crud
from activity_sessions.constants.status import ParticipantStatus
from activity_sessions.core.config import settings
from activity_sessions.core.exceptions import SessionNotFoundError
from activity_sessions.models.activity_session import ActivitySession
from activity_sessions.schemas.activity import Activity as ActivitySchema
from activity_sessions.schemas.session import (
    ParticipationsView,
    SessionStats,
    SessionView,
    UserSessionStatus,
)

logger = logging.getLogger(__name__)


def compute_stats(session_obj: ActivitySession) -> SessionStats:
    statuses = [p.status for p in session_obj.participants]
    confirmed_count = statuses.count(ParticipantStatus.CONFIRMED)
    return SessionStats(
        confirmed_count=confirmed_count,
        waiting_count=statuses.count(ParticipantStatus.WAITING),
        interested_count=statuses.count(ParticipantStatus.INTERESTED),
        available_spots=max(0, session_obj.max_players - confirmed_count),
    )


def build_session_view(session_obj: ActivitySession, user_id: Optional[str] = None) -> SessionView:
    """Annotate a session (activity and participants loaded) for one viewer."""
    stats = compute_stats(session_obj)

    own_row = None
    if user_id:
        own_row = next((p for p in session_obj.participants if p.user_id == user_id), None)
    is_participant = own_row is not None

    return SessionView(
        id=session_obj.id,
        activity_id=session_obj.activity_id,
        date=session_obj.date,
        max_players=session_obj.max_players,
        status=session_obj.status,
        is_cancelled=session_obj.is_cancelled,
        activity=ActivitySchema.model_validate(session_obj.activity),
        stats=stats,
        user_status=UserSessionStatus(
            is_participant=is_participant,
            can_join=(
                not is_participant
                and not session_obj.is_cancelled
                and stats.available_spots > 0
            ),
            participant_status=own_row.status if own_row else None,
        ),
    )


def get_upcoming_sessions(
    db: Session,
    *,
    limit: Optional[int] = None,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[SessionView]:
    """
    Future active sessions, earliest first.

    With a user_id the feed is restricted to that user's subscribed
    activities (none subscribed -> empty) and sessions the user already
    participates in are dropped after the `limit` is applied, so the result
    can be shorter than `limit` even when more sessions qualify.
    """
    now = now or datetime.now()
    if limit is None:
        limit = settings.UPCOMING_SESSIONS_LIMIT

    activity_ids = None
    if user_id:
        activity_ids = crud.activity_subscription.get_activity_ids_for_user(db, user_id=user_id)
        if not activity_ids:
            return []

    sessions = crud.activity_session.get_upcoming(
        db, now=now, limit=limit, activity_ids=activity_ids
    )

    views = [build_session_view(s, user_id) for s in sessions]
    visible = [v for v in views if not v.user_status.is_participant]
    logger.debug(
        f"Upcoming feed for user {user_id}: {len(sessions)} fetched, {len(visible)} shown"
    )
    return visible


def find_session_by_id(db: Session, *, session_id: str) -> ActivitySession:
    """Session with its activity and participants (join order)."""
    session_obj = crud.activity_session.get_with_details(db, session_id=session_id)
    if not session_obj:
        raise SessionNotFoundError(session_id)
    return session_obj


def find_user_participations(
    db: Session, *, user_id: str, now: Optional[datetime] = None
) -> ParticipationsView:
    """A user's sessions split into upcoming (soonest first) and past (latest first)."""
    now = now or datetime.now()
    participations = crud.activity_participant.get_by_user(db, user_id=user_id)

    upcoming = []
    past = []
    for participation in participations:
        view = build_session_view(participation.session, user_id)
        if participation.session.date >= now:
            upcoming.append(view)
        else:
            past.append(view)

    past.reverse()
    return ParticipationsView(upcoming=upcoming, past=past)
