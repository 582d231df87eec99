# activity_sessions/services/session_materializer.py
"""
Session materialization: expanded recurrence dates -> ActivitySession rows.

Idempotent per calendar day. The (activity_id, session_day) unique
constraint closes the race between two concurrent runs: the loser's insert
raises IntegrityError, is rolled back and skipped like any existing day.
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Sequence, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from activity_sessions import crud
from activity_sessions.core.config import settings
from activity_sessions.core.exceptions import ActivityNotFoundError, InvalidActivityError
from activity_sessions.models.activity import Activity
from activity_sessions.models.activity_session import ActivitySession
from activity_sessions.services.notification_trigger import (
    NotificationTrigger,
    notification_trigger,
)
from activity_sessions.services.recurrence import expand_recurrence

logger = logging.getLogger(__name__)


def materialize(
    db: Session, *, activity: Activity, dates: Sequence[datetime]
) -> List[ActivitySession]:
    """
    Ensure one session exists per date for this activity.

    Returns only the sessions created by this call. Each new session is
    committed on its own so an interrupted run keeps what it already made.
    """
    created = []
    for session_date in dates:
        existing = crud.activity_session.find_session_on_day(
            db, activity_id=activity.id, day=session_date.date()
        )
        if existing:
            continue

        try:
            session_obj = crud.activity_session.create_session(
                db,
                activity_id=activity.id,
                session_date=session_date,
                max_players=activity.max_players,
            )
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                f"Session for activity {activity.id} on {session_date.date()} "
                f"was created concurrently, skipping"
            )
            continue

        logger.info(f"Created session {session_obj.id} for activity {activity.id} on {session_date}")
        created.append(session_obj)

    return created


def generate_sessions(
    db: Session,
    *,
    activity_id: str,
    from_date: Optional[Union[date, datetime]] = None,
    weeks_ahead: Optional[int] = None,
    now: Optional[datetime] = None,
    notifier: NotificationTrigger = notification_trigger,
) -> List[ActivitySession]:
    """
    Materialize an activity's sessions for the next `weeks_ahead` weeks.

    Args:
        activity_id: Activity to expand
        from_date: Window start, defaults to today
        weeks_ahead: Horizon in whole weeks, defaults to DEFAULT_WEEKS_AHEAD
        now: Clock override

    Returns: Newly created sessions, earliest first

    Raises:
        ActivityNotFoundError: unknown activity
        InvalidActivityError: negative horizon or malformed recurrence rule
    """
    activity = crud.activity.get(db, id=activity_id)
    if not activity:
        raise ActivityNotFoundError(activity_id)

    if from_date is None:
        from_date = now or datetime.now()
    if weeks_ahead is None:
        weeks_ahead = settings.DEFAULT_WEEKS_AHEAD

    try:
        dates = expand_recurrence(
            activity.recurring_days,
            activity.recurring_type,
            from_date,
            weeks_ahead,
            anchor_hour=settings.SESSION_ANCHOR_HOUR,
        )
    except ValueError as e:
        raise InvalidActivityError(str(e), field="recurring_days")

    created = materialize(db, activity=activity, dates=dates)

    if created:
        logger.info(f"Generated {len(created)} session(s) for activity {activity_id}")
        notifier.notify_new_sessions(
            db, activity_id=activity_id, session_ids=[s.id for s in created]
        )

    return created
