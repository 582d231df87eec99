# activity_sessions/services/recurrence.py
"""
Recurrence expansion: activity rule + date window -> session datetimes.

Pure functions, no database access. All datetimes are naive local time;
every occurrence is anchored at `anchor_hour` on its calendar day whatever
the activity's configured start time.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Union

from activity_sessions.constants.status import RecurringType, WEEKDAYS


def _weekday_number(day_name: str) -> int:
    try:
        return WEEKDAYS[day_name.lower()]
    except KeyError:
        raise ValueError(f"Unknown weekday: {day_name!r}")


def _first_on_or_after(start: date, weekday: int) -> date:
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def _next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def _weekly_days(weekday: int, start: date, end: date) -> List[date]:
    days = []
    current = _first_on_or_after(start, weekday)
    while current <= end:
        days.append(current)
        current += timedelta(days=7)
    return days


def _monthly_days(weekday: int, start: date, end: date) -> List[date]:
    """First `weekday` of every month touched by [start, end], clipped to the window."""
    days = []
    month_start = start.replace(day=1)
    while month_start <= end:
        first = _first_on_or_after(month_start, weekday)
        if start <= first <= end:
            days.append(first)
        month_start = _next_month(month_start)
    return days


def expand_recurrence(
    recurring_days: Iterable[str],
    recurring_type: str,
    from_date: Union[date, datetime],
    weeks_ahead: int,
    anchor_hour: int = 12,
) -> List[datetime]:
    """
    Expand a recurrence rule over [from_date, from_date + 7 * weeks_ahead days].

    Both window bounds are inclusive and compared at calendar-day
    granularity. The result is sorted ascending with no duplicate days.

    Raises:
        ValueError: unknown weekday or recurring type, or negative horizon
    """
    if weeks_ahead < 0:
        raise ValueError("weeks_ahead must be >= 0")

    start = from_date.date() if isinstance(from_date, datetime) else from_date
    end = start + timedelta(days=7 * weeks_ahead)

    if recurring_type == RecurringType.WEEKLY:
        expand = _weekly_days
    elif recurring_type == RecurringType.MONTHLY:
        expand = _monthly_days
    else:
        raise ValueError(f"Unknown recurring type: {recurring_type!r}")

    days = set()
    for day_name in recurring_days:
        days.update(expand(_weekday_number(day_name), start, end))

    anchor = time(hour=anchor_hour)
    return [datetime.combine(day, anchor) for day in sorted(days)]
