# activity_sessions/constants/status.py
"""
Constants for activity, session and participant status values.

Provides type-safe constants to replace hardcoded strings throughout the codebase.
"""



class ParticipantStatus:
    """Membership status of a user in one session."""
    CONFIRMED = "confirmed"
    WAITING = "waiting"
    # Soft signal: counted for notifications, never for capacity.
    INTERESTED = "interested"


class SessionStatus:
    """Lifecycle status of a session, independent of cancellation."""
    ACTIVE = "active"
    COMPLETED = "completed"


class RecurringType:
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class NotificationType:
    NEW_SESSIONS_AVAILABLE = "new_sessions_available"
    SESSION_CONFIRMED = "session_confirmed"
    SESSION_CANCELLED = "session_cancelled"
    SESSION_REMINDER = "session_reminder"


# Python's date.weekday() numbering (Monday == 0).
WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

MIN_PLAYERS_FLOOR = 2
MAX_PLAYERS_CEILING = 100
