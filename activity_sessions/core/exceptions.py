# activity_sessions/core/exceptions.py
"""
Exception hierarchy for the activity sessions service.

Service functions raise these; the API layer translates them into HTTP
responses. All of them inherit from ActivityServiceError.
"""

from typing import Optional


class ActivityServiceError(Exception):
    """Base exception for all activity service errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "ACTIVITY_SERVICE_ERROR",
        details: Optional[dict] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ===========================================
# Lookup Errors
# ===========================================


class ActivityNotFoundError(ActivityServiceError):
    """Referenced activity does not exist."""

    def __init__(self, activity_id: str):
        self.activity_id = activity_id
        super().__init__(
            message=f"Activity {activity_id} not found",
            error_code="ACTIVITY_NOT_FOUND",
            details={"activity_id": activity_id},
        )


class SessionNotFoundError(ActivityServiceError):
    """Referenced session does not exist."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            message=f"Session {session_id} not found",
            error_code="SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )


# ===========================================
# Admission Errors
# ===========================================


class SessionCancelledError(ActivityServiceError):
    """Join attempted on a cancelled session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            message=f"Session {session_id} has been cancelled",
            error_code="SESSION_CANCELLED",
            details={"session_id": session_id},
        )


class AlreadyParticipatingError(ActivityServiceError):
    """The user already has a participant row in this session."""

    def __init__(self, session_id: str, user_id: str):
        self.session_id = session_id
        self.user_id = user_id
        super().__init__(
            message=f"User {user_id} already participates in session {session_id}",
            error_code="ALREADY_PARTICIPATING",
            details={"session_id": session_id, "user_id": user_id},
        )


class NotParticipatingError(ActivityServiceError):
    """Leave attempted without an existing membership."""

    def __init__(self, session_id: str, user_id: str):
        self.session_id = session_id
        self.user_id = user_id
        super().__init__(
            message=f"User {user_id} does not participate in session {session_id}",
            error_code="NOT_PARTICIPATING",
            details={"session_id": session_id, "user_id": user_id},
        )


class CapacityConflictError(ActivityServiceError):
    """A write would push the confirmed count above the session capacity."""

    def __init__(self, session_id: str, confirmed: int, max_players: int):
        self.session_id = session_id
        super().__init__(
            message=(
                f"Session {session_id} capacity conflict "
                f"({confirmed} confirmed, capacity {max_players})"
            ),
            error_code="CAPACITY_CONFLICT",
            details={
                "session_id": session_id,
                "confirmed": confirmed,
                "max_players": max_players,
            },
        )


# ===========================================
# Activity Management Errors
# ===========================================


class NotActivityOwnerError(ActivityServiceError):
    """Only the activity's creator may change or delete it."""

    def __init__(self, activity_id: str, user_id: str):
        super().__init__(
            message=f"User {user_id} is not allowed to modify activity {activity_id}",
            error_code="NOT_ACTIVITY_OWNER",
            details={"activity_id": activity_id, "user_id": user_id},
        )


class InvalidActivityError(ActivityServiceError):
    """Activity data breaks a business rule."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="INVALID_ACTIVITY",
            details={"field": field} if field else {},
        )
