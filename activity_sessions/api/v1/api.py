# activity_sessions/api/v1/api.py

from fastapi import APIRouter
from activity_sessions.api.v1.endpoints import (
    activities,
    sessions,
    notifications,
    internals,
)

# Main router for the v1 API.
api_router = APIRouter()

api_router.include_router(activities.router)
api_router.include_router(sessions.router)
api_router.include_router(notifications.router)
api_router.include_router(internals.router)
