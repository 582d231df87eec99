# activity_sessions/models/__init__.py

from .activity import Activity
from .activity_session import ActivitySession
from .activity_participant import ActivityParticipant
from .activity_subscription import ActivitySubscription
from .notification import Notification, OutboxEvent
