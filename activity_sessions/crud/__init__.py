# activity_sessions/crud/__init__.py

from .crud_activity import activity
from .crud_activity_session import activity_session
from .crud_activity_participant import activity_participant
from .crud_activity_subscription import activity_subscription
from .crud_notification import notification
from .crud_outbox_event import outbox_event
