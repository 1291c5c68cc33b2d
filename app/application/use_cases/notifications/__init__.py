"""Use cases for submitting notifications and tracking their delivery status."""

from .dispatch import NotificationDispatchService, SessionFactory
from .messages import build_outbound_message, topic_for
from .validators import (
    build_pending_notification,
    coerce_notification_status,
    coerce_notification_type,
)

__all__ = [
    "NotificationDispatchService",
    "SessionFactory",
    "build_outbound_message",
    "build_pending_notification",
    "coerce_notification_status",
    "coerce_notification_type",
    "topic_for",
]
