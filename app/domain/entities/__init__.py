"""Domain entities exposed by the application."""

from .notification import (
    Notification,
    NotificationRequest,
    NotificationStatus,
    NotificationType,
    OutboundMessage,
)

__all__ = [
    "Notification",
    "NotificationRequest",
    "NotificationStatus",
    "NotificationType",
    "OutboundMessage",
]
