"""Errors raised by the notification domain."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for notification failures."""


class ValidationError(NotificationError, ValueError):
    """The request is malformed or misses required data."""


class InvalidStatusTransitionError(ValidationError):
    """A terminal notification was asked to move to a different status."""


class NotFoundError(NotificationError, LookupError):
    """No notification exists for the given identifier."""

    def __init__(self, notification_id: int) -> None:
        super().__init__(f"Notification not found with id: {notification_id}")
        self.notification_id = notification_id


class PublishFailure(NotificationError):
    """The message channel could not accept a notification."""


__all__ = [
    "InvalidStatusTransitionError",
    "NotFoundError",
    "NotificationError",
    "PublishFailure",
    "ValidationError",
]
