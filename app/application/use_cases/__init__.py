"""Aggregate application use cases."""

from .notifications import NotificationDispatchService

__all__ = [
    "NotificationDispatchService",
]
