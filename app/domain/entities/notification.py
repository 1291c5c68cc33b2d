"""Domain entities describing outbound notifications and their lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    """Delivery medium requested by the caller."""

    EMAIL = "EMAIL"
    SMS = "SMS"
    PUSH = "PUSH"


class NotificationStatus(str, Enum):
    """Lifecycle status of a notification.

    ``PENDING`` is the only non-terminal value; ``QUEUED`` is kept as an alias
    for clients that still use the older name.
    """

    PENDING = "PENDING"
    QUEUED = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not NotificationStatus.PENDING


@dataclass
class NotificationRequest:
    """Caller input used to create a notification."""

    recipient: str | None
    type: NotificationType | str
    body: str = ""
    title: str | None = None
    merchant_id: str | None = None


@dataclass
class Notification:
    """Notification tracked from submission until its publish outcome is known."""

    id: int | None
    recipient: str
    type: NotificationType
    body: str
    title: str | None = None
    merchant_id: str | None = None
    status: NotificationStatus = NotificationStatus.PENDING
    publish_attempts: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class OutboundMessage:
    """Message handed to the channel for downstream delivery."""

    notification_id: int
    topic: str
    type: NotificationType
    recipient: str
    body: str
    created_at: datetime
    title: str | None = None
    merchant_id: str | None = None


__all__ = [
    "Notification",
    "NotificationRequest",
    "NotificationStatus",
    "NotificationType",
    "OutboundMessage",
]
