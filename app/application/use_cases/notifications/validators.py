"""Validation helpers for notification use cases."""

from __future__ import annotations

from app.domain.entities import (
    Notification,
    NotificationRequest,
    NotificationStatus,
    NotificationType,
)
from app.domain.exceptions import ValidationError


def coerce_notification_type(value: NotificationType | str | None) -> NotificationType:
    """Return ``value`` as a :class:`NotificationType` or raise ``ValidationError``."""

    if isinstance(value, NotificationType):
        return value
    try:
        return NotificationType(str(value).strip().upper())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in NotificationType)
        raise ValidationError(
            f"Unsupported notification type {value!r}; expected one of {allowed}"
        ) from exc


def coerce_notification_status(
    value: NotificationStatus | str | None,
) -> NotificationStatus:
    """Return ``value`` as a :class:`NotificationStatus` or raise ``ValidationError``."""

    if isinstance(value, NotificationStatus):
        return value
    normalized = str(value).strip().upper()
    try:
        return NotificationStatus[normalized]
    except KeyError as exc:
        raise ValidationError(f"Unsupported notification status {value!r}") from exc


def build_pending_notification(request: NotificationRequest | None) -> Notification:
    """Validate ``request`` and turn it into an unsaved PENDING notification."""

    if request is None:
        raise ValidationError("Notification request must not be null")

    recipient = request.recipient
    if recipient is None or not str(recipient).strip():
        raise ValidationError("Recipient must not be blank")

    return Notification(
        id=None,
        recipient=str(recipient).strip(),
        type=coerce_notification_type(request.type),
        body=request.body or "",
        title=request.title,
        merchant_id=request.merchant_id,
        status=NotificationStatus.PENDING,
        publish_attempts=1,
    )


__all__ = [
    "build_pending_notification",
    "coerce_notification_status",
    "coerce_notification_type",
]
