"""Derive channel messages from persisted notifications."""

from __future__ import annotations

from typing import Final

from app.domain.entities import Notification, NotificationType, OutboundMessage

_TOPIC_SUFFIXES: Final[dict[NotificationType, str]] = {
    NotificationType.EMAIL: "email",
    NotificationType.SMS: "sms",
    NotificationType.PUSH: "push",
}


def topic_for(notification_type: NotificationType, prefix: str) -> str:
    """Return the channel topic that consumers of ``notification_type`` listen on."""

    try:
        suffix = _TOPIC_SUFFIXES[notification_type]
    except KeyError as exc:
        raise ValueError(f"Unsupported notification type: {notification_type!r}") from exc
    return f"{prefix}.{suffix}"


def build_outbound_message(notification: Notification, topic_prefix: str) -> OutboundMessage:
    """Build the message published for ``notification``.

    Only stored records carry the identifier and timestamp consumers need to
    report back, so unsaved entities are rejected.
    """

    if notification.id is None or notification.created_at is None:
        raise ValueError("Outbound messages require a persisted notification")

    return OutboundMessage(
        notification_id=notification.id,
        topic=topic_for(notification.type, topic_prefix),
        type=notification.type,
        recipient=notification.recipient,
        title=notification.title,
        body=notification.body,
        merchant_id=notification.merchant_id,
        created_at=notification.created_at,
    )


__all__ = ["build_outbound_message", "topic_for"]
