"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.application.use_cases.notifications.validators import coerce_notification_status
from app.domain.entities import NotificationStatus, NotificationType


class NotificationCreate(BaseModel):
    """Payload used to submit a notification for delivery."""

    recipient: str = Field(..., max_length=255, description="Email, phone number or device token")
    type: NotificationType
    body: str = Field("", description="Message text delivered to the recipient")
    title: str | None = Field(None, max_length=255)
    merchant_id: str | None = Field(
        None, max_length=64, description="Routing key forwarded to channel consumers"
    )


class NotificationStatusUpdate(BaseModel):
    """Payload used to set the status of a notification manually."""

    status: NotificationStatus

    @field_validator("status", mode="before")
    @classmethod
    def _accept_status_names(cls, value: object) -> NotificationStatus:
        """Accept status names and aliases such as ``QUEUED``, case-insensitively."""

        return coerce_notification_status(value)


class NotificationRead(BaseModel):
    """Representation of a stored notification."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient: str
    type: NotificationType
    title: str | None = None
    body: str
    merchant_id: str | None = None
    status: NotificationStatus
    publish_attempts: int
    created_at: datetime
    updated_at: datetime | None = None


__all__ = ["NotificationCreate", "NotificationRead", "NotificationStatusUpdate"]
