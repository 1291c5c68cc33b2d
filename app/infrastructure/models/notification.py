"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Column, DateTime, Enum, Integer, String, Text

from app.domain.entities import NotificationStatus, NotificationType
from app.infrastructure.database import Base


class NotificationModel(Base):
    """Database representation for outbound notifications."""

    __tablename__ = "notification"

    id = Column(Integer, primary_key=True, index=True)
    recipient = Column(String(255), nullable=False)
    type = Column(
        Enum(NotificationType, native_enum=False, length=16),
        nullable=False,
    )
    title = Column(String(255), nullable=True)
    body = Column(Text, nullable=False, default="")
    merchant_id = Column(String(64), nullable=True, index=True)
    status = Column(
        Enum(NotificationStatus, native_enum=False, length=16),
        nullable=False,
        default=NotificationStatus.PENDING,
        index=True,
    )
    publish_attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(), nullable=False)
    updated_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
