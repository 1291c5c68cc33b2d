"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Notification, NotificationStatus
from app.infrastructure.models import NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        return self._to_entity(model)

    def list_recent(
        self,
        *,
        status: NotificationStatus | None = None,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = self.session.query(NotificationModel)
        if status is not None:
            query = query.filter(NotificationModel.status == status)
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def create(self, notification: Notification) -> Notification:
        """Insert ``notification`` and return it with its generated fields.

        ``created_at`` is always assigned here, whatever the entity carries.
        """

        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        model.created_at = ensure_app_naive_datetime(now_in_app_timezone())
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def transition_status(
        self,
        notification_id: int,
        *,
        expected: NotificationStatus,
        target: NotificationStatus,
    ) -> bool:
        """Move the record to ``target`` only while it still holds ``expected``.

        Returns ``True`` when a row was updated.
        """

        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.status == expected,
            )
            .update(
                {
                    NotificationModel.status: target,
                    NotificationModel.updated_at: ensure_app_naive_datetime(
                        now_in_app_timezone()
                    ),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated > 0

    def record_publish_attempt(self, notification_id: int) -> int:
        """Increment the attempt counter of a pending record and return it."""

        self.session.query(NotificationModel).filter(
            NotificationModel.id == notification_id,
            NotificationModel.status == NotificationStatus.PENDING,
        ).update(
            {NotificationModel.publish_attempts: NotificationModel.publish_attempts + 1},
            synchronize_session=False,
        )
        self.session.commit()
        model = self.session.get(NotificationModel, notification_id)
        return model.publish_attempts if model is not None else 0

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel, notification: Notification
    ) -> None:
        model.recipient = notification.recipient
        model.type = notification.type
        model.title = notification.title
        model.body = notification.body or ""
        model.merchant_id = notification.merchant_id
        model.status = notification.status
        model.publish_attempts = notification.publish_attempts

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient=model.recipient,
            type=model.type,
            title=model.title,
            body=model.body,
            merchant_id=model.merchant_id,
            status=model.status,
            publish_attempts=model.publish_attempts,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationRepository"]
