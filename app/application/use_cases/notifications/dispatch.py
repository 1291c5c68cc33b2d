"""Create notifications, publish them and record the publish outcome."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from contextlib import contextmanager
from functools import partial

from sqlalchemy.orm import Session

from app.domain.entities import (
    Notification,
    NotificationRequest,
    NotificationStatus,
    OutboundMessage,
)
from app.domain.exceptions import (
    InvalidStatusTransitionError,
    NotFoundError,
    PublishFailure,
)
from app.infrastructure.notifications import MessageChannel, failed_future
from app.infrastructure.repositories import NotificationRepository

from .messages import build_outbound_message
from .validators import build_pending_notification, coerce_notification_status

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


class NotificationDispatchService:
    """Single entry point for the lifecycle of a notification.

    ``submit`` stores the record and starts the publish without waiting for it.
    The outcome is recorded later by a worker thread that opens its own
    session, so no session is ever shared with the submitting caller.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        channel: MessageChannel,
        *,
        topic_prefix: str = "notifications",
        max_publish_attempts: int = 1,
        retry_backoff_seconds: float = 0.0,
        executor: Executor | None = None,
        reconcile_workers: int = 4,
    ) -> None:
        if max_publish_attempts < 1:
            raise ValueError("max_publish_attempts must be at least 1")
        if retry_backoff_seconds < 0:
            raise ValueError("retry_backoff_seconds must not be negative")

        self._session_factory = session_factory
        self._channel = channel
        self._topic_prefix = topic_prefix
        self._max_publish_attempts = max_publish_attempts
        self._retry_backoff_seconds = retry_backoff_seconds
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=reconcile_workers,
            thread_name_prefix="notification-reconcile",
        )
        self._lock = threading.Lock()
        self._closed = False
        self._retry_timers: dict[int, threading.Timer] = {}

    def submit(self, request: NotificationRequest | None) -> Notification:
        """Persist ``request`` as a PENDING notification and start publishing it."""

        notification = build_pending_notification(request)
        with self._unit_of_work() as repository:
            saved = repository.create(notification)

        logger.info(
            "Notification %s queued for %s delivery to %s",
            saved.id,
            saved.type.value,
            saved.recipient,
        )
        self._publish(build_outbound_message(saved, self._topic_prefix), attempt=1)
        return saved

    def mark_sent(self, notification_id: int) -> Notification:
        notification = self._transition(
            notification_id, NotificationStatus.SENT, strict=False
        )
        logger.info("Notification %s published", notification_id)
        return notification

    def mark_failed(
        self, notification_id: int, cause: BaseException | str | None = None
    ) -> Notification:
        notification = self._transition(
            notification_id, NotificationStatus.FAILED, strict=False
        )
        logger.warning(
            "Notification %s could not be published: %s", notification_id, cause
        )
        return notification

    def update_status(
        self, notification_id: int, status: NotificationStatus | str
    ) -> Notification:
        """Set the status of a notification.

        Writing the current value again is a no-op; moving a SENT or FAILED
        record anywhere else raises :class:`InvalidStatusTransitionError`.
        """

        target = coerce_notification_status(status)
        return self._transition(notification_id, target, strict=True)

    def find_by_id(self, notification_id: int) -> Notification:
        with self._unit_of_work() as repository:
            notification = repository.get(notification_id)
        if notification is None:
            raise NotFoundError(notification_id)
        return notification

    def list_notifications(
        self,
        *,
        status: NotificationStatus | str | None = None,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        status_filter = coerce_notification_status(status) if status is not None else None
        with self._unit_of_work() as repository:
            return repository.list_recent(status=status_filter, limit=limit)

    def close(self) -> None:
        """Wait for pending outcome handlers and release the worker threads.

        Retries that have not fired yet are cancelled and their notifications
        are marked as failed, so no record is left PENDING by a shutdown.
        """

        with self._lock:
            self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True)

        with self._lock:
            pending = list(self._retry_timers.items())
            self._retry_timers.clear()
        for notification_id, timer in pending:
            timer.cancel()
            self._fail_closed(notification_id)

    @contextmanager
    def _unit_of_work(self) -> Iterator[NotificationRepository]:
        session = self._session_factory()
        try:
            yield NotificationRepository(session)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _transition(
        self,
        notification_id: int,
        target: NotificationStatus,
        *,
        strict: bool,
    ) -> Notification:
        with self._unit_of_work() as repository:
            current = repository.get(notification_id)
            if current is None:
                raise NotFoundError(notification_id)
            if current.status is target:
                return current
            if not current.status.is_terminal and repository.transition_status(
                notification_id, expected=current.status, target=target
            ):
                updated = repository.get(notification_id)
                if updated is not None:
                    return updated
            latest = repository.get(notification_id)

        if latest is None:
            raise NotFoundError(notification_id)
        if latest.status is target:
            return latest
        if strict:
            raise InvalidStatusTransitionError(
                f"Notification {notification_id} is already {latest.status.value} "
                f"and cannot move to {target.value}"
            )
        logger.info(
            "Ignoring %s outcome for notification %s, already %s",
            target.value,
            notification_id,
            latest.status.value,
        )
        return latest

    def _publish(self, message: OutboundMessage, *, attempt: int) -> None:
        try:
            future = self._channel.publish(message)
        except Exception as exc:
            future = failed_future(exc)
        future.add_done_callback(partial(self._on_publish_done, message, attempt))

    def _on_publish_done(
        self, message: OutboundMessage, attempt: int, future: Future
    ) -> None:
        # Runs on whichever thread completed the future, possibly the event loop.
        try:
            self._executor.submit(self._reconcile, message, attempt, future)
        except RuntimeError:
            logger.warning(
                "Dispatcher is closed; recording outcome for notification %s inline",
                message.notification_id,
            )
            self._reconcile(message, attempt, future)

    def _reconcile(
        self, message: OutboundMessage, attempt: int, future: Future
    ) -> None:
        if future.cancelled():
            error: BaseException | None = PublishFailure("Publish was cancelled")
        else:
            error = future.exception()

        try:
            if error is None:
                self.mark_sent(message.notification_id)
            elif attempt < self._max_publish_attempts:
                self._retry(message, attempt, error)
            else:
                self.mark_failed(message.notification_id, error)
        except Exception:
            logger.exception(
                "Failed to record publish outcome for notification %s",
                message.notification_id,
            )

    def _retry(self, message: OutboundMessage, attempt: int, error: BaseException) -> None:
        with self._unit_of_work() as repository:
            current = repository.get(message.notification_id)
            if current is None or current.status.is_terminal:
                return
            repository.record_publish_attempt(message.notification_id)

        delay = self._retry_backoff_seconds * (2 ** (attempt - 1))
        logger.warning(
            "Publish attempt %s/%s for notification %s failed: %s; retrying in %.2fs",
            attempt,
            self._max_publish_attempts,
            message.notification_id,
            error,
            delay,
        )
        timer = threading.Timer(
            delay, self._fire_retry, args=(message,), kwargs={"attempt": attempt + 1}
        )
        timer.daemon = True
        with self._lock:
            closed = self._closed
            if not closed and delay > 0:
                self._retry_timers[message.notification_id] = timer
                timer.start()

        if closed:
            self._fail_closed(message.notification_id)
        elif delay <= 0:
            self._publish(message, attempt=attempt + 1)

    def _fire_retry(self, message: OutboundMessage, *, attempt: int) -> None:
        with self._lock:
            scheduled = self._retry_timers.pop(message.notification_id, None)
        # close() already cancelled this retry and recorded the failure.
        if scheduled is None:
            return
        self._publish(message, attempt=attempt)

    def _fail_closed(self, notification_id: int) -> None:
        try:
            self.mark_failed(
                notification_id, PublishFailure("Dispatcher closed before retry")
            )
        except NotFoundError:
            logger.warning(
                "Notification %s vanished before its retry was abandoned", notification_id
            )


__all__ = ["NotificationDispatchService", "SessionFactory"]
