"""FastAPI dependency utilities."""

from functools import lru_cache

from app.application.use_cases.notifications import NotificationDispatchService
from app.config import get_settings
from app.infrastructure.database import SessionLocal
from app.infrastructure.notifications import message_channel


@lru_cache
def get_dispatch_service() -> NotificationDispatchService:
    """Return the shared :class:`NotificationDispatchService` instance."""

    settings = get_settings()
    return NotificationDispatchService(
        SessionLocal,
        message_channel,
        topic_prefix=settings.channel_topic_prefix,
        max_publish_attempts=settings.publish_max_attempts,
        retry_backoff_seconds=settings.publish_retry_backoff_seconds,
        reconcile_workers=settings.reconcile_workers,
    )


def shutdown_dispatch_service() -> None:
    """Close the shared service, if it was created, and forget it."""

    if get_dispatch_service.cache_info().currsize:
        get_dispatch_service().close()
    get_dispatch_service.cache_clear()
