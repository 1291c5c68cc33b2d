"""Message channel used to hand notifications to downstream delivery workers."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Protocol

from anyio.from_thread import BlockingPortal

from app.domain.entities import OutboundMessage
from app.domain.exceptions import PublishFailure

from .manager import ChannelConnectionManager, channel_manager

logger = logging.getLogger(__name__)


class MessageChannel(Protocol):
    """Asynchronous publish operation offered by a message channel."""

    def publish(self, message: OutboundMessage) -> Future:
        """Start publishing ``message`` and return a handle for its outcome."""


class WebSocketMessageChannel:
    """Publish messages to consumers connected through websockets.

    Broadcasts run on the server event loop; callers in worker threads reach it
    through the :class:`BlockingPortal` attached while the app is running.
    """

    def __init__(self, manager: ChannelConnectionManager) -> None:
        self._manager = manager
        self._portal: BlockingPortal | None = None

    @property
    def is_running(self) -> bool:
        return self._portal is not None

    def attach(self, portal: BlockingPortal) -> None:
        self._portal = portal

    def detach(self) -> None:
        self._portal = None

    def publish(self, message: OutboundMessage) -> Future:
        portal = self._portal
        if portal is None:
            return failed_future(PublishFailure("Message channel is not running"))

        logger.debug(
            "Publishing notification %s to topic %s",
            message.notification_id,
            message.topic,
        )
        return portal.start_task_soon(
            self._manager.broadcast, message.topic, serialize_message(message)
        )


def serialize_message(message: OutboundMessage) -> dict[str, Any]:
    """Return the websocket frame representation for ``message``."""

    return {
        "type": "notification",
        "data": {
            "notification_id": message.notification_id,
            "topic": message.topic,
            "type": message.type.value,
            "receiver": message.recipient,
            "title": message.title,
            "body": message.body,
            "merchant_id": message.merchant_id,
            "created_at": message.created_at.isoformat(),
        },
    }


def failed_future(exc: BaseException) -> Future:
    """Return a future that has already completed with ``exc``."""

    future: Future = Future()
    future.set_exception(exc)
    return future


message_channel = WebSocketMessageChannel(channel_manager)


__all__ = [
    "MessageChannel",
    "WebSocketMessageChannel",
    "failed_future",
    "message_channel",
    "serialize_message",
]
