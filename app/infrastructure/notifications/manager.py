"""Connection management helpers for channel consumer websockets."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

from app.domain.exceptions import PublishFailure

logger = logging.getLogger(__name__)


class ChannelConnectionManager:
    """Manage active consumer websocket connections grouped by topic."""

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, topic: str, websocket: WebSocket) -> None:
        """Accept the websocket connection and subscribe it to ``topic``."""

        await websocket.accept()
        self._connections[topic].add(websocket)

    def disconnect(self, topic: str, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the consumers of ``topic``."""

        connections = self._connections.get(topic)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(topic, None)

    def subscriber_count(self, topic: str) -> int:
        return len(self._connections.get(topic, ()))

    async def broadcast(self, topic: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every consumer of ``topic``.

        Returns the number of consumers that accepted the frame and raises
        :class:`PublishFailure` when none did.
        """

        delivered = 0
        for connection in list(self._connections.get(topic, set())):
            try:
                await connection.send_json(message)
            except Exception as exc:
                logger.warning("Dropping consumer on topic %s after send error: %s", topic, exc)
                self.disconnect(topic, connection)
                continue
            delivered += 1

        if not delivered:
            raise PublishFailure(f"No consumer accepted the message on topic '{topic}'")
        return delivered


channel_manager = ChannelConnectionManager()


__all__ = ["ChannelConnectionManager", "channel_manager"]
