"""Message channel helpers for the infrastructure layer."""

from .channel import (
    MessageChannel,
    WebSocketMessageChannel,
    failed_future,
    message_channel,
    serialize_message,
)
from .manager import ChannelConnectionManager, channel_manager

__all__ = [
    "ChannelConnectionManager",
    "channel_manager",
    "MessageChannel",
    "WebSocketMessageChannel",
    "failed_future",
    "message_channel",
    "serialize_message",
]
