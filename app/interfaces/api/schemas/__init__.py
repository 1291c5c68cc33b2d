from .notification import (
    NotificationCreate,
    NotificationRead,
    NotificationStatusUpdate,
)

__all__ = [
    "NotificationCreate",
    "NotificationRead",
    "NotificationStatusUpdate",
]
