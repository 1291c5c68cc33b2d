"""Endpoints for notifications and the websocket used by channel consumers."""

from __future__ import annotations

import logging

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from app.application.use_cases.notifications import NotificationDispatchService
from app.domain.entities import Notification, NotificationRequest, NotificationStatus
from app.domain.exceptions import (
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from app.infrastructure.notifications import channel_manager
from app.interfaces.api.dependencies import get_dispatch_service
from app.interfaces.api.schemas import (
    NotificationCreate,
    NotificationRead,
    NotificationStatusUpdate,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _to_read_model(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


@router.post("/", response_model=NotificationRead, status_code=status.HTTP_202_ACCEPTED)
def submit_notification(
    payload: NotificationCreate,
    service: NotificationDispatchService = Depends(get_dispatch_service),
) -> NotificationRead:
    """Registra la notificación y la publica sin esperar el resultado."""

    request = NotificationRequest(
        recipient=payload.recipient,
        type=payload.type,
        body=payload.body,
        title=payload.title,
        merchant_id=payload.merchant_id,
    )
    try:
        notification = service.submit(request)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_read_model(notification)


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    status_filter: NotificationStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    service: NotificationDispatchService = Depends(get_dispatch_service),
) -> list[NotificationRead]:
    """Devuelve las notificaciones más recientes, opcionalmente filtradas por estado."""

    notifications = service.list_notifications(status=status_filter, limit=limit)
    return [_to_read_model(notification) for notification in notifications]


@router.get("/{notification_id}", response_model=NotificationRead)
def read_notification(
    notification_id: int,
    service: NotificationDispatchService = Depends(get_dispatch_service),
) -> NotificationRead:
    """Devuelve una notificación por su identificador."""

    try:
        notification = service.find_by_id(notification_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _to_read_model(notification)


@router.patch("/{notification_id}/status", response_model=NotificationRead)
def update_notification_status(
    notification_id: int,
    payload: NotificationStatusUpdate,
    service: NotificationDispatchService = Depends(get_dispatch_service),
) -> NotificationRead:
    """Actualiza manualmente el estado de una notificación."""

    try:
        notification = service.update_status(notification_id, payload.status)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidStatusTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    logger.info("Notification %s status set to %s", notification_id, notification.status.value)
    return _to_read_model(notification)


@router.websocket("/ws/{topic}")
async def channel_consumer_websocket(websocket: WebSocket, topic: str) -> None:
    """Websocket endpoint that streams published notifications to a consumer."""

    await channel_manager.connect(topic, websocket)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                continue

            if isinstance(message, dict) and message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        channel_manager.disconnect(topic, websocket)
