import logging
from contextlib import asynccontextmanager

from anyio.from_thread import BlockingPortal
from fastapi import FastAPI

from app.infrastructure.database import engine, initialize_database
from app.infrastructure.notifications import message_channel
from app.interfaces.api.dependencies import shutdown_dispatch_service
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Inicializa la base de datos y el canal de mensajes; libera los recursos al cerrar."""

    initialize_database()
    async with BlockingPortal() as portal:
        message_channel.attach(portal)
        logger.info("Message channel attached to the server event loop")
        try:
            yield
        finally:
            message_channel.detach()
    shutdown_dispatch_service()
    engine.dispose()


def create_app() -> FastAPI:
    """Crea y configura la aplicación principal de FastAPI."""

    app = FastAPI(lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
