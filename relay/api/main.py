"""
FastAPI application for the notification relay.

- WebSocket: settings.WS_PATH (default /ws)
- Lifespan builds the connection registry and runs the Redis broadcast loop.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from relay.api.websocket import router as ws_router
from relay.core.config import settings
from relay.services.broadcast_loop import BroadcastLoop, SourceFactory
from relay.services.connection_registry import ConnectionRegistry
from relay.services.redis_client import close_redis, subscribe_channel

logger = logging.getLogger("relay.main")


def setup_logging() -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(source_factory: Optional[SourceFactory] = None) -> FastAPI:
    """Build the app; source_factory defaults to the Redis channel subscription."""
    source = source_factory or subscribe_channel

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()

        registry = ConnectionRegistry()
        loop = BroadcastLoop(registry, source)
        app.state.registry = registry
        app.state.broadcast_loop = loop

        loop.start()
        logger.info("WebSocket server started on %s", settings.listen_address())

        yield

        await loop.stop()
        await close_redis()

    app = FastAPI(
        title="Notification relay",
        description="Redis pub/sub channel fanned out to WebSocket clients",
        lifespan=lifespan,
    )
    app.include_router(ws_router)
    return app


app = create_app()
