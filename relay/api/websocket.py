"""
WebSocket endpoint: one acceptor per client.

The acceptor only reads to notice disconnects; anything the client sends is
discarded.
"""
import logging

from fastapi import APIRouter, Depends, WebSocket

from relay.core.config import settings
from relay.services.connection_registry import ConnectionRegistry, close_peer

router = APIRouter()
logger = logging.getLogger("relay.ws")


class UpgradeError(Exception):
    """Raised when the WebSocket handshake cannot be completed."""


def get_registry(websocket: WebSocket) -> ConnectionRegistry:
    return websocket.app.state.registry


async def _upgrade(websocket: WebSocket) -> None:
    try:
        await websocket.accept()
    except Exception as exc:
        raise UpgradeError(f"handshake failed: {exc}") from exc


async def serve_peer(websocket: WebSocket, registry: ConnectionRegistry) -> None:
    """
    Upgrade, register, block until the peer goes away, then deregister and close.

    The first read failure or disconnect frame ends the connection.
    """
    try:
        await _upgrade(websocket)
    except UpgradeError as exc:
        logger.warning("%s", exc)
        return

    await registry.add(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except Exception as exc:
        logger.debug("read from peer %s failed: %s", id(websocket), exc)
    finally:
        await registry.remove(websocket)
        await close_peer(websocket)


@router.websocket(settings.WS_PATH)
async def notifications(
    websocket: WebSocket,
    registry: ConnectionRegistry = Depends(get_registry),
):
    """Persistent notification stream; every published message arrives as one text frame."""
    await serve_peer(websocket, registry)
