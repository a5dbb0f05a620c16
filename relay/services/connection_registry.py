"""
Connection registry for WebSocket fanout.

- One instance per process, built at app lifespan start and injected where needed.
- A single asyncio.Lock serialises add/remove and every broadcast pass, so a
  broadcast never writes to a half-removed peer.
- Peers that fail a write are closed and evicted inside the same critical section.
"""
import asyncio
import logging
from typing import Set

from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = logging.getLogger("relay.registry")


async def close_peer(peer: WebSocket) -> None:
    """Close peer unless either side already has; never raises."""
    if (
        peer.application_state == WebSocketState.DISCONNECTED
        or peer.client_state == WebSocketState.DISCONNECTED
    ):
        return
    try:
        await peer.close()
    except Exception as exc:
        logger.debug("close error on peer %s: %s", id(peer), exc)


class ConnectionRegistry:
    """Set of live peers; presence in the set is liveness."""

    def __init__(self) -> None:
        self._peers: Set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._evicted = 0

    async def add(self, peer: WebSocket) -> None:
        async with self._lock:
            self._peers.add(peer)
            logger.info("peer %s registered (%d connected)", id(peer), len(self._peers))

    async def remove(self, peer: WebSocket) -> None:
        """Deregister peer; no-op when absent. Closing is left to the caller."""
        async with self._lock:
            if peer not in self._peers:
                return
            self._peers.discard(peer)
            logger.info("peer %s removed (%d connected)", id(peer), len(self._peers))

    async def broadcast(self, payload: str) -> int:
        """
        Write payload to every registered peer as one text frame.

        Writes are sequential and happen while holding the lock. Returns the
        number of peers that received the payload.
        """
        delivered = 0
        async with self._lock:
            for peer in list(self._peers):
                try:
                    await peer.send_text(payload)
                except Exception as exc:
                    logger.warning("send to peer %s failed, evicting: %s", id(peer), exc)
                    await close_peer(peer)
                    self._peers.discard(peer)
                    self._evicted += 1
                    continue
                delivered += 1
        return delivered

    @property
    def evicted(self) -> int:
        return self._evicted

    def __len__(self) -> int:
        return len(self._peers)

    def __contains__(self, peer: object) -> bool:
        return peer in self._peers
