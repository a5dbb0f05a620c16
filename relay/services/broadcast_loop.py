"""
Broadcast loop: drains the subscription and fans each payload out to the registry.

- Exactly one loop per process.
- The next message is not pulled until the current broadcast (writes and
  evictions included) has finished.
- A failing subscription source stops the loop for good; connections are still
  accepted but nothing more is broadcast.
"""
import asyncio
import enum
import logging
from typing import Any, AsyncIterator, Callable, Dict, Optional

from relay.services.connection_registry import ConnectionRegistry

logger = logging.getLogger("relay.broadcast")

SourceFactory = Callable[[], AsyncIterator[str]]


class LoopState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class BroadcastLoop:
    def __init__(self, registry: ConnectionRegistry, source_factory: SourceFactory):
        self._registry = registry
        self._source_factory = source_factory
        self._task: Optional[asyncio.Task[None]] = None
        self.state = LoopState.IDLE
        self.stats: Dict[str, Any] = {
            "received": 0,
            "delivered": 0,
            "evicted": 0,
        }

    def start(self) -> asyncio.Task[None]:
        if self._task is not None:
            raise RuntimeError("Broadcast loop already started")
        self._task = asyncio.create_task(self.run(), name="relay-broadcast")
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        logger.info("broadcast loop stopped")

    async def run(self) -> None:
        """Consume the source until it ends or fails. Terminal state is STOPPED."""
        if self.state is not LoopState.IDLE:
            raise RuntimeError(f"Broadcast loop cannot run from state {self.state.value}")
        self.state = LoopState.RUNNING
        logger.info("broadcast loop running")
        try:
            async for payload in self._source_factory():
                self.stats["received"] += 1
                evicted_before = self._registry.evicted
                self.stats["delivered"] += await self._registry.broadcast(payload)
                self.stats["evicted"] += self._registry.evicted - evicted_before
            logger.warning("subscription source closed; no further broadcasts")
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("subscription source failed; no further broadcasts")
        finally:
            self.state = LoopState.STOPPED
