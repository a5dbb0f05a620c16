from relay.services.broadcast_loop import BroadcastLoop, LoopState
from relay.services.connection_registry import ConnectionRegistry, close_peer

__all__ = [
    "BroadcastLoop",
    "ConnectionRegistry",
    "LoopState",
    "close_peer",
]
