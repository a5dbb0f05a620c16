"""Redis pub/sub to WebSocket notification relay."""
