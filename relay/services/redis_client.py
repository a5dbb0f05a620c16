"""
Redis client for the notification subscription.

- Publishers push payloads onto one channel; the relay subscribes and fans
  them out to WebSocket peers.
- The subscription is lazy: nothing connects until the iterator is consumed.
"""
import logging
from typing import AsyncIterator, Optional

import redis.asyncio as redis

from relay.core.config import settings

logger = logging.getLogger("relay.redis")

_redis: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    global _redis
    if _redis is None:
        _redis = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            encoding_errors="replace",
        )
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


async def subscribe_channel(channel: Optional[str] = None) -> AsyncIterator[str]:
    """
    Subscribe to the notification channel; yields payload strings in delivery order.

    Payloads that are not valid UTF-8 arrive with U+FFFD replacements.
    Connection or protocol errors propagate to the consumer; there is no retry.
    """
    channel = channel or settings.REDIS_CHANNEL
    r = await get_redis()
    pubsub = r.pubsub()
    await pubsub.subscribe(channel)
    logger.info("subscribed to channel %s", channel)
    try:
        async for message in pubsub.listen():
            if message["type"] == "message":
                yield message["data"]
    finally:
        try:
            await pubsub.unsubscribe(channel)
        except Exception as exc:
            logger.debug("unsubscribe from %s failed: %s", channel, exc)
        await pubsub.aclose()
