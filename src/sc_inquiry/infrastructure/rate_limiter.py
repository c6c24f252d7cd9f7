"""Per-sender message spam window, backed by Redis.

Fixed window: INCR a counter keyed by (inquiry, sender); the first hit
sets a 60 s expiry. Once the count exceeds the limit the message is
rejected until the key expires. A message that is counted but then fails
to store is given back with ``release``.
"""

from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis

from config.settings import settings
from src.sc_common.errors import MessageRateLimitError
from src.sc_common.redis_client import get_redis

WINDOW_SECONDS = 60


class MessageRateLimiter:
    def __init__(
        self,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        limit: int | None = None,
        window_seconds: int = WINDOW_SECONDS,
    ) -> None:
        self._redis_factory = redis_factory
        self._limit = settings.INQUIRY_MESSAGE_LIMIT_PER_MINUTE if limit is None else limit
        self._window = window_seconds

    @staticmethod
    def key(inquiry_id: str, sender_id: str) -> str:
        return f"ratelimit:inquiry_msg:{inquiry_id}:{sender_id}"

    async def hit(self, inquiry_id: str, sender_id: str) -> int:
        """Count one message; raise MessageRateLimitError past the limit."""
        redis = await self._redis_factory()
        key = self.key(inquiry_id, sender_id)
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, self._window)
        if count > self._limit:
            raise MessageRateLimitError()
        return count

    async def release(self, inquiry_id: str, sender_id: str) -> None:
        """Undo one ``hit`` for a message that was never stored."""
        redis = await self._redis_factory()
        key = self.key(inquiry_id, sender_id)
        # DECR on an expired key recreates it at -1 without a TTL
        if await redis.decr(key) <= 0:
            await redis.delete(key)
