"""
Best-effort JSON cache in front of the menu catalog.

Callers receive ``None`` for a miss *or* a failure and always fall back to the
database; a broken or absent Redis only costs latency.
"""

import json
import logging
from typing import Any, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from storefront.metrics import CACHE_LOOKUPS

logger = logging.getLogger(__name__)


class JSONCache(Protocol):
    async def get_json(self, key: str) -> Any | None: ...

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None: ...


class RedisCache:
    def __init__(self, client: Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float) -> "RedisCache":
        client = Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError) as exc:
            logger.warning("Redis ping failed", extra={"error": str(exc)})
            return False

    async def get_json(self, key: str) -> Any | None:
        try:
            raw = await self.client.get(key)
        except (RedisError, OSError) as exc:
            CACHE_LOOKUPS.labels("error").inc()
            logger.warning("Cache read error", extra={"key": key, "error": str(exc)})
            return None

        if raw is None:
            CACHE_LOOKUPS.labels("miss").inc()
            return None

        try:
            value = json.loads(raw)
        except ValueError:
            CACHE_LOOKUPS.labels("error").inc()
            logger.warning("Discarding undecodable cache entry", extra={"key": key})
            return None

        CACHE_LOOKUPS.labels("hit").inc()
        return value

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            await self.client.set(key, json.dumps(value), ex=ttl_seconds)
        except (RedisError, OSError) as exc:
            logger.warning("Cache write error", extra={"key": key, "error": str(exc)})

    async def close(self) -> None:
        await self.client.aclose()
