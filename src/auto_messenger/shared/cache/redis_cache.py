"""
Redis Cache Implementation
Async Redis-based cache provider
"""
from __future__ import annotations

import asyncio
import json
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)


class RedisCache:
    """
    Async Redis cache implementation.

    Keys are written verbatim unless a key_prefix is given, so external
    consumers can look up entries such as ``sent_msg:<id>`` directly.

    Attributes:
        redis: Async Redis client
        key_prefix: Optional prefix for all cache keys (for namespacing)
    """

    def __init__(self, redis: Redis, key_prefix: str | None = None) -> None:
        self.redis = redis
        self.key_prefix = key_prefix

    @classmethod
    async def connect(
        cls,
        url: str,
        *,
        attempts: int = 5,
        retry_interval: float = 2.0,
    ) -> "RedisCache":
        """
        Create a client from a URL and ping it until it answers.

        Raises:
            RedisError: If Redis is still unreachable after all attempts
        """
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        client = Redis.from_url(url, decode_responses=True)
        attempt = 1
        while True:
            try:
                await client.ping()
                logger.info("Redis connection established", attempt=attempt)
                return cls(client)
            except RedisError as e:
                logger.warning("Redis ping failed", attempt=attempt, error=str(e))
                if attempt >= attempts:
                    await client.aclose()
                    raise
            await asyncio.sleep(retry_interval)
            attempt += 1

    def _make_key(self, key: str) -> str:
        if self.key_prefix:
            return f"{self.key_prefix}:{key}"
        return key

    async def get(self, key: str) -> Any | None:
        """
        Retrieve value from cache by key.

        Returns:
            Cached value (deserialized) or None
        """
        try:
            value = await self.redis.get(self._make_key(key))
            if value is None:
                return None
            return json.loads(value)
        except RedisError as e:
            logger.error("Redis GET failed", key=key, error=str(e))
            return None
        except json.JSONDecodeError as e:
            logger.error("Failed to deserialize cached value", key=key, error=str(e))
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """
        Set a value in cache with optional TTL.

        Returns:
            True if successful, False otherwise
        """
        try:
            serialized = json.dumps(value)

            if ttl:
                await self.redis.setex(self._make_key(key), ttl, serialized)
            else:
                await self.redis.set(self._make_key(key), serialized)

            logger.debug("Cached value", key=key, ttl=ttl)
            return True
        except (RedisError, TypeError, ValueError) as e:
            logger.error("Redis SET failed", key=key, error=str(e))
            return False

    async def ping(self) -> bool:
        try:
            await self.redis.ping()
            return True
        except RedisError as e:
            logger.error("Redis PING failed", error=str(e))
            return False

    async def close(self) -> None:
        await self.redis.aclose()
