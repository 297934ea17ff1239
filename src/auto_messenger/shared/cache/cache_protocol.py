"""
Cache Protocol (Abstract Interface)
Contract for all cache implementations
"""
from __future__ import annotations

from typing import Any, Protocol


class ICacheProvider(Protocol):
    """
    Abstract cache provider interface.

    All cache implementations (Redis, in-memory) must conform to this protocol.
    Cache is used ONLY for idempotency assistance - never as source of truth.
    """

    async def get(self, key: str) -> Any | None:
        """
        Retrieve value from cache by key.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        ...

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """
        Set a value in cache with optional TTL.

        Args:
            key: Cache key
            value: Value to cache (must be JSON-serializable)
            ttl: Time-to-live in seconds (None for no expiration)

        Returns:
            True if successful, False otherwise
        """
        ...

    async def ping(self) -> bool:
        """Check connectivity."""
        ...

    async def close(self) -> None:
        """Release the underlying connection, if any."""
        ...
