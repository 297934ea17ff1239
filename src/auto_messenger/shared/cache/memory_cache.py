from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, Optional, Tuple


class InMemoryTTLCache:
    """
    Process-local cache with per-entry expiry.

    Used when no REDIS_URL is configured. Values are stored JSON-encoded so
    that callers observe the same round-trip behaviour as with RedisCache.
    The clock is injectable so expiry can be driven deterministically.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._store: Dict[str, Tuple[str, Optional[float]]] = {}

    def _alive(self, key: str) -> Optional[str]:
        entry = self._store.get(key)
        if entry is None:
            return None
        raw, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._store[key]
            return None
        return raw

    async def get(self, key: str) -> Any | None:
        raw = self._alive(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError):
            return False
        expires_at = self._clock() + ttl if ttl else None
        self._store[key] = (raw, expires_at)
        return True

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return sum(1 for key in list(self._store) if self._alive(key) is not None)
