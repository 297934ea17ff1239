import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from auto_messenger.shared.cache import InMemoryTTLCache, RedisCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


async def test_memory_cache_round_trip_and_expiry():
    clock = FakeClock()
    cache = InMemoryTTLCache(clock=clock)

    assert await cache.set("k", {"a": 1}, ttl=10)
    assert await cache.get("k") == {"a": 1}
    assert len(cache) == 1

    clock.now = 10
    assert await cache.get("k") is None
    assert len(cache) == 0


async def test_memory_cache_without_ttl_keeps_value():
    clock = FakeClock()
    cache = InMemoryTTLCache(clock=clock)
    await cache.set("k", "v")
    clock.now = 10**9
    assert await cache.get("k") == "v"


async def test_memory_cache_rejects_unserializable():
    assert await InMemoryTTLCache().set("k", object()) is False


async def test_redis_set_uses_setex():
    redis = AsyncMock()
    cache = RedisCache(redis)
    value = {"messageId": "abc", "sentAt": "2024-03-01T12:30:05Z"}

    assert await cache.set("sent_msg:abc", value, ttl=86400) is True

    redis.setex.assert_awaited_once_with("sent_msg:abc", 86400, json.dumps(value))


async def test_redis_key_prefix():
    redis = AsyncMock()
    await RedisCache(redis, key_prefix="am").set("k", 1)
    redis.set.assert_awaited_once_with("am:k", "1")


async def test_redis_set_failure_returns_false():
    redis = AsyncMock()
    redis.setex.side_effect = RedisConnectionError("down")

    assert await RedisCache(redis).set("k", {"x": 1}, ttl=5) is False


async def test_redis_get_decodes_json():
    redis = AsyncMock()
    redis.get.return_value = '{"messageId": "abc"}'

    assert await RedisCache(redis).get("sent_msg:abc") == {"messageId": "abc"}


async def test_redis_ping_failure():
    redis = AsyncMock()
    redis.ping.side_effect = RedisConnectionError("down")
    assert await RedisCache(redis).ping() is False


async def test_redis_connect_gives_up_and_closes(monkeypatch):
    client = AsyncMock()
    client.ping.side_effect = RedisConnectionError("refused")
    monkeypatch.setattr(
        "auto_messenger.shared.cache.redis_cache.Redis.from_url",
        lambda url, **kwargs: client,
    )

    with pytest.raises(RedisConnectionError):
        await RedisCache.connect("redis://localhost:6379/0", attempts=3, retry_interval=0)

    assert client.ping.await_count == 3
    client.aclose.assert_awaited_once()


async def test_redis_connect_retries_until_ping_answers(monkeypatch):
    client = AsyncMock()
    client.ping.side_effect = [RedisConnectionError("loading"), True]
    monkeypatch.setattr(
        "auto_messenger.shared.cache.redis_cache.Redis.from_url",
        lambda url, **kwargs: client,
    )

    cache = await RedisCache.connect("redis://localhost:6379/0", attempts=3, retry_interval=0)

    assert cache.redis is client
    client.aclose.assert_not_awaited()
