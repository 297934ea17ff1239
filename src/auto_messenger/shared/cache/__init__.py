from auto_messenger.shared.cache.cache_protocol import ICacheProvider
from auto_messenger.shared.cache.memory_cache import InMemoryTTLCache
from auto_messenger.shared.cache.redis_cache import RedisCache

__all__ = ["ICacheProvider", "InMemoryTTLCache", "RedisCache"]
