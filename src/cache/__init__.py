"""Redis caching layer for the storefront.

This package provides Redis-based caching with:
- Connection lifecycle with lazy reconnect (RedisConnection)
- Fail-open primitive operations (StoreClient)
- Cache key generation (CacheKeyGenerator)
- TTL policies (CacheTTL)
- Entity/listing caching with cascading invalidation (CacheManager)
"""

from src.cache.connection import ConnectionState, RedisConnection
from src.cache.exceptions import (
    CacheConnectionError,
    CacheError,
    CacheOperationError,
    CacheSerializationError,
)
from src.cache.keys import CacheKeyGenerator
from src.cache.manager import CacheManager
from src.cache.result import CacheResult
from src.cache.store import StoreClient
from src.cache.ttl import CacheTTL

__all__ = [
    # Connection
    "ConnectionState",
    "RedisConnection",
    # Errors and results
    "CacheError",
    "CacheConnectionError",
    "CacheOperationError",
    "CacheSerializationError",
    "CacheResult",
    # Primitive operations
    "StoreClient",
    # Key generation
    "CacheKeyGenerator",
    # Domain cache
    "CacheManager",
    # TTL policies
    "CacheTTL",
]
