"""
Wiring for the cache, session and rate limiting layer.

Builds one RedisConnection and hands it to every component, so route
handlers receive explicit collaborators instead of module globals.
"""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from src.cache.connection import ClientFactory, RedisConnection
from src.cache.manager import CacheManager
from src.cache.store import StoreClient
from src.ratelimit.limiter import Clock, SlidingWindowRateLimiter
from src.session.store import SessionStore
from src.utils.config import RedisSettings
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CacheLayer:
    """All components sharing one logical Redis connection."""

    connection: RedisConnection
    store: StoreClient
    cache: CacheManager
    sessions: SessionStore
    rate_limiter: SlidingWindowRateLimiter

    async def close(self) -> None:
        """Disconnect from Redis. Raises CacheConnectionError on failure."""
        await self.connection.disconnect()


def create_cache_layer(
    settings: Optional[RedisSettings] = None,
    client_factory: Optional[ClientFactory] = None,
    clock: Optional[Clock] = None,
) -> CacheLayer:
    """
    Construct the layer. Does not connect; the first operation does.

    Args:
        settings: Connection settings (default: from environment)
        client_factory: Redis client builder (tests pass a fake)
        clock: Epoch-millisecond clock for the rate limiter

    Returns:
        CacheLayer ready for use

    Example:
        >>> layer = create_cache_layer()
        >>> await layer.cache.cache_entity("42", {"name": "Mug"})
        True
    """
    connection = RedisConnection(settings=settings, client_factory=client_factory)
    store = StoreClient(connection)

    layer = CacheLayer(
        connection=connection,
        store=store,
        cache=CacheManager(store),
        sessions=SessionStore(store),
        rate_limiter=SlidingWindowRateLimiter(store, clock=clock),
    )

    logger.info("cache_layer_created", redis_url=connection.settings.redacted_url)

    return layer


@asynccontextmanager
async def open_cache_layer(
    settings: Optional[RedisSettings] = None,
    client_factory: Optional[ClientFactory] = None,
) -> AsyncIterator[CacheLayer]:
    """
    Connect eagerly and disconnect on exit.

    Meant for application startup/shutdown hooks.

    Raises:
        CacheConnectionError: If the initial connection fails
    """
    layer = create_cache_layer(settings=settings, client_factory=client_factory)
    await layer.connection.connect()
    try:
        yield layer
    finally:
        await layer.close()
