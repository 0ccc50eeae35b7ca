"""Domain cache for catalog entities and listings.

This module provides the CacheManager class, which caches single
entities and filtered/paginated listings under namespaced keys and
implements cascading invalidation on writes.
"""

from typing import Any, Awaitable, Callable, Dict, Optional

import structlog

from src.cache.keys import CacheKeyGenerator
from src.cache.store import StoreClient
from src.cache.ttl import CacheTTL
from src.models.results import CacheLookup

logger = structlog.get_logger(__name__)

Fetch = Callable[[], Awaitable[Any]]


class CacheManager:
    """
    Catalog cache operations over the primitive store client.

    Entities live under entity:{id} for 30 minutes; listing pages live
    under listing:{filter}:page:{n} for 10 minutes. Any entity write
    drops the entity key and every listing key, since a listing cannot
    be traced back to the entities it contains. Listings missed by an
    invalidation pass are bounded by the listing TTL.

    Attributes:
        store: Primitive store client
        keys: Key generator
    """

    def __init__(
        self,
        store: StoreClient,
        keys: Optional[CacheKeyGenerator] = None,
    ) -> None:
        self.store = store
        self.keys = keys or CacheKeyGenerator()

    async def cache_entity(self, entity_id: str, value: Any) -> bool:
        """
        Cache a single entity snapshot.

        Args:
            entity_id: Entity identifier (e.g. product id)
            value: JSON-serializable snapshot

        Returns:
            True if cached, False otherwise

        Example:
            >>> await manager.cache_entity("42", {"name": "Mug", "price": 12.5})
            True
        """
        return await self.store.set(self.keys.entity(entity_id), value, CacheTTL.ENTITY.value)

    async def get_cached_entity(self, entity_id: str) -> Any:
        return await self.store.get(self.keys.entity(entity_id))

    async def cache_listing(
        self, filter_descriptor: Dict[str, Any], page: int, values: Any
    ) -> bool:
        """
        Cache one page of a filtered listing.

        Args:
            filter_descriptor: Query filter; key order does not matter
            page: Page number
            values: JSON-serializable page contents

        Returns:
            True if cached, False otherwise
        """
        key = self._listing_key(filter_descriptor, page)
        if key is None:
            return False
        return await self.store.set(key, values, CacheTTL.LISTING.value)

    async def get_cached_listing(
        self, filter_descriptor: Dict[str, Any], page: int = 1
    ) -> Any:
        key = self._listing_key(filter_descriptor, page)
        if key is None:
            return None
        return await self.store.get(key)

    def _listing_key(self, filter_descriptor: Dict[str, Any], page: int) -> Optional[str]:
        # None means the filter has no canonical form; callers treat it as uncacheable
        try:
            return self.keys.listing(filter_descriptor, page)
        except (TypeError, ValueError) as e:
            logger.warning(
                "listing_key_unserializable",
                page=page,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def invalidate_listings(self) -> int:
        """
        Delete every cached listing page.

        Failures are logged per key and skipped.

        Returns:
            Number of listing keys deleted
        """
        listing_keys = await self.store.keys_matching(self.keys.listing_pattern())

        deleted = 0
        for key in listing_keys:
            if await self.store.delete(key):
                deleted += 1

        logger.info(
            "listing_cache_invalidated",
            found=len(listing_keys),
            deleted=deleted,
        )

        return deleted

    async def invalidate_entity(self, entity_id: str) -> bool:
        """
        Invalidate an entity and, in cascade, every listing.

        Best-effort: store failures are logged and swallowed, and the
        call always reports success.

        Args:
            entity_id: Identifier of the entity that was written

        Returns:
            Always True
        """
        await self.store.delete(self.keys.entity(entity_id))
        deleted = await self.invalidate_listings()

        logger.info(
            "entity_cache_invalidated",
            entity_id=entity_id,
            listings_deleted=deleted,
        )

        return True

    async def get_or_fetch(
        self, key: str, fetch_func: Fetch, ttl: Optional[int] = None
    ) -> CacheLookup:
        """
        Get from cache or fetch and cache (cache-aside pattern).

        It first checks the cache, and if not found, executes the fetch
        function and caches the result. Errors raised by fetch_func are
        propagated; cache errors never are.

        Args:
            key: Cache key
            fetch_func: Async function producing the value on a miss
            ttl: Time to live in seconds (default: the key namespace's TTL)

        Returns:
            CacheLookup with the data and whether it came from cache

        Example:
            >>> async def load_product():
            ...     return await products.find_one("42")
            >>>
            >>> lookup = await manager.get_or_fetch("entity:42", load_product)
            >>> print(f"Cached: {lookup.cached}")
        """
        if ttl is None:
            ttl = CacheTTL.for_namespace(key.split(":", 1)[0])

        cached = await self.store.get(key)

        if cached is not None:
            logger.info("cache_hit_get_or_fetch", key=key)
            return CacheLookup(data=cached, cached=True, ttl=ttl)

        logger.info("cache_miss_fetching", key=key)

        try:
            data = await fetch_func()

        except Exception as e:
            logger.error(
                "fetch_function_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            # Re-raise the fetch error (don't swallow it)
            raise

        await self.store.set(key, data, ttl)

        return CacheLookup(data=data, cached=False, ttl=ttl)

    async def get_or_fetch_entity(self, entity_id: str, fetch_func: Fetch) -> CacheLookup:
        return await self.get_or_fetch(
            self.keys.entity(entity_id), fetch_func, CacheTTL.ENTITY.value
        )

    async def get_or_fetch_listing(
        self, filter_descriptor: Dict[str, Any], page: int, fetch_func: Fetch
    ) -> CacheLookup:
        ttl = CacheTTL.LISTING.value
        key = self._listing_key(filter_descriptor, page)
        if key is None:
            return CacheLookup(data=await fetch_func(), cached=False, ttl=ttl)
        return await self.get_or_fetch(key, fetch_func, ttl)
