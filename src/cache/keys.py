"""Cache key generation for consistent, deterministic cache keys.

This module provides the CacheKeyGenerator class, which owns the layout
of every key the layer writes to Redis.
"""

import json
from typing import Any, Dict

import structlog

logger = structlog.get_logger(__name__)


class CacheKeyGenerator:
    """
    Generate namespaced keys for the storefront cache.

    Key layouts:
        entity:{id}
        listing:{canonical filter}:page:{page}
        session:{session_id}
        ratelimit:{scope}:{identifier}

    Listing filters are serialized canonically (sorted keys, no
    whitespace) so that equal filters always produce the same key,
    whatever order their fields were built in.
    """

    ENTITY_PREFIX = "entity"
    LISTING_PREFIX = "listing"
    SESSION_PREFIX = "session"
    RATE_LIMIT_PREFIX = "ratelimit"

    @staticmethod
    def canonical_filter(filter_descriptor: Dict[str, Any]) -> str:
        """
        Serialize a filter descriptor deterministically.

        Args:
            filter_descriptor: Query filter; values JSON cannot encode
                (Decimal, date, ObjectId, ...) are written as str(value)

        Returns:
            Compact JSON with keys sorted at every nesting level

        Raises:
            TypeError: If filter keys cannot be sorted against each other
            ValueError: If the filter contains a reference cycle

        Example:
            >>> CacheKeyGenerator.canonical_filter({"b": 2, "a": 1})
            '{"a":1,"b":2}'
        """
        return json.dumps(
            filter_descriptor, sort_keys=True, separators=(",", ":"), default=str
        )

    @staticmethod
    def entity(entity_id: str) -> str:
        return f"{CacheKeyGenerator.ENTITY_PREFIX}:{entity_id}"

    @staticmethod
    def listing(filter_descriptor: Dict[str, Any], page: int = 1) -> str:
        """
        Generate the key for one page of a filtered listing.

        Args:
            filter_descriptor: Query filter (category, price range, sort, ...)
            page: 1-based page number

        Returns:
            Key in format listing:{canonical filter}:page:{page}

        Example:
            >>> CacheKeyGenerator.listing({"category": "shirts"}, page=2)
            'listing:{"category":"shirts"}:page:2'
        """
        filter_str = CacheKeyGenerator.canonical_filter(filter_descriptor)
        cache_key = f"{CacheKeyGenerator.LISTING_PREFIX}:{filter_str}:page:{page}"

        logger.debug("cache_key_generated", namespace="listing", cache_key=cache_key)

        return cache_key

    @staticmethod
    def listing_pattern() -> str:
        """SCAN pattern matching every listing key."""
        return f"{CacheKeyGenerator.LISTING_PREFIX}:*"

    @staticmethod
    def session(session_id: str) -> str:
        return f"{CacheKeyGenerator.SESSION_PREFIX}:{session_id}"

    @staticmethod
    def rate_limit(identifier: str, scope: str = "api") -> str:
        """
        Generate the sorted-set key for a caller's rate limit window.

        Example:
            >>> CacheKeyGenerator.rate_limit("203.0.113.7")
            'ratelimit:api:203.0.113.7'
        """
        return f"{CacheKeyGenerator.RATE_LIMIT_PREFIX}:{scope}:{identifier}"
