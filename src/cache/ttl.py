"""TTL (Time To Live) policies for each cache namespace.

This module defines how long each kind of storefront data may live in
Redis before the store expires it.
"""

from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class CacheTTL(Enum):
    """
    Cache TTL policies per key namespace.

    - Single entities (product detail): 30 minutes, invalidated on write
    - Listings (filtered, paginated): 10 minutes, the staleness bound
      for listings an invalidation pass misses
    - Sessions: 24 hours from the last explicit write

    Values are in seconds.
    """

    ENTITY = 1800  # 30 minutes
    LISTING = 600  # 10 minutes
    SESSION = 86400  # 24 hours

    # Fallback for ad-hoc keys written through the primitive client
    DEFAULT = 3600  # 1 hour

    @staticmethod
    def for_namespace(namespace: str) -> int:
        """
        Determine TTL from a key namespace.

        Args:
            namespace: Key prefix ("entity", "listing", "session")

        Returns:
            TTL in seconds

        Example:
            >>> CacheTTL.for_namespace("listing")
            600
        """
        try:
            ttl = CacheTTL[namespace.upper()].value
        except KeyError:
            ttl = CacheTTL.DEFAULT.value
            logger.warning(
                "unknown_namespace_using_default_ttl",
                namespace=namespace,
                default_ttl=ttl,
            )

        return ttl
