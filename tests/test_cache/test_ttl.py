"""Unit tests for TTL policies."""

from src.cache.ttl import CacheTTL


class TestCacheTTL:
    """Test suite for CacheTTL enum and policies."""

    def test_enum_values_are_positive_integers(self):
        """Test that all TTL values are positive integers."""
        for ttl in CacheTTL:
            assert isinstance(ttl.value, int)
            assert ttl.value > 0

    def test_entity_ttl(self):
        """Test TTL for entities is 30 minutes."""
        assert CacheTTL.ENTITY.value == 1800

    def test_listing_ttl(self):
        """Test TTL for listings is 10 minutes."""
        assert CacheTTL.LISTING.value == 600

    def test_session_ttl(self):
        """Test TTL for sessions is 24 hours."""
        assert CacheTTL.SESSION.value == 86400

    def test_listing_is_shortest_catalog_ttl(self):
        """Test listings expire before entities."""
        assert CacheTTL.LISTING.value < CacheTTL.ENTITY.value

    def test_for_namespace(self):
        """Test namespace lookup is case-insensitive."""
        assert CacheTTL.for_namespace("entity") == 1800
        assert CacheTTL.for_namespace("listing") == 600
        assert CacheTTL.for_namespace("SESSION") == 86400

    def test_for_unknown_namespace_uses_default(self):
        """Test unknown namespaces fall back to the default TTL."""
        assert CacheTTL.for_namespace("coupon") == CacheTTL.DEFAULT.value
