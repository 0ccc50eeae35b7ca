"""
Pydantic models returned by the cache layer.

Defines the result structures handed back to route handlers: cache
lookups, rate limit decisions and connection health.
"""
import math
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

RATE_LIMIT_MESSAGE = "Too many requests from this IP. Please try again later."


class CacheLookup(BaseModel):
    """
    Outcome of a cache-aside read.

    Tells the caller whether the data came from Redis or was freshly
    fetched and written back.
    """

    data: Any = Field(
        ...,
        description="Cached or freshly fetched payload",
    )
    cached: bool = Field(
        ...,
        description="Whether the payload was served from cache",
    )
    ttl: int = Field(
        ...,
        gt=0,
        description="TTL in seconds the payload is (or would be) cached for",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": {"name": "Linen shirt", "price": 49.0},
                "cached": True,
                "ttl": 1800,
            }
        }
    )


class RateLimitRule(BaseModel):
    """A request budget: at most `limit` calls per trailing window."""

    limit: int = Field(
        ...,
        ge=1,
        description="Number of allowed requests per window",
    )
    window_seconds: int = Field(
        ...,
        ge=1,
        description="Trailing window length in seconds",
    )


class RateLimitResult(BaseModel):
    """
    Decision of the sliding-window rate limiter for one call.

    Timestamps are milliseconds since the epoch.
    """

    allowed: bool = Field(
        ...,
        description="Whether the call is within the limit",
    )
    remaining: int = Field(
        ...,
        ge=0,
        description="Calls left in the current window",
    )
    limit: int = Field(
        ...,
        ge=1,
        description="Limit the call was checked against",
    )
    reset_at_ms: int = Field(
        ...,
        description="When the window started by this call ends",
    )
    checked_at_ms: int = Field(
        ...,
        description="When the decision was made",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "allowed": True,
                "remaining": 97,
                "limit": 100,
                "reset_at_ms": 1760873400000,
                "checked_at_ms": 1760872500000,
            }
        }
    )

    @property
    def reset_at(self) -> datetime:
        return datetime.fromtimestamp(self.reset_at_ms / 1000, tz=timezone.utc)

    @property
    def reset_seconds(self) -> int:
        """Whole seconds from the decision until the window resets."""
        return max(0, math.ceil((self.reset_at_ms - self.checked_at_ms) / 1000))

    @property
    def message(self) -> str | None:
        """Client-facing message for rejected calls."""
        return None if self.allowed else RATE_LIMIT_MESSAGE

    def headers(self) -> dict[str, str]:
        """
        Standard RateLimit-* response headers for this decision.

        Example:
            >>> result.headers()
            {'RateLimit-Limit': '100', 'RateLimit-Remaining': '97', 'RateLimit-Reset': '900'}
        """
        headers = {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_seconds),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.reset_seconds)
        return headers


class ConnectionHealth(BaseModel):
    """Health snapshot of the Redis connection."""

    state: str = Field(
        ...,
        description="Connection state (disconnected, connecting, connected)",
    )
    reachable: bool = Field(
        ...,
        description="Whether Redis answered PING",
    )
    redis_url: str = Field(
        ...,
        description="Redis host with credentials stripped",
    )
