"""
Sliding-window rate limiter on Redis sorted sets.

Each caller key maps to a sorted set of call timestamps (epoch ms).
A call is recorded first, entries older than the window are trimmed,
and the remaining cardinality is compared to the limit. Exactly `limit`
calls pass in any trailing window; rejected calls still consume a slot.

On any store failure the limiter fails open.
"""

import time
from typing import Callable, Optional

import structlog

from src.cache.keys import CacheKeyGenerator
from src.cache.store import StoreClient
from src.models.results import RateLimitResult, RateLimitRule

logger = structlog.get_logger(__name__)

# 100 requests per 15 minutes per client IP
API_RATE_LIMIT = RateLimitRule(limit=100, window_seconds=15 * 60)

Clock = Callable[[], int]


def epoch_ms() -> int:
    return int(time.time() * 1000)


class SlidingWindowRateLimiter:
    """
    Per-key sliding-window request counter.

    No step is wrapped in a transaction: concurrent calls on one key may
    observe slightly different counts, each a valid snapshot of the set.
    The set's own expiry is reset to the window length on every call so
    idle keys disappear.

    Attributes:
        store: Primitive store client
        clock: Callable returning the current time in epoch milliseconds
    """

    def __init__(self, store: StoreClient, clock: Optional[Clock] = None) -> None:
        self.store = store
        self.clock = clock or epoch_ms

    async def check_and_record(
        self, key: str, limit: int, window_seconds: int
    ) -> RateLimitResult:
        """
        Record a call and decide whether it is within the limit.

        Args:
            key: Rate limit key (see CacheKeyGenerator.rate_limit)
            limit: Maximum calls allowed in the window
            window_seconds: Trailing window length

        Returns:
            RateLimitResult; allowed=True with remaining=limit if Redis failed

        Raises:
            ValueError: If limit or window_seconds is below 1

        Example:
            >>> result = await limiter.check_and_record("ratelimit:api:10.0.0.1", 5, 60)
            >>> result.allowed, result.remaining
            (True, 4)
        """
        rule = RateLimitRule(limit=limit, window_seconds=window_seconds)
        window_ms = rule.window_seconds * 1000

        now = self.clock()
        window_start = now - window_ms
        member = str(now)

        steps = [
            ("zadd", lambda client: client.zadd(key, {member: now})),
            ("zremrangebyscore", lambda client: client.zremrangebyscore(key, "-inf", window_start)),
            ("zcard", lambda client: client.zcard(key)),
            ("expire", lambda client: client.expire(key, window_seconds)),
        ]

        values = []
        for operation, command in steps:
            result = await self.store.run(operation, key, command)
            if not result.ok:
                logger.warning(
                    "rate_limit_fail_open",
                    key=key,
                    operation=operation,
                    error=str(result.error),
                )
                return RateLimitResult(
                    allowed=True,
                    remaining=limit,
                    limit=limit,
                    reset_at_ms=now,
                    checked_at_ms=now,
                )
            values.append(result.value)

        count = int(values[2])
        allowed = count <= limit
        remaining = max(0, limit - count)

        if not allowed:
            logger.warning(
                "rate_limit_exceeded",
                key=key,
                count=count,
                limit=limit,
                window_seconds=window_seconds,
            )
        elif count > limit * 0.9:
            logger.info(
                "rate_limit_approaching",
                key=key,
                count=count,
                limit=limit,
                remaining=remaining,
            )

        return RateLimitResult(
            allowed=allowed,
            remaining=remaining,
            limit=limit,
            reset_at_ms=now + window_ms,
            checked_at_ms=now,
        )

    async def check(
        self,
        identifier: str,
        rule: RateLimitRule = API_RATE_LIMIT,
        scope: str = "api",
    ) -> RateLimitResult:
        """
        Check a caller (e.g. client IP) against a rule.

        Example:
            >>> result = await limiter.check(request.client.host)
            >>> if not result.allowed:
            ...     return JSONResponse({"error": result.message}, 429, headers=result.headers())
        """
        key = CacheKeyGenerator.rate_limit(identifier, scope)
        return await self.check_and_record(key, rule.limit, rule.window_seconds)

    async def get_remaining(self, key: str, limit: int, window_seconds: int) -> int:
        """
        Count remaining calls without recording one.

        Returns:
            Calls left in the trailing window, or limit if Redis failed
        """
        now = self.clock()
        window_start = now - window_seconds * 1000

        result = await self.store.run(
            "zcount",
            key,
            lambda client: client.zcount(key, f"({window_start}", "+inf"),
        )
        if not result.ok:
            return limit

        return max(0, limit - int(result.value))

    async def reset(self, key: str) -> bool:
        """
        Drop a key's window.

        Useful for testing or manual intervention.
        """
        reset = await self.store.delete(key)
        if reset:
            logger.info("rate_limiter_reset", key=key)
        return reset
