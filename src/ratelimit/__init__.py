"""Sliding-window request rate limiting on Redis."""

from src.ratelimit.limiter import API_RATE_LIMIT, SlidingWindowRateLimiter

__all__ = [
    "API_RATE_LIMIT",
    "SlidingWindowRateLimiter",
]
