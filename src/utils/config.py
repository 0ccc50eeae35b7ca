"""
Environment configuration for the cache layer.

All tunables come from environment variables; per-call TTLs and rate
limit parameters are supplied by callers and are not configured here.
"""
import os

from pydantic import BaseModel, Field

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class RedisSettings(BaseModel):
    """Connection settings for the shared Redis store."""

    url: str = Field(
        DEFAULT_REDIS_URL,
        description="Redis connection URL",
    )
    max_connections: int = Field(
        20,
        ge=1,
        description="Connection pool size",
    )
    socket_timeout: float = Field(
        5.0,
        gt=0,
        description="Per-command socket timeout in seconds",
    )
    socket_connect_timeout: float = Field(
        5.0,
        gt=0,
        description="Connect timeout in seconds",
    )

    @classmethod
    def from_env(cls) -> "RedisSettings":
        """
        Build settings from REDIS_* environment variables.

        Example:
            >>> settings = RedisSettings.from_env()
            >>> settings.url
            'redis://localhost:6379/0'
        """
        return cls(
            url=os.getenv("REDIS_URL", DEFAULT_REDIS_URL),
            max_connections=int(os.getenv("REDIS_MAX_CONNECTIONS", "20")),
            socket_timeout=float(os.getenv("REDIS_SOCKET_TIMEOUT", "5")),
            socket_connect_timeout=float(os.getenv("REDIS_CONNECT_TIMEOUT", "5")),
        )

    @property
    def redacted_url(self) -> str:
        """URL with credentials stripped, safe for logs."""
        return self.url.split("@")[-1]
