"""Redis connection lifecycle management.

This module provides the RedisConnection class, which owns the single
logical connection to the shared Redis store and reconnects lazily
after a drop.
"""

import asyncio
from enum import Enum
from typing import Callable, List, Optional

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

import structlog

from src.cache.exceptions import CacheConnectionError
from src.models.results import ConnectionHealth
from src.utils.config import RedisSettings

logger = structlog.get_logger(__name__)


class ConnectionState(Enum):
    """Lifecycle states of the logical Redis connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


ClientFactory = Callable[[RedisSettings], redis.Redis]
StateListener = Callable[[ConnectionState, ConnectionState], None]


def create_redis_client(settings: RedisSettings) -> redis.Redis:
    """
    Build a pooled asyncio Redis client from settings.

    Args:
        settings: Connection settings (URL, pool size, timeouts)

    Returns:
        Redis client bound to a fresh connection pool
    """
    pool = ConnectionPool.from_url(
        settings.url,
        max_connections=settings.max_connections,
        decode_responses=True,  # Values are JSON text
        socket_timeout=settings.socket_timeout,
        socket_connect_timeout=settings.socket_connect_timeout,
        retry_on_timeout=True,
    )
    return redis.Redis(connection_pool=pool)


class RedisConnection:
    """
    Owner of the logical connection to Redis.

    State moves through DISCONNECTED -> CONNECTING -> CONNECTED under an
    asyncio lock. Higher layers never call connect() themselves; they call
    acquire(), which connects on demand, so a dropped connection heals on
    the next operation instead of needing a supervisor.

    Attributes:
        settings: Connection settings
    """

    def __init__(
        self,
        settings: Optional[RedisSettings] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.settings = settings or RedisSettings.from_env()
        self._client_factory = client_factory or create_redis_client
        self._client: Optional[redis.Redis] = None
        self._state = ConnectionState.DISCONNECTED
        self._lock = asyncio.Lock()
        self._listeners: List[StateListener] = []
        self._failed_attempts = 0
        self._last_failure: Optional[BaseException] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def add_listener(self, listener: StateListener) -> None:
        """
        Register a callback invoked as listener(old_state, new_state).

        Example:
            >>> conn = RedisConnection()
            >>> conn.add_listener(lambda old, new: print(old, "->", new))
        """
        self._listeners.append(listener)

    def _set_state(self, new_state: ConnectionState, **context) -> None:
        old_state = self._state
        if old_state is new_state:
            return

        self._state = new_state
        logger.info(
            "redis_state_changed",
            from_state=old_state.value,
            to_state=new_state.value,
            **context,
        )

        for listener in self._listeners:
            try:
                listener(old_state, new_state)
            except Exception as e:
                logger.warning(
                    "redis_state_listener_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )

    async def connect(self) -> redis.Redis:
        """
        Establish the connection and complete a PING handshake.

        Returns the existing client if already connected. Callers that were
        waiting on the lock while another attempt failed raise at once
        instead of repeating the handshake.

        Returns:
            Connected Redis client

        Raises:
            CacheConnectionError: If the client cannot be built or PING fails
        """
        failures_seen = self._failed_attempts

        async with self._lock:
            if self._state is ConnectionState.CONNECTED and self._client is not None:
                return self._client

            # An attempt failed while this caller waited; don't queue another handshake
            if self._failed_attempts != failures_seen:
                logger.debug("redis_connect_skipped", reason="attempt_failed_while_waiting")
                raise CacheConnectionError(
                    f"Cannot connect to Redis at {self.settings.redacted_url}: "
                    f"{self._last_failure}",
                    operation="connect",
                ) from self._last_failure

            stale = self._client
            self._client = None
            if stale is not None:
                await self._close_quietly(stale)

            self._set_state(ConnectionState.CONNECTING)

            client = None
            try:
                client = self._client_factory(self.settings)
                await client.ping()

            except Exception as e:
                self._failed_attempts += 1
                self._last_failure = e
                if client is not None:
                    await self._close_quietly(client)
                self._set_state(ConnectionState.DISCONNECTED, reason="handshake_failed")
                logger.error(
                    "redis_connect_failed",
                    redis_url=self.settings.redacted_url,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise CacheConnectionError(
                    f"Cannot connect to Redis at {self.settings.redacted_url}: {e}",
                    operation="connect",
                ) from e

            self._client = client
            self._set_state(ConnectionState.CONNECTED, redis_url=self.settings.redacted_url)
            return client

    async def disconnect(self) -> None:
        """
        Close the client and its pool gracefully.

        Raises:
            CacheConnectionError: If closing fails (state still ends DISCONNECTED)
        """
        async with self._lock:
            client = self._client
            self._client = None

            if client is None:
                self._set_state(ConnectionState.DISCONNECTED, reason="closed")
                return

            try:
                await client.aclose(close_connection_pool=True)
                logger.info("redis_client_closed")

            except Exception as e:
                logger.error(
                    "redis_close_error",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise CacheConnectionError(
                    f"Error closing Redis connection: {e}",
                    operation="disconnect",
                ) from e

            finally:
                self._set_state(ConnectionState.DISCONNECTED, reason="closed")

    async def acquire(self) -> redis.Redis:
        """
        Return a connected client, connecting first if needed.

        Raises:
            CacheConnectionError: If (re)connection fails
        """
        if self._state is ConnectionState.CONNECTED and self._client is not None:
            return self._client
        return await self.connect()

    def mark_disconnected(self, reason: str) -> None:
        """Flag the connection as dropped so the next acquire() reconnects."""
        if self._state is ConnectionState.CONNECTED:
            self._set_state(ConnectionState.DISCONNECTED, reason=reason)

    async def ping(self) -> bool:
        """
        Check Redis connection health.

        Connects on demand. Never raises.

        Returns:
            True if Redis answered PING, False otherwise
        """
        try:
            client = await self.acquire()
            result = await client.ping()
            logger.debug("redis_ping_success", result=result)
            return bool(result)

        except Exception as e:
            logger.error(
                "redis_ping_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            self.mark_disconnected(reason="ping_failed")
            return False

    async def health(self) -> ConnectionHealth:
        """Snapshot of connection state for health checks."""
        reachable = await self.ping()
        return ConnectionHealth(
            state=self._state.value,
            reachable=reachable,
            redis_url=self.settings.redacted_url,
        )

    async def _close_quietly(self, client: redis.Redis) -> None:
        try:
            await client.aclose(close_connection_pool=True)
        except Exception as e:
            logger.debug(
                "redis_stale_client_close_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
