"""Primitive Redis operations with fail-open error handling.

This module provides the StoreClient class: typed get/set/delete/exists/
scan/flush over a RedisConnection, with JSON encoding of values. Cache
failures must never break the caller's request path, so every public
method degrades to "as if absent" instead of raising.
"""

import json
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

import structlog

from src.cache.connection import RedisConnection
from src.cache.exceptions import (
    CacheConnectionError,
    CacheError,
    CacheOperationError,
    CacheSerializationError,
)
from src.cache.result import CacheResult

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Command = Callable[[redis.Redis], Awaitable[T]]

SCAN_BATCH_SIZE = 500


class StoreClient:
    """
    Thin typed wrapper over the shared Redis connection.

    Each operation has a *_result variant returning CacheResult (value or
    CacheError, kept for logging and composite callers) and a public
    variant returning the documented safe default:

        get -> None, set/delete/exists/flush_all -> False,
        keys_matching -> []

    Attributes:
        connection: Connection manager supplying the client
    """

    def __init__(self, connection: RedisConnection) -> None:
        self.connection = connection

    async def run(
        self, operation: str, key: Optional[str], command: Command[T]
    ) -> CacheResult[T]:
        """
        Execute one store command and capture its outcome.

        Acquires the client (reconnecting lazily), runs the command and
        converts any failure into a CacheResult carrying a CacheError.
        Connection-class failures also mark the connection dropped so the
        next call reconnects.

        Args:
            operation: Command name for logs ("get", "zadd", ...)
            key: Key the command touches, if any
            command: Callable taking the client and returning an awaitable

        Returns:
            CacheResult with the command's return value or the error
        """
        try:
            client = await self.connection.acquire()
            value = await command(client)

        except CacheConnectionError as e:
            return self._failure(operation, key, e, e)

        except (RedisConnectionError, RedisTimeoutError, ConnectionError) as e:
            self.connection.mark_disconnected(reason=f"{operation}_failed")
            error = CacheOperationError(str(e), operation=operation, key=key)
            return self._failure(operation, key, error, e)

        except Exception as e:
            error = CacheOperationError(str(e), operation=operation, key=key)
            return self._failure(operation, key, error, e)

        return CacheResult.success(value)

    def _failure(
        self,
        operation: str,
        key: Optional[str],
        error: CacheError,
        cause: Exception,
    ) -> CacheResult[Any]:
        logger.error(
            f"cache_{operation}_error",
            key=key,
            error=str(error),
            error_type=type(cause).__name__,
        )
        return CacheResult.failure(error)

    async def get_result(self, key: str) -> CacheResult[Any]:
        raw = await self.run("get", key, lambda client: client.get(key))
        if not raw.ok:
            return raw

        if raw.value is None:
            logger.debug("cache_miss", key=key)
            return raw

        try:
            value = json.loads(raw.value)

        except (json.JSONDecodeError, TypeError) as e:
            logger.error(
                "cache_get_json_decode_error",
                key=key,
                error=str(e),
            )
            # Invalid cached data - delete it
            await self.delete(key)
            return CacheResult.failure(
                CacheSerializationError(str(e), operation="get", key=key)
            )

        logger.debug("cache_hit", key=key)
        return CacheResult.success(value)

    async def get(self, key: str) -> Any:
        """
        Retrieve and decode a cached value.

        Args:
            key: Cache key to retrieve

        Returns:
            Decoded JSON value, or None on miss, decode failure or error

        Example:
            >>> value = await store.get("entity:42")
        """
        result = await self.get_result(key)
        return result.unwrap_or(None)

    async def set_result(self, key: str, value: Any, ttl: int) -> CacheResult[Any]:
        if ttl <= 0:
            logger.error("cache_set_invalid_ttl", key=key, ttl=ttl)
            return CacheResult.failure(
                CacheOperationError(
                    f"TTL must be a positive number of seconds, got {ttl}",
                    operation="set",
                    key=key,
                )
            )

        try:
            payload = json.dumps(value)

        except (TypeError, ValueError) as e:
            logger.error(
                "cache_set_serialization_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return CacheResult.failure(
                CacheSerializationError(str(e), operation="set", key=key)
            )

        result = await self.run("set", key, lambda client: client.set(key, payload, ex=ttl))

        if result.ok:
            logger.debug("cache_set", key=key, ttl=ttl, data_size=len(payload))

        return result

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """
        Store a JSON-encoded value with an expiry.

        Args:
            key: Cache key
            value: Data to cache (must be JSON-serializable)
            ttl: Time to live in seconds, must be positive

        Returns:
            True if cached successfully, False otherwise

        Example:
            >>> ok = await store.set("entity:42", {"name": "Mug"}, ttl=1800)
        """
        result = await self.set_result(key, value, ttl)
        return result.ok

    async def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if the command succeeded (whether or not the key existed)
        """
        result = await self.run("delete", key, lambda client: client.delete(key))
        if result.ok:
            logger.debug("cache_delete", key=key, deleted=bool(result.value))
        return result.ok

    async def exists(self, key: str) -> bool:
        result = await self.run("exists", key, lambda client: client.exists(key))
        return bool(result.unwrap_or(0))

    async def keys_matching_result(self, pattern: str) -> CacheResult[List[str]]:
        async def scan(client: redis.Redis) -> List[str]:
            return [key async for key in client.scan_iter(match=pattern, count=SCAN_BATCH_SIZE)]

        return await self.run("scan", pattern, scan)

    async def keys_matching(self, pattern: str) -> List[str]:
        """
        List keys matching a glob-style pattern.

        Uses cursor-based SCAN, so large keyspaces do not block Redis.

        Args:
            pattern: Glob pattern, e.g. "listing:*"

        Returns:
            Matching keys, or an empty list on error
        """
        result = await self.keys_matching_result(pattern)
        return result.unwrap_or([])

    async def flush_all(self) -> bool:
        """
        Remove every key in the store.

        Administrative operation for maintenance and tests only.
        """
        result = await self.run("flushall", None, lambda client: client.flushall())
        if result.ok:
            logger.warning("cache_flushed")
        return result.ok
