"""
Exceptions for the Redis cache layer.

Only CacheConnectionError ever leaves the layer (from connect() and
disconnect()). Every other error is captured in a CacheResult, logged,
and converted to the operation's safe default by StoreClient.
"""

from typing import Optional


class CacheError(Exception):
    """
    Base exception for all cache layer errors.

    Attributes:
        message: Error description
        operation: Store operation that failed (e.g. "get", "zadd")
        key: Cache key involved, if any
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        self.message = message
        self.operation = operation
        self.key = key
        super().__init__(self.message)


class CacheConnectionError(CacheError, ConnectionError):
    """
    Raised when the Redis connection cannot be established or closed.

    Subclasses the builtin ConnectionError so callers that already
    handle network failures generically keep working.

    Example:
        >>> raise CacheConnectionError("PING failed", operation="connect")
    """

    def __init__(
        self,
        message: str = "Redis connection failed",
        operation: Optional[str] = "connect",
        key: Optional[str] = None,
    ) -> None:
        super().__init__(message, operation=operation, key=key)


class CacheOperationError(CacheError):
    """Raised when a store command fails (network, protocol or server error)."""


class CacheSerializationError(CacheError):
    """
    Raised when a value cannot be JSON encoded, or a stored value
    cannot be decoded.
    """
