"""Typed outcome of a single store operation."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from src.cache.exceptions import CacheError

T = TypeVar("T")


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    """
    Either a value or the CacheError that prevented producing it.

    StoreClient builds one of these for every command. Public methods
    collapse it to a safe default with unwrap_or(); composite callers
    (the rate limiter) inspect ok/error directly.
    """

    value: Optional[T] = None
    error: Optional[CacheError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "CacheResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CacheError) -> "CacheResult[T]":
        return cls(error=error)

    def unwrap_or(self, default: T) -> T:
        """Return the value, or default if the operation failed."""
        if self.error is not None:
            return default
        return self.value
