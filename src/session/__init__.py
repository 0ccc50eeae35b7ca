"""Server-side session storage on Redis."""

from src.session.store import SessionStore

__all__ = ["SessionStore"]
