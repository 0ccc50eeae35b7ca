"""
Redis-backed session store.

Sessions are JSON blobs under session:{id} with a fixed 24 hour TTL,
so session lookup keeps working independently of the primary database.
Session ids are issued by the authentication layer, never here.
"""

from typing import Any, Optional

import structlog

from src.cache.keys import CacheKeyGenerator
from src.cache.store import StoreClient
from src.cache.ttl import CacheTTL

logger = structlog.get_logger(__name__)


class SessionStore:
    """
    Namespaced session storage with a fixed TTL.

    Reading a session does not extend its TTL; it expires 24 hours
    after it was last written. An empty session id never reaches Redis:
    it is logged and answered with the same default as a store failure.
    """

    def __init__(self, store: StoreClient, ttl: Optional[int] = None) -> None:
        self.store = store
        self.ttl = ttl or CacheTTL.SESSION.value

    @staticmethod
    def _key(session_id: str, operation: str) -> Optional[str]:
        if not session_id:
            logger.warning("session_id_missing", operation=operation)
            return None
        return CacheKeyGenerator.session(session_id)

    async def put_session(self, session_id: str, data: Any) -> bool:
        """
        Write (or overwrite) a session, restarting its TTL.

        Args:
            session_id: Opaque id issued by the auth layer
            data: JSON-serializable session payload

        Returns:
            True if stored, False otherwise (including an empty session_id)
        """
        key = self._key(session_id, "put")
        if key is None:
            return False

        stored = await self.store.set(key, data, self.ttl)
        logger.debug("session_stored", stored=stored, ttl=self.ttl)
        return stored

    async def get_session(self, session_id: str) -> Any:
        key = self._key(session_id, "get")
        if key is None:
            return None
        return await self.store.get(key)

    async def delete_session(self, session_id: str) -> bool:
        key = self._key(session_id, "delete")
        if key is None:
            return False
        return await self.store.delete(key)

    async def has_session(self, session_id: str) -> bool:
        key = self._key(session_id, "exists")
        if key is None:
            return False
        return await self.store.exists(key)
