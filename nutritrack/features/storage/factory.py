import logging
from typing import Optional

from nutritrack.core.config import settings
from nutritrack.core.errors import PersistenceError
from nutritrack.features.storage.base import SafeStore
from nutritrack.features.storage.memory import InMemoryStore

logger = logging.getLogger("nutritrack")


def build_store(backend: Optional[str] = None) -> SafeStore:
    """
    Build the store selected by STORAGE_BACKEND.

    - memory: process-local InMemoryStore
    - sql: SqlStore, raises PersistenceError if the database is unreachable
    - auto: SqlStore when a database URL is configured and reachable,
      otherwise InMemoryStore
    """
    from nutritrack.core.database import check_connection, get_database_url

    mode = (backend or settings.STORAGE_BACKEND or "auto").lower()

    if mode == "memory":
        return SafeStore(InMemoryStore())

    if mode == "sql" or get_database_url():
        from nutritrack.features.storage.sql import SqlStore

        if check_connection():
            return SafeStore(SqlStore())
        if mode == "sql":
            raise PersistenceError("STORAGE_BACKEND=sql but the database is unreachable")
        logger.warning("store.sql_unavailable, falling back to in-memory")

    return SafeStore(InMemoryStore())


# Global store instance (lazy initialization)
_store_instance: Optional[SafeStore] = None


def get_store() -> SafeStore:
    """Get the singleton store instance."""
    global _store_instance
    if _store_instance is None:
        _store_instance = build_store()
    return _store_instance


def reset_store() -> None:
    """
    Reset the store instance.

    FOR TESTING ONLY - forces re-initialization on next get_store() call.
    """
    global _store_instance
    _store_instance = None
