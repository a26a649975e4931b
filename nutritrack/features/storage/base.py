"""
Persistence facade.

Key/value reads and writes of JSON-serializable values, plus an atomic
append for list-valued keys. Adapters raise PersistenceError; SafeStore
turns those faults into "no data" / "write not confirmed" so callers can
always fall back to default state.
"""

import logging
from typing import Any, List, Mapping, Optional, Protocol, runtime_checkable

from nutritrack.core.errors import PersistenceError

logger = logging.getLogger("nutritrack")


@runtime_checkable
class KeyValueStore(Protocol):
    def read(self, key: str) -> Optional[Any]:
        """Return the stored JSON value, or None when the key is absent."""
        ...

    def write(self, key: str, value: Any) -> bool:
        """Replace the value under key. True once the write is durable."""
        ...

    def append(self, key: str, item: Any) -> bool:
        """Append item to the list stored under key without rewriting it."""
        ...

    def read_list(self, key: str, match: Optional[Mapping[str, str]] = None) -> List[Any]:
        """Return the items appended under key, oldest first.

        With `match`, only object items whose top-level fields equal every
        given value are returned, so adapters can filter before loading.
        """
        ...


class SafeStore:
    """Wraps an adapter so storage faults degrade instead of propagating."""

    def __init__(self, inner: KeyValueStore):
        self.inner = inner

    def read(self, key: str) -> Optional[Any]:
        try:
            return self.inner.read(key)
        except PersistenceError as exc:
            logger.warning("store.read_failed", extra={"key": key, "error_code": exc.code, "error_message": exc.message})
            return None

    def write(self, key: str, value: Any) -> bool:
        try:
            return bool(self.inner.write(key, value))
        except PersistenceError as exc:
            logger.warning("store.write_failed", extra={"key": key, "error_code": exc.code, "error_message": exc.message})
            return False

    def append(self, key: str, item: Any) -> bool:
        try:
            return bool(self.inner.append(key, item))
        except PersistenceError as exc:
            logger.warning("store.append_failed", extra={"key": key, "error_code": exc.code, "error_message": exc.message})
            return False

    def read_list(self, key: str, match: Optional[Mapping[str, str]] = None) -> List[Any]:
        try:
            return list(self.inner.read_list(key, match=match))
        except PersistenceError as exc:
            logger.warning("store.read_failed", extra={"key": key, "error_code": exc.code, "error_message": exc.message})
            return []
