import json
import threading
from typing import Any, Dict, List, Mapping, Optional

from nutritrack.core.errors import PersistenceError


def _roundtrip(value: Any) -> Any:
    # Copy through JSON so callers never hold references into the store
    try:
        return json.loads(json.dumps(value))
    except (TypeError, ValueError) as exc:
        raise PersistenceError(f"Value is not JSON-serializable: {exc}") from exc


class InMemoryStore:
    """Process-local store used in development and tests."""

    def __init__(self):
        self._values: Dict[str, Any] = {}
        self._lists: Dict[str, List[Any]] = {}
        self._lock = threading.Lock()

    def read(self, key: str) -> Optional[Any]:
        with self._lock:
            if key not in self._values:
                return None
            return _roundtrip(self._values[key])

    def write(self, key: str, value: Any) -> bool:
        encoded = _roundtrip(value)
        with self._lock:
            self._values[key] = encoded
        return True

    def append(self, key: str, item: Any) -> bool:
        encoded = _roundtrip(item)
        with self._lock:
            self._lists.setdefault(key, []).append(encoded)
        return True

    def read_list(self, key: str, match: Optional[Mapping[str, str]] = None) -> List[Any]:
        with self._lock:
            items = self._lists.get(key, [])
            if match:
                items = [
                    item
                    for item in items
                    if isinstance(item, dict) and all(item.get(field) == value for field, value in match.items())
                ]
            return _roundtrip(items)

    def clear(self) -> None:
        """FOR TESTING ONLY."""
        with self._lock:
            self._values.clear()
            self._lists.clear()
