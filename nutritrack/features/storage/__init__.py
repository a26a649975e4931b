"""
Persistence facade: a key/value port with in-memory and SQL adapters.

Engines depend on the KeyValueStore protocol only, so tests inject an
InMemoryStore and production wires a SqlStore through get_store().
"""

from nutritrack.features.storage.base import KeyValueStore, SafeStore
from nutritrack.features.storage.factory import build_store, get_store, reset_store
from nutritrack.features.storage.keys import ACTIVITIES_KEY, streak_key, tasks_key, tasks_last_saved_key
from nutritrack.features.storage.memory import InMemoryStore

__all__ = [
    "ACTIVITIES_KEY",
    "InMemoryStore",
    "KeyValueStore",
    "SafeStore",
    "build_store",
    "get_store",
    "reset_store",
    "streak_key",
    "tasks_key",
    "tasks_last_saved_key",
]
