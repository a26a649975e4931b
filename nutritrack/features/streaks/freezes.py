from __future__ import annotations

import threading
from typing import Dict, Optional, Protocol


class FreezeProvider(Protocol):
    """Streak-freeze entitlement as seen by the streak engine."""

    def has_freeze(self, user_id: str) -> bool: ...

    def consume_freeze(self, user_id: str) -> bool: ...


class FreezeBank:
    """In-memory freeze balances; each user starts with `allowance` freezes."""

    def __init__(self, allowance: int = 1):
        self._allowance = max(0, allowance)
        self._balances: Dict[str, int] = {}
        self._lock = threading.Lock()

    def remaining(self, user_id: str) -> int:
        with self._lock:
            return self._balances.setdefault(user_id, self._allowance)

    def has_freeze(self, user_id: str) -> bool:
        return self.remaining(user_id) > 0

    def consume_freeze(self, user_id: str) -> bool:
        with self._lock:
            balance = self._balances.setdefault(user_id, self._allowance)
            if balance <= 0:
                return False
            self._balances[user_id] = balance - 1
            return True

    def grant(self, user_id: str, count: int = 1) -> int:
        if count < 0:
            raise ValueError("count must be non-negative")
        with self._lock:
            balance = self._balances.setdefault(user_id, self._allowance) + count
            self._balances[user_id] = balance
            return balance


class NoFreezes:
    """Provider for deployments without the freeze entitlement."""

    def has_freeze(self, user_id: str) -> bool:
        return False

    def consume_freeze(self, user_id: str) -> bool:
        return False


def default_freeze_bank(allowance: Optional[int] = None) -> FreezeBank:
    from nutritrack.core.config import settings

    return FreezeBank(settings.STREAK_FREEZE_ALLOWANCE if allowance is None else allowance)
