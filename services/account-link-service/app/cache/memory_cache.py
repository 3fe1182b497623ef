"""In-memory expiring cache of local accounts."""

from __future__ import annotations

import time
from threading import Lock

from ..domain.account import LocalAccount


class InMemoryLocalAccountCache:
    """Thread-safe per-process cache keyed by account id."""

    def __init__(self, ttl_seconds: int) -> None:
        """Initialise the expiration window and the entry storage."""
        self._ttl = ttl_seconds
        self._entries: dict[int, tuple[float, dict]] = {}
        self._lock = Lock()

    def get(self, account_id: int) -> LocalAccount | None:
        """Return a fresh copy of the cached account, or ``None`` when absent or expired."""
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(account_id)
            if entry is None:
                return None
            expires_at, data = entry
            if expires_at <= now:
                del self._entries[account_id]
                return None
        return LocalAccount.from_dict(data)

    def put(self, account: LocalAccount) -> None:
        if account.account_id is None:
            return
        with self._lock:
            self._entries[account.account_id] = (time.monotonic() + self._ttl, account.to_dict())

    def evict(self, account_id: int) -> None:
        with self._lock:
            self._entries.pop(account_id, None)
