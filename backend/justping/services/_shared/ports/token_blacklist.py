from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import Protocol


class TokenBlacklist(Protocol):
    """
    Set of explicitly revoked **access** tokens, keyed by the raw token string.

    ``add`` is idempotent. A backend that cannot be reached raises its own
    driver error; callers translate that into a fail-closed rejection.
    """

    def add(self, token: str, expires_at: datetime) -> None: ...

    def contains(self, token: str) -> bool: ...

    def purge_expired(self) -> int: ...


class InMemoryTokenBlacklist(TokenBlacklist):
    """Simple in-memory blacklist for unit tests."""

    def __init__(self) -> None:
        self._entries: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def add(self, token: str, expires_at: datetime) -> None:
        with self._lock:
            self._entries.setdefault(token, expires_at)

    def contains(self, token: str) -> bool:
        return token in self._entries

    def purge_expired(self) -> int:
        now = datetime.now(UTC)
        with self._lock:
            stale = [t for t, exp in self._entries.items() if exp <= now]
            for token in stale:
                del self._entries[token]
            return len(stale)
