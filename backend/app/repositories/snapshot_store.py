"""Date-keyed snapshot cache contract and its in-memory implementation."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol, runtime_checkable


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@runtime_checkable
class SnapshotStore(Protocol):
    """Key-value capability with per-entry time-to-live.

    Values are JSON-compatible structures. ``get`` returns ``None`` for keys
    that were never written or whose TTL has elapsed.
    """

    async def get(self, key: str) -> Any | None:
        ...

    async def put(self, key: str, value: Any, *, expiration_ttl: int) -> None:
        ...


class InMemorySnapshotStore:
    """Process-local store, used for dry runs and tests."""

    def __init__(self, *, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, datetime]] = {}

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        serialized, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return json.loads(serialized)

    async def put(self, key: str, value: Any, *, expiration_ttl: int) -> None:
        # Serialized on write so callers cannot mutate a stored snapshot.
        serialized = json.dumps(value, ensure_ascii=False)
        self._entries[key] = (serialized, self._clock() + timedelta(seconds=expiration_ttl))

    def keys(self) -> list[str]:
        now = self._clock()
        return sorted(key for key, (_, expires_at) in self._entries.items() if expires_at > now)
