"""TTL cache for food source lookups."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Key-value cache with per-entry expiry."""

    def get(self, key: str) -> object | None:
        """Return a live cached value, if any."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Cache a value for ``ttl_seconds``."""


@dataclass
class _Entry:
    value: object
    expires_at: datetime


class InMemoryCache(Cache):
    """Bounded in-memory cache; the oldest entry is evicted when full."""

    def __init__(self, max_entries: int = 512) -> None:
        self.max_entries = max_entries
        self._entries: dict[str, _Entry] = {}

    def get(self, key: str) -> object | None:
        """Return a cached value unless it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= datetime.now(tz=UTC):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Cache a value, evicting the oldest entry at capacity."""
        if key not in self._entries and len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[key] = _Entry(
            value=value,
            expires_at=datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds),
        )

    def __len__(self) -> int:
        return len(self._entries)
