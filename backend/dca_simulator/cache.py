"""TTL cache with capacity-bounded eviction over a pluggable storage medium.

Entries are written as JSON ``{"value", "timestamp", "expiresAt"}`` under
``<prefix><key>``. Eviction removes the oldest writes first; reads never
refresh an entry's position.
"""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass
from typing import Any, List, Optional, Tuple

from .clock import Clock, SystemClock
from .storage import Storage, StorageQuotaExceeded, item_size

logger = logging.getLogger(__name__)

CACHE_PREFIX = "crypto-dca-cache:"
DEFAULT_TTL_SECONDS = 24 * 60 * 60
MAX_CACHE_SIZE_BYTES = 5 * 1024 * 1024
EVICTION_THRESHOLD = 0.8


@dataclass(frozen=True)
class CacheStats:
    totalEntries: int
    validEntries: int
    expiredEntries: int
    totalSizeBytes: int
    maxSizeBytes: int
    utilizationPercent: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class CacheStore:
    """Persistent key/value cache with per-entry TTL and LRU-by-write eviction."""

    def __init__(
        self,
        storage: Storage,
        *,
        prefix: str = CACHE_PREFIX,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        max_size_bytes: int = MAX_CACHE_SIZE_BYTES,
        eviction_threshold: float = EVICTION_THRESHOLD,
        clock: Clock | None = None,
    ) -> None:
        self._storage = storage
        self.prefix = prefix
        self.default_ttl = default_ttl
        self.max_size_bytes = max_size_bytes
        self.eviction_threshold = eviction_threshold
        self._clock = clock or SystemClock()
        self._lock = threading.RLock()

    # Helpers

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _owned_keys(self) -> List[str]:
        return [key for key in self._storage.keys() if key.startswith(self.prefix)]

    def _size(self) -> int:
        return self._storage.total_size(self.prefix)

    def _load(self, storage_key: str) -> Optional[dict[str, Any]]:
        raw = self._storage.get_item(storage_key)
        if raw is None:
            return None
        data = json.loads(raw)
        if not isinstance(data, dict) or not isinstance(data.get("expiresAt"), (int, float)):
            raise ValueError(f"Malformed cache entry {storage_key}")
        return data

    def _entries(self) -> List[Tuple[str, float]]:
        entries: List[Tuple[str, float]] = []
        for storage_key in self._owned_keys():
            try:
                data = self._load(storage_key)
            except ValueError:
                continue
            if data is None:
                continue
            timestamp = data.get("timestamp")
            entries.append((storage_key, float(timestamp) if isinstance(timestamp, (int, float)) else 0.0))
        return entries

    def _is_expired(self, data: dict[str, Any], now: float) -> bool:
        return now >= float(data["expiresAt"])

    def _evict(self, target_size: float) -> int:
        """Remove the oldest entries until the cache fits in ``target_size`` bytes."""

        entries = sorted(self._entries(), key=lambda entry: entry[1])
        current_size = self._size()
        removed = 0
        for storage_key, _ in entries:
            if current_size <= target_size:
                break
            current_size -= item_size(storage_key, self._storage.get_item(storage_key))
            self._storage.remove_item(storage_key)
            removed += 1
        if removed:
            logger.info("Evicted %d cache entries (size now %d bytes)", removed, current_size)
        return removed

    # Public API

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """Store ``value`` for ``ttl`` seconds. Returns ``False`` instead of raising.

        The cache never grows past ``max_size_bytes``, whether or not the
        storage medium enforces a quota of its own.
        """

        ttl = self.default_ttl if ttl is None else ttl
        storage_key = self._key(key)
        with self._lock:
            now = self._clock.now()
            try:
                payload = json.dumps({"value": value, "timestamp": now, "expiresAt": now + ttl})
            except (TypeError, ValueError) as exc:
                logger.warning("Cache set error for %s: %s", key, exc)
                return False
            entry_size = item_size(storage_key, payload)
            try:
                threshold = self.max_size_bytes * self.eviction_threshold
                if self._size() >= threshold:
                    self._evict(threshold)
                if self._size() + entry_size <= self.max_size_bytes:
                    self._storage.set_item(storage_key, payload)
                    return True
            except StorageQuotaExceeded:
                pass
            except Exception as exc:
                logger.warning("Cache set error for %s: %s", key, exc)
                return False
            # Over capacity or rejected by the medium: make room and try once more.
            try:
                self._evict(self.max_size_bytes / 2)
                if self._size() + entry_size > self.max_size_bytes:
                    logger.warning("Cache entry %s (%d bytes) does not fit", key, entry_size)
                    return False
                self._storage.set_item(storage_key, payload)
                return True
            except Exception as exc:
                logger.warning("Failed to set cache after eviction for %s: %s", key, exc)
                return False

    def get(self, key: str) -> Any:
        """Return the cached value, or ``None`` when missing, unreadable or expired."""

        storage_key = self._key(key)
        with self._lock:
            try:
                data = self._load(storage_key)
                if data is None:
                    return None
                if self._is_expired(data, self._clock.now()):
                    self._storage.remove_item(storage_key)
                    return None
                return data.get("value")
            except Exception as exc:
                logger.warning("Cache get error for %s: %s", key, exc)
                return None

    def is_valid(self, key: str) -> bool:
        try:
            data = self._load(self._key(key))
        except Exception:
            return False
        if data is None:
            return False
        return not self._is_expired(data, self._clock.now())

    def clear_expired(self) -> int:
        """Remove expired or unreadable entries and return how many were removed."""

        cleared = 0
        with self._lock:
            now = self._clock.now()
            for storage_key in self._owned_keys():
                try:
                    data = self._load(storage_key)
                    if data is None or not self._is_expired(data, now):
                        continue
                except ValueError:
                    pass
                self._storage.remove_item(storage_key)
                cleared += 1
        if cleared:
            logger.info("Cleared %d expired cache entries", cleared)
        return cleared

    def clear_all(self) -> int:
        with self._lock:
            keys = self._owned_keys()
            for storage_key in keys:
                self._storage.remove_item(storage_key)
        return len(keys)

    def get_stats(self) -> CacheStats:
        with self._lock:
            now = self._clock.now()
            total = 0
            expired = 0
            for storage_key in self._owned_keys():
                try:
                    data = self._load(storage_key)
                except ValueError:
                    continue
                if data is None:
                    continue
                total += 1
                if self._is_expired(data, now):
                    expired += 1
            size = self._size()
        return CacheStats(
            totalEntries=total,
            validEntries=total - expired,
            expiredEntries=expired,
            totalSizeBytes=size,
            maxSizeBytes=self.max_size_bytes,
            utilizationPercent=size / self.max_size_bytes * 100,
        )


__all__ = [
    "CacheStore",
    "CacheStats",
    "CACHE_PREFIX",
    "DEFAULT_TTL_SECONDS",
    "MAX_CACHE_SIZE_BYTES",
    "EVICTION_THRESHOLD",
]
