"""Key/value storage media that back the price cache."""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol


class StorageError(RuntimeError):
    """Raised when a storage medium cannot complete an operation."""


class StorageQuotaExceeded(StorageError):
    """Raised when a write would push the medium past its quota."""


class Storage(Protocol):
    """String key/value store in the style of browser local storage."""

    def keys(self) -> Iterable[str]:
        ...

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def total_size(self, prefix: str = "") -> int:
        """Return the summed ``item_size`` of every key starting with ``prefix``."""
        ...


def item_size(key: str, value: str | None) -> int:
    """Approximate stored size in bytes (two bytes per character)."""

    return (len(key) + (len(value) if value else 0)) * 2


class MemoryStorage:
    """Process-local storage with an optional byte quota."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._items: Dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def keys(self) -> list[str]:
        return list(self._items)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(item_size(k, v) for k, v in self._items.items() if k != key)
            if used + item_size(key, value) > self.quota_bytes:
                raise StorageQuotaExceeded(f"Storage quota of {self.quota_bytes} bytes exceeded")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def total_size(self, prefix: str = "") -> int:
        return sum(item_size(k, v) for k, v in self._items.items() if k.startswith(prefix))

    def __len__(self) -> int:
        return len(self._items)


__all__ = [
    "Storage",
    "StorageError",
    "StorageQuotaExceeded",
    "MemoryStorage",
    "item_size",
]
