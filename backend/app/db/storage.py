"""SQLAlchemy-backed storage medium for the price cache."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Engine, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.init import init_database
from app.db.session import get_session_factory
from app.models import CacheEntry
from dca_simulator.storage import StorageError, StorageQuotaExceeded, item_size


def _characters(session: Session, *conditions) -> int:
    """Sum of key and value lengths over the matching rows, in one query."""

    total = session.scalar(
        select(
            func.coalesce(
                func.sum(func.length(CacheEntry.key) + func.length(CacheEntry.value)), 0
            )
        ).where(*conditions)
    )
    return int(total or 0)


class SqlStorage:
    """Key/value storage in the ``cache_entries`` table.

    ``quota_bytes`` mimics a bounded browser store: writes that would push the
    table past it raise ``StorageQuotaExceeded``.
    """

    def __init__(self, engine: Engine, *, quota_bytes: int | None = None) -> None:
        init_database(engine)
        self._session_factory = get_session_factory(engine)
        self.quota_bytes = quota_bytes

    def keys(self) -> list[str]:
        try:
            with self._session_factory() as session:
                return list(session.scalars(select(CacheEntry.key)))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to list cache keys: {exc}") from exc

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as session:
                return session.scalar(select(CacheEntry.value).where(CacheEntry.key == key))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read cache key {key}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        try:
            with self._session_factory() as session:
                if self.quota_bytes is not None:
                    used = _characters(session, CacheEntry.key != key) * 2
                    if used + item_size(key, value) > self.quota_bytes:
                        raise StorageQuotaExceeded(
                            f"Storage quota of {self.quota_bytes} bytes exceeded"
                        )
                session.merge(CacheEntry(key=key, value=value))
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to write cache key {key}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            with self._session_factory() as session:
                session.execute(delete(CacheEntry).where(CacheEntry.key == key))
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to remove cache key {key}: {exc}") from exc

    def total_size(self, prefix: str = "") -> int:
        try:
            with self._session_factory() as session:
                return _characters(session, CacheEntry.key.startswith(prefix, autoescape=True)) * 2
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to measure cache size: {exc}") from exc


__all__ = ["SqlStorage"]
