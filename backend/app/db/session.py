"""Database engine and session utilities."""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.config import get_settings


def create_cache_engine(url: str) -> Engine:
    """Create an engine for the cache database; SQLite connections may cross threads."""

    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=False, future=True, connect_args=connect_args)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_cache_engine(get_settings().cache_database_url)


def get_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    return sessionmaker(bind=engine or get_engine(), expire_on_commit=False)


__all__ = ["create_cache_engine", "get_engine", "get_session_factory"]
