"""Database schema initialization helpers."""

from __future__ import annotations

import logging

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.db.base import Base

# Import models so that SQLAlchemy is aware of all tables before create_all runs.
import app.models  # noqa: F401  # pylint: disable=unused-import

logger = logging.getLogger(__name__)


def init_database(engine: Engine) -> None:
    """Ensure the cache table exists on ``engine``."""

    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError:
        logger.exception("Failed to initialise cache schema")
        raise


__all__ = ["init_database"]
