"""ORM models for the DCA simulator service."""

from .cache import CacheEntry

__all__ = ["CacheEntry"]
