"""ORM models for the local cache."""

from stock_kernel.models.cache_entry import CacheEntry

__all__ = ["CacheEntry"]
