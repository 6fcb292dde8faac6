"""Tiered read cache and its durable stores."""

from __future__ import annotations

from .store import CacheStore, InMemoryStore, JSONFileStore
from .tiered import CacheEntry, CacheLookup, TieredCache

__all__ = [
    "CacheEntry",
    "CacheLookup",
    "CacheStore",
    "InMemoryStore",
    "JSONFileStore",
    "TieredCache",
]
