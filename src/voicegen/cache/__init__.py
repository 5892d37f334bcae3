"""Incremental build cache for voicegen."""

from .models import CacheEntry
from .store import CACHE_FILENAME, CacheStore

__all__ = ["CACHE_FILENAME", "CacheEntry", "CacheStore"]
