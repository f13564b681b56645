"""
Specials caching package.

The cache is advisory: absence of an entry is always valid, and every
implementation can be swapped for the no-op cache.
"""

from .kv_cache import (
    KeyValueCache,
    MemoryKVCache,
    NullCache,
    RedisKVCache,
    STORES_CACHE_KEY,
    build_cache,
    specials_cache_key,
)

__all__ = [
    "KeyValueCache",
    "MemoryKVCache",
    "NullCache",
    "RedisKVCache",
    "STORES_CACHE_KEY",
    "build_cache",
    "specials_cache_key",
]
