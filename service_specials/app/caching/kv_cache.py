"""
Key-value cache port used by the specials aggregator.

Three implementations share the ``get``/``put`` contract: Redis for
deployments, an in-process dict for local runs, and a no-op stub that always
misses. Callers treat every implementation as advisory.
"""

from __future__ import annotations

import time
from typing import Dict, Optional, Protocol, Tuple

import redis.asyncio as redis

from shared.config import SpecialsSettings
from shared.errors import CacheUnavailableError
from shared.logging import get_logger


STORES_CACHE_KEY = "dutchie:stores:all"
SPECIALS_CACHE_PREFIX = "dutchie:specials"


def specials_cache_key(store_id: str) -> str:
    return f"{SPECIALS_CACHE_PREFIX}:{store_id}"


class KeyValueCache(Protocol):
    """TTL key-value store holding JSON strings."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        ...


class NullCache:
    """Cache stand-in used when no cache is configured; every read misses."""

    async def get(self, key: str) -> Optional[str]:
        return None

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        return None

    async def close(self) -> None:
        return None


class MemoryKVCache:
    """In-process TTL cache for local development and tests."""

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            # Expired entries read exactly like absent ones
            self._entries.pop(key, None)
            return None
        return value

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def close(self) -> None:
        self._entries.clear()


class RedisKVCache:
    """Redis-backed cache; connection errors surface as CacheUnavailableError."""

    def __init__(self, redis_url: str, *, client: Optional[redis.Redis] = None) -> None:
        self.redis_url = redis_url
        self.logger = get_logger("specials.cache.redis")
        self._redis = client or redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self._redis.get(key)
        except redis.RedisError as exc:
            raise CacheUnavailableError(f"Redis read failed: {exc}", details={"key": key}) from exc
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._redis.set(key, value, ex=ttl_seconds)
        except redis.RedisError as exc:
            raise CacheUnavailableError(f"Redis write failed: {exc}", details={"key": key}) from exc
        self.logger.debug("Cached value", key=key, ttl=ttl_seconds)

    async def close(self) -> None:
        """Close Redis connections."""
        try:
            await self._redis.aclose()
        except redis.RedisError as exc:  # pragma: no cover - close is best effort
            self.logger.warning("Redis close failed", error=str(exc))


def build_cache(settings: SpecialsSettings):
    """Pick the cache implementation named by ``settings.cache_backend``."""
    backend = settings.cache_backend.lower()
    if backend == "memory":
        return MemoryKVCache()
    if backend == "redis" and settings.redis_url:
        return RedisKVCache(settings.redis_url)
    if backend not in ("redis", "none"):
        raise ValueError(f"Unknown cache backend: {settings.cache_backend}")
    return NullCache()
