"""
Specials service: cache-aside reads of store lists and per-store specials.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING, Union

from shared.logging import get_logger

from service_specials.app.adapters.queries import SPECIALS_QUERY, STORES_QUERY
from service_specials.app.caching.kv_cache import (
    KeyValueCache,
    NullCache,
    STORES_CACHE_KEY,
    specials_cache_key,
)
from service_specials.app.domain.models import (
    AggregateResult,
    SpecialProduct,
    Store,
    StoreSpecialsResult,
    Variant,
)

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from service_specials.app.adapters.dutchie_client import DutchieClient
    from shared.metrics import MetricsCollector


DEFAULT_CACHE_TTL = 900
DEFAULT_BATCH_SIZE = 10

StoreLike = Union[Store, Mapping[str, Any]]


def is_on_special(variant: Variant) -> bool:
    """A variant is on special when its discounted price is present and below the regular price."""
    return variant.is_on_special


def filter_specials(products: Iterable[SpecialProduct]) -> List[SpecialProduct]:
    """Keep only products with at least one variant on special."""
    return [product for product in products if any(is_on_special(v) for v in product.variants)]


def _as_store(item: StoreLike) -> Store:
    if isinstance(item, Store):
        return item
    return Store.from_dict(item)


class SpecialsService:
    """Coordinates key-value cache reads and inventory API lookups for specials."""

    def __init__(
        self,
        client: "DutchieClient",
        cache: Optional[KeyValueCache] = None,
        *,
        logger: Any = None,
        metrics: Optional["MetricsCollector"] = None,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.client = client
        self.cache: KeyValueCache = cache if cache is not None else NullCache()
        self.logger = logger or get_logger("specials.service")
        self.metrics = metrics
        self.cache_ttl_seconds = cache_ttl_seconds
        self.batch_size = batch_size

    async def fetch_store_list(self, cache: Optional[KeyValueCache] = None) -> List[Store]:
        """
        Return every store listed by the inventory API.

        Served from the cache when present. Upstream failures degrade to an
        empty list; the store list is a display aid, not a correctness input.
        """
        cache = self._resolve_cache(cache)

        cached = await self._read_cache(cache, STORES_CACHE_KEY, kind="stores")
        if cached is not None:
            stores = self._decode(cached, Store.from_dict, key=STORES_CACHE_KEY)
            if stores is not None:
                self.logger.info("Retrieved stores from cache", count=len(stores))
                return stores

        try:
            self.logger.info("Fetching all stores from inventory API")
            data = await self.client.execute_query(STORES_QUERY, {})
        except Exception as exc:
            self.logger.error("Error fetching stores", error=str(exc))
            self._record_upstream_error(exc)
            return []

        try:
            stores = [Store.from_api(row) for row in (data.get("retailers") or [])]
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            self.logger.error("Malformed store list payload", error=repr(exc))
            self._record_upstream_error(exc)
            return []
        self.logger.info("Fetched stores", count=len(stores))

        if stores:
            await self._write_cache(cache, STORES_CACHE_KEY, [store.to_dict() for store in stores])
        return stores

    async def fetch_store_specials(
        self,
        store_id: str,
        store_name: str = "Unknown Store",
        cache: Optional[KeyValueCache] = None,
    ) -> List[SpecialProduct]:
        """Return the on-special products of one store, or an empty list on any failure."""
        try:
            return await self._load_store_specials(store_id, store_name, self._resolve_cache(cache))
        except Exception:
            # Already logged with store context in _load_store_specials
            return []

    async def fetch_multiple_store_specials(
        self,
        stores: Sequence[StoreLike],
        cache: Optional[KeyValueCache] = None,
    ) -> AggregateResult:
        """
        Fetch specials for every store concurrently and settle all of them.

        A failing store never fails the call: its reason is reported in
        ``errors`` as ``"{name}: {reason}"``. Stores with zero specials are
        omitted from ``store_specials``.
        """
        targets = [_as_store(item) for item in stores]
        self.logger.info("Fetching specials in parallel", store_count=len(targets))

        start_time = time.perf_counter()
        store_specials, errors = await self._fan_out(targets, self._resolve_cache(cache))
        duration = round(time.perf_counter() - start_time, 2)

        result = AggregateResult(
            store_specials=tuple(store_specials),
            total_specials=sum(entry.special_count for entry in store_specials),
            errors=tuple(errors),
            duration=duration,
            store_count=len(targets),
        )
        self._log_summary(result)
        return result

    async def fetch_store_specials_in_batches(
        self,
        stores: Sequence[StoreLike],
        batch_size: Optional[int] = None,
        cache: Optional[KeyValueCache] = None,
    ) -> AggregateResult:
        """
        Same result as ``fetch_multiple_store_specials``, but at most
        ``batch_size`` stores are in flight at once; batches run one after
        another.
        """
        size = self.batch_size if batch_size is None else batch_size
        if size < 1:
            raise ValueError("batch_size must be at least 1")

        targets = [_as_store(item) for item in stores]
        cache = self._resolve_cache(cache)
        batch_total = (len(targets) + size - 1) // size
        self.logger.info(
            "Fetching specials in batches",
            store_count=len(targets),
            batch_size=size,
        )

        start_time = time.perf_counter()
        all_specials: List[StoreSpecialsResult] = []
        all_errors: List[str] = []
        for index in range(0, len(targets), size):
            batch = targets[index:index + size]
            self.logger.info(
                "Processing batch",
                batch=index // size + 1,
                batch_total=batch_total,
                store_count=len(batch),
            )
            store_specials, errors = await self._fan_out(batch, cache)
            all_specials.extend(store_specials)
            all_errors.extend(errors)
        duration = round(time.perf_counter() - start_time, 2)

        result = AggregateResult(
            store_specials=tuple(all_specials),
            total_specials=sum(entry.special_count for entry in all_specials),
            errors=tuple(all_errors),
            duration=duration,
            store_count=len(targets),
        )
        self._log_summary(result)
        return result

    async def _fan_out(
        self,
        stores: List[Store],
        cache: KeyValueCache,
    ) -> Tuple[List[StoreSpecialsResult], List[str]]:
        """Run one task per store and pair outcomes back to stores by position."""
        outcomes = await asyncio.gather(
            *(self._load_store_specials(store.id, store.name, cache) for store in stores),
            return_exceptions=True,
        )

        store_specials: List[StoreSpecialsResult] = []
        errors: List[str] = []
        for store, outcome in zip(stores, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                reason = str(outcome) or "Unknown error"
                errors.append(f"{store.name}: {reason}")
                continue
            if outcome:
                store_specials.append(StoreSpecialsResult(store=store, products=tuple(outcome)))
        return store_specials, errors

    async def _load_store_specials(
        self,
        store_id: str,
        store_name: str,
        cache: KeyValueCache,
    ) -> List[SpecialProduct]:
        """Cache-aside read of one store's specials; upstream errors propagate."""
        key = specials_cache_key(store_id)

        cached = await self._read_cache(cache, key, kind="specials")
        if cached is not None:
            products = self._decode(cached, SpecialProduct.from_dict, key=key)
            if products is not None:
                self.logger.info("Retrieved specials from cache", store_id=store_id, store_name=store_name)
                return products

        try:
            self.logger.info("Fetching specials from inventory API", store_id=store_id, store_name=store_name)
            data = await self.client.execute_query(SPECIALS_QUERY, {"retailerId": store_id})
        except Exception as exc:
            self.logger.error(
                "Error fetching specials",
                store_id=store_id,
                store_name=store_name,
                error=str(exc),
            )
            self._record_upstream_error(exc)
            raise

        menu = data.get("menu") or {}
        raw_products = menu.get("products")
        if not raw_products:
            self.logger.info("No menu data found", store_id=store_id, store_name=store_name)
            return []

        products = filter_specials(SpecialProduct.from_api(row) for row in raw_products)
        self.logger.info(
            "Found special products",
            store_id=store_id,
            store_name=store_name,
            count=len(products),
        )

        if products:
            await self._write_cache(cache, key, [product.to_dict() for product in products])
        return products

    def _resolve_cache(self, cache: Optional[KeyValueCache]) -> KeyValueCache:
        return cache if cache is not None else self.cache

    async def _read_cache(self, cache: KeyValueCache, key: str, *, kind: str) -> Optional[Any]:
        """Read and JSON-decode a cache entry; any failure reads as a miss."""
        try:
            value = await cache.get(key)
        except Exception as exc:
            self.logger.warning("Cache read failed", key=key, error=str(exc))
            value = None

        if self.metrics:
            self.metrics.record_cache_access(kind, hit=value is not None)

        if value is None:
            return None
        try:
            return json.loads(value)
        except (TypeError, ValueError):
            self.logger.warning("Discarding malformed cache payload", key=key)
            return None

    async def _write_cache(self, cache: KeyValueCache, key: str, payload: Any) -> None:
        """Best-effort cache write."""
        try:
            await cache.put(key, json.dumps(payload), self.cache_ttl_seconds)
        except Exception as exc:
            self.logger.warning("Cache write failed", key=key, error=str(exc))
            return
        self.logger.debug("Cached value", key=key, ttl=self.cache_ttl_seconds)

    def _decode(self, cached: Any, factory, *, key: str) -> Optional[List[Any]]:
        if not isinstance(cached, list):
            self.logger.warning("Discarding malformed cache payload", key=key)
            return None
        try:
            return [factory(item) for item in cached]
        except (KeyError, TypeError, ValueError, AttributeError):
            self.logger.warning("Discarding malformed cache payload", key=key)
            return None

    def _record_upstream_error(self, exc: BaseException) -> None:
        if self.metrics:
            self.metrics.record_upstream_error(type(exc).__name__)

    def _log_summary(self, result: AggregateResult) -> None:
        if self.metrics:
            self.metrics.observe_duration(result.duration)

        self.logger.info(
            "Completed specials fetch",
            duration=result.duration,
            stores_with_specials=len(result.store_specials),
            total_specials=result.total_specials,
            store_count=result.store_count,
            success_rate=result.success_rate,
        )
        if result.errors:
            self.logger.warning(
                "Some stores failed; continuing with partial results",
                error_count=len(result.errors),
            )
