#!/usr/bin/env python3
"""
Warm the specials cache for every store and print the aggregate summary.

Runs the same batched fetch the deals page performs, so a successful run
leaves the store list and each store's specials in the cache for the next
15 minutes. Can be executed from a developer workstation or a cron job.
"""

import argparse
import asyncio
import json
from pathlib import Path
from typing import List, Optional
import os
import sys

from shared.config import get_settings
from shared.logging import clear_context, set_request_id
from service_specials.app.main import SpecialsApplication


async def warm(
    *,
    redis_url: Optional[str],
    batch_size: Optional[int],
    store_ids: List[str],
    use_cache: bool,
) -> dict:
    """Fetch stores and specials, returning the aggregate summary."""
    set_request_id()
    overrides = {}
    if redis_url:
        overrides["redis_url"] = redis_url
    if batch_size is not None:
        overrides["batch_size"] = batch_size
    if not use_cache:
        overrides["cache_backend"] = "none"

    try:
        async with SpecialsApplication(get_settings(**overrides)) as app:
            if store_ids:
                stores = [{"id": store_id, "name": store_id} for store_id in store_ids]
            else:
                stores = await app.service.fetch_store_list()

            result = await app.service.fetch_store_specials_in_batches(stores)
            return result.to_dict()
    finally:
        clear_context()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Warm the dispensary specials cache.")
    parser.add_argument("--redis-url", default=os.getenv("SPECIALS_REDIS_URL"), help="Redis connection URL")
    parser.add_argument("--batch-size", type=int, default=None, help="Stores fetched concurrently per batch")
    parser.add_argument("--store", dest="stores", action="append", default=[], help="Store id to fetch (repeatable); skips the store list")
    parser.add_argument("--no-cache", action="store_true", help="Bypass the cache entirely")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    try:
        summary = asyncio.run(
            warm(
                redis_url=args.redis_url,
                batch_size=args.batch_size,
                store_ids=args.stores,
                use_cache=not args.no_cache,
            )
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[specials-warm] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))

    if args.output:
        args.output.write_text(json.dumps(summary, indent=2))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
