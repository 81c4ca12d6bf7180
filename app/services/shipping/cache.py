from __future__ import annotations

import asyncio
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from app.core.logging import get_logger
from app.services.shipping.types import CartLineItem

logger = get_logger(__name__)


@dataclass
class RateCacheEntry:
    value: Any
    created_at: float


def quote_fingerprint(to_zip: str, items: Iterable[CartLineItem]) -> str:
    signature = sorted((str(item.id), item.quantity) for item in items)
    return f"{to_zip}:{json.dumps(signature, separators=(',', ':'))}"


class RateCache:
    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], float] = time.time) -> None:
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[str, RateCacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, entry: RateCacheEntry, now: float) -> bool:
        return now - entry.created_at >= self.ttl_seconds

    def get(self, key: str) -> Any | None:
        now = self.clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, now):
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = RateCacheEntry(value=value, created_at=self.clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        now = self.clock()
        with self._lock:
            snapshot = list(self._entries.items())
        removed = 0
        for key, entry in snapshot:
            if not self._expired(entry, now):
                continue
            with self._lock:
                # only drop the entry we inspected; a fresh write may have replaced it
                if self._entries.get(key) is entry:
                    del self._entries[key]
                    removed += 1
        return removed


async def sweep_periodically(cache: RateCache, interval_seconds: float, *extra: Any) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = cache.sweep()
            for target in extra:
                target.sweep()
        except Exception:
            logger.exception("shipping_cache_sweep_failed")
            continue
        if removed:
            logger.info("shipping_cache_sweep", removed=removed, remaining=len(cache))
