from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request

from app.core.config import get_settings
from app.core.exceptions import RateLimitExceeded


@dataclass
class RateLimitCounter:
    count: int
    reset_at: float


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """Fixed-window request counter per client address."""

    def __init__(
        self,
        limit: int = 10,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self.counters: dict[str, RateLimitCounter] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        now = self.clock()
        with self._lock:
            counter = self.counters.get(key)
            if counter is None or now > counter.reset_at:
                self.counters[key] = RateLimitCounter(count=1, reset_at=now + self.window_seconds)
                return True
            if counter.count >= self.limit:
                return False
            counter.count += 1
            return True

    def retry_after(self, key: str) -> int:
        with self._lock:
            counter = self.counters.get(key)
            if counter is None:
                return 0
            return max(0, math.ceil(counter.reset_at - self.clock()))

    def check(self, request: Request) -> None:
        key = client_address(request)
        if not self.hit(key):
            raise RateLimitExceeded(key, self.retry_after(key))

    def sweep(self) -> int:
        now = self.clock()
        with self._lock:
            expired = [key for key, counter in self.counters.items() if now > counter.reset_at]
            for key in expired:
                del self.counters[key]
        return len(expired)


_settings = get_settings()
rate_limiter = RateLimiter(
    limit=_settings.shipping_rate_limit_max,
    window_seconds=_settings.shipping_rate_limit_window_seconds,
)
