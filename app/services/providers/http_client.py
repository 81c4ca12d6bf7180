from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any

import httpx


@dataclass
class CircuitBreaker:
    max_failures: int = 3
    reset_seconds: int = 30
    failures: int = 0
    last_failure_ts: float | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def allow(self) -> bool:
        with self._lock:
            if self.failures < self.max_failures:
                return True
            if self.last_failure_ts is None:
                return True
            if time.time() - self.last_failure_ts > self.reset_seconds:
                self.failures = 0
                self.last_failure_ts = None
                return True
            return False

    def record_failure(self) -> None:
        with self._lock:
            self.failures += 1
            self.last_failure_ts = time.time()

    def record_success(self) -> None:
        with self._lock:
            self.failures = 0
            self.last_failure_ts = None


async def post_json(
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
    timeout: float = 30,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        response = await client.post(url, json=payload, headers=headers)
        response.raise_for_status()
        return response.json()
