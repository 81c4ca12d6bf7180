from __future__ import annotations

from typing import Protocol

from app.services.shipping.types import RateOption, RateRequest


class RateProvider(Protocol):
    name: str
    estimated: bool

    async def quote(self, request: RateRequest) -> list[RateOption]:
        ...
