from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Request

from app.core.config import get_settings
from app.core.rate_limit import RateLimiter, rate_limiter
from app.services.pix.service import PixService
from app.services.providers.factory import build_rate_provider
from app.services.shipping.engine import RateQuoteEngine


@lru_cache(maxsize=1)
def get_rate_engine() -> RateQuoteEngine:
    settings = get_settings()
    return RateQuoteEngine.from_settings(settings, build_rate_provider(settings))


def get_rate_limiter() -> RateLimiter:
    return rate_limiter


def get_pix_service() -> PixService:
    return PixService(get_settings())


def enforce_rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    limiter.check(request)
