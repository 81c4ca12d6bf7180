from __future__ import annotations

from typing import Iterable, Sequence

from app.core.config import Settings
from app.core.exceptions import EmptyCartError, InvalidPostalCodeError, ProviderConfigurationError
from app.core.logging import get_logger
from app.services.providers.base import RateProvider
from app.services.shipping.cache import RateCache, quote_fingerprint
from app.services.shipping.packaging import ParcelMinimums, to_provider_package
from app.services.shipping.postal_code import normalize_postal_code, validate_postal_code
from app.services.shipping.types import CartLineItem, RateOption, RateQuote, RateRequest

logger = get_logger(__name__)


def rank_options(options: Iterable[RateOption], supported_carriers: Sequence[str]) -> tuple[RateOption, ...]:
    allowed = [carrier.lower() for carrier in supported_carriers]
    kept = [
        option for option in options if any(carrier in (option.company or "").lower() for carrier in allowed)
    ]
    kept.sort(key=lambda option: option.price)
    return tuple(option.flagged(index == 0) for index, option in enumerate(kept))


class RateQuoteEngine:
    def __init__(
        self,
        provider: RateProvider,
        from_zip: str,
        cache: RateCache,
        supported_carriers: Sequence[str] = ("correios", "jadlog"),
        minimums: ParcelMinimums | None = None,
    ) -> None:
        if not validate_postal_code(from_zip):
            raise ProviderConfigurationError(details=f"invalid origin postal code {from_zip!r}")
        self.provider = provider
        self.from_zip = normalize_postal_code(from_zip)
        self.cache = cache
        self.supported_carriers = tuple(supported_carriers)
        self.minimums = minimums or ParcelMinimums()

    @classmethod
    def from_settings(cls, settings: Settings, provider: RateProvider) -> RateQuoteEngine:
        return cls(
            provider=provider,
            from_zip=settings.melhor_envio_from_zip,
            cache=RateCache(ttl_seconds=settings.shipping_cache_ttl_seconds),
            supported_carriers=settings.shipping_supported_carriers,
            minimums=ParcelMinimums.from_settings(settings),
        )

    async def calculate_rates(self, to_zip: str | None, items: Sequence[CartLineItem]) -> RateQuote:
        if not validate_postal_code(to_zip):
            logger.info("shipping_invalid_postal_code", to_zip=to_zip)
            raise InvalidPostalCodeError(to_zip)
        if not items:
            raise EmptyCartError()

        clean_zip = normalize_postal_code(to_zip)
        packages = tuple(to_provider_package(item, self.minimums) for item in items)

        cache_key = quote_fingerprint(clean_zip, items)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("shipping_quote_cache_hit", to_zip=clean_zip)
            return cached

        request = RateRequest(from_zip=self.from_zip, to_zip=clean_zip, packages=packages)
        options = await self.provider.quote(request)
        quote = RateQuote(
            from_zip=self.from_zip,
            to_zip=clean_zip,
            options=rank_options(options, self.supported_carriers),
            estimated=self.provider.estimated,
        )
        self.cache.set(cache_key, quote)
        logger.info(
            "shipping_quote",
            provider=self.provider.name,
            to_zip=clean_zip,
            items=len(items),
            options=len(quote.options),
        )
        return quote
