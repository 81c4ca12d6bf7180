from __future__ import annotations

from app.core.config import Settings
from app.core.logging import get_logger
from app.services.providers.base import RateProvider
from app.services.providers.estimate import EstimateRateProvider
from app.services.providers.melhor_envio import MelhorEnvioRateProvider

logger = get_logger(__name__)


def build_rate_provider(settings: Settings) -> RateProvider:
    if settings.use_estimate_provider:
        logger.info(
            "rate_provider_selected",
            provider=EstimateRateProvider.name,
            has_token=bool(settings.melhor_envio_token),
            use_mock=settings.melhor_envio_use_mock,
        )
        return EstimateRateProvider.from_settings(settings)

    logger.info("rate_provider_selected", provider=MelhorEnvioRateProvider.name, api_url=settings.melhor_envio_api_url)
    return MelhorEnvioRateProvider(settings)
