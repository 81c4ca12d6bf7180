from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Storefront Checkout Services"
    environment: str = Field(default="local", alias="ENVIRONMENT")
    api_prefix: str = "/api"

    melhor_envio_token: str | None = Field(default=None, alias="MELHOR_ENVIO_TOKEN")
    melhor_envio_api_url: str = Field(
        default="https://sandbox.melhorenvio.com.br/api/v2",
        alias="MELHOR_ENVIO_API_URL",
    )
    melhor_envio_from_zip: str = Field(default="01310100", alias="MELHOR_ENVIO_FROM_ZIP")
    melhor_envio_use_mock: bool = Field(default=False, alias="MELHOR_ENVIO_USE_MOCK")
    melhor_envio_services: str = Field(default="1,2,3,4,17", alias="MELHOR_ENVIO_SERVICES")
    melhor_envio_timeout_seconds: float = Field(default=30.0, alias="MELHOR_ENVIO_TIMEOUT_SECONDS")
    melhor_envio_user_agent: str = "Zark E-commerce (contato@zark.com)"
    melhor_envio_platform: str = "zark-ecommerce"

    shipping_supported_carriers: list[str] = Field(
        default=["correios", "jadlog"], alias="SHIPPING_SUPPORTED_CARRIERS"
    )
    shipping_cache_ttl_seconds: int = Field(default=300, alias="SHIPPING_CACHE_TTL_SECONDS")
    shipping_cache_sweep_seconds: int = Field(default=60, alias="SHIPPING_CACHE_SWEEP_SECONDS")
    shipping_rate_limit_max: int = Field(default=10, alias="SHIPPING_RATE_LIMIT_MAX")
    shipping_rate_limit_window_seconds: int = Field(default=60, alias="SHIPPING_RATE_LIMIT_WINDOW_SECONDS")

    # Correios minimum parcel size
    shipping_min_width_cm: float = Field(default=11.0, alias="SHIPPING_MIN_WIDTH_CM")
    shipping_min_height_cm: float = Field(default=2.0, alias="SHIPPING_MIN_HEIGHT_CM")
    shipping_min_length_cm: float = Field(default=16.0, alias="SHIPPING_MIN_LENGTH_CM")
    shipping_min_weight_kg: float = 0.001

    estimate_weight_breakpoints_kg: list[float] = Field(
        default=[0.1, 1.0, 5.0], alias="ESTIMATE_WEIGHT_BREAKPOINTS_KG"
    )
    estimate_base_prices: list[int] = Field(default=[1200, 1800, 2500, 4500], alias="ESTIMATE_BASE_PRICES")
    estimate_express_multiplier: float = Field(default=1.8, alias="ESTIMATE_EXPRESS_MULTIPLIER")
    estimate_economy_multiplier: float = Field(default=1.4, alias="ESTIMATE_ECONOMY_MULTIPLIER")
    estimate_light_parcel_kg: float = 1.0

    pix_key: str = Field(default="zark@zarabatanas.com.br", alias="PIX_KEY")
    pix_merchant_name: str = Field(default="ZARK", alias="PIX_MERCHANT_NAME")
    pix_merchant_city: str = Field(default="Sao Paulo", alias="PIX_MERCHANT_CITY")
    pix_expiration_minutes: int = Field(default=15, alias="PIX_EXPIRATION_MINUTES")

    @property
    def use_estimate_provider(self) -> bool:
        return not self.melhor_envio_token or self.melhor_envio_use_mock


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
