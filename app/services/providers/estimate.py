from __future__ import annotations

import bisect

from app.core.config import Settings
from app.services.shipping.types import DeliveryRange, RateOption, RateRequest


class EstimateRateProvider:
    """Deterministic weight-tier quotes used when Melhor Envio is not configured."""

    name = "estimate"
    estimated = True

    def __init__(
        self,
        breakpoints_kg: list[float],
        base_prices: list[int],
        express_multiplier: float = 1.8,
        economy_multiplier: float = 1.4,
        light_parcel_kg: float = 1.0,
    ) -> None:
        if len(base_prices) != len(breakpoints_kg) + 1:
            raise ValueError("base_prices needs exactly one more entry than breakpoints_kg")
        if list(breakpoints_kg) != sorted(breakpoints_kg):
            raise ValueError("breakpoints_kg must be ascending")
        self.breakpoints_kg = list(breakpoints_kg)
        self.base_prices = list(base_prices)
        self.express_multiplier = express_multiplier
        self.economy_multiplier = economy_multiplier
        self.light_parcel_kg = light_parcel_kg

    @classmethod
    def from_settings(cls, settings: Settings) -> EstimateRateProvider:
        return cls(
            breakpoints_kg=settings.estimate_weight_breakpoints_kg,
            base_prices=settings.estimate_base_prices,
            express_multiplier=settings.estimate_express_multiplier,
            economy_multiplier=settings.estimate_economy_multiplier,
            light_parcel_kg=settings.estimate_light_parcel_kg,
        )

    def base_price(self, total_weight: float) -> int:
        # weights equal to a breakpoint belong to the lower tier
        return self.base_prices[bisect.bisect_left(self.breakpoints_kg, total_weight)]

    async def quote(self, request: RateRequest) -> list[RateOption]:
        total_weight = request.total_weight
        base = self.base_price(total_weight)
        light = total_weight <= self.light_parcel_kg
        express = round(base * self.express_multiplier)
        economy = round(base * self.economy_multiplier)

        return [
            RateOption(
                id="correios-pac",
                name="PAC",
                company="Correios",
                company_id=1,
                price=base,
                original_price=base,
                delivery_time=4 if light else 6,
                delivery_range=DeliveryRange(min=3, max=7),
            ),
            RateOption(
                id="correios-sedex",
                name="SEDEX",
                company="Correios",
                company_id=1,
                price=express,
                original_price=express,
                delivery_time=2 if light else 4,
                delivery_range=DeliveryRange(min=1, max=5),
            ),
            RateOption(
                id="jadlog-package",
                name="Package",
                company="Jadlog",
                company_id=2,
                price=economy,
                original_price=economy,
                delivery_time=3 if light else 5,
                delivery_range=DeliveryRange(min=2, max=6),
            ),
        ]
