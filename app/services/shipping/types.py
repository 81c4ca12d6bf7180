from __future__ import annotations

from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class CartLineItem:
    id: str
    weight: float | None
    width: float | None
    height: float | None
    length: float | None
    quantity: int = 1


@dataclass(frozen=True)
class ProviderPackage:
    id: str
    weight: float
    width: float
    height: float
    length: float
    quantity: int

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "weight": self.weight,
            "width": self.width,
            "height": self.height,
            "length": self.length,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class RateRequest:
    from_zip: str
    to_zip: str
    packages: tuple[ProviderPackage, ...]

    @property
    def total_weight(self) -> float:
        return sum(package.weight * package.quantity for package in self.packages)


@dataclass(frozen=True)
class DeliveryRange:
    min: int
    max: int


@dataclass(frozen=True)
class RateOption:
    id: str
    name: str
    company: str
    company_id: int | None
    price: int
    original_price: int
    delivery_time: int
    delivery_range: DeliveryRange
    is_cheapest: bool = False
    logo: str = ""
    currency: str = "BRL"

    def flagged(self, is_cheapest: bool) -> RateOption:
        return replace(self, is_cheapest=is_cheapest)


@dataclass(frozen=True)
class RateQuote:
    from_zip: str
    to_zip: str
    options: tuple[RateOption, ...] = field(default_factory=tuple)
    estimated: bool = False
