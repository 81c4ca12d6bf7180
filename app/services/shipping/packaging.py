from __future__ import annotations

from dataclasses import dataclass

from app.core.exceptions import InvalidDimensionsError, MissingDimensionsError, ShippingValidationError
from app.services.shipping.types import CartLineItem, ProviderPackage


@dataclass(frozen=True)
class ParcelMinimums:
    width: float = 11.0
    height: float = 2.0
    length: float = 16.0
    weight: float = 0.001

    @classmethod
    def from_settings(cls, settings) -> ParcelMinimums:
        return cls(
            width=settings.shipping_min_width_cm,
            height=settings.shipping_min_height_cm,
            length=settings.shipping_min_length_cm,
            weight=settings.shipping_min_weight_kg,
        )


def parse_dimensions(value: str) -> tuple[float, float, float]:
    parts = [part.strip() for part in value.lower().split("x")]
    if len(parts) != 3:
        raise InvalidDimensionsError(value)
    try:
        width, height, length = (float(part) for part in parts)
    except ValueError as exc:
        raise InvalidDimensionsError(value) from exc
    return width, height, length


def _is_positive(value: float | None) -> bool:
    return value is not None and value > 0


def to_provider_package(item: CartLineItem, minimums: ParcelMinimums) -> ProviderPackage:
    if not all(_is_positive(value) for value in (item.weight, item.width, item.height, item.length)):
        raise MissingDimensionsError(item.id)
    if item.quantity is None or item.quantity <= 0:
        raise ShippingValidationError(f'Product "{item.id}" has an invalid quantity')

    # clamp upward only; never shrink a parcel
    return ProviderPackage(
        id=str(item.id),
        weight=max(item.weight, minimums.weight),
        width=max(item.width, minimums.width),
        height=max(item.height, minimums.height),
        length=max(item.length, minimums.length),
        quantity=item.quantity,
    )
