from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import BaseSchema
from app.services.shipping.packaging import parse_dimensions
from app.services.shipping.types import CartLineItem


class ShippingProduct(BaseModel):
    id: str
    price: float | None = None
    quantity: int = 1
    weight: float | None = None
    width: float | None = None
    height: float | None = None
    length: float | None = None
    dimensions: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value):
        return str(value) if isinstance(value, int) else value

    def to_line_item(self) -> CartLineItem:
        width, height, length = self.width, self.height, self.length
        if self.dimensions and None in (width, height, length):
            width, height, length = parse_dimensions(self.dimensions)
        return CartLineItem(
            id=self.id,
            weight=self.weight,
            width=width,
            height=height,
            length=length,
            quantity=self.quantity,
        )


class ShippingCalculateRequest(BaseModel):
    cep: str | None = None
    products: list[ShippingProduct] = Field(default_factory=list)


class DeliveryRangeRead(BaseSchema):
    min: int
    max: int


class RateOptionRead(BaseSchema):
    id: str
    name: str
    company: str
    company_id: int | None
    price: int
    original_price: int
    delivery_time: int
    delivery_range: DeliveryRangeRead
    is_cheapest: bool
    logo: str
    currency: str


class ShippingCalculateResponse(BaseSchema):
    success: bool = True
    options: list[RateOptionRead]
    from_zip: str
    to_zip: str
    estimated: bool


class ZipCodeValidationResponse(BaseSchema):
    valid: bool
    zip_code: str
