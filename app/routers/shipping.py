from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.core.deps import enforce_rate_limit, get_rate_engine
from app.core.exceptions import ShippingError, ShippingValidationError
from app.core.logging import get_logger
from app.schemas.shipping import (
    RateOptionRead,
    ShippingCalculateRequest,
    ShippingCalculateResponse,
    ZipCodeValidationResponse,
)
from app.services.shipping.engine import RateQuoteEngine
from app.services.shipping.postal_code import normalize_postal_code, validate_postal_code

router = APIRouter(prefix="/shipping", tags=["shipping"])
logger = get_logger(__name__)


@router.post(
    "/calculate",
    response_model=ShippingCalculateResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def calculate_shipping(
    payload: ShippingCalculateRequest,
    engine: RateQuoteEngine = Depends(get_rate_engine),
):
    try:
        items = [product.to_line_item() for product in payload.products]
        quote = await engine.calculate_rates(payload.cep, items)
    except ShippingError:
        raise
    except Exception as exc:
        logger.exception("shipping_calculation_failed", to_zip=payload.cep)
        raise ShippingError("Internal error while calculating shipping", details=repr(exc)) from exc
    return ShippingCalculateResponse(
        options=[RateOptionRead.model_validate(option) for option in quote.options],
        from_zip=quote.from_zip,
        to_zip=quote.to_zip,
        estimated=quote.estimated,
    )


@router.get("/calculate", response_model=ZipCodeValidationResponse)
async def validate_zip_code(zip_code: str | None = Query(default=None, alias="zipCode")):
    if not zip_code:
        raise ShippingValidationError("Postal code is required")
    return ZipCodeValidationResponse(valid=validate_postal_code(zip_code), zip_code=normalize_postal_code(zip_code))
