from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.core.deps import get_pix_service
from app.core.exceptions import PixValidationError
from app.core.logging import get_logger
from app.schemas.pix import PixErrorResponse, PixGenerateRequest, PixGenerateResponse, PixRead
from app.services.pix.service import PixService

router = APIRouter(prefix="/pix", tags=["pix"])
logger = get_logger(__name__)


def pix_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=PixErrorResponse(error=message).model_dump())


@router.post("/generate", response_model=PixGenerateResponse, responses={400: {"model": PixErrorResponse}})
async def generate_pix(payload: PixGenerateRequest, service: PixService = Depends(get_pix_service)):
    if not payload.amount or payload.customer is None:
        return pix_error(status.HTTP_400_BAD_REQUEST, "Amount and customer are required")

    try:
        charge = service.create_charge(
            amount=payload.amount,
            customer_name=payload.customer.name,
            description=payload.description,
        )
    except PixValidationError as exc:
        logger.info("pix_rejected", reason=str(exc))
        return pix_error(status.HTTP_400_BAD_REQUEST, str(exc))
    except Exception:
        logger.exception("pix_generation_failed")
        return pix_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    return PixGenerateResponse(
        pix=PixRead(
            qr_code=charge.qr_code,
            copy_paste=charge.copy_paste,
            expires_at=charge.expires_at,
            amount=float(charge.amount),
            description=charge.description,
        )
    )
