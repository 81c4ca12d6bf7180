from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from app.schemas.common import BaseSchema


class PixCustomer(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    email: str | None = None


class PixGenerateRequest(BaseModel):
    amount: Decimal | None = None
    description: str | None = None
    customer: PixCustomer | None = None


class PixRead(BaseSchema):
    qr_code: str
    copy_paste: str
    expires_at: datetime
    amount: float
    description: str


class PixGenerateResponse(BaseSchema):
    success: bool = True
    pix: PixRead


class PixErrorResponse(BaseModel):
    success: bool = False
    error: str
