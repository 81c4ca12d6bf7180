from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP

from app.core.config import Settings
from app.core.exceptions import PixValidationError
from app.core.logging import get_logger
from app.services.pix.payload import generate_payload, generate_transaction_id
from app.services.pix.qr import render_qr_code

logger = get_logger(__name__)


@dataclass(frozen=True)
class PixCharge:
    qr_code: str
    copy_paste: str
    expires_at: datetime
    amount: Decimal
    description: str
    transaction_id: str


def to_minor_units(amount: Decimal | float | int) -> int:
    value = Decimal(str(amount))
    if value <= 0:
        raise PixValidationError("PIX amount must be positive")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PixService:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def create_charge(
        self,
        amount: Decimal | float | int,
        customer_name: str | None = None,
        description: str | None = None,
        now: datetime | None = None,
    ) -> PixCharge:
        amount_minor_units = to_minor_units(amount)
        if not description:
            description = f"Order - {customer_name}" if customer_name else "Order"
        transaction_id = generate_transaction_id()

        payload = generate_payload(
            payee_key=self.settings.pix_key,
            amount_minor_units=amount_minor_units,
            merchant_name=self.settings.pix_merchant_name,
            merchant_city=self.settings.pix_merchant_city,
            transaction_id=transaction_id,
        )
        issued_at = now or datetime.now(timezone.utc)
        charge = PixCharge(
            qr_code=render_qr_code(payload),
            copy_paste=payload,
            expires_at=issued_at + timedelta(minutes=self.settings.pix_expiration_minutes),
            amount=Decimal(amount_minor_units) / 100,
            description=description,
            transaction_id=transaction_id,
        )
        logger.info("pix_charge_created", transaction_id=transaction_id, amount_minor_units=amount_minor_units)
        return charge
