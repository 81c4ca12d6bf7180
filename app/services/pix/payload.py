"""EMV "copia e cola" payloads for static PIX charges.

Every field is ``tag + two-digit length + value``. The payload always ends with
the CRC field ``6304XXXX`` where the checksum covers everything before it,
including the ``6304`` prefix itself.
"""
from __future__ import annotations

import secrets
import string
import time
import unicodedata
from decimal import Decimal, ROUND_HALF_UP

from app.core.exceptions import PixFieldTooLongError, PixValidationError
from app.services.pix.crc16 import crc16_ccitt, format_crc

MAX_FIELD_LENGTH = 99
TRANSACTION_ID_MAX_LENGTH = 25

PAYLOAD_FORMAT_INDICATOR = "00"
MERCHANT_ACCOUNT_INFORMATION = "26"
MERCHANT_CATEGORY_CODE = "52"
TRANSACTION_CURRENCY = "53"
TRANSACTION_AMOUNT = "54"
COUNTRY_CODE = "58"
MERCHANT_NAME = "59"
MERCHANT_CITY = "60"
ADDITIONAL_DATA_FIELD = "62"
CRC16 = "63"

GUI_SUBTAG = "00"
PIX_KEY_SUBTAG = "01"
REFERENCE_LABEL_SUBTAG = "05"

PIX_GUI = "BR.GOV.BCB.PIX"
BRL_CURRENCY_CODE = "986"

_BASE36 = string.digits + string.ascii_lowercase


def tlv(tag: str, value: str) -> str:
    if len(value) > MAX_FIELD_LENGTH:
        raise PixFieldTooLongError(tag, len(value))
    return f"{tag}{len(value):02d}{value}"


def to_ascii(value: str) -> str:
    normalized = unicodedata.normalize("NFKD", value)
    return normalized.encode("ascii", "ignore").decode("ascii")


def format_amount(amount_minor_units: int) -> str:
    if isinstance(amount_minor_units, bool) or not isinstance(amount_minor_units, int):
        raise PixValidationError("PIX amount must be an integer number of cents")
    if amount_minor_units <= 0:
        raise PixValidationError("PIX amount must be positive")
    amount = (Decimal(amount_minor_units) / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return str(amount)


def _require(value: str, field: str) -> str:
    if not value or not value.strip():
        raise PixValidationError(f"PIX {field} is required")
    return value.strip()


def _require_exact(value: str, field: str) -> str:
    if not value or not value.strip():
        raise PixValidationError(f"PIX {field} is required")
    if value != value.strip():
        raise PixValidationError(f"PIX {field} must not have surrounding whitespace")
    # TLV lengths count characters; the CRC counts bytes
    if not value.isascii():
        raise PixValidationError(f"PIX {field} must be ASCII")
    return value


def generate_payload(
    payee_key: str,
    amount_minor_units: int,
    merchant_name: str,
    merchant_city: str,
    transaction_id: str,
) -> str:
    payee_key = _require_exact(payee_key, "key")
    merchant_name = _require(to_ascii(merchant_name), "merchant name")
    merchant_city = _require(to_ascii(merchant_city), "merchant city")
    transaction_id = _require_exact(transaction_id, "transaction id")

    account_information = tlv(GUI_SUBTAG, PIX_GUI) + tlv(PIX_KEY_SUBTAG, payee_key)
    additional_data = tlv(REFERENCE_LABEL_SUBTAG, transaction_id)

    body = "".join(
        [
            tlv(PAYLOAD_FORMAT_INDICATOR, "01"),
            tlv(MERCHANT_ACCOUNT_INFORMATION, account_information),
            tlv(MERCHANT_CATEGORY_CODE, "0000"),
            tlv(TRANSACTION_CURRENCY, BRL_CURRENCY_CODE),
            tlv(TRANSACTION_AMOUNT, format_amount(amount_minor_units)),
            tlv(COUNTRY_CODE, "BR"),
            tlv(MERCHANT_NAME, merchant_name),
            tlv(MERCHANT_CITY, merchant_city),
            tlv(ADDITIONAL_DATA_FIELD, additional_data),
        ]
    )
    body += f"{CRC16}04"
    return body + format_crc(crc16_ccitt(body))


def verify_payload(payload: str) -> bool:
    if len(payload) < 8 or payload[-8:-4] != f"{CRC16}04":
        return False
    return format_crc(crc16_ccitt(payload[:-4])) == payload[-4:].upper()


def generate_transaction_id() -> str:
    timestamp = str(time.time_ns() // 1_000_000)
    random_part = "".join(secrets.choice(_BASE36) for _ in range(13))
    return f"{timestamp}{random_part}"[:TRANSACTION_ID_MAX_LENGTH]
