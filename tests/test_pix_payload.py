import pytest

from app.core.exceptions import PixFieldTooLongError, PixValidationError
from app.services.pix.crc16 import crc16_ccitt, format_crc
from app.services.pix.payload import (
    format_amount,
    generate_payload,
    generate_transaction_id,
    tlv,
    verify_payload,
)

PAYEE_KEY = "zark@zarabatanas.com.br"


def _payload(**overrides):
    values = {
        "payee_key": PAYEE_KEY,
        "amount_minor_units": 19990,
        "merchant_name": "ZARK",
        "merchant_city": "Sao Paulo",
        "transaction_id": "ABC123",
    }
    values.update(overrides)
    return generate_payload(**values)


def test_crc16_check_value():
    assert crc16_ccitt("123456789") == 0x29B1
    assert crc16_ccitt(b"") == 0xFFFF


def test_format_crc_is_padded_uppercase():
    assert format_crc(0xA) == "000A"
    assert format_crc(0xBEEF) == "BEEF"


def test_tlv_encoding():
    assert tlv("59", "ZARK") == "5904ZARK"
    assert tlv("62", "") == "6200"
    assert tlv("00", "x" * 99).startswith("0099")
    with pytest.raises(PixFieldTooLongError):
        tlv("00", "x" * 100)


def test_literal_example_layout():
    payload = _payload()
    expected_body = (
        "000201"
        "2645"
        "0014BR.GOV.BCB.PIX"
        "0123zark@zarabatanas.com.br"
        "52040000"
        "5303986"
        "5406199.90"
        "5802BR"
        "5904ZARK"
        "6009Sao Paulo"
        "62100506ABC123"
        "6304"
    )
    assert payload[:-4] == expected_body
    checksum = payload[-4:]
    assert len(checksum) == 4
    assert checksum == checksum.upper()
    int(checksum, 16)
    assert format_crc(crc16_ccitt(payload[:-4])) == checksum
    assert verify_payload(payload)


def test_payload_is_deterministic():
    assert _payload() == _payload()


def test_single_character_corruption_changes_checksum():
    payload = _payload()
    body, checksum = payload[:-4], payload[-4:]
    for index in range(len(body) - 4):
        replacement = "X" if body[index] != "X" else "Y"
        mutated = body[:index] + replacement + body[index + 1 :]
        assert format_crc(crc16_ccitt(mutated)) != checksum
        assert not verify_payload(mutated + checksum)


@pytest.mark.parametrize("amount,expected", [(19990, "199.90"), (1, "0.01"), (100, "1.00"), (123456, "1234.56")])
def test_amount_is_rendered_in_major_units(amount, expected):
    assert format_amount(amount) == expected


@pytest.mark.parametrize("amount", [0, -100, 19.9, True])
def test_invalid_amounts_are_rejected(amount):
    with pytest.raises(PixValidationError):
        format_amount(amount)


def test_accents_are_stripped_from_merchant_fields():
    payload = _payload(merchant_city="São Paulo")
    assert "6009Sao Paulo" in payload
    assert verify_payload(payload)


@pytest.mark.parametrize(
    "overrides",
    [
        {"transaction_id": "T" * 100},
        {"payee_key": "k" * 100},
        {"payee_key": "k" * 78},
        {"merchant_name": "N" * 100},
    ],
)
def test_oversized_fields_are_rejected(overrides):
    with pytest.raises(PixFieldTooLongError):
        _payload(**overrides)


@pytest.mark.parametrize("field", ["payee_key", "merchant_name", "merchant_city", "transaction_id"])
def test_blank_fields_are_rejected(field):
    with pytest.raises(PixValidationError):
        _payload(**{field: "  "})


@pytest.mark.parametrize(
    "overrides",
    [{"payee_key": " " + PAYEE_KEY}, {"payee_key": PAYEE_KEY + "\n"}, {"transaction_id": "ABC123 "}],
)
def test_keys_with_surrounding_whitespace_are_rejected(overrides):
    with pytest.raises(PixValidationError, match="whitespace"):
        _payload(**overrides)


@pytest.mark.parametrize("overrides", [{"payee_key": "joão@exemplo.com.br"}, {"transaction_id": "PEDIDOÇ1"}])
def test_non_ascii_keys_are_rejected(overrides):
    with pytest.raises(PixValidationError, match="ASCII"):
        _payload(**overrides)


def test_payee_key_is_embedded_verbatim():
    payload = _payload()
    assert f"01{len(PAYEE_KEY):02d}{PAYEE_KEY}" in payload
    assert verify_payload(payload)


def test_transaction_ids_are_bounded_and_unique():
    ids = {generate_transaction_id() for _ in range(200)}
    assert len(ids) == 200
    for value in ids:
        assert 0 < len(value) <= 25
        assert value.isalnum()
