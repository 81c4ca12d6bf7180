from __future__ import annotations

POLYNOMIAL = 0x1021
INITIAL_VALUE = 0xFFFF


def crc16_ccitt(data: str | bytes) -> int:
    if isinstance(data, str):
        data = data.encode("utf-8")
    crc = INITIAL_VALUE
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ POLYNOMIAL) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return crc


def format_crc(crc: int) -> str:
    return f"{crc & 0xFFFF:04X}"
