"""CRC16-CCITT implementation."""
from __future__ import annotations

import re

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF
CRC_HEADER = "6304"

# \Z rather than $: a trailing newline is not part of the trailer
_TRAILER_RE = re.compile(r"6304([0-9A-Fa-f]{4})\Z")


def crc16_ccitt(data: str) -> str:
    """Compute CRC16-CCITT (0x1021, init 0xFFFF) over the UTF-16 code units of ``data``.

    Characters outside the BMP contribute both surrogates. Returns four
    lowercase hex digits; EMV payloads carry the uppercase form.
    """

    checksum = CRC16_INIT
    units = data.encode("utf-16-be", "surrogatepass")
    for i in range(0, len(units), 2):
        code_unit = (units[i] << 8) | units[i + 1]
        checksum = (checksum ^ (code_unit << 8)) & 0xFFFF
        for _ in range(8):
            if checksum & 0x8000:
                checksum = (checksum << 1) ^ CRC16_POLY
            else:
                checksum <<= 1
            checksum &= 0xFFFF
    return f"{checksum:04x}"


def checksum(payload_without_crc: str) -> str:
    """Return the uppercase Tag 63 value for a payload that has no CRC trailer yet."""

    return crc16_ccitt(f"{payload_without_crc}{CRC_HEADER}").upper()


def strip_crc(payload: str) -> str:
    """Remove the trailing ``6304XXXX`` field from an EMV payload if present."""

    if _TRAILER_RE.search(payload):
        return payload[:-8]
    return payload


def verify_crc(payload: str) -> bool:
    match = _TRAILER_RE.search(payload)
    if not match:
        return False
    return checksum(payload[:-8]) == match.group(1).upper()
