"""QR image scan handling services."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..crc import verify_crc
from ..scanner import decode_qr_from_base64
from ..tlv import EmvTree, parse_emv
from .errors import err_qr_not_found

logger = logging.getLogger("qrisgen.scan")


@dataclass(slots=True)
class ScanResult:
    payload: str
    tree: EmvTree
    crc_valid: bool


class ScanService:
    async def decode(self, image: str) -> ScanResult:
        payload = (await decode_qr_from_base64(image)).strip()
        if not payload:
            raise err_qr_not_found()

        crc_valid = verify_crc(payload)
        if not crc_valid:
            logger.warning("decoded payload has an invalid CRC", extra={"payload_length": len(payload)})
        return ScanResult(payload=payload, tree=parse_emv(payload), crc_valid=crc_valid)
