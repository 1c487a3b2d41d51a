"""Dynamic QRIS generation service."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import settings
from ..crc import CRC_HEADER, verify_crc
from ..monitoring import record_payload_generated
from ..qris_encoder import Amount, PayloadSummary, describe_payload, encode_dynamic
from ..renderer import render_qr_payload
from ..tlv import parse_emv
from .errors import err_bad_crc, err_bad_payload

logger = logging.getLogger("qrisgen.generator")


@dataclass(slots=True)
class GenerateResult:
    payload: str
    crc: str
    data_url: str
    summary: PayloadSummary


class DynamicQRGenerator:
    def __init__(self, *, require_valid_crc: bool | None = None):
        if require_valid_crc is None:
            require_valid_crc = settings.require_valid_source_crc
        self.require_valid_crc = require_valid_crc

    def check_source(self, base_payload: str) -> None:
        """Reject source payloads that would produce a meaningless dynamic QR."""

        if not parse_emv(base_payload):
            raise err_bad_payload("Base payload contains no EMV fields")
        if self.require_valid_crc and base_payload[-8:-4] == CRC_HEADER and not verify_crc(base_payload):
            raise err_bad_crc("Base payload CRC does not match its contents")

    def create(
        self,
        *,
        base_payload: str,
        amount: Amount,
        reference: str | None = None,
        size: int | None = None,
    ) -> GenerateResult:
        base_payload = base_payload.strip()
        self.check_source(base_payload)

        encoded = encode_dynamic(base_payload, amount, reference)
        render = render_qr_payload(encoded.payload, size=size)
        summary = describe_payload(encoded.payload)

        record_payload_generated("dynamic")
        logger.info(
            "dynamic payload generated",
            extra={"amount": summary.amount, "reference": reference, "crc": encoded.crc},
        )
        return GenerateResult(payload=encoded.payload, crc=encoded.crc, data_url=render.data_url, summary=summary)
