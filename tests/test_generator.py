from __future__ import annotations

import pytest

from qrisgen.services.errors import ServiceError
from qrisgen.services.generator import DynamicQRGenerator
from samples import QRIS_DYNAMIC_ORDER, QRIS_STATIC


def test_create_returns_payload_image_and_summary() -> None:
    result = DynamicQRGenerator().create(base_payload=f"  {QRIS_STATIC}\n", amount=15000, reference="ORD-001", size=128)

    assert result.payload == QRIS_DYNAMIC_ORDER
    assert result.crc == "2FA9"
    assert result.data_url.startswith("data:image/png;base64,")
    assert result.summary.reference == "ORD-001"


def test_bad_source_crc_can_be_tolerated() -> None:
    tampered = QRIS_STATIC[:-4] + "0000"

    with pytest.raises(ServiceError) as excinfo:
        DynamicQRGenerator(require_valid_crc=True).check_source(tampered)
    assert excinfo.value.code == "ERR_BAD_CRC"

    result = DynamicQRGenerator(require_valid_crc=False).create(base_payload=tampered, amount=15000, reference="ORD-001")
    assert result.payload == QRIS_DYNAMIC_ORDER


def test_source_without_crc_is_accepted() -> None:
    DynamicQRGenerator(require_valid_crc=True).check_source(QRIS_STATIC[:-8])
