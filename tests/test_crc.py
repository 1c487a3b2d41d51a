from __future__ import annotations

import pytest

from qrisgen.crc import checksum, crc16_ccitt, strip_crc, verify_crc
from samples import PIX_SAMPLE, PIX_SCANNED, QRIS_DYNAMIC_ORDER, QRIS_STATIC


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ("123456789", "29b1"),
        ("", "ffff"),
        ("A", "b915"),
    ],
)
def test_crc16_known_vectors(data: str, expected: str) -> None:
    assert crc16_ccitt(data) == expected


def test_crc16_is_lowercase_and_zero_padded() -> None:
    for data in ("123456789", "A", PIX_SAMPLE[:-4]):
        value = crc16_ccitt(data)
        assert len(value) == 4
        assert value == value.lower()


@pytest.mark.parametrize("payload", [PIX_SAMPLE, PIX_SCANNED, QRIS_STATIC, QRIS_DYNAMIC_ORDER])
def test_sample_payloads_are_self_consistent(payload: str) -> None:
    assert crc16_ccitt(payload[:-4]).upper() == payload[-4:]
    assert checksum(payload[:-8]) == payload[-4:]
    assert verify_crc(payload)


def test_verify_crc_accepts_lowercase_trailer() -> None:
    assert verify_crc(PIX_SAMPLE[:-4] + PIX_SAMPLE[-4:].lower())


def test_verify_crc_detects_tampering() -> None:
    tampered = PIX_SAMPLE.replace("BRASILIA", "BRASILIO")
    assert not verify_crc(tampered)


def test_verify_crc_requires_trailer() -> None:
    assert not verify_crc(PIX_SAMPLE[:-8])
    assert not verify_crc("")


def test_strip_crc() -> None:
    assert strip_crc(PIX_SAMPLE) == PIX_SAMPLE[:-8]
    assert strip_crc(PIX_SAMPLE[:-8]) == PIX_SAMPLE[:-8]


def test_crc16_counts_utf16_code_units() -> None:
    assert crc16_ccitt("Rp é") == "ae7a"
    # astral characters contribute both surrogates
    assert crc16_ccitt("\U0001F600") == "6ec6"
    assert crc16_ccitt("\U0001F600") == crc16_ccitt("😀")


def test_trailing_newline_is_not_a_crc_trailer() -> None:
    assert strip_crc(PIX_SAMPLE + "\n") == PIX_SAMPLE + "\n"
    assert not verify_crc(PIX_SAMPLE + "\n")
