"""Shared service error definitions."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ServiceError(Exception):
    code: str
    message: str
    status_code: int = 400

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code}: {self.message}"


class EmvCodecError(ServiceError):
    """Base class for TLV parse and build failures."""


class MalformedLengthError(EmvCodecError):
    pass


class TruncatedValueError(EmvCodecError):
    pass


class TrailingDataError(EmvCodecError):
    pass


class FieldTooLongError(EmvCodecError):
    pass


class InvalidTagError(EmvCodecError):
    pass


class UnsupportedCharacterError(EmvCodecError):
    pass


def err_malformed_length(tag: str, raw: str, position: int) -> MalformedLengthError:
    return MalformedLengthError(
        code="ERR_MALFORMED_LENGTH",
        message=f"Tag {tag} at offset {position} has non-numeric length {raw!r}",
        status_code=422,
    )


def err_truncated_value(tag: str, expected: int, available: int) -> TruncatedValueError:
    return TruncatedValueError(
        code="ERR_TRUNCATED_VALUE",
        message=f"Tag {tag} declares {expected} characters but only {available} remain",
        status_code=422,
    )


def err_trailing_data(position: int, remainder: str) -> TrailingDataError:
    return TrailingDataError(
        code="ERR_TRAILING_DATA",
        message=f"Unparsed data at offset {position}: {remainder[:16]!r}",
        status_code=422,
    )


def err_field_too_long(path: str, length: int) -> FieldTooLongError:
    return FieldTooLongError(
        code="ERR_FIELD_TOO_LONG",
        message=f"Value of tag {path} is {length} characters, maximum is 99",
        status_code=422,
    )


def err_invalid_tag(tag: object) -> InvalidTagError:
    return InvalidTagError(code="ERR_INVALID_TAG", message=f"Invalid EMV tag {tag!r}", status_code=422)


def err_unsupported_character(path: str) -> UnsupportedCharacterError:
    return UnsupportedCharacterError(
        code="ERR_UNSUPPORTED_CHARACTER",
        message=f"Value of tag {path} contains characters outside the Basic Multilingual Plane",
        status_code=422,
    )


def err_bad_payload(message: str | None = None) -> ServiceError:
    return ServiceError(code="ERR_BAD_PAYLOAD", message=message or "Invalid request payload", status_code=400)


def err_bad_crc(message: str | None = None) -> ServiceError:
    return ServiceError(code="ERR_BAD_CRC", message=message or "Payload checksum does not match", status_code=422)


def err_qr_not_found(message: str | None = None) -> ServiceError:
    return ServiceError(code="ERR_QR_NOT_FOUND", message=message or "No QR code found in image", status_code=422)
