"""Best-effort QR decoding of uploaded images."""
from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from .config import settings

logger = logging.getLogger("qrisgen.scanner")


def image_bytes_from_base64(image: str) -> bytes:
    """Accept a ``data:image/...;base64,`` URL or bare base64 and return raw bytes."""

    data = image.strip()
    if data.startswith("data:"):
        header, _, data = data.partition(",")
        if ";base64" not in header:
            raise ValueError("data URL is not base64 encoded")
    return base64.b64decode("".join(data.split()), validate=True)


def decode_qr_image(raw: bytes) -> str:
    """Return the text of the first QR code found in ``raw`` image bytes, or ""."""

    with Image.open(io.BytesIO(raw)) as img:
        rgb = np.array(img.convert("RGB"))

    detector = cv2.QRCodeDetector()
    bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
    data, _, _ = detector.detectAndDecode(bgr)
    if data:
        return data

    # second pass on a binarised copy helps with photographed codes
    gray = cv2.cvtColor(bgr, cv2.COLOR_BGR2GRAY)
    _, thresh = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    data, _, _ = detector.detectAndDecode(thresh)
    return data or ""


def _decode_sync(image: str) -> str:
    try:
        raw = image_bytes_from_base64(image)
    except (ValueError, binascii.Error):
        logger.info("image is not valid base64")
        return ""
    if len(raw) > settings.max_image_bytes:
        logger.info("image too large to decode", extra={"size_bytes": len(raw), "limit": settings.max_image_bytes})
        return ""
    try:
        return decode_qr_image(raw)
    except (UnidentifiedImageError, OSError, cv2.error):
        logger.info("image could not be decoded", exc_info=True)
        return ""


async def decode_qr_from_base64(image: str) -> str:
    """Decode a QR code from a base64 image; never raises, returns "" on failure."""

    try:
        return await asyncio.to_thread(_decode_sync, image)
    except Exception:
        logger.exception("unexpected QR decode failure")
        return ""
