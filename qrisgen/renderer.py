"""QR image renderer for finished payload strings."""
from __future__ import annotations

import base64
import io
from dataclasses import dataclass

import qrcode
from PIL import Image

from .config import settings


@dataclass(frozen=True)
class RenderedQR:
    png_bytes: bytes

    @property
    def png_base64(self) -> str:
        return base64.b64encode(self.png_bytes).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:image/png;base64,{self.png_base64}"


def generate_qr_image(data: str, size: int | None = None, margin: int | None = None) -> Image.Image:
    """Generate a square QR image (error correction level M) of exactly ``size`` pixels."""

    size = size or settings.qr_size
    margin = settings.qr_margin if margin is None else margin

    qr = qrcode.QRCode(version=None, error_correction=qrcode.constants.ERROR_CORRECT_M, box_size=10, border=margin)
    qr.add_data(data)
    qr.make(fit=True)

    qr_img = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    return qr_img.resize((size, size), Image.Resampling.NEAREST)


def qr_image_to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def render_qr_payload(payload: str, size: int | None = None, margin: int | None = None) -> RenderedQR:
    """Render payload into a PNG, exposed as bytes, base64 and a data URL."""

    image = generate_qr_image(payload, size=size, margin=margin)
    return RenderedQR(png_bytes=qr_image_to_png_bytes(image))
