"""Pydantic schemas for API contracts."""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class PayloadSummaryModel(BaseModel):
    point_of_initiation: str | None = None
    merchant_name: str | None = None
    merchant_city: str | None = None
    currency: str | None = None
    amount: str | None = None
    reference: str | None = None
    crc_valid: bool


class DynamicQRRequest(BaseModel):
    base_payload: str = Field(min_length=8, max_length=512, description="Static QRIS payload string")
    amount: Decimal = Field(gt=0, max_digits=13, decimal_places=2)
    reference: str | None = Field(default=None, max_length=99)
    size: int | None = Field(default=None, ge=64, le=2048, description="Rendered QR size in pixels")


class DynamicQRResponse(BaseModel):
    payload: str
    crc: str
    qr_data_url: str
    summary: PayloadSummaryModel


class ParseRequest(BaseModel):
    payload: str = Field(max_length=512)
    strict: bool = False


class ParseResponse(BaseModel):
    tags: dict[str, Any]
    crc_valid: bool
    summary: PayloadSummaryModel


class BuildRequest(BaseModel):
    tags: dict[str, Any] = Field(description="Nested tag map; strings are leaves, objects nested templates")


class BuildResponse(BaseModel):
    payload: str
    crc: str


class DecodeRequest(BaseModel):
    image: str = Field(min_length=1, description="Base64 image or data URL")


class DecodeResponse(BaseModel):
    payload: str
    tags: dict[str, Any]
    crc_valid: bool
