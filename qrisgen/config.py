"""Application configuration utilities."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(default=True, description="Enable JSON formatted logs")


class Settings(BaseSettings):
    """Central application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = Field(default="qrisgen")
    environment: Literal["development", "staging", "production"] = Field(default="development")
    api_key: str = Field(default="dev-secret-key")
    qr_size: int = Field(default=512, ge=64, le=2048, validation_alias=AliasChoices("QRISGEN_QR_SIZE", "QR_SIZE"))
    qr_margin: int = Field(default=2, ge=0, le=16)
    max_image_bytes: int = Field(default=5 * 1024 * 1024, ge=1024, description="Largest uploaded QR image accepted for decoding")
    require_valid_source_crc: bool = Field(default=True, description="Reject base payloads whose own CRC trailer is wrong")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return memoized application settings."""

    return Settings()


settings = get_settings()
