"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str
    api_token: str | None = None
    api_timeout_seconds: float = 15
    min_photo_count: int = 4
    max_photo_size_bytes: int = 10 * 1024 * 1024
    shelf_label_max_count: int = 1000
    product_label_max_count: int = 100
    printer_host: str | None = None
    printer_port: int = 9100
    printer_timeout_seconds: float = 10
    printer_settle_seconds: float = 1.0
    event_history_size: int = 200
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="STOCK_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
