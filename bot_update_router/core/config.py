"""Router configuration loaded via Pydantic settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    BOT_ROUTER_LOG_LEVEL: str = Field(default="info")
    BOT_ROUTER_LOG_DIR: Path | None = Field(default=None)
    BOT_ROUTER_LOG_TO_FILE: bool = Field(default=False)
    BOT_ROUTER_LOG_SCHEMA_VERSION: str = Field(default="1.0.0")

    DATA_DIR: Path = Field(default=Path("/data"))


settings = Settings()
config = settings  # Alias for backward compatibility


__all__ = ["Settings", "settings", "config"]
