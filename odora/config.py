"""Configuration management with environment variable support and type safety.

This module provides the OdoraConfig settings model, loaded from environment
variables through pydantic-settings.
"""

from __future__ import annotations

from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "OdoraConfig",
    "TransportType",
]


class TransportType(str, Enum):
    """Supported MCP transport types."""

    STDIO = "stdio"


class OdoraConfig(BaseSettings):
    """
    Odora runtime settings.

    These settings are loaded from environment variables:
    - ODORA_STORAGE_PATH: JSON file holding all persisted values (unset keeps data in memory)
    - ODORA_PHOTO_DIR: Directory for permanent photo copies
    - ODORA_CAPTURE_DIR: Directory captures are read from (default: <photo dir>/incoming)
    - OPENAI_API_KEY: Key for scent description generation
    - ODORA_VISION_MODEL / ODORA_SUGGESTION_MODEL: OpenAI model names
    - ODORA_TIMEZONE: IANA zone used to decide calendar days for streaks
    - ODORA_SERVER_NAME, ODORA_TRANSPORT, ODORA_DEBUG: Server options
    """

    model_config = SettingsConfigDict(populate_by_name=True)

    storage_path: str | None = Field(default=None, validation_alias="ODORA_STORAGE_PATH")
    photo_dir: str = Field(default="odora_photos", validation_alias="ODORA_PHOTO_DIR")
    capture_dir: str | None = Field(default=None, validation_alias="ODORA_CAPTURE_DIR")
    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    vision_model: str = Field(default="gpt-4o", validation_alias="ODORA_VISION_MODEL")
    suggestion_model: str = Field(default="gpt-4o-mini", validation_alias="ODORA_SUGGESTION_MODEL")
    timezone: str = Field(default="UTC", validation_alias="ODORA_TIMEZONE")
    server_name: str = Field(default="odora", validation_alias="ODORA_SERVER_NAME")
    transport: TransportType = Field(default=TransportType.STDIO, validation_alias="ODORA_TRANSPORT")
    debug: bool = Field(default=False, validation_alias="ODORA_DEBUG")
    odora_version: str = "1.0.0"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @classmethod
    def from_env(cls) -> OdoraConfig:
        """Load configuration from environment variables."""
        return cls()

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)
