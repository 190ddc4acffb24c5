"""Configuration management using pydantic-settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHHMAC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Signing
    service_id: str = Field(
        default="AuthHMAC",
        description="Service ID prefix used in the Authorization header",
    )
    credentials: dict[str, str] = Field(
        default_factory=dict,
        description="Mapping of access key id to shared secret (JSON)",
    )

    # Middleware
    exempt_paths: tuple[str, ...] = Field(
        default=("/health",),
        description="Paths exempt from HMAC authentication",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )
    log_json: bool | None = Field(
        default=None,
        description="Emit JSON log lines (defaults to auto-detect from TTY)",
    )
