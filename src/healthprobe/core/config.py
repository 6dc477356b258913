"""Probe configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def normalize_path(uri: str) -> str:
    """Normalize an endpoint path to a single leading slash.

    Args:
        uri: Configured path, with or without a leading slash

    Returns:
        The path starting with "/"

    Raises:
        ValueError: If the path is blank once the slash is removed
    """
    if uri.startswith("/"):
        _assert_not_blank(uri[1:])
        return uri
    _assert_not_blank(uri)
    return f"/{uri}"


def _assert_not_blank(value: str) -> None:
    if not value.strip():
        raise ValueError("The provided path must not be empty")


class ProbeSettings(BaseSettings):
    """Health probe settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="HEALTHPROBE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Application
    app_name: str = Field(default="healthprobe", description="Application name")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    # Endpoints
    health_check_path: str = Field(default="/health", description="Health endpoint path")
    ready_check_path: str = Field(default="/ready", description="Ready endpoint path")
    health_check_enabled: bool = Field(default=True, description="Serve the health endpoint")
    ready_check_enabled: bool = Field(default=True, description="Serve the ready endpoint")

    # Status codes
    successful_check_status_code: int = Field(
        default=200, ge=100, le=599, description="Status when every check passes"
    )
    unsuccessful_check_status_code: int = Field(
        default=500, ge=100, le=599, description="Status when any check fails"
    )

    # Check execution
    check_timeout_seconds: float | None = Field(
        default=None, gt=0, description="Per-check timeout, unbounded when unset"
    )
    isolate_failures: bool = Field(
        default=True, description="Record a raising check as failed instead of aborting"
    )
    concurrent_checks: bool = Field(
        default=False, description="Run an endpoint's checks concurrently"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("health_check_path", "ready_check_path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        return normalize_path(value)


@lru_cache
def get_settings() -> ProbeSettings:
    """Get cached settings instance."""
    return ProbeSettings()
