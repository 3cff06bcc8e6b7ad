"""
Harness configuration settings.
"""
from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Harness settings, read from ``APIHARNESS_*`` variables and ``.env``."""

    base_url: str = "https://reqres.in"
    resource_path: str = "/api/users"
    environment: str = "test"
    timeout: float = Field(default=20, gt=0)
    report_dir: str = "test-output"
    log_dir: str = "logs"
    log_level: str = "INFO"
    # extra headers sent with every request, JSON encoded in the environment
    api_headers: dict[str, str] = Field(default_factory=dict)

    model_config = SettingsConfigDict(
        env_prefix="APIHARNESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


def get_settings(env_file: str | None = None, **overrides: Any) -> Settings:
    values = {key: value for key, value in overrides.items() if value is not None}
    if env_file is not None:
        return Settings(_env_file=env_file, **values)
    return Settings(**values)
