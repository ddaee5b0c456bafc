"""Application configuration model using pydantic-settings."""

from __future__ import annotations

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    ticket_api_base_url: str = "https://support.amelia.com"
    ticket_api_token: str | None = None
    ticket_api_username: str | None = None
    ticket_api_password: str | None = None
    ticket_api_proxy_url: str | None = None
    anthropic_api_key: str | None = None
    llm_model: str = "claude-haiku-4-5-20251001"
    requests_per_minute: int = 10
    max_tickets: int = 50
    sink_strategy: Literal["append", "keyed"] = "keyed"
    http_timeout: int = 30
    log_level: str = "INFO"

    @field_validator("ticket_api_base_url")
    @classmethod
    def validate_ticket_api_base_url(cls, value: str) -> str:
        """Base URL must be http(s); trailing slashes are dropped."""
        if not value.startswith(("http://", "https://")):
            msg = "ticket_api_base_url must start with http:// or https://"
            raise ValueError(msg)
        return value.rstrip("/")

    @field_validator("requests_per_minute")
    @classmethod
    def validate_requests_per_minute(cls, value: int) -> int:
        """Requests per minute must be at least 1."""
        if value < 1:
            msg = "requests_per_minute must be >= 1"
            raise ValueError(msg)
        return value

    @field_validator("max_tickets")
    @classmethod
    def validate_max_tickets(cls, value: int) -> int:
        """Max tickets per run must be between 1 and 1000."""
        if value < 1 or value > 1000:
            msg = "max_tickets must be between 1 and 1000"
            raise ValueError(msg)
        return value

    @field_validator("http_timeout")
    @classmethod
    def validate_http_timeout(cls, value: int) -> int:
        """HTTP timeout must be positive."""
        if value < 1:
            msg = "http_timeout must be >= 1"
            raise ValueError(msg)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value
