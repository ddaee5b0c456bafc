"""Failure signal and error classification models."""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class ErrorClassification(StrEnum):
    """Severity class of a failed ticket analysis."""

    AUTH_FAILED = "auth_failed"
    RATE_LIMITED = "rate_limited"
    RECOVERABLE = "recoverable"

    @property
    def is_fatal(self) -> bool:
        """Fatal classifications halt the whole batch."""
        return self is not ErrorClassification.RECOVERABLE


class FailureSignal(BaseModel):
    """Normalized failure raised by the history fetch or the analysis call."""

    model_config = ConfigDict(frozen=True)

    error_type: str
    status_code: int | None = None
    message: str

    @field_validator("error_type")
    @classmethod
    def validate_error_type(cls, value: str) -> str:
        """Error type must be PascalCase and between 1-100 characters."""
        if not value or len(value) > 100:
            msg = "error_type must be between 1 and 100 characters"
            raise ValueError(msg)
        if not re.fullmatch(r"[A-Z][a-zA-Z0-9]*", value):
            msg = "error_type must be in PascalCase format"
            raise ValueError(msg)
        return value

    @field_validator("status_code")
    @classmethod
    def validate_status_code(cls, value: int | None) -> int | None:
        """Status code, when present, must be a valid HTTP status."""
        if value is not None and not 100 <= value <= 599:
            msg = "status_code must be between 100 and 599"
            raise ValueError(msg)
        return value
