"""Batch run configuration, state and progress models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

from ticket_audit.models.failure import ErrorClassification


class BatchStatus(StrEnum):
    """Lifecycle status of a batch run."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    COMPLETED = "completed"


class StopReason(StrEnum):
    """Why a batch run stopped before completing."""

    CANCELLED = "cancelled"
    AUTH_FAILED = "auth_failed"
    RATE_LIMITED = "rate_limited"

    @classmethod
    def from_classification(cls, classification: ErrorClassification) -> StopReason:
        """Map a fatal error classification to its stop reason."""
        if classification is ErrorClassification.AUTH_FAILED:
            return cls.AUTH_FAILED
        if classification is ErrorClassification.RATE_LIMITED:
            return cls.RATE_LIMITED
        msg = f"{classification} is not a fatal classification"
        raise ValueError(msg)


class BatchConfig(BaseModel):
    """Per-run settings. Immutable for the duration of a run."""

    model_config = ConfigDict(frozen=True)

    model_id: str
    requests_per_minute: int = 10
    api_key: str | None = None
    max_items: int | None = None
    validate_credentials: bool = True

    @field_validator("model_id")
    @classmethod
    def validate_model_id(cls, value: str) -> str:
        """Model ID must be non-empty."""
        if not value.strip():
            msg = "model_id must not be empty"
            raise ValueError(msg)
        return value.strip()

    @field_validator("requests_per_minute")
    @classmethod
    def validate_requests_per_minute(cls, value: int) -> int:
        """Requests per minute must be at least 1."""
        if value < 1:
            msg = "requests_per_minute must be >= 1"
            raise ValueError(msg)
        return value

    @field_validator("max_items")
    @classmethod
    def validate_max_items(cls, value: int | None) -> int | None:
        """Item limit, when set, must be at least 1."""
        if value is not None and value < 1:
            msg = "max_items must be >= 1"
            raise ValueError(msg)
        return value


class BatchProgress(NamedTuple):
    """Progress of a run as published after every processed ticket."""

    processed: int
    total: int
    current_item_id: int | None


class BatchState(BaseModel):
    """State of one batch run, owned and mutated by the batch analyzer."""

    status: BatchStatus = BatchStatus.IDLE
    stop_reason: StopReason | None = None
    processed_count: int = 0
    total_count: int = 0
    current_item_id: int | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        """True once the run has completed or stopped."""
        return self.status in (BatchStatus.COMPLETED, BatchStatus.STOPPED)

    @property
    def progress(self) -> BatchProgress:
        """Progress triple for observers."""
        return BatchProgress(self.processed_count, self.total_count, self.current_item_id)

    def snapshot(self) -> BatchState:
        """Return an independent copy for callers."""
        return self.model_copy()
