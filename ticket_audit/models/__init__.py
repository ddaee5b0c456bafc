"""Pydantic data models for the ticket quality audit."""

from ticket_audit.models.analysis import AnalysisResult
from ticket_audit.models.batch import (
    BatchConfig,
    BatchProgress,
    BatchState,
    BatchStatus,
    StopReason,
)
from ticket_audit.models.config import Config
from ticket_audit.models.failure import ErrorClassification, FailureSignal
from ticket_audit.models.ticket import (
    HistoryComment,
    HistoryFieldUpdate,
    HistoryItem,
    Ticket,
)

__all__ = [
    "AnalysisResult",
    "BatchConfig",
    "BatchProgress",
    "BatchState",
    "BatchStatus",
    "Config",
    "ErrorClassification",
    "FailureSignal",
    "HistoryComment",
    "HistoryFieldUpdate",
    "HistoryItem",
    "StopReason",
    "Ticket",
]
