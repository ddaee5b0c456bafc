"""Analysis result model for ticket quality audits."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ticket_audit.models.failure import ErrorClassification

_FAILURE_SUMMARIES: dict[ErrorClassification, tuple[str, str]] = {
    ErrorClassification.AUTH_FAILED: (
        "Authentication failed during batch processing.",
        "Invalid or expired API key",
    ),
    ErrorClassification.RATE_LIMITED: (
        "Rate limit or quota exhausted during batch processing.",
        "Request quota exceeded",
    ),
    ErrorClassification.RECOVERABLE: (
        "Analysis failed.",
        "Error processing ticket",
    ),
}


class AnalysisResult(BaseModel):
    """Quality audit of one ticket, or a synthetic failure result.

    A result with a non-empty ``error`` is a synthetic failure result
    manufactured by the batch analyzer, not a real analysis.
    """

    model_config = ConfigDict(frozen=True)

    ticket_id: int
    score: float = Field(ge=0, le=10)
    summary: str
    strengths: list[str] = []
    weaknesses: list[str] = []
    rca_detected: bool = False
    error: str | None = None
    failure: ErrorClassification | None = None

    @field_validator("strengths", "weaknesses", mode="before")
    @classmethod
    def default_empty_list(cls, value: object) -> object:
        """LLM payloads occasionally send null for empty lists."""
        return value if value is not None else []

    @property
    def is_failure(self) -> bool:
        """True for synthetic failure results."""
        return bool(self.error)

    @classmethod
    def failed(
        cls,
        ticket_id: int,
        error: str,
        classification: ErrorClassification = ErrorClassification.RECOVERABLE,
    ) -> AnalysisResult:
        """Build the synthetic failure result for a ticket."""
        summary, weakness = _FAILURE_SUMMARIES[classification]
        return cls(
            ticket_id=ticket_id,
            score=0,
            summary=summary,
            weaknesses=[weakness],
            error=error or classification.value,
            failure=classification,
        )
