"""Progress tracking for ticket batch runs."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from ticket_audit.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ProgressTracker:
    """Per-run progress of a ticket batch.

    The processed count is whatever the batch analyzer last reported through
    ``advance``; the tracker only adds failure bookkeeping on top of it.
    """

    total: int
    log_every: int = 10
    processed: int = 0
    failed: int = 0
    current_item_id: int | None = None
    errors: list[str] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic)

    @property
    def successful(self) -> int:
        return max(self.processed - self.failed, 0)

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self.start_time

    @property
    def progress_percentage(self) -> float:
        """Percentage of total tickets processed."""
        if self.total == 0:
            return 100.0
        return (self.processed / self.total) * 100.0

    def record_failure(self, ticket_id: int, error: str) -> None:
        """Remember a failed ticket and its error reason."""
        self.failed += 1
        self.errors.append(f"Ticket {ticket_id}: {error}")

    def advance(self, processed: int, total: int, current_item_id: int | None) -> None:
        """Take over the analyzer's counters and log every ``log_every`` tickets."""
        self.processed = processed
        self.total = total
        self.current_item_id = current_item_id
        if processed % self.log_every == 0 or processed == total:
            logger.info(
                "batch_progress",
                processed=processed,
                total=total,
                failed=self.failed,
                ticket_id=current_item_id,
                percentage=f"{self.progress_percentage:.1f}%",
                elapsed=f"{self.elapsed_seconds:.1f}s",
            )

    def summary(self) -> dict[str, int | float | list[str]]:
        return {
            "processed": self.processed,
            "successful": self.successful,
            "failed": self.failed,
            "duration_seconds": round(self.elapsed_seconds, 2),
            "errors": list(self.errors),
        }
