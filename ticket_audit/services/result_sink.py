"""Result sinks accumulating per-ticket analysis outcomes and progress."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from ticket_audit.core.result_aggregation import summarize_results
from ticket_audit.models.batch import BatchProgress
from ticket_audit.utils.progress import ProgressTracker

if TYPE_CHECKING:
    from ticket_audit.models.analysis import AnalysisResult

logger = structlog.get_logger(__name__)

SINK_STRATEGIES = ("append", "keyed")


class ResultSink:
    """Base sink: tracks progress; subclasses decide how results are stored.

    Only the batch analyzer writes to a sink, one result at a time.
    """

    def __init__(self, log_every: int = 10) -> None:
        if log_every < 1:
            msg = f"log_every must be at least 1, got {log_every}"
            raise ValueError(msg)
        self.log_every = log_every
        self.tracker = ProgressTracker(total=0, log_every=log_every)

    def start(self, total: int) -> None:
        """Prepare for a new run over ``total`` tickets."""
        self.tracker = ProgressTracker(total=total, log_every=self.log_every)

    def record(self, result: AnalysisResult) -> None:
        """Store a result; failures are also counted for the run summary."""
        self._store(result)
        if result.is_failure:
            self.tracker.record_failure(result.ticket_id, result.error or "")

    def update_progress(self, processed: int, total: int, current_item_id: int | None) -> None:
        """Publish the analyzer's progress after a processed ticket."""
        self.tracker.advance(processed, total, current_item_id)

    @property
    def progress(self) -> BatchProgress:
        return BatchProgress(
            self.tracker.processed,
            self.tracker.total,
            self.tracker.current_item_id,
        )

    @property
    def results(self) -> list[AnalysisResult]:
        raise NotImplementedError

    def _store(self, result: AnalysisResult) -> None:
        raise NotImplementedError

    def summary(self) -> dict[str, Any]:
        """Audit statistics over the stored results plus run counters."""
        stats = summarize_results(self.results)
        stats["run"] = self.tracker.summary()
        return stats

    def __len__(self) -> int:
        return len(self.results)


class AppendSink(ResultSink):
    """Appends every result in emission order; each run starts empty."""

    def __init__(self, log_every: int = 10) -> None:
        super().__init__(log_every)
        self._results: list[AnalysisResult] = []

    def start(self, total: int) -> None:
        super().start(total)
        self._results = []

    def _store(self, result: AnalysisResult) -> None:
        self._results.append(result)

    @property
    def results(self) -> list[AnalysisResult]:
        return list(self._results)


class KeyedSink(ResultSink):
    """Keeps the latest result per ticket; re-analysis overwrites."""

    def __init__(self, log_every: int = 10) -> None:
        super().__init__(log_every)
        self._results: dict[int, AnalysisResult] = {}

    def _store(self, result: AnalysisResult) -> None:
        if result.ticket_id in self._results:
            logger.debug("analysis_result_replaced", ticket_id=result.ticket_id)
        self._results[result.ticket_id] = result

    def get(self, ticket_id: int) -> AnalysisResult | None:
        """Return the stored result for a ticket, if any."""
        return self._results.get(ticket_id)

    @property
    def results(self) -> list[AnalysisResult]:
        return list(self._results.values())


def create_sink(strategy: str = "keyed", log_every: int = 10) -> ResultSink:
    """Build a sink for the given strategy name ("append" or "keyed")."""
    if strategy == "append":
        return AppendSink(log_every)
    if strategy == "keyed":
        return KeyedSink(log_every)
    msg = f"Unknown sink strategy {strategy!r}; expected one of {', '.join(SINK_STRATEGIES)}"
    raise ValueError(msg)
