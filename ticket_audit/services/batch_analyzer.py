"""Sequential, rate-limited batch analysis of support tickets."""

from __future__ import annotations

import threading
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from ticket_audit.core.error_classifier import classify_exception
from ticket_audit.core.throttle import remaining_wait, throttle_interval
from ticket_audit.models.analysis import AnalysisResult
from ticket_audit.models.batch import BatchState, BatchStatus, StopReason

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ticket_audit.models.batch import BatchConfig
    from ticket_audit.models.failure import ErrorClassification
    from ticket_audit.models.ticket import Ticket
    from ticket_audit.services.protocols import (
        AnalysisProviderProtocol,
        HistoryProviderProtocol,
        ResultSinkProtocol,
    )

    ResultCallback = Callable[[AnalysisResult], Any]
    ProgressCallback = Callable[[int, int, int | None], Any]

logger = structlog.get_logger(__name__)


class BatchAnalyzer:
    """Walks a list of tickets, fetching history and requesting an AI audit for each.

    Processing is strictly sequential: one ticket is in flight at a time and
    results reach the sink in input order. Between tickets the analyzer waits
    out the remainder of the throttle interval derived from the configured
    requests per minute.

    Failures never escape ``run``. Each one is classified: recoverable
    failures become a synthetic failure result and the run continues; auth
    and rate-limit failures produce a synthetic failure result and stop the
    run immediately.

    Cancellation is cooperative. The cancel event is checked before each
    ticket and before each throttle sleep; a history fetch or analysis call
    already in progress is allowed to finish and its result is recorded.
    """

    def __init__(
        self,
        history_provider: HistoryProviderProtocol,
        analysis_provider: AnalysisProviderProtocol,
        sleep: Callable[[float], Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.history_provider = history_provider
        self.analysis_provider = analysis_provider
        self._sleep = sleep
        self._clock = clock
        self._run_lock = threading.Lock()
        self._state = BatchState()

    @property
    def state(self) -> BatchState:
        """Snapshot of the current or most recent run."""
        return self._state.snapshot()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def run(
        self,
        tickets: Sequence[Ticket],
        config: BatchConfig,
        sink: ResultSinkProtocol,
        cancel_event: threading.Event | None = None,
        on_result: ResultCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> BatchState:
        """Analyze ``tickets`` in order and return the terminal state.

        ``on_result`` and ``on_progress`` are invoked synchronously after each
        processed ticket, after the sink has been updated.

        Raises RuntimeError if this analyzer is already running a batch.
        """
        if not self._run_lock.acquire(blocking=False):
            msg = "A batch run is already in progress"
            raise RuntimeError(msg)
        try:
            return self._run(
                tickets,
                config,
                sink,
                cancel_event or threading.Event(),
                on_result,
                on_progress,
            )
        finally:
            self._run_lock.release()

    def _run(
        self,
        tickets: Sequence[Ticket],
        config: BatchConfig,
        sink: ResultSinkProtocol,
        cancel_event: threading.Event,
        on_result: ResultCallback | None,
        on_progress: ProgressCallback | None,
    ) -> BatchState:
        items = list(tickets) if config.max_items is None else list(tickets[: config.max_items])
        sleep = self._sleep or cancel_event.wait

        state = BatchState(
            status=BatchStatus.RUNNING,
            total_count=len(items),
            started_at=datetime.now(UTC),
        )
        self._state = state
        sink.start(len(items))

        log = logger.bind(model_id=config.model_id, total=len(items))
        log.info(
            "batch_started",
            requests_per_minute=config.requests_per_minute,
            interval_seconds=throttle_interval(config.requests_per_minute),
            skipped_by_limit=len(tickets) - len(items),
        )

        if items and config.validate_credentials:
            probe_stop = self._probe_credentials(config)
            if probe_stop is not None:
                return self._stop(state, probe_stop)

        for index, ticket in enumerate(items):
            if cancel_event.is_set():
                return self._stop(state, StopReason.CANCELLED)

            state.current_item_id = ticket.ticket_id
            classification: ErrorClassification | None = None
            started = self._clock()

            try:
                history = self.history_provider.get_ticket_history(ticket.ticket_id)
                result = self.analysis_provider.analyze_ticket(
                    ticket,
                    history,
                    config.model_id,
                    config.api_key,
                )
                if result.ticket_id != ticket.ticket_id:
                    result = result.model_copy(update={"ticket_id": ticket.ticket_id})
            except Exception as exc:
                signal, classification = classify_exception(exc)
                log.warning(
                    "batch_item_failed",
                    ticket_id=ticket.ticket_id,
                    error_type=signal.error_type,
                    status_code=signal.status_code,
                    classification=classification.value,
                    error=signal.message[:300],
                )
                result = AnalysisResult.failed(ticket.ticket_id, signal.message, classification)

            elapsed = self._clock() - started
            self._emit(state, sink, result, on_result, on_progress)

            if classification is not None and classification.is_fatal:
                return self._stop(state, StopReason.from_classification(classification))

            if index < len(items) - 1 and not cancel_event.is_set():
                wait = remaining_wait(config.requests_per_minute, elapsed)
                if wait > 0:
                    log.debug("batch_throttle_wait", wait_seconds=round(wait, 3))
                    sleep(wait)

        state.status = BatchStatus.COMPLETED
        state.finished_at = datetime.now(UTC)
        log.info("batch_completed", processed=state.processed_count)
        return state.snapshot()

    def _probe_credentials(self, config: BatchConfig) -> StopReason | None:
        """Check the credentials once before any ticket is dispatched.

        Returns the stop reason when the run must not start.
        """
        try:
            valid = self.analysis_provider.validate_api_key(config.api_key, config.model_id)
        except Exception as exc:
            signal, classification = classify_exception(exc)
            if classification.is_fatal:
                logger.error(
                    "credential_probe_failed",
                    classification=classification.value,
                    error=signal.message[:300],
                )
                return StopReason.from_classification(classification)
            logger.warning("credential_probe_inconclusive", error=signal.message[:300])
            return None

        if not valid:
            logger.error("credential_probe_rejected", model_id=config.model_id)
            return StopReason.AUTH_FAILED
        return None

    @staticmethod
    def _emit(
        state: BatchState,
        sink: ResultSinkProtocol,
        result: AnalysisResult,
        on_result: ResultCallback | None,
        on_progress: ProgressCallback | None,
    ) -> None:
        sink.record(result)
        state.processed_count += 1
        if on_result is not None:
            on_result(result)

        sink.update_progress(state.processed_count, state.total_count, state.current_item_id)
        if on_progress is not None:
            on_progress(state.processed_count, state.total_count, state.current_item_id)

    @staticmethod
    def _stop(state: BatchState, reason: StopReason) -> BatchState:
        state.status = BatchStatus.STOPPED
        state.stop_reason = reason
        state.finished_at = datetime.now(UTC)
        logger.warning(
            "batch_stopped",
            reason=reason.value,
            processed=state.processed_count,
            total=state.total_count,
        )
        return state.snapshot()
