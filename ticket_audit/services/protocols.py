"""Service protocols defining the batch analyzer's collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ticket_audit.models.analysis import AnalysisResult
    from ticket_audit.models.batch import BatchProgress
    from ticket_audit.models.ticket import HistoryItem, Ticket


class HistoryProviderProtocol(Protocol):
    """Protocol for ticket history sources."""

    def get_ticket_history(self, ticket_id: int) -> list[HistoryItem]: ...


class AnalysisProviderProtocol(Protocol):
    """Protocol for AI ticket analysis services."""

    def analyze_ticket(
        self,
        ticket: Ticket,
        history: list[HistoryItem],
        model_id: str,
        api_key: str | None = None,
    ) -> AnalysisResult: ...

    def validate_api_key(
        self,
        api_key: str | None = None,
        model_id: str | None = None,
    ) -> bool: ...


class ResultSinkProtocol(Protocol):
    """Protocol for result accumulators fed by the batch analyzer."""

    def start(self, total: int) -> None: ...

    def record(self, result: AnalysisResult) -> None: ...

    def update_progress(self, processed: int, total: int, current_item_id: int | None) -> None: ...

    @property
    def progress(self) -> BatchProgress: ...
