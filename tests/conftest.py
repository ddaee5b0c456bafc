"""Shared test fixtures for the ticket quality audit."""

from __future__ import annotations

from typing import Any

import pytest

from ticket_audit.models.analysis import AnalysisResult
from ticket_audit.models.ticket import HistoryItem, Ticket


class FakeClock:
    """Monotonic clock whose time only moves when told to."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeHistoryProvider:
    """History provider returning one comment per ticket, with scripted failures."""

    def __init__(
        self,
        clock: FakeClock | None = None,
        latency: float = 0.0,
        failures: dict[int, Exception] | None = None,
    ) -> None:
        self.clock = clock
        self.latency = latency
        self.failures = failures or {}
        self.calls: list[int] = []

    def get_ticket_history(self, ticket_id: int) -> list[HistoryItem]:
        self.calls.append(ticket_id)
        if self.clock is not None:
            self.clock.advance(self.latency)
        if ticket_id in self.failures:
            raise self.failures[ticket_id]
        return [
            HistoryItem(
                id=ticket_id * 10,
                created="2025-01-01T10:00:00",
                actorId="agent-1",
                source="email",
                comment={"content": f"<p>Looking into ticket {ticket_id}</p>"},
            )
        ]


class FakeAnalysisProvider:
    """Analysis provider scoring every ticket 8, with scripted failures."""

    def __init__(
        self,
        clock: FakeClock | None = None,
        latency: float = 0.0,
        failures: dict[int, Exception] | None = None,
        key_valid: bool = True,
        probe_error: Exception | None = None,
    ) -> None:
        self.clock = clock
        self.latency = latency
        self.failures = failures or {}
        self.key_valid = key_valid
        self.probe_error = probe_error
        self.calls: list[dict[str, Any]] = []
        self.probe_calls: list[tuple[str | None, str | None]] = []
        self.on_call: Any = None

    def validate_api_key(self, api_key: str | None = None, model_id: str | None = None) -> bool:
        self.probe_calls.append((api_key, model_id))
        if self.probe_error is not None:
            raise self.probe_error
        return self.key_valid

    def analyze_ticket(
        self,
        ticket: Ticket,
        history: list[HistoryItem],
        model_id: str,
        api_key: str | None = None,
    ) -> AnalysisResult:
        self.calls.append(
            {
                "ticket_id": ticket.ticket_id,
                "history": history,
                "model_id": model_id,
                "api_key": api_key,
            }
        )
        if self.on_call is not None:
            self.on_call(ticket)
        if self.clock is not None:
            self.clock.advance(self.latency)
        if ticket.ticket_id in self.failures:
            raise self.failures[ticket.ticket_id]
        return AnalysisResult(
            ticket_id=ticket.ticket_id,
            score=8,
            summary=f"Ticket {ticket.ticket_id} handled well.",
            strengths=["Fast response"],
            weaknesses=[],
            rca_detected=ticket.ticket_id % 2 == 0,
        )


def make_ticket(ticket_id: int, **overrides: Any) -> Ticket:
    """Build a ticket with realistic metadata."""
    data: dict[str, Any] = {
        "ticketId": ticket_id,
        "ticketClientCode": "ACME",
        "ticketClientName": "Acme Corp",
        "priority": "P2",
        "ticketType": "Incident",
        "ticketSource": "email",
        "subject": f"VPN outage #{ticket_id}",
        "status": "Resolved",
        "created": "2025-01-01T09:00:00",
        "updated": "2025-01-02T09:00:00",
    }
    data.update(overrides)
    return Ticket.model_validate(data)


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def tickets() -> list[Ticket]:
    """Five tickets with IDs 1..5."""
    return [make_ticket(ticket_id) for ticket_id in range(1, 6)]


@pytest.fixture
def sample_search_response() -> dict[str, Any]:
    """Ticket search response as returned by the reporting export endpoint."""
    return {
        "total": 2,
        "searchResults": [
            {
                "ticketId": 101,
                "ticketClientCode": "ACME",
                "ticketClientName": "Acme Corp",
                "priority": "P1",
                "ticketType": "Incident",
                "ticketSource": "portal",
                "subject": "Email down",
                "status": "Resolved",
                "created": "2025-03-01T08:00:00",
                "updated": "2025-03-01T12:00:00",
                "resolved": "2025-03-01T12:00:00",
                "requesterEmail": "ops@acme.com",
            },
            {
                "ticketId": 102,
                "ticketClientCode": "GLOBEX",
                "ticketClientName": "Globex",
                "priority": "P3",
                "ticketType": "Request",
                "ticketSource": "email",
                "subject": "New laptop",
                "status": "Open",
                "created": "2025-03-02T08:00:00",
                "updated": "2025-03-02T08:30:00",
            },
        ],
    }


@pytest.fixture
def sample_history_response() -> dict[str, Any]:
    """Ticket history response with a comment, a field update and a workflow step."""
    return {
        "content": [
            {
                "id": 1,
                "created": "2025-03-01T08:05:00",
                "actorId": "agent-7",
                "actorName": "Dana Agent",
                "source": "email",
                "comment": {
                    "id": 11,
                    "contentType": "text/html",
                    "content": "<p>Hi,&nbsp;we are <b>investigating</b>.</p>",
                },
                "fieldUpdates": None,
                "ticketId": 101,
            },
            {
                "id": 2,
                "created": "2025-03-01T09:00:00",
                "actorId": "agent-7",
                "actorName": None,
                "source": "workflow",
                "fieldUpdates": [
                    {"field": "status", "id": 5, "oldValue": "Open", "newValue": "In Progress"}
                ],
                "ticketId": 101,
            },
            {
                "id": 3,
                "created": "2025-03-01T12:00:00",
                "actorId": "system",
                "source": "workflow",
                "ticketId": 101,
            },
        ]
    }
