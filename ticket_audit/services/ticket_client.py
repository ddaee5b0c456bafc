"""Ticketing API client for ticket search, history and authentication."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests
import structlog

from ticket_audit.core.transformers import extract_token, parse_history, parse_tickets
from ticket_audit.utils.retry import retry_with_logging

if TYPE_CHECKING:
    from ticket_audit.models.ticket import HistoryItem

logger = structlog.get_logger(__name__)


class TicketApiError(Exception):
    """Non-success response from the ticketing API.

    The response body is kept on ``body`` and is not part of the message.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TicketApiClient:
    """Client for the support ticketing REST API."""

    AUTH_PATH = "/AmeliaRest/api/v1/aiops/token/get"
    AUTH_APP_PATH = "/Amelia"
    REPORTING_PATH = "/api/reporting/export"
    TICKET_PATH = "/api/tickets"

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        proxy_url: str | None = None,
        timeout: int = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.proxy_url = proxy_url or None
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self.token: str | None = None
        if token:
            self.set_token(token)

    def set_token(self, token: str) -> None:
        """Use ``token`` as the Bearer credential for subsequent requests."""
        self.token = token
        self.session.headers["Authorization"] = f"Bearer {token}"

    def _url(self, path: str) -> str:
        """Build the request URL, routing through the proxy when configured.

        The target URL is percent-encoded so its query string reaches the
        ticketing API rather than the proxy.
        """
        target = f"{self.base_url}{path}"
        if not self.proxy_url:
            return target
        return f"{self.proxy_url}{quote(target, safe='')}"

    def _check_response(self, response: requests.Response, action: str) -> None:
        if response.ok:
            return
        msg = f"{action} failed: {response.status_code} {response.reason}".rstrip()
        raise TicketApiError(
            msg,
            status_code=response.status_code,
            body=(response.text or "")[:500],
        )

    def _require_token(self) -> None:
        if not self.token:
            msg = "Not authenticated with the ticketing API"
            raise TicketApiError(msg, status_code=401)

    def authenticate(self, username: str, password: str) -> str:
        """Exchange username/password for an access token and store it."""
        response = self.session.post(
            self._url(self.AUTH_PATH),
            json={
                "ameliaUrl": f"{self.base_url}{self.AUTH_APP_PATH}",
                "username": username,
                "password": password,
            },
            timeout=self.timeout,
        )
        self._check_response(response, "Authentication")

        token = extract_token(response.text)
        self.set_token(token)
        logger.info("ticket_api_authenticated", username=username)
        return token

    @retry_with_logging(max_attempts=3)
    def search_tickets(self, query: str, size: int = 50, page: int = 0) -> dict[str, Any]:
        """Run a search with a caller-written query string.

        Returns dict with: tickets (list of Ticket), total.
        """
        self._require_token()
        path = (
            f"{self.REPORTING_PATH}?index=tasks&showTotal=true"
            f"&page={page}&size={size}&q={quote(query, safe='')}"
        )
        response = self.session.get(self._url(path), timeout=self.timeout)
        self._check_response(response, "Search")

        data = response.json()
        tickets = parse_tickets(data)
        logger.info("ticket_search_completed", query=query, results=len(tickets))
        return {"tickets": tickets, "total": data.get("total", len(tickets))}

    @retry_with_logging(max_attempts=3)
    def get_ticket_history(self, ticket_id: int) -> list[HistoryItem]:
        """Fetch the full history log of a ticket, oldest first."""
        self._require_token()
        response = self.session.get(
            self._url(f"{self.TICKET_PATH}/{ticket_id}/history/all"),
            timeout=self.timeout,
        )
        self._check_response(response, "History fetch")

        history = parse_history(response.json())
        logger.debug("ticket_history_fetched", ticket_id=ticket_id, entries=len(history))
        return history
