"""Data transformation functions for converting API payloads to models."""

from __future__ import annotations

import json
import re
from typing import Any

from bs4 import BeautifulSoup
from pydantic import ValidationError

from ticket_audit.models.analysis import AnalysisResult
from ticket_audit.models.ticket import HistoryItem, Ticket

_WHITESPACE_RE = re.compile(r"\s+")

# Keys checked in order when the token endpoint answers with an object
_TOKEN_KEYS: tuple[str, ...] = (
    "aiOpsAccessToken",
    "token",
    "access_token",
    "accessToken",
    "data",
    "sessionId",
    "id_token",
    "idToken",
)


class PayloadError(ValueError):
    """Raised when an API or LLM payload cannot be turned into a model."""


def strip_html(content: str) -> str:
    """Extract the visible text of an HTML fragment with collapsed whitespace."""
    if not content:
        return ""
    text = BeautifulSoup(content, "html.parser").get_text(" ", strip=True)
    return _WHITESPACE_RE.sub(" ", text).strip()


def describe_history_item(item: HistoryItem) -> str:
    """Render one history entry as a single log line."""
    if item.comment is not None:
        details = f'Comment: "{strip_html(item.comment.content)}"'
    elif item.field_updates:
        changes = ", ".join(
            f"{update.field} changed from {update.old_value} to {update.new_value}"
            for update in item.field_updates
        )
        details = f"Updates: {changes}"
    else:
        details = "System/Workflow action"

    actor = item.actor_name or item.actor_id
    return f"[{item.created}] {actor} ({item.source}): {details}"


def render_history(history: list[HistoryItem]) -> str:
    """Render a ticket history as a newline-separated log."""
    return "\n".join(describe_history_item(item) for item in history)


def parse_tickets(payload: dict[str, Any]) -> list[Ticket]:
    """Parse a ticket search response (``searchResults``) into Tickets."""
    records = payload.get("searchResults") or []
    try:
        return [Ticket.model_validate(record) for record in records]
    except ValidationError as exc:
        msg = f"Malformed ticket in search response: {exc}"
        raise PayloadError(msg) from exc


def parse_history(payload: dict[str, Any] | list[Any]) -> list[HistoryItem]:
    """Parse a history response (``content`` list) into HistoryItems."""
    records = payload if isinstance(payload, list) else payload.get("content") or []
    try:
        return [HistoryItem.model_validate(record) for record in records]
    except ValidationError as exc:
        msg = f"Malformed history entry: {exc}"
        raise PayloadError(msg) from exc


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code block from an LLM response."""
    cleaned_text = text.strip()
    if cleaned_text.startswith("```"):
        lines = cleaned_text.split("\n")
        # Remove first and last lines (```json and ```)
        cleaned_text = "\n".join(lines[1:-1]) if len(lines) > 2 else cleaned_text
    return cleaned_text.strip()


def parse_analysis_payload(ticket_id: int, text: str | None) -> AnalysisResult:
    """Turn the LLM's JSON answer into an AnalysisResult.

    Raises PayloadError for empty, non-JSON or schema-violating answers.
    """
    if not text or not text.strip():
        msg = "Empty response from AI"
        raise PayloadError(msg)

    try:
        parsed = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as exc:
        msg = f"Failed to parse AI response as JSON: {exc.msg}"
        raise PayloadError(msg) from exc

    if not isinstance(parsed, dict):
        msg = "AI response is not a JSON object"
        raise PayloadError(msg)

    try:
        return AnalysisResult(
            ticket_id=ticket_id,
            score=parsed["score"],
            summary=parsed["summary"],
            strengths=parsed.get("strengths") or [],
            weaknesses=parsed.get("weaknesses") or [],
            rca_detected=parsed.get("rcaDetected", parsed.get("rca_detected")) or False,
        )
    except KeyError as exc:
        msg = f"AI response missing required field {exc}"
        raise PayloadError(msg) from exc
    except ValidationError as exc:
        msg = f"AI response failed validation: {exc.error_count()} error(s)"
        raise PayloadError(msg) from exc


def extract_token(body: str) -> str:
    """Extract an access token from the token endpoint's response body.

    The endpoint answers with a bare token, a JSON string, or a JSON object
    whose token key varies between deployments.
    """
    try:
        parsed: Any = json.loads(body)
    except json.JSONDecodeError:
        return body.strip()

    if isinstance(parsed, str):
        return parsed

    if not isinstance(parsed, dict):
        return str(parsed)

    for key in _TOKEN_KEYS:
        value = parsed.get(key)
        if value and isinstance(value, str):
            return value

    for key, value in parsed.items():
        if "token" in key.lower() and isinstance(value, str):
            return value

    for value in parsed.values():
        if isinstance(value, str) and len(value) > 15:
            return value

    values = list(parsed.values())
    if len(values) == 1 and isinstance(values[0], str):
        return values[0]

    msg = f"Could not find token in response keys: {sorted(parsed)}"
    raise PayloadError(msg)
