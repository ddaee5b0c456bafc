"""Failure classification pure functions.

The history fetch and the analysis call surface errors differently (HTTP
status codes, SDK exception types, bare messages), so every failure is first
normalized into a ``FailureSignal`` and then classified by ``classify``.
"""

from __future__ import annotations

import re

from ticket_audit.models.failure import ErrorClassification, FailureSignal

AUTH_STATUS_CODE = 401
RATE_LIMIT_STATUS_CODE = 429

AUTH_MESSAGE_MARKERS: tuple[str, ...] = ("api key", "unauthorized")

RATE_LIMIT_MESSAGE_MARKERS: tuple[str, ...] = (
    "quota",
    "rate limit",
    "too many requests",
    "resource exhausted",
    "credit balance",
)


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def classify(status_code: int | None, message: str) -> ErrorClassification:
    """Map a failure's status code and message to a severity class.

    Rules are checked in order with case-insensitive substring matching:
    auth failures first, then rate limiting, otherwise recoverable.
    """
    text = (message or "").lower()

    if status_code == AUTH_STATUS_CODE or _contains_any(text, AUTH_MESSAGE_MARKERS):
        return ErrorClassification.AUTH_FAILED

    if status_code == RATE_LIMIT_STATUS_CODE or _contains_any(
        text, RATE_LIMIT_MESSAGE_MARKERS
    ):
        return ErrorClassification.RATE_LIMITED

    return ErrorClassification.RECOVERABLE


def _status_code_of(exc: BaseException) -> int | None:
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        return status_code

    # requests.HTTPError carries the status on its response
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    return None


def extract_failure_signal(exc: BaseException) -> FailureSignal:
    """Normalize an exception from either collaborator into a FailureSignal."""
    status_code = _status_code_of(exc)
    if status_code is not None and not 100 <= status_code <= 599:
        status_code = None

    error_type = re.sub(r"[^a-zA-Z0-9]", "", type(exc).__name__).lstrip("0123456789")
    error_type = (error_type[:1].upper() + error_type[1:100]) or "Exception"

    return FailureSignal(
        error_type=error_type,
        status_code=status_code,
        message=str(exc) or error_type,
    )


def classify_exception(exc: BaseException) -> tuple[FailureSignal, ErrorClassification]:
    """Extract the failure signal from an exception and classify it."""
    signal = extract_failure_signal(exc)
    return signal, classify(signal.status_code, signal.message)
