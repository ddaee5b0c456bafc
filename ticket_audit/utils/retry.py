"""Retry logic with structured logging using tenacity."""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, ParamSpec, TypeVar

import anthropic
import requests
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ticket_audit.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)

# Transport-level failures only. 401 and 429 responses are never retried.
_TRANSIENT_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    requests.ConnectionError,
    requests.Timeout,
    anthropic.APIConnectionError,
)


def is_transient_error(exc: BaseException) -> bool:
    """Return True for connection/timeout failures and 5xx server errors."""
    if isinstance(exc, _TRANSIENT_EXCEPTIONS):
        return True
    status_code = getattr(exc, "status_code", None)
    return isinstance(status_code, int) and status_code >= 500


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempt with structured context."""
    logger.warning(
        "retrying_operation",
        attempt=retry_state.attempt_number,
        function=getattr(retry_state.fn, "__name__", "unknown"),
        error=str(retry_state.outcome.exception()) if retry_state.outcome else "unknown",
    )


def retry_with_logging(max_attempts: int = 3) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator using tenacity with structured logging.

    Retries on connection errors, timeouts and 5xx responses from either the
    ticketing API or the Anthropic API. Uses exponential backoff starting at
    2s, capped at 10s. The last exception is re-raised unchanged.
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception(is_transient_error),
            before_sleep=_log_retry,
            reraise=True,
        )
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
