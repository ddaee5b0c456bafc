"""Anthropic LLM client for ticket quality audits."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import anthropic
import structlog

from ticket_audit.core.credentials import mask_api_key, resolve_api_key
from ticket_audit.core.llm_prompts import build_ticket_audit_prompt
from ticket_audit.core.transformers import PayloadError, parse_analysis_payload
from ticket_audit.utils.retry import retry_with_logging

if TYPE_CHECKING:
    from ticket_audit.models.analysis import AnalysisResult
    from ticket_audit.models.ticket import HistoryItem, Ticket

logger = structlog.get_logger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"

AVAILABLE_MODELS: tuple[tuple[str, str], ...] = (
    ("claude-haiku-4-5-20251001", "Claude Haiku 4.5"),
    ("claude-sonnet-4-5-20250929", "Claude Sonnet 4.5"),
)


class AnalysisError(Exception):
    """The LLM answered, but the answer is not a usable analysis."""


class LLMClient:
    """Client for Anthropic LLM API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 1024,
    ) -> None:
        self.api_key = resolve_api_key(None, api_key)
        self.model = model
        self.max_tokens = max_tokens
        self._clients: dict[str, anthropic.Anthropic] = {}

    @staticmethod
    def available_models() -> list[dict[str, str]]:
        """Models selectable for a batch run."""
        return [{"id": model_id, "display_name": name} for model_id, name in AVAILABLE_MODELS]

    def _client_for(self, api_key: str | None) -> anthropic.Anthropic:
        """Return an SDK client for the override key or the configured key."""
        key = resolve_api_key(api_key, self.api_key)
        if not key:
            msg = "API key is missing. Provide a key or set ANTHROPIC_API_KEY."
            raise AnalysisError(msg)
        if key not in self._clients:
            # Retries are handled by retry_with_logging, not the SDK
            self._clients[key] = anthropic.Anthropic(api_key=key, max_retries=0)
        return self._clients[key]

    def validate_api_key(
        self,
        api_key: str | None = None,
        model_id: str | None = None,
    ) -> bool:
        """Send one minimal request to check that the key is accepted.

        Returns False for a missing or rejected key. Other API errors
        (rate limiting, outages) propagate to the caller.
        """
        try:
            client = self._client_for(api_key)
        except AnalysisError:
            logger.warning("llm_api_key_missing")
            return False

        try:
            client.messages.create(
                model=model_id or self.model,
                max_tokens=1,
                messages=[{"role": "user", "content": "Test connection"}],
            )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as exc:
            logger.warning(
                "llm_api_key_rejected",
                api_key=mask_api_key(resolve_api_key(api_key, self.api_key)),
                error=str(exc),
            )
            return False

        return True

    @retry_with_logging(max_attempts=2)
    def analyze_ticket(
        self,
        ticket: Ticket,
        history: list[HistoryItem],
        model_id: str,
        api_key: str | None = None,
    ) -> AnalysisResult:
        """Audit one ticket's handling quality.

        Raises anthropic.APIError subclasses for API failures and
        AnalysisError for empty or malformed answers.
        """
        client = self._client_for(api_key)
        system_prompt, user_prompt = build_ticket_audit_prompt(ticket, history)

        response = client.messages.create(
            model=model_id,
            max_tokens=self.max_tokens,
            temperature=0.0,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )

        text = self._response_text(response)
        try:
            result = parse_analysis_payload(ticket.ticket_id, text)
        except PayloadError as exc:
            logger.warning(
                "failed_to_parse_llm_json",
                ticket_id=ticket.ticket_id,
                text=(text or "")[:200],
                error=str(exc),
            )
            raise AnalysisError(str(exc)) from exc

        logger.debug("llm_ticket_analyzed", ticket_id=ticket.ticket_id, score=result.score)
        return result

    @staticmethod
    def _response_text(response: Any) -> str:
        """Concatenate the text blocks of a Messages API response."""
        blocks = getattr(response, "content", None) or []
        return "".join(
            getattr(block, "text", "") or ""
            for block in blocks
            if getattr(block, "type", "text") == "text"
        )
