"""API credential resolution pure functions."""

from __future__ import annotations

_QUOTE_CHARS = "\"'"


def normalize_api_key(value: str | None) -> str | None:
    """Strip whitespace and one pair of surrounding quotes from a pasted key."""
    if value is None:
        return None
    cleaned = value.strip()
    if cleaned.startswith(tuple(_QUOTE_CHARS)):
        cleaned = cleaned[1:]
    if cleaned.endswith(tuple(_QUOTE_CHARS)):
        cleaned = cleaned[:-1]
    cleaned = cleaned.strip()
    return cleaned or None


def resolve_api_key(override: str | None, fallback: str | None) -> str | None:
    """Resolve the key to use: an explicit override wins over ambient config."""
    return normalize_api_key(override) or normalize_api_key(fallback)


def mask_api_key(value: str | None) -> str:
    """Render a key for logs without exposing it."""
    if not value:
        return "<none>"
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}...{value[-4:]}"
