"""API health check utilities."""

from __future__ import annotations

import requests

from ticket_audit.utils.logger import get_logger

logger = get_logger(__name__)


def check_ticket_api_health(base_url: str, token: str | None, timeout: int = 10) -> bool:
    """Check if the ticketing API is reachable and accepts the token."""
    if not token:
        return False
    try:
        response = requests.get(
            f"{base_url.rstrip('/')}/api/tickets",
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        )
        # 404/405 still prove the host answered and the token was not refused
        return response.status_code not in (401, 403) and response.status_code < 500
    except requests.RequestException as exc:
        logger.warning("ticket_api_health_check_failed", error=str(exc))
        return False
