"""Request-rate throttle computations for batch runs."""

from __future__ import annotations

MIN_INTERVAL_SECONDS = 0.1
SECONDS_PER_MINUTE = 60.0


def throttle_interval(requests_per_minute: int) -> float:
    """Seconds between the starts of consecutive work items.

    Floored at 100ms so a very high RPM never yields a zero interval.
    """
    if requests_per_minute < 1:
        msg = "requests_per_minute must be >= 1"
        raise ValueError(msg)
    return max(MIN_INTERVAL_SECONDS, SECONDS_PER_MINUTE / requests_per_minute)


def remaining_wait(requests_per_minute: int, elapsed_seconds: float) -> float:
    """Seconds to sleep after an item whose calls took ``elapsed_seconds``.

    Slow items shrink the following wait, so long-run throughput stays close
    to the configured budget instead of compounding delay.
    """
    return max(0.0, throttle_interval(requests_per_minute) - max(0.0, elapsed_seconds))
