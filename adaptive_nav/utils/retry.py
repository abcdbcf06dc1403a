"""
Exponential backoff between navigation attempts.

The retry loop itself lives in the orchestrator; this module only
computes delays so the curve can be tested on its own.
"""

from __future__ import annotations

from adaptive_nav.models import navigation


def backoff_delay_ms(attempt: int, config: navigation.RetryConfig) -> int:
    """Delay to wait after failed attempt number *attempt* (1-indexed).

    ``min(max_delay, base_delay * factor ** (attempt - 1))``. Attempts
    below 1 are treated as the first attempt.
    """
    exponent = max(attempt, 1) - 1
    try:
        raw = config.base_delay_ms * config.backoff_factor**exponent
    except OverflowError:
        return config.max_delay_ms
    return int(min(config.max_delay_ms, raw))


def backoff_schedule(config: navigation.RetryConfig, attempts: int | None = None) -> list[int]:
    """Delays for attempts ``1..attempts`` (defaults to ``max_retries``)."""
    count = config.max_retries if attempts is None else attempts
    return [backoff_delay_ms(n, config) for n in range(1, count + 1)]
