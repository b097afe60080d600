"""Retry with exponential backoff for transient store failures."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

from civic_align.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(exc: BaseException) -> bool:
    """Return True for driver errors worth retrying."""
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


def call_with_retry(
    func: Callable[[], T],
    *,
    max_retries: int = 3,
    base_delay: float = 0.05,
    max_delay: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``func``, retrying while it raises :class:`StoreUnavailable`.

    Args:
        func: Zero-argument callable performing one attempt.
        max_retries: Retries after the first attempt (0 = no retries).
        base_delay: Delay before the first retry in seconds; doubles each time.
        max_delay: Upper bound for a single delay.
        sleep: Sleep function, replaceable in tests.

    Raises:
        StoreUnavailable: When every attempt failed.
    """
    delay = base_delay
    for attempt in range(max_retries + 1):
        try:
            return func()
        except StoreUnavailable as exc:
            if attempt >= max_retries:
                logger.error("Store unavailable after %d attempts: %s", attempt + 1, exc)
                raise
            current_delay = min(delay, max_delay)
            logger.warning(
                "Store unavailable (attempt %d/%d), retrying in %.2fs: %s",
                attempt + 1,
                max_retries + 1,
                current_delay,
                exc,
            )
            sleep(current_delay)
            delay *= 2
    raise AssertionError("unreachable")  # pragma: no cover
