"""Caller-side retry policy for lost optimistic-concurrency races."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from reftracker.core.errors import RetryableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retries(func: Callable[[], T], max_attempts: int = 5) -> T:
    """Call ``func`` again while it loses races with other writers.

    Each attempt reruns the whole operation, re-probing the tracker from
    scratch. Only AlreadyExists and Conflict are retried; any other error
    propagates immediately.

    Raises:
        ValueError: If max_attempts is not positive
        RetryableError: The last error once attempts are exhausted
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts):
        try:
            return func()
        except RetryableError as exc:
            logger.info("Attempt %d/%d lost a race (%s); retrying", attempt, max_attempts, exc)

    try:
        return func()
    except RetryableError as exc:
        logger.warning("Giving up after %d attempts: %s", max_attempts, exc)
        raise
