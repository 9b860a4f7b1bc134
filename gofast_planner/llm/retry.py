# gofast_planner/llm/retry.py
"""Transient-failure retry policy for generative backend calls."""

import logging

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# One original attempt plus exactly one retry
MAX_ATTEMPTS = 2

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


def is_transient(exception: BaseException) -> bool:
    """
    Returns True if the exception is a transient transport failure.

    Retryable conditions:
    - ConnectionError / httpx transport errors (server unreachable, reset)
    - Provider errors carrying status in (408, 429, 500, 502, 503, 504)
      BUT NOT status 500 with "requires more system memory" (model too large)

    Content problems are never transient.
    """
    if isinstance(exception, (ConnectionError, httpx.TransportError)):
        return True

    status = getattr(exception, "status_code", None)
    if status not in RETRYABLE_STATUSES:
        return False

    if status == 500 and "requires more system memory" in str(exception).lower():
        return False

    return True


def transient_retry(min_wait: float = 2.0, max_wait: float = 10.0):
    """
    Build a tenacity decorator allowing one bounded retry on transient errors.

    The last exception is re-raised unchanged so callers can classify it.
    """
    return retry(
        stop=stop_after_attempt(MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception(is_transient),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
