"""
Retry wrapper for database-backed service calls.

Transient transport failures (connection dropped, server restarting,
lock wait timeout surfaced as OperationalError) are retried with
exponential backoff. Everything else propagates on the first attempt.

Usage:
    @with_retry
    @transaction.atomic
    def approve_investment(*, investment_id, approved_by):
        ...

The decorator must sit outside ``transaction.atomic`` so each attempt
runs in a fresh transaction.
"""

import functools
import logging
import time

from django.conf import settings
from django.db import InterfaceError, OperationalError

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (OperationalError, InterfaceError)


def is_transient_error(error: Exception) -> bool:
    """Return True if the error is worth another attempt."""
    return isinstance(error, TRANSIENT_ERRORS)


def with_retry(func=None, *, max_attempts=None, base_delay=None):
    """
    Retry a callable on transient database errors.

    Delay before attempt ``n + 1`` is ``base_delay * 2 ** (n - 1)`` seconds,
    so with the defaults the waits are 1s and 2s across three attempts.

    Args:
        func: Callable to wrap (when used without arguments)
        max_attempts: Total attempts, defaults to STORE_RETRY_ATTEMPTS
        base_delay: First backoff in seconds, defaults to STORE_RETRY_BASE_DELAY

    Returns:
        Wrapped callable
    """
    def decorator(inner):
        @functools.wraps(inner)
        def wrapper(*args, **kwargs):
            attempts = max_attempts or getattr(settings, 'STORE_RETRY_ATTEMPTS', 3)
            delay = base_delay if base_delay is not None else getattr(
                settings, 'STORE_RETRY_BASE_DELAY', 1.0
            )

            for attempt in range(1, attempts + 1):
                try:
                    return inner(*args, **kwargs)
                except TRANSIENT_ERRORS as e:
                    if attempt == attempts:
                        logger.error(
                            "%s failed after %d attempts: %s",
                            inner.__name__, attempts, e
                        )
                        raise

                    wait = delay * (2 ** (attempt - 1))
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        inner.__name__, attempt, attempts, e, wait
                    )
                    time.sleep(wait)

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
