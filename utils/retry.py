"""
Bounded retry for storage contention.

Only SQLite lock/busy errors are retried. Business failures (BookingError)
propagate on the first attempt.
"""

import logging
import sqlite3
from functools import wraps

from flask import current_app
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from utils.errors import StorageUnavailableError

logger = logging.getLogger(__name__)


def is_storage_contention(exc: BaseException) -> bool:
    """True for the SQLite errors raised when the write lock cannot be taken."""
    if not isinstance(exc, sqlite3.OperationalError):
        return False
    message = str(exc).lower()
    return 'locked' in message or 'busy' in message


def _log_retry(retry_state) -> None:
    logger.warning(
        "Storage busy, retry %d/%d for %s: %s",
        retry_state.attempt_number,
        current_app.config.get('DB_MAX_RETRIES', 3),
        getattr(retry_state.fn, '__name__', 'operation'),
        retry_state.outcome.exception() if retry_state.outcome else 'unknown',
    )


def db_retry(func):
    """
    Retry a write operation while the database is locked.

    Each attempt must open its own transaction. After DB_MAX_RETRIES
    attempts the caller receives StorageUnavailableError.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        max_attempts = current_app.config.get('DB_MAX_RETRIES', 3)
        retryer = Retrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(
                multiplier=current_app.config.get('DB_RETRY_DELAY', 0.2),
                max=2,
            ),
            retry=retry_if_exception(is_storage_contention),
            before_sleep=_log_retry,
        )
        try:
            return retryer(func, *args, **kwargs)
        except RetryError as exc:
            logger.error("%s failed after %d attempts", func.__name__, max_attempts)
            raise StorageUnavailableError(
                'Booking store is busy, please retry'
            ) from exc
    return wrapper
