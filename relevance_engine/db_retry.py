"""
Database retry utilities for the batch jobs.

Transient connection drops (SSL resets, pool timeouts) are retried with a
linear backoff; every other error propagates after the session is rolled
back.
"""

import logging
import time
import functools
from typing import TypeVar, Callable

from flask import current_app
from sqlalchemy.exc import OperationalError, DBAPIError

logger = logging.getLogger(__name__)

T = TypeVar('T')

CONNECTION_ERROR_INDICATORS = (
    'ssl connection has been closed',
    'connection reset',
    'connection refused',
    'connection timed out',
    'server closed the connection',
    'lost connection',
    'could not connect',
    'broken pipe',
)


def is_connection_error(exc: Exception) -> bool:
    """Check if exception is a transient connection error worth retrying."""
    error_msg = str(exc).lower()
    return any(indicator in error_msg for indicator in CONNECTION_ERROR_INDICATORS)


def _reset_session(dispose_pool: bool = False) -> None:
    from relevance_engine import db

    try:
        db.session.rollback()
    except Exception as e:
        logger.debug(f"Rollback during reset failed: {e}")
    try:
        db.session.remove()
    except Exception as e:
        logger.debug(f"Session remove during reset failed: {e}")
    if dispose_pool:
        try:
            db.engine.dispose()
        except Exception as e:
            logger.debug(f"Engine dispose during reset failed: {e}")


def with_db_retry(max_attempts: int = None, delay: float = None):
    """
    Decorator for retrying database work on transient connection errors.

    Between attempts the failed transaction is rolled back, the session is
    removed and the connection pool disposed so the retry gets a fresh
    connection. Non-transient errors are re-raised immediately.

    Usage:
        @with_db_retry()
        def refresh_relevance():
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            attempts = max_attempts or current_app.config.get('DB_RETRY_ATTEMPTS', 3)
            base_delay = delay if delay is not None else current_app.config.get('DB_RETRY_DELAY', 1)

            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except (OperationalError, DBAPIError) as e:
                    if not is_connection_error(e) or attempt == attempts:
                        logger.error(
                            f"Database error in {func.__name__} (attempt {attempt}/{attempts}): {e}"
                        )
                        _reset_session()
                        raise

                    logger.warning(
                        f"Transient DB error in {func.__name__} (attempt {attempt}/{attempts}): {e}. "
                        f"Retrying in {base_delay * attempt}s..."
                    )
                    _reset_session(dispose_pool=True)
                    time.sleep(base_delay * attempt)

        return wrapper
    return decorator


def cleanup_db_session():
    """
    Remove the scoped session after a background job.

    Call this in a finally block in every scheduler job so connections are
    returned to the pool.
    """
    from relevance_engine import db
    try:
        db.session.remove()
    except Exception as e:
        logger.debug(f"Session cleanup error (safe to ignore): {e}")
