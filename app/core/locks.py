import logging
from collections.abc import Iterator
from contextlib import contextmanager

import redis

from app.core.config import LOCK_BLOCKING_TIMEOUT, LOCK_TIMEOUT, get_redis_url
from app.core.exceptions import LockUnavailableError

logger = logging.getLogger(__name__)


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)


@contextmanager
def event_lock(event_id: int) -> Iterator[None]:
    """
    Serialize writers touching the same event.

    The conditional UPDATE on the event row and the unique constraints are
    what keep the data consistent; the lock only keeps concurrent writers
    for one event from stepping on each other's transactions.
    """
    redis_client = get_redis_client()
    lock_key = f"event_lock:{event_id}"
    lock = redis_client.lock(lock_key, timeout=LOCK_TIMEOUT, blocking_timeout=LOCK_BLOCKING_TIMEOUT)

    try:
        acquired = lock.acquire(blocking=True, blocking_timeout=LOCK_BLOCKING_TIMEOUT)
    except redis.exceptions.RedisError as exc:  # type: ignore
        logger.warning("Could not acquire %s: %s", lock_key, exc)
        raise LockUnavailableError("Could not acquire lock, please try again.") from exc
    if not acquired:
        logger.warning("Timed out waiting for %s", lock_key)
        raise LockUnavailableError("Could not acquire lock, please try again.")

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.RedisError as exc:  # type: ignore
            # expired or unreachable; the database transaction already decided the outcome
            logger.warning("Lock %s not released cleanly: %s", lock_key, exc)
