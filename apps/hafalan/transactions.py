"""
Transaction boundary for engine operations.

Each mutating operation runs as one ``transaction.atomic()`` unit: read the
current row, validate, write, append history. Conflicting writers are
detected by the database (unique constraints on open records, active
partials and recheck rounds; lock/serialization failures) and come back as
``IntegrityError`` or ``OperationalError``.
"""
import functools
import logging

from django.db import IntegrityError, OperationalError, transaction

from . import conf
from .exceptions import ConcurrentModification

logger = logging.getLogger(__name__)


def atomic_operation(retry_on_conflict=False):
    """
    Run the wrapped function inside ``transaction.atomic()``.

    With ``retry_on_conflict`` (only for idempotent operations) a store
    conflict is retried ``HAFALAN_CONFLICT_RETRIES`` times before it turns
    into ``ConcurrentModification``.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            retries = conf.get("HAFALAN_CONFLICT_RETRIES") if retry_on_conflict else 0
            attempt = 0
            while True:
                try:
                    with transaction.atomic():
                        return func(*args, **kwargs)
                except (IntegrityError, OperationalError) as e:
                    if attempt >= retries:
                        logger.warning("%s gave up after %d attempt(s): %s", func.__name__, attempt + 1, e)
                        raise ConcurrentModification() from e
                    attempt += 1
                    logger.warning("%s hit a write conflict, retrying (%d/%d): %s",
                                   func.__name__, attempt, retries, e)
        return wrapper
    return decorator
