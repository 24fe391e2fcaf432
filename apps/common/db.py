"""Helpers for turning persistence failures into typed service errors."""
import logging
from contextlib import contextmanager

from django.db import DatabaseError, IntegrityError

from .exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def store_operation(action: str):
    """
    Run a block against the database, failing closed on store errors.

    IntegrityError is re-raised untouched because callers map constraint
    violations to their own Conflict errors. Any other DatabaseError is
    logged with its traceback and replaced by StoreUnavailableError, whose
    message never contains store details.

    Example:
        with store_operation('mark code used'):
            Code.objects.filter(...).update(...)
    """
    try:
        yield
    except IntegrityError:
        raise
    except DatabaseError as exc:
        logger.error("Store failure during %s", action, exc_info=True)
        raise StoreUnavailableError() from exc
