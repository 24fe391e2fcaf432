"""Code generation - unique, human-typeable redemption codes."""

import logging
import secrets

from django.conf import settings
from django.db import transaction, IntegrityError

from apps.codes.models import Batch, Code
from apps.common.db import store_operation
from .exceptions import CodeGenerationError
from .qr_binding import artifact_path_for

logger = logging.getLogger(__name__)

# No I, L, O, 0 or 1: they are easily confused when typed from a label
CODE_ALPHABET = 'ABCDEFGHJKMNPQRSTUVWXYZ23456789'


def generate_code_value() -> str:
    """
    Return a fresh candidate code value such as ``LUM-7KQ2XHP9MA``.

    The value is the configured prefix followed by CODE_RANDOM_LENGTH
    symbols drawn with the ``secrets`` CSPRNG. With 31 symbols and 10
    positions there are ~8e14 values, so a collision is a rare event that
    the store-level unique constraint catches; it is not checked here.
    """
    random_part = ''.join(
        secrets.choice(CODE_ALPHABET)
        for _ in range(settings.CODE_RANDOM_LENGTH)
    )
    return f"{settings.CODE_PREFIX}{random_part}"


def normalize_code_value(raw: str) -> str:
    """Case-fold and trim a submitted code so it matches the stored form."""
    return (raw or '').strip().upper()


def issue_code(batch: Batch) -> Code:
    """
    Persist one new Code under ``batch``.

    Uniqueness is decided by the database: the INSERT runs inside a
    savepoint and a unique-constraint violation triggers regeneration.
    Two concurrent callers can never both insert the same value.

    Args:
        batch: Batch the code belongs to

    Returns:
        The created Code (its QR artifact path is derived from the value;
        the caller writes the artifact inside the same transaction)

    Raises:
        CodeGenerationError: If every attempt collided
        StoreUnavailableError: If the store failed (no code issued)
    """
    max_attempts = settings.CODE_GENERATION_MAX_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        value = generate_code_value()
        try:
            with store_operation('issue code'), transaction.atomic():
                return Code.objects.create(
                    value=value,
                    batch=batch,
                    qr_image_path=artifact_path_for(value),
                )
        except IntegrityError:
            logger.warning(
                "Code value collision on attempt %d/%d for batch %s",
                attempt, max_attempts, batch.id
            )

    raise CodeGenerationError(
        f"No unique code value found after {max_attempts} attempts"
    )
