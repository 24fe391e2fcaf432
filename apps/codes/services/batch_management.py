"""Batch management service - products, batches, code issuance and recalls."""

import logging
from datetime import date
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction, IntegrityError
from django.db.models import Count, Q
from django.utils import timezone

from apps.accounts.models import User
from apps.codes.models import Product, Batch, BatchRecall, Code, RecallStatus
from apps.common.db import store_operation
from .code_generation import issue_code
from .qr_binding import bind_qr, remove_artifacts
from .exceptions import (
    ProductNotFoundError,
    BatchNotFoundError,
    RecallNotFoundError,
    DuplicateBatchNumberError,
    RecallAlreadyClosedError,
    BatchRecalledError,
    InvalidQuantityError,
    InvalidBatchDatesError,
    MissingBatchNumberError,
    InvalidProductDataError,
    MissingRecallReasonError,
)

logger = logging.getLogger(__name__)


def register_product(
    *,
    manufacturer: User,
    name: str,
    category: str,
    description: str = ''
) -> Product:
    """
    Register a new product line for a manufacturer.

    Raises:
        InvalidProductDataError: If name or category is blank
    """
    name = (name or '').strip()
    category = (category or '').strip()
    if not name or not category:
        raise InvalidProductDataError()

    with store_operation('register product'):
        product = Product.objects.create(
            manufacturer=manufacturer,
            name=name,
            category=category,
            description=description or '',
        )

    logger.info("Product %s registered by %s", product.id, manufacturer.id)
    return product


def _validate_quantity(quantity) -> int:
    max_codes = settings.MAX_CODES_PER_BATCH
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError("Quantity must be a whole number")
    if not (1 <= quantity <= max_codes):
        raise InvalidQuantityError(f"Quantity must be between 1 and {max_codes}")
    return quantity


def _issue_with_artifacts(batch: Batch, quantity: int, written: list[str]) -> list[Code]:
    """Issue ``quantity`` codes, binding a QR artifact to each as it is created."""
    codes = []
    for _ in range(quantity):
        code = issue_code(batch)
        artifact = bind_qr(code.value)
        written.append(artifact.path)
        codes.append(code)
    return codes


def _get_owned_product(manufacturer: User, product_id: UUID) -> Product:
    try:
        return Product.objects.get(id=product_id, manufacturer=manufacturer)
    except (Product.DoesNotExist, ValidationError):
        raise ProductNotFoundError()


def _get_owned_batch(manufacturer: User, batch_id: UUID) -> Batch:
    try:
        return Batch.objects.select_related('product').get(
            id=batch_id,
            product__manufacturer=manufacturer
        )
    except (Batch.DoesNotExist, ValidationError):
        raise BatchNotFoundError()


def create_batch(
    *,
    manufacturer: User,
    product_id: UUID,
    batch_number: str,
    production_date: date,
    expiry_date: date,
    quantity: int
) -> Batch:
    """
    Register a batch and issue its codes with their QR artifacts.

    This operation:
    1. Validates quantity, batch number and dates (nothing written yet)
    2. Creates the batch row
    3. Issues each code and writes its QR artifact

    Steps 2-3 run in one transaction. If any code or artifact fails, no
    batch or code rows survive and the artifacts already written are
    removed again.

    Args:
        manufacturer: Owner of the product
        product_id: UUID of an active product owned by ``manufacturer``
        batch_number: Manufacturer's batch number, unique per product
        production_date: Date of manufacture
        expiry_date: Must be after ``production_date``
        quantity: Number of codes to issue (1..MAX_CODES_PER_BATCH)

    Returns:
        Created Batch instance

    Raises:
        InvalidQuantityError: If quantity is out of range
        MissingBatchNumberError: If batch_number is blank
        InvalidBatchDatesError: If expiry is not after production
        ProductNotFoundError: If product is missing, foreign or withdrawn
        DuplicateBatchNumberError: If the batch number is taken
        CodeGenerationError: If a unique code value could not be found
        QRArtifactError: If an artifact write failed
    """
    quantity = _validate_quantity(quantity)

    batch_number = (batch_number or '').strip()
    if not batch_number:
        raise MissingBatchNumberError()

    if expiry_date <= production_date:
        raise InvalidBatchDatesError()

    product = _get_owned_product(manufacturer, product_id)
    if not product.is_active:
        raise ProductNotFoundError("Product has been withdrawn")

    written: list[str] = []
    try:
        with transaction.atomic():
            try:
                with store_operation('create batch'), transaction.atomic():
                    batch = Batch.objects.create(
                        product=product,
                        batch_number=batch_number,
                        production_date=production_date,
                        expiry_date=expiry_date,
                    )
            except IntegrityError:
                raise DuplicateBatchNumberError()

            _issue_with_artifacts(batch, quantity, written)
    except Exception:
        remove_artifacts(written)
        logger.error(
            "Batch %s for product %s rolled back after %d artifacts",
            batch_number, product.id, len(written)
        )
        raise

    logger.info("Batch %s created with %d codes", batch.id, quantity)
    return batch


def issue_codes_for_batch(
    *,
    manufacturer: User,
    batch_id: UUID,
    quantity: int
) -> list[Code]:
    """
    Issue additional codes under an existing batch.

    Same all-or-nothing behaviour as create_batch.

    Raises:
        InvalidQuantityError: If quantity is out of range
        BatchNotFoundError: If batch is missing or foreign
        BatchRecalledError: If the batch has an active recall
        ProductNotFoundError: If the product has been withdrawn
    """
    quantity = _validate_quantity(quantity)
    batch = _get_owned_batch(manufacturer, batch_id)

    if not batch.product.is_active:
        raise ProductNotFoundError("Product has been withdrawn")
    if batch.has_active_recall():
        raise BatchRecalledError()

    written: list[str] = []
    try:
        with transaction.atomic():
            codes = _issue_with_artifacts(batch, quantity, written)
    except Exception:
        remove_artifacts(written)
        logger.error("Issuance for batch %s rolled back", batch.id)
        raise

    logger.info("Issued %d additional codes for batch %s", len(codes), batch.id)
    return codes


@transaction.atomic
def recall_batch(
    *,
    manufacturer: User,
    batch_id: UUID,
    reason: str,
    description: str = ''
) -> BatchRecall:
    """
    Open a recall for a batch.

    While the recall is active, every code of the batch verifies as
    UNREGISTERED_PRODUCT and stays unused.

    Raises:
        MissingRecallReasonError: If reason is blank
        BatchNotFoundError: If batch is missing or foreign
        BatchRecalledError: If the batch already has an active recall
    """
    reason = (reason or '').strip()
    if not reason:
        raise MissingRecallReasonError()

    batch = _get_owned_batch(manufacturer, batch_id)
    if batch.has_active_recall():
        raise BatchRecalledError()

    with store_operation('recall batch'):
        recall = BatchRecall.objects.create(
            batch=batch,
            reason=reason,
            description=description or '',
        )

    logger.warning("Batch %s recalled: %s", batch.id, reason)
    return recall


def close_batch_recall(*, manufacturer: User, recall_id: UUID) -> BatchRecall:
    """
    Close an active recall so the batch verifies normally again.

    Raises:
        RecallNotFoundError: If recall is missing or foreign
        RecallAlreadyClosedError: If the recall was already closed
    """
    owned = BatchRecall.objects.filter(
        id=recall_id,
        batch__product__manufacturer=manufacturer
    )

    with store_operation('close batch recall'):
        updated = owned.filter(status=RecallStatus.ACTIVE).update(
            status=RecallStatus.CLOSED,
            closed_at=timezone.now()
        )

    if not updated:
        if owned.exists():
            raise RecallAlreadyClosedError()
        raise RecallNotFoundError()

    recall = owned.get()
    logger.info("Recall %s closed for batch %s", recall.id, recall.batch_id)
    return recall


def withdraw_product(*, manufacturer: User, product_id: UUID) -> Product:
    """
    Withdraw a product from the market (idempotent).

    Codes stay in place but verify as UNREGISTERED_PRODUCT.

    Raises:
        ProductNotFoundError: If product is missing or foreign
    """
    product = _get_owned_product(manufacturer, product_id)

    if product.is_active:
        with store_operation('withdraw product'):
            Product.objects.filter(id=product.id).update(
                is_active=False,
                updated_at=timezone.now()
            )
        product.refresh_from_db()
        logger.warning("Product %s withdrawn by %s", product.id, manufacturer.id)

    return product


def get_batch_code_summary(batch_id: UUID) -> dict:
    """
    Count the codes of a batch by redemption state.

    Returns:
        Dict with 'total', 'used' and 'unused'

    Raises:
        BatchNotFoundError: If batch does not exist
    """
    try:
        exists = Batch.objects.filter(id=batch_id).exists()
    except ValidationError:
        exists = False
    if not exists:
        raise BatchNotFoundError()

    counts = Code.objects.filter(batch_id=batch_id).aggregate(
        total=Count('id'),
        used=Count('id', filter=Q(is_used=True)),
    )
    total = counts['total'] or 0
    used = counts['used'] or 0

    return {
        'total': total,
        'used': used,
        'unused': total - used,
    }
