"""
Dispute workflow service - the dispute status machine.

    OPEN -> UNDER_INVESTIGATION -> RESOLVED | REJECTED | REFUNDED

Every transition is a compare-and-swap on the current status
(``UPDATE ... WHERE id = ? AND status = <expected>``). When the update
touches no row, the current state decides which error is raised. Each
successful transition appends a DisputeTransition row in the same
transaction.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet
from django.utils import timezone

from apps.billing.models import Payment
from apps.common.db import store_operation
from apps.disputes.models import Dispute, DisputeStatus, DisputeTransition, TERMINAL_STATUSES
from .exceptions import (
    DisputeNotFoundError,
    PaymentNotFoundError,
    DisputeAlreadyExistsError,
    InvalidDisputeTransitionError,
    DisputeAlreadyTerminalError,
    DisputeAlreadyRefundedError,
    MissingDisputeFieldError,
    MissingActorError,
    MissingResolutionNotesError,
    MissingRejectionReasonError,
    InvalidClaimAmountError,
    InvalidRefundAmountError,
)

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


def _require_text(value, error_class):
    text = (value or '').strip() if isinstance(value, str) else ''
    if not text:
        raise error_class()
    return text


def _to_money(value, error_class) -> Decimal:
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise error_class()
        amount = amount.quantize(CENTS)
    except (InvalidOperation, ValueError):
        raise error_class()
    return amount


def _as_uuid(value, error_class) -> UUID:
    """Parse an identifier; anything that is not a UUID cannot name a row."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise error_class()


def _raise_refused(dispute_id: UUID, target: str):
    """Explain why a conditional status update touched no row."""
    current = Dispute.objects.filter(id=dispute_id).values_list('status', flat=True).first()

    if current is None:
        raise DisputeNotFoundError()

    logger.warning("Refused dispute %s transition %s -> %s", dispute_id, current, target)

    if current == DisputeStatus.REFUNDED:
        raise DisputeAlreadyRefundedError()
    if current in TERMINAL_STATUSES:
        raise DisputeAlreadyTerminalError(f"Dispute is already {current}.")
    raise InvalidDisputeTransitionError(f"Cannot move dispute from {current} to {target}.")


def _advance(
    dispute_id: UUID,
    *,
    expected: str,
    target: str,
    actor: str,
    notes: str = '',
    **fields
) -> Dispute:
    dispute_id = _as_uuid(dispute_id, DisputeNotFoundError)
    now = timezone.now()

    with store_operation(f'advance dispute to {target}'), transaction.atomic():
        updated = Dispute.objects.filter(id=dispute_id, status=expected).update(
            status=target,
            updated_at=now,
            **fields
        )
        if not updated:
            _raise_refused(dispute_id, target)

        DisputeTransition.objects.create(
            dispute_id=dispute_id,
            from_status=expected,
            to_status=target,
            actor=actor,
            notes=notes,
        )

    logger.info("Dispute %s moved %s -> %s by %s", dispute_id, expected, target, actor)
    return Dispute.objects.get(id=dispute_id)


def create_dispute(
    *,
    payment_id: UUID,
    manufacturer_id: UUID,
    reason: str,
    description: str,
    claimed_amount: Optional[Decimal] = None
) -> Dispute:
    """
    Open a dispute against a payment.

    The payment's reference and amount are copied onto the dispute. A
    second dispute for the same payment is refused by the database's
    one-to-one constraint, not by a prior lookup, so concurrent callers
    cannot both succeed.

    Args:
        payment_id: Payment being disputed
        manufacturer_id: Manufacturer raising the dispute (must own the payment)
        reason: Short reason (required)
        description: Details of the claim (required)
        claimed_amount: Amount claimed back (defaults to the full payment)

    Returns:
        Created Dispute in OPEN state

    Raises:
        MissingDisputeFieldError: If reason or description is blank
        PaymentNotFoundError: If payment is missing or not the manufacturer's
        InvalidClaimAmountError: If claimed amount is not in (0, payment amount]
        DisputeAlreadyExistsError: If the payment already has a dispute
    """
    reason = _require_text(reason, MissingDisputeFieldError)
    description = _require_text(description, MissingDisputeFieldError)

    payment_id = _as_uuid(payment_id, PaymentNotFoundError)
    payment = Payment.objects.filter(id=payment_id, manufacturer_id=manufacturer_id).first()
    if payment is None:
        raise PaymentNotFoundError()

    if claimed_amount is None:
        claimed = payment.amount
    else:
        claimed = _to_money(claimed_amount, InvalidClaimAmountError)
    if claimed <= 0 or claimed > payment.amount:
        raise InvalidClaimAmountError()

    try:
        with store_operation('create dispute'), transaction.atomic():
            dispute = Dispute.objects.create(
                payment=payment,
                manufacturer_id=payment.manufacturer_id,
                reference=payment.reference,
                amount=payment.amount,
                claimed_amount=claimed,
                reason=reason,
                description=description,
            )
            DisputeTransition.objects.create(
                dispute=dispute,
                to_status=DisputeStatus.OPEN,
                actor=str(manufacturer_id),
                notes=reason,
            )
    except IntegrityError:
        logger.warning("Duplicate dispute refused for payment %s", payment.id)
        raise DisputeAlreadyExistsError()

    logger.info("Dispute %s opened for payment %s", dispute.id, payment.reference)
    return dispute


def start_investigation(*, dispute_id: UUID, investigator: str, notes: str = '') -> Dispute:
    """
    Move an OPEN dispute to UNDER_INVESTIGATION.

    Raises:
        MissingActorError: If investigator is blank
        DisputeNotFoundError: If dispute does not exist
        DisputeAlreadyTerminalError: If the dispute is closed
        InvalidDisputeTransitionError: If it is already under investigation
    """
    investigator = _require_text(investigator, MissingActorError)
    notes = notes or ''

    return _advance(
        dispute_id,
        expected=DisputeStatus.OPEN,
        target=DisputeStatus.UNDER_INVESTIGATION,
        actor=investigator,
        notes=notes,
        investigator=investigator,
        investigation_notes=notes,
        investigation_started_at=timezone.now(),
    )


def resolve_dispute(*, dispute_id: UUID, actor: str, resolution_notes: str) -> Dispute:
    """
    Close a dispute under investigation without moving money.

    Raises:
        MissingActorError: If actor is blank
        MissingResolutionNotesError: If notes are blank
        DisputeNotFoundError, DisputeAlreadyTerminalError,
        InvalidDisputeTransitionError: If the transition is refused
    """
    actor = _require_text(actor, MissingActorError)
    resolution_notes = _require_text(resolution_notes, MissingResolutionNotesError)

    return _advance(
        dispute_id,
        expected=DisputeStatus.UNDER_INVESTIGATION,
        target=DisputeStatus.RESOLVED,
        actor=actor,
        notes=resolution_notes,
        resolution_notes=resolution_notes,
        resolved_by=actor,
        resolved_at=timezone.now(),
    )


def approve_refund(
    *,
    dispute_id: UUID,
    actor: str,
    refund_amount: Optional[Decimal] = None,
    notes: str = ''
) -> Dispute:
    """
    Refund a dispute under investigation.

    The refund defaults to the claimed amount and may not exceed the
    payment amount captured on the dispute. Once REFUNDED, a second call
    fails with DisputeAlreadyRefundedError and nothing changes.

    Raises:
        MissingActorError: If actor is blank
        DisputeNotFoundError: If dispute does not exist
        InvalidRefundAmountError: If amount is not in (0, payment amount]
        DisputeAlreadyRefundedError: If already refunded
        DisputeAlreadyTerminalError: If resolved or rejected
        InvalidDisputeTransitionError: If still OPEN
    """
    actor = _require_text(actor, MissingActorError)

    dispute_id = _as_uuid(dispute_id, DisputeNotFoundError)
    dispute = Dispute.objects.filter(id=dispute_id).only('id', 'amount', 'claimed_amount').first()
    if dispute is None:
        raise DisputeNotFoundError()

    if refund_amount is None:
        amount = dispute.claimed_amount
    else:
        amount = _to_money(refund_amount, InvalidRefundAmountError)
    if amount <= 0 or amount > dispute.amount:
        raise InvalidRefundAmountError()

    now = timezone.now()
    return _advance(
        dispute_id,
        expected=DisputeStatus.UNDER_INVESTIGATION,
        target=DisputeStatus.REFUNDED,
        actor=actor,
        notes=notes or '',
        refunded_amount=amount,
        refunded_at=now,
        resolution_notes=notes or '',
        resolved_by=actor,
        resolved_at=now,
    )


def reject_dispute(*, dispute_id: UUID, actor: str, reason: str) -> Dispute:
    """
    Reject a dispute under investigation.

    Raises:
        MissingActorError: If actor is blank
        MissingRejectionReasonError: If reason is blank (nothing is changed)
        DisputeNotFoundError, DisputeAlreadyTerminalError,
        InvalidDisputeTransitionError: If the transition is refused
    """
    actor = _require_text(actor, MissingActorError)
    reason = _require_text(reason, MissingRejectionReasonError)

    return _advance(
        dispute_id,
        expected=DisputeStatus.UNDER_INVESTIGATION,
        target=DisputeStatus.REJECTED,
        actor=actor,
        notes=reason,
        resolution_notes=reason,
        resolved_by=actor,
        resolved_at=timezone.now(),
    )


def get_dispute(dispute_id: UUID, *, manufacturer_id: Optional[UUID] = None) -> Dispute:
    """
    Fetch one dispute, optionally scoped to its manufacturer.

    Raises:
        DisputeNotFoundError: If missing or owned by another manufacturer
    """
    dispute_id = _as_uuid(dispute_id, DisputeNotFoundError)
    queryset = Dispute.objects.select_related('payment', 'manufacturer')
    if manufacturer_id is not None:
        queryset = queryset.filter(manufacturer_id=manufacturer_id)

    dispute = queryset.filter(id=dispute_id).first()
    if dispute is None:
        raise DisputeNotFoundError()
    return dispute


def list_disputes(
    *,
    status: Optional[str] = None,
    manufacturer_id: Optional[UUID] = None
) -> QuerySet:
    """Disputes newest first, filtered by status and/or manufacturer."""
    queryset = Dispute.objects.select_related('payment', 'manufacturer')
    if status:
        queryset = queryset.filter(status=status)
    if manufacturer_id is not None:
        queryset = queryset.filter(manufacturer_id=manufacturer_id)
    return queryset.order_by('-created_at')
