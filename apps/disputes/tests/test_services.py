"""
Service layer tests for the disputes app.

Covers:
- Dispute creation, snapshots and the one-dispute-per-payment rule
- Every transition and the refused ones
- Validation before mutation
- Audit trail
- Concurrent creation and refund
"""

import threading
from decimal import Decimal
from uuid import uuid4

import pytest
from django.core.exceptions import ValidationError
from django.db import connection

from apps.billing.models import Payment
from apps.disputes.models import Dispute, DisputeStatus, DisputeTransition
from apps.disputes.services import (
    create_dispute,
    start_investigation,
    resolve_dispute,
    approve_refund,
    reject_dispute,
    get_dispute,
    list_disputes,
)
from apps.disputes.services.exceptions import (
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
from apps.common.exceptions import ConflictError, InputValidationError


def _snapshot(dispute_id):
    return Dispute.objects.filter(id=dispute_id).values().get()


# ============================================================================
# CREATION TESTS
# ============================================================================

@pytest.mark.django_db
class TestCreateDispute:

    def test_create_snapshots_payment(self, dispute, payment):
        assert dispute.status == DisputeStatus.OPEN
        assert dispute.reference == 'PSK-REF-0001'
        assert dispute.amount == Decimal('5000.00')
        assert dispute.claimed_amount == Decimal('5000.00')
        assert dispute.resolved_at is None

        Payment.objects.filter(id=payment.id).update(amount=Decimal('1.00'), reference='CHANGED')
        dispute.refresh_from_db()
        assert dispute.amount == Decimal('5000.00')
        assert dispute.reference == 'PSK-REF-0001'

    def test_creation_is_audited(self, dispute, manufacturer):
        transition = dispute.transitions.get()

        assert transition.from_status == ''
        assert transition.to_status == DisputeStatus.OPEN
        assert transition.actor == str(manufacturer.id)

    def test_second_dispute_for_payment_conflicts(self, dispute, payment, manufacturer):
        with pytest.raises(DisputeAlreadyExistsError) as exc_info:
            create_dispute(
                payment_id=payment.id,
                manufacturer_id=manufacturer.id,
                reason='Something else entirely',
                description='Different attributes',
                claimed_amount=Decimal('10.00'),
            )

        assert isinstance(exc_info.value, ConflictError)
        assert Dispute.objects.count() == 1

    def test_partial_claim(self, payment, manufacturer):
        dispute = create_dispute(
            payment_id=payment.id,
            manufacturer_id=manufacturer.id,
            reason='Overcharge',
            description='Quota price changed',
            claimed_amount=Decimal('1500'),
        )

        assert dispute.claimed_amount == Decimal('1500.00')

    @pytest.mark.parametrize('claimed', [Decimal('0'), Decimal('-5'), Decimal('5000.01'), Decimal('NaN'), 'Infinity'])
    def test_claim_out_of_range(self, payment, manufacturer, claimed):
        with pytest.raises(InvalidClaimAmountError):
            create_dispute(
                payment_id=payment.id,
                manufacturer_id=manufacturer.id,
                reason='x',
                description='y',
                claimed_amount=claimed,
            )

    @pytest.mark.parametrize('reason,description', [('', 'details'), ('reason', '  '), (None, 'd')])
    def test_missing_fields(self, payment, manufacturer, reason, description):
        with pytest.raises(MissingDisputeFieldError):
            create_dispute(
                payment_id=payment.id,
                manufacturer_id=manufacturer.id,
                reason=reason,
                description=description,
            )

        assert Dispute.objects.count() == 0

    def test_unknown_payment(self, manufacturer):
        with pytest.raises(PaymentNotFoundError):
            create_dispute(payment_id=uuid4(), manufacturer_id=manufacturer.id, reason='r', description='d')

    def test_malformed_payment_id(self, manufacturer):
        with pytest.raises(PaymentNotFoundError):
            create_dispute(payment_id='abc', manufacturer_id=manufacturer.id, reason='r', description='d')

    def test_foreign_payment(self, other_payment, manufacturer):
        with pytest.raises(PaymentNotFoundError):
            create_dispute(payment_id=other_payment.id, manufacturer_id=manufacturer.id, reason='r', description='d')

    def test_disputes_cannot_be_deleted(self, dispute):
        with pytest.raises(ValidationError):
            dispute.delete()


# ============================================================================
# TRANSITION TESTS
# ============================================================================

@pytest.mark.django_db
class TestTransitions:

    def test_start_investigation(self, dispute, back_office_user):
        result = start_investigation(
            dispute_id=dispute.id,
            investigator=back_office_user.actor_id,
            notes='Checking gateway logs',
        )

        assert result.status == DisputeStatus.UNDER_INVESTIGATION
        assert result.investigator == back_office_user.actor_id
        assert result.investigation_notes == 'Checking gateway logs'
        assert result.investigation_started_at is not None
        assert result.resolved_at is None

    def test_investigating_twice_is_invalid(self, investigated_dispute, back_office_user):
        with pytest.raises(InvalidDisputeTransitionError):
            start_investigation(dispute_id=investigated_dispute.id, investigator=back_office_user.actor_id)

    def test_resolve(self, investigated_dispute, back_office_user):
        result = resolve_dispute(
            dispute_id=investigated_dispute.id,
            actor=back_office_user.actor_id,
            resolution_notes='Charge was valid, explained to manufacturer',
        )

        assert result.status == DisputeStatus.RESOLVED
        assert result.resolved_by == back_office_user.actor_id
        assert result.resolved_at is not None
        assert result.refunded_amount is None

    def test_resolve_requires_notes(self, investigated_dispute, back_office_user):
        before = _snapshot(investigated_dispute.id)

        with pytest.raises(MissingResolutionNotesError):
            resolve_dispute(dispute_id=investigated_dispute.id, actor=back_office_user.actor_id, resolution_notes='')

        assert _snapshot(investigated_dispute.id) == before

    def test_refund_defaults_to_disputed_amount(self, investigated_dispute, back_office_user):
        result = approve_refund(dispute_id=investigated_dispute.id, actor=back_office_user.actor_id)

        assert result.status == DisputeStatus.REFUNDED
        assert result.refunded_amount == Decimal('5000.00')
        assert result.refunded_at is not None
        assert result.resolved_by == back_office_user.actor_id

    def test_refund_explicit_amount(self, investigated_dispute, back_office_user):
        result = approve_refund(
            dispute_id=investigated_dispute.id,
            actor=back_office_user.actor_id,
            refund_amount=Decimal('2500.50'),
        )

        assert result.refunded_amount == Decimal('2500.50')

    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-1'), Decimal('5000.01'), 'abc', Decimal('NaN'), Decimal('-Infinity')])
    def test_refund_amount_out_of_range(self, investigated_dispute, back_office_user, amount):
        before = _snapshot(investigated_dispute.id)

        with pytest.raises(InvalidRefundAmountError):
            approve_refund(
                dispute_id=investigated_dispute.id,
                actor=back_office_user.actor_id,
                refund_amount=amount,
            )

        assert _snapshot(investigated_dispute.id) == before

    def test_double_refund_conflicts_and_keeps_amount(self, investigated_dispute, back_office_user):
        approve_refund(
            dispute_id=investigated_dispute.id,
            actor=back_office_user.actor_id,
            refund_amount=Decimal('3000.00'),
        )

        with pytest.raises(DisputeAlreadyRefundedError) as exc_info:
            approve_refund(
                dispute_id=investigated_dispute.id,
                actor='someone-else',
                refund_amount=Decimal('4000.00'),
            )

        assert isinstance(exc_info.value, ConflictError)
        dispute = Dispute.objects.get(id=investigated_dispute.id)
        assert dispute.refunded_amount == Decimal('3000.00')
        assert dispute.resolved_by == back_office_user.actor_id

    def test_reject(self, investigated_dispute, back_office_user):
        result = reject_dispute(
            dispute_id=investigated_dispute.id,
            actor=back_office_user.actor_id,
            reason='No evidence of duplicate charge',
        )

        assert result.status == DisputeStatus.REJECTED
        assert result.resolution_notes == 'No evidence of duplicate charge'
        assert result.resolved_at is not None

    @pytest.mark.parametrize('reason', ['', '   ', None])
    def test_reject_requires_reason(self, investigated_dispute, back_office_user, reason):
        before = _snapshot(investigated_dispute.id)

        with pytest.raises(MissingRejectionReasonError) as exc_info:
            reject_dispute(dispute_id=investigated_dispute.id, actor=back_office_user.actor_id, reason=reason)

        assert isinstance(exc_info.value, InputValidationError)
        assert _snapshot(investigated_dispute.id) == before
        assert investigated_dispute.transitions.count() == 2

    def test_actor_required(self, dispute):
        with pytest.raises(MissingActorError):
            start_investigation(dispute_id=dispute.id, investigator='')

    def test_full_refund_scenario(self, manufacturer, back_office_user):
        payment = Payment.objects.create(
            manufacturer=manufacturer,
            reference='PSK-SCENARIO',
            amount=Decimal('5000'),
        )
        dispute = create_dispute(
            payment_id=payment.id,
            manufacturer_id=manufacturer.id,
            reason='Service not delivered',
            description='Codes were never issued',
        )
        start_investigation(dispute_id=dispute.id, investigator=back_office_user.actor_id)

        result = approve_refund(dispute_id=dispute.id, actor=back_office_user.actor_id)

        assert result.status == DisputeStatus.REFUNDED
        assert result.refunded_amount == Decimal('5000')
        assert [t.to_status for t in result.transitions.all()] == [
            DisputeStatus.OPEN,
            DisputeStatus.UNDER_INVESTIGATION,
            DisputeStatus.REFUNDED,
        ]


@pytest.mark.django_db
class TestRefusedTransitions:
    """Refusals distinguish not found, wrong state and terminal state."""

    def test_unknown_dispute(self, back_office_user):
        with pytest.raises(DisputeNotFoundError):
            start_investigation(dispute_id=uuid4(), investigator=back_office_user.actor_id)

        with pytest.raises(DisputeNotFoundError):
            approve_refund(dispute_id=uuid4(), actor=back_office_user.actor_id)

    @pytest.mark.parametrize('bad_id', ['not-a-uuid', '0' * 36, '', None])
    def test_malformed_dispute_id(self, dispute, back_office_user, bad_id):
        actor = back_office_user.actor_id

        with pytest.raises(DisputeNotFoundError):
            start_investigation(dispute_id=bad_id, investigator=actor)
        with pytest.raises(DisputeNotFoundError):
            approve_refund(dispute_id=bad_id, actor=actor)
        with pytest.raises(DisputeNotFoundError):
            get_dispute(bad_id)

        dispute.refresh_from_db()
        assert dispute.status == DisputeStatus.OPEN

    @pytest.mark.parametrize('operation', ['resolve', 'refund', 'reject'])
    def test_open_dispute_cannot_skip_investigation(self, dispute, back_office_user, operation):
        actor = back_office_user.actor_id

        with pytest.raises(InvalidDisputeTransitionError):
            if operation == 'resolve':
                resolve_dispute(dispute_id=dispute.id, actor=actor, resolution_notes='done')
            elif operation == 'refund':
                approve_refund(dispute_id=dispute.id, actor=actor)
            else:
                reject_dispute(dispute_id=dispute.id, actor=actor, reason='no')

        dispute.refresh_from_db()
        assert dispute.status == DisputeStatus.OPEN

    @pytest.mark.parametrize('close', ['resolve', 'reject'])
    def test_terminal_states_refuse_everything(self, investigated_dispute, back_office_user, close):
        actor = back_office_user.actor_id
        dispute_id = investigated_dispute.id
        if close == 'resolve':
            resolve_dispute(dispute_id=dispute_id, actor=actor, resolution_notes='done')
        else:
            reject_dispute(dispute_id=dispute_id, actor=actor, reason='no')
        before = _snapshot(dispute_id)

        with pytest.raises(DisputeAlreadyTerminalError):
            start_investigation(dispute_id=dispute_id, investigator=actor)
        with pytest.raises(DisputeAlreadyTerminalError):
            resolve_dispute(dispute_id=dispute_id, actor=actor, resolution_notes='again')
        with pytest.raises(DisputeAlreadyTerminalError):
            reject_dispute(dispute_id=dispute_id, actor=actor, reason='again')
        with pytest.raises(DisputeAlreadyTerminalError) as exc_info:
            approve_refund(dispute_id=dispute_id, actor=actor)

        assert not isinstance(exc_info.value, DisputeAlreadyRefundedError)
        assert _snapshot(dispute_id) == before
        assert DisputeTransition.objects.filter(dispute_id=dispute_id).count() == 3


@pytest.mark.django_db
class TestQueries:

    def test_get_dispute_scoped(self, dispute, manufacturer, other_manufacturer):
        assert get_dispute(dispute.id, manufacturer_id=manufacturer.id) == dispute

        with pytest.raises(DisputeNotFoundError):
            get_dispute(dispute.id, manufacturer_id=other_manufacturer.id)

    def test_list_filters(self, dispute, other_payment, other_manufacturer, back_office_user):
        other = create_dispute(
            payment_id=other_payment.id,
            manufacturer_id=other_manufacturer.id,
            reason='r',
            description='d',
        )
        start_investigation(dispute_id=other.id, investigator=back_office_user.actor_id)

        assert set(list_disputes()) == {dispute, other}
        assert list(list_disputes(status=DisputeStatus.OPEN)) == [dispute]
        assert list(list_disputes(manufacturer_id=other_manufacturer.id)) == [other]


# ============================================================================
# CONCURRENCY TESTS
# ============================================================================

def _run_concurrently(target, count):
    barrier = threading.Barrier(count)
    outcomes = []

    def run():
        try:
            barrier.wait()
            outcomes.append(target())
        except Exception as exc:
            outcomes.append(exc)
        finally:
            connection.close()

    threads = [threading.Thread(target=run) for _ in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return outcomes


@pytest.mark.django_db(transaction=True)
class TestConcurrentDisputes:

    def test_concurrent_creation_yields_one_dispute(self, payment, manufacturer):
        outcomes = _run_concurrently(
            lambda: create_dispute(
                payment_id=payment.id,
                manufacturer_id=manufacturer.id,
                reason='Duplicate charge',
                description='Charged twice',
            ),
            5,
        )

        created = [o for o in outcomes if isinstance(o, Dispute)]
        refused = [o for o in outcomes if isinstance(o, DisputeAlreadyExistsError)]
        assert len(created) == 1
        assert len(refused) == 4
        assert Dispute.objects.filter(payment=payment).count() == 1

    def test_concurrent_refunds_pay_once(self, investigated_dispute, back_office_user):
        outcomes = _run_concurrently(
            lambda: approve_refund(dispute_id=investigated_dispute.id, actor=back_office_user.actor_id),
            5,
        )

        refunded = [o for o in outcomes if isinstance(o, Dispute)]
        refused = [o for o in outcomes if isinstance(o, DisputeAlreadyRefundedError)]
        assert len(refunded) == 1
        assert len(refused) == 4
        assert DisputeTransition.objects.filter(
            dispute_id=investigated_dispute.id,
            to_status=DisputeStatus.REFUNDED
        ).count() == 1
