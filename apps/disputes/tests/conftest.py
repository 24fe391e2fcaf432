import pytest
from decimal import Decimal

from apps.billing.models import Payment
from apps.disputes.services import create_dispute, start_investigation


@pytest.fixture
def payment(manufacturer):
    return Payment.objects.create(
        manufacturer=manufacturer,
        reference='PSK-REF-0001',
        amount=Decimal('5000.00'),
    )


@pytest.fixture
def other_payment(other_manufacturer):
    return Payment.objects.create(
        manufacturer=other_manufacturer,
        reference='PSK-REF-0002',
        amount=Decimal('1200.00'),
    )


@pytest.fixture
def dispute(payment, manufacturer):
    """An OPEN dispute over the full payment."""
    return create_dispute(
        payment_id=payment.id,
        manufacturer_id=manufacturer.id,
        reason='Duplicate charge',
        description='Charged twice for the same code quota top-up.',
    )


@pytest.fixture
def investigated_dispute(dispute, back_office_user):
    """A dispute already under investigation."""
    return start_investigation(
        dispute_id=dispute.id,
        investigator=back_office_user.actor_id,
    )
