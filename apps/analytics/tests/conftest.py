import pytest
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from apps.billing.models import Payment
from apps.disputes.services import create_dispute, start_investigation, approve_refund, reject_dispute
from apps.verification.models import VerificationLog, Verdict, TrustDecision


# Two scans a few hundred metres apart in Lagos fall in one 2-place cell
LAGOS_MARKET = (6.4541, 3.3947)
LAGOS_MARKET_STALL = (6.4549, 3.3941)
KANO = (12.0022, 8.5920)


@pytest.fixture
def log_scan():
    """Return a factory writing verification log rows directly."""
    def _log_scan(verdict=Verdict.GENUINE, location=None, code=None, days_ago=0):
        latitude, longitude = location if location else (None, None)
        return VerificationLog.objects.create(
            code_value=code.value if code else 'LUM-UNKNOWN00',
            code=code,
            verdict=verdict,
            base_verdict=verdict,
            trust_decision=TrustDecision.DO_NOT_USE,
            latitude=latitude,
            longitude=longitude,
            created_at=timezone.now() - timedelta(days=days_ago),
        )
    return _log_scan


@pytest.fixture
def scans(log_scan):
    """A small verification history across three locations."""
    log_scan(Verdict.GENUINE, LAGOS_MARKET)
    log_scan(Verdict.CODE_ALREADY_USED, LAGOS_MARKET_STALL)
    log_scan(Verdict.SUSPICIOUS_PATTERN, LAGOS_MARKET)
    log_scan(Verdict.INVALID, KANO)
    log_scan(Verdict.INVALID)
    log_scan(Verdict.GENUINE, days_ago=2)


@pytest.fixture
def make_payment(manufacturer):
    counter = {'n': 0}

    def _make_payment(amount):
        counter['n'] += 1
        return Payment.objects.create(
            manufacturer=manufacturer,
            reference=f"PSK-STATS-{counter['n']:03d}",
            amount=Decimal(amount),
        )
    return _make_payment


@pytest.fixture
def disputes(make_payment, manufacturer, back_office_user):
    """One open, one refunded (3000 of 5000) and one rejected dispute."""
    actor = back_office_user.actor_id
    created = []
    for amount in ('1000.00', '5000.00', '250.00'):
        payment = make_payment(amount)
        created.append(create_dispute(
            payment_id=payment.id,
            manufacturer_id=manufacturer.id,
            reason='Billing error',
            description='Charged for codes never issued',
        ))

    _, refunded, rejected = created
    start_investigation(dispute_id=refunded.id, investigator=actor)
    approve_refund(dispute_id=refunded.id, actor=actor, refund_amount=Decimal('3000.00'))
    start_investigation(dispute_id=rejected.id, investigator=actor)
    reject_dispute(dispute_id=rejected.id, actor=actor, reason='Charge was valid')
    return created
