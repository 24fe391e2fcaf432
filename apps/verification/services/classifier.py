"""Verification classifier - turns a redemption attempt into a verdict."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.codes.models import Code
from apps.codes.services import normalize_code_value
from apps.common.db import store_operation
from apps.common.exceptions import StoreUnavailableError
from apps.verification.models import VerificationLog, Verdict
from .exceptions import VerificationUnavailableError
from .risk import (
    RiskAssessment,
    BATCH_EXPIRED,
    evaluate_risk,
    apply_overlay,
    trust_decision,
)

logger = logging.getLogger(__name__)

LOGGED_VALUE_MAX_LENGTH = 64


@dataclass(frozen=True)
class VerificationResult:
    verdict: str
    base_verdict: str
    code_value: str
    risk_score: int
    trust_decision: str
    advisories: list = field(default_factory=list)
    checked_at: Optional[datetime] = None
    log_id: Optional[UUID] = None
    # Product details, present whenever the code exists
    product_name: Optional[str] = None
    manufacturer_name: Optional[str] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None
    used_at: Optional[datetime] = None


def _lookup(value: str) -> Optional[Code]:
    if not value:
        return None
    return (
        Code.objects
        .select_related('batch__product__manufacturer')
        .filter(value=value)
        .first()
    )


def _is_withdrawn(code: Code) -> bool:
    return not code.batch.product.is_active or code.batch.has_active_recall()


def _claim(code: Code, *, timestamp, latitude, longitude) -> bool:
    """Mark ``code`` used if it is still unused; True when this call won."""
    claimed = Code.objects.filter(id=code.id, is_used=False).update(
        is_used=True,
        used_at=timestamp,
        used_latitude=latitude,
        used_longitude=longitude,
    )
    return claimed == 1


def classify_code(
    submitted_code,
    *,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    timestamp: Optional[datetime] = None,
    user: Optional[User] = None,
    ip_address: Optional[str] = None
) -> VerificationResult:
    """
    Classify a redemption attempt and append it to the verification log.

    This operation:
    1. Normalizes the submitted value (trim, upper-case)
    2. INVALID if no code has that value
    3. UNREGISTERED_PRODUCT if the product is withdrawn or the batch recalled
    4. Otherwise marks the code used with a conditional update; the caller
       whose update changed the row gets GENUINE, everyone else
       CODE_ALREADY_USED
    5. Applies the suspicious-pattern overlay (upgrade only)
    6. Appends a VerificationLog row

    Steps 4-6 share one transaction: if the log cannot be written the code
    stays unused.

    Args:
        submitted_code: Raw value typed or scanned by the consumer
        latitude: Optional WGS84 latitude of the attempt
        longitude: Optional WGS84 longitude of the attempt
        timestamp: Time of the attempt (defaults to now)
        user: Authenticated consumer, if any
        ip_address: Client address, if known

    Returns:
        VerificationResult carrying one of the five verdicts

    Raises:
        VerificationUnavailableError: If the store failed; nothing committed
    """
    value = normalize_code_value(submitted_code if isinstance(submitted_code, str) else '')
    timestamp = timestamp or timezone.now()

    try:
        with store_operation('classify code'):
            code = _lookup(value)

            if code is None:
                base_verdict = Verdict.INVALID
            elif _is_withdrawn(code):
                base_verdict = Verdict.UNREGISTERED_PRODUCT
            else:
                base_verdict = None

            with transaction.atomic():
                if base_verdict is None:
                    won = _claim(code, timestamp=timestamp, latitude=latitude, longitude=longitude)
                    base_verdict = Verdict.GENUINE if won else Verdict.CODE_ALREADY_USED

                if code is not None:
                    assessment = evaluate_risk(
                        code.id,
                        latitude=latitude,
                        longitude=longitude,
                        timestamp=timestamp,
                    )
                else:
                    assessment = RiskAssessment()

                verdict = apply_overlay(base_verdict, assessment)

                advisories = list(assessment.reasons)
                expired = code is not None and code.batch.is_expired(timestamp.date())
                if expired:
                    advisories.append(BATCH_EXPIRED)

                decision = trust_decision(verdict, assessment.score, expired=expired)

                log = VerificationLog.objects.create(
                    code_value=value[:LOGGED_VALUE_MAX_LENGTH],
                    code=code,
                    verdict=verdict,
                    base_verdict=base_verdict,
                    risk_score=assessment.score,
                    trust_decision=decision,
                    advisories=advisories,
                    latitude=latitude,
                    longitude=longitude,
                    user=user if user is not None and user.is_authenticated else None,
                    ip_address=ip_address,
                    created_at=timestamp,
                )

            if code is not None:
                code.refresh_from_db(fields=['is_used', 'used_at'])
    except StoreUnavailableError as exc:
        raise VerificationUnavailableError() from exc

    if verdict != base_verdict:
        logger.warning(
            "Code %s upgraded from %s to %s (risk %d: %s)",
            value, base_verdict, verdict, assessment.score, ', '.join(assessment.reasons)
        )
    logger.info("Verification of %s: %s", value or '<empty>', verdict)

    result = VerificationResult(
        verdict=verdict,
        base_verdict=base_verdict,
        code_value=value,
        risk_score=assessment.score,
        trust_decision=decision,
        advisories=advisories,
        checked_at=timestamp,
        log_id=log.id,
    )

    if code is None:
        return result

    product = code.batch.product
    return replace(
        result,
        product_name=product.name,
        manufacturer_name=product.manufacturer.company_name or product.manufacturer.get_display_name(),
        batch_number=code.batch.batch_number,
        expiry_date=code.batch.expiry_date,
        used_at=code.used_at,
    )
