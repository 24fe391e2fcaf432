"""
Suspicious-pattern policy for redemption attempts.

The policy is a tunable heuristic, configured through settings:

- distance rule: an earlier attempt on the same code inside
  SUSPICIOUS_WINDOW_MINUTES was made more than SUSPICIOUS_DISTANCE_KM
  away (great-circle distance) -> +50
- frequency rule: SUSPICIOUS_MAX_ATTEMPTS or more attempts on the same
  code inside the window, the current one included -> +30

Either rule firing makes the attempt suspicious. The score is capped at 100.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from django.conf import settings

from apps.verification.models import VerificationLog, Verdict, TrustDecision

EARTH_RADIUS_KM = 6371.0088

DISTANCE_RULE_SCORE = 50
FREQUENCY_RULE_SCORE = 30
MAX_RISK_SCORE = 100

DISTANT_REDEMPTION = 'DISTANT_REDEMPTION'
HIGH_FREQUENCY = 'HIGH_FREQUENCY'
BATCH_EXPIRED = 'BATCH_EXPIRED'

# Only these base verdicts may be upgraded to SUSPICIOUS_PATTERN
UPGRADABLE_VERDICTS = frozenset({Verdict.GENUINE, Verdict.CODE_ALREADY_USED})


@dataclass(frozen=True)
class RiskAssessment:
    score: int = 0
    reasons: tuple = ()

    @property
    def is_suspicious(self) -> bool:
        return bool(self.reasons)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two WGS84 points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def evaluate_risk(
    code_id: UUID,
    *,
    latitude: Optional[float],
    longitude: Optional[float],
    timestamp: datetime
) -> RiskAssessment:
    """
    Score an attempt on ``code_id`` against earlier attempts in the window.

    Must be called before the current attempt is logged.
    """
    window_start = timestamp - timedelta(minutes=settings.SUSPICIOUS_WINDOW_MINUTES)
    recent = VerificationLog.objects.filter(
        code_id=code_id,
        created_at__gte=window_start,
        created_at__lte=timestamp,
    )

    score = 0
    reasons = []

    if latitude is not None and longitude is not None:
        located = recent.filter(latitude__isnull=False, longitude__isnull=False)
        for prior_lat, prior_lng in located.values_list('latitude', 'longitude'):
            if haversine_km(latitude, longitude, prior_lat, prior_lng) > settings.SUSPICIOUS_DISTANCE_KM:
                score += DISTANCE_RULE_SCORE
                reasons.append(DISTANT_REDEMPTION)
                break

    if recent.count() + 1 >= settings.SUSPICIOUS_MAX_ATTEMPTS:
        score += FREQUENCY_RULE_SCORE
        reasons.append(HIGH_FREQUENCY)

    return RiskAssessment(score=min(score, MAX_RISK_SCORE), reasons=tuple(reasons))


def apply_overlay(base_verdict: str, assessment: RiskAssessment) -> str:
    """Upgrade GENUINE / CODE_ALREADY_USED to SUSPICIOUS_PATTERN; never downgrade."""
    if assessment.is_suspicious and base_verdict in UPGRADABLE_VERDICTS:
        return Verdict.SUSPICIOUS_PATTERN
    return base_verdict


def trust_decision(verdict: str, risk_score: int = 0, *, expired: bool = False) -> str:
    """Consumer advisory for a verdict and risk score."""
    if verdict == Verdict.SUSPICIOUS_PATTERN:
        return TrustDecision.REPORT_SUSPECTED_COUNTERFEIT

    if verdict in (Verdict.CODE_ALREADY_USED, Verdict.INVALID):
        return TrustDecision.DO_NOT_USE

    if verdict == Verdict.UNREGISTERED_PRODUCT:
        if risk_score >= 60:
            return TrustDecision.DO_NOT_USE
        return TrustDecision.VERIFY_WITH_SELLER

    if verdict == Verdict.GENUINE:
        if expired or risk_score >= 60:
            return TrustDecision.DO_NOT_USE
        if risk_score >= 30:
            return TrustDecision.VERIFY_WITH_SELLER
        return TrustDecision.SAFE_TO_USE

    return TrustDecision.VERIFY_WITH_SELLER
