"""
Verification services - Business logic layer.

This package contains the redemption classifier and the suspicious
pattern policy it applies.
"""

from .classifier import (
    VerificationResult,
    classify_code,
)

from .risk import (
    RiskAssessment,
    haversine_km,
    evaluate_risk,
    apply_overlay,
    trust_decision,
)

from .exceptions import (
    VerificationUnavailableError,
)

__all__ = [
    # Classification
    'VerificationResult',
    'classify_code',
    # Risk policy
    'RiskAssessment',
    'haversine_km',
    'evaluate_risk',
    'apply_overlay',
    'trust_decision',
    # Exceptions
    'VerificationUnavailableError',
]
