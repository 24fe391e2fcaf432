"""
Domain exceptions for the verification app.

Classification itself never raises for unknown or withdrawn codes; those
are verdicts. Only the store can fail a classification.
"""
from apps.common.exceptions import StoreUnavailableError


class VerificationUnavailableError(StoreUnavailableError):
    """Classification could not be recorded; the code was left untouched."""
    default_detail = 'Verification is temporarily unavailable, please try again.'
    default_code = 'verification_unavailable'
