"""
Domain exceptions for the disputes app.

Refused transitions are split so callers can tell "does not exist",
"wrong state" and "already finished" apart.

Exception Hierarchy:
    NotFoundError
    ├── DisputeNotFoundError
    └── PaymentNotFoundError
    ConflictError
    ├── DisputeAlreadyExistsError
    ├── InvalidDisputeTransitionError
    └── DisputeAlreadyTerminalError
        └── DisputeAlreadyRefundedError
    InputValidationError
    ├── MissingDisputeFieldError
    ├── MissingActorError
    ├── MissingResolutionNotesError
    ├── MissingRejectionReasonError
    ├── InvalidClaimAmountError
    └── InvalidRefundAmountError
"""
from apps.common.exceptions import (
    NotFoundError,
    ConflictError,
    InputValidationError,
)


class DisputeNotFoundError(NotFoundError):
    default_detail = 'Dispute not found.'
    default_code = 'dispute_not_found'


class PaymentNotFoundError(NotFoundError):
    default_detail = 'Payment not found.'
    default_code = 'payment_not_found'


class DisputeAlreadyExistsError(ConflictError):
    """The payment already has a dispute (database one-to-one constraint)."""
    default_detail = 'A dispute already exists for this payment.'
    default_code = 'dispute_already_exists'


class InvalidDisputeTransitionError(ConflictError):
    """The dispute is not in the state the transition starts from."""
    default_detail = 'Dispute is not in a state that allows this action.'
    default_code = 'invalid_transition'


class DisputeAlreadyTerminalError(ConflictError):
    default_detail = 'Dispute is already closed.'
    default_code = 'dispute_terminal'


class DisputeAlreadyRefundedError(DisputeAlreadyTerminalError):
    default_detail = 'Dispute has already been refunded.'
    default_code = 'already_refunded'


class MissingDisputeFieldError(InputValidationError):
    default_detail = 'Reason and description are required.'
    default_code = 'missing_dispute_field'


class MissingActorError(InputValidationError):
    default_detail = 'Acting user is required.'
    default_code = 'missing_actor'


class MissingResolutionNotesError(InputValidationError):
    default_detail = 'Resolution notes are required.'
    default_code = 'missing_resolution_notes'


class MissingRejectionReasonError(InputValidationError):
    default_detail = 'A rejection reason is required.'
    default_code = 'missing_rejection_reason'


class InvalidClaimAmountError(InputValidationError):
    default_detail = 'Claimed amount must be positive and not exceed the payment amount.'
    default_code = 'invalid_claim_amount'


class InvalidRefundAmountError(InputValidationError):
    default_detail = 'Refund amount must be positive and not exceed the payment amount.'
    default_code = 'invalid_refund_amount'
