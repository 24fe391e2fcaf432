"""
Disputes services - Business logic layer.

This package contains the dispute status machine and its read operations.
"""

from .dispute_workflow import (
    create_dispute,
    start_investigation,
    resolve_dispute,
    approve_refund,
    reject_dispute,
    get_dispute,
    list_disputes,
)

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

__all__ = [
    # Workflow
    'create_dispute',
    'start_investigation',
    'resolve_dispute',
    'approve_refund',
    'reject_dispute',
    # Queries
    'get_dispute',
    'list_disputes',
    # Exceptions
    'DisputeNotFoundError',
    'PaymentNotFoundError',
    'DisputeAlreadyExistsError',
    'InvalidDisputeTransitionError',
    'DisputeAlreadyTerminalError',
    'DisputeAlreadyRefundedError',
    'MissingDisputeFieldError',
    'MissingActorError',
    'MissingResolutionNotesError',
    'MissingRejectionReasonError',
    'InvalidClaimAmountError',
    'InvalidRefundAmountError',
]
