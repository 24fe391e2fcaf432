"""
Error taxonomy shared by every service layer in the project.

Services raise these (or app-specific subclasses) and DRF's default
exception handler renders them, so views stay thin HTTP handlers.

Exception Hierarchy:
    ServiceError (base, APIException)
    ├── NotFoundError          404  reference does not exist
    ├── ConflictError          409  uniqueness violation or wrong state
    ├── InputValidationError   400  missing/invalid field, nothing mutated
    └── StoreUnavailableError  503  persistence failure, nothing committed

Usage:
    from apps.common.exceptions import ConflictError

    class DuplicateThingError(ConflictError):
        default_detail = 'Thing already exists.'
        default_code = 'duplicate_thing'
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class ServiceError(APIException):
    """Base exception for all domain service errors."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Service error.'
    default_code = 'service_error'


class NotFoundError(ServiceError):
    """Referenced code, batch, payment or dispute does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'not_found'


class ConflictError(ServiceError):
    """Uniqueness violation or invalid state transition."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Request conflicts with the current state.'
    default_code = 'conflict'


class InputValidationError(ServiceError):
    """Mandatory field missing or invalid; rejected before any mutation."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'invalid_input'


class StoreUnavailableError(ServiceError):
    """Backing store failed; the operation was not committed."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Service temporarily unavailable, please try again.'
    default_code = 'store_unavailable'
