"""
Domain exceptions for the codes app.

Exception Hierarchy:
    NotFoundError
    ├── ProductNotFoundError
    ├── BatchNotFoundError
    └── RecallNotFoundError
    ConflictError
    ├── CodeGenerationError
    ├── DuplicateBatchNumberError
    ├── RecallAlreadyClosedError
    └── BatchRecalledError
    InputValidationError
    ├── InvalidQuantityError
    ├── InvalidBatchDatesError
    ├── MissingBatchNumberError
    ├── InvalidProductDataError
    ├── MissingRecallReasonError
    └── InvalidQRPayloadError
    StoreUnavailableError
    └── QRArtifactError
"""
from apps.common.exceptions import (
    NotFoundError,
    ConflictError,
    InputValidationError,
    StoreUnavailableError,
)


class ProductNotFoundError(NotFoundError):
    """Product does not exist or belongs to another manufacturer."""
    default_detail = 'Product not found.'
    default_code = 'product_not_found'


class BatchNotFoundError(NotFoundError):
    """Batch does not exist or belongs to another manufacturer."""
    default_detail = 'Batch not found.'
    default_code = 'batch_not_found'


class RecallNotFoundError(NotFoundError):
    default_detail = 'Batch recall not found.'
    default_code = 'recall_not_found'


class CodeGenerationError(ConflictError):
    """Could not find a free code value within the retry bound."""
    default_detail = 'Could not generate a unique code, please retry.'
    default_code = 'code_generation_failed'


class DuplicateBatchNumberError(ConflictError):
    default_detail = 'A batch with this number already exists for the product.'
    default_code = 'duplicate_batch_number'


class RecallAlreadyClosedError(ConflictError):
    default_detail = 'Batch recall is already closed.'
    default_code = 'recall_already_closed'


class BatchRecalledError(ConflictError):
    default_detail = 'Batch has an active recall.'
    default_code = 'batch_recalled'


class InvalidQuantityError(InputValidationError):
    default_detail = 'Invalid code quantity.'
    default_code = 'invalid_quantity'


class InvalidBatchDatesError(InputValidationError):
    default_detail = 'Expiry date must be after production date.'
    default_code = 'invalid_batch_dates'


class MissingBatchNumberError(InputValidationError):
    default_detail = 'A batch number is required.'
    default_code = 'missing_batch_number'


class InvalidProductDataError(InputValidationError):
    default_detail = 'Product name and category are required.'
    default_code = 'invalid_product_data'


class MissingRecallReasonError(InputValidationError):
    default_detail = 'A recall reason is required.'
    default_code = 'missing_recall_reason'


class InvalidQRPayloadError(InputValidationError):
    """Scanned payload is not a code issued by this system."""
    default_detail = 'Invalid QR data.'
    default_code = 'invalid_qr_payload'


class QRArtifactError(StoreUnavailableError):
    """QR artifact could not be written; no code was issued."""
    default_detail = 'QR artifact storage failed, no codes were issued.'
    default_code = 'qr_artifact_failed'
