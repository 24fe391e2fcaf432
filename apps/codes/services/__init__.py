"""
Codes services - Business logic layer.

This package contains all business operations for the codes app:
- Code value generation
- QR artifact binding
- Product, batch and recall management
"""

from .code_generation import (
    CODE_ALPHABET,
    generate_code_value,
    normalize_code_value,
    issue_code,
)

from .qr_binding import (
    QRArtifact,
    artifact_path_for,
    build_qr,
    render_qr_png,
    bind_qr,
    remove_artifacts,
    decode_qr_payload,
    regenerate_qr_artifacts,
)

from .batch_management import (
    register_product,
    create_batch,
    issue_codes_for_batch,
    recall_batch,
    close_batch_recall,
    withdraw_product,
    get_batch_code_summary,
)

from .exceptions import (
    ProductNotFoundError,
    BatchNotFoundError,
    RecallNotFoundError,
    CodeGenerationError,
    DuplicateBatchNumberError,
    RecallAlreadyClosedError,
    BatchRecalledError,
    InvalidQuantityError,
    InvalidBatchDatesError,
    MissingBatchNumberError,
    InvalidProductDataError,
    MissingRecallReasonError,
    InvalidQRPayloadError,
    QRArtifactError,
)

__all__ = [
    # Code generation
    'CODE_ALPHABET',
    'generate_code_value',
    'normalize_code_value',
    'issue_code',
    # QR binding
    'QRArtifact',
    'artifact_path_for',
    'build_qr',
    'render_qr_png',
    'bind_qr',
    'remove_artifacts',
    'decode_qr_payload',
    'regenerate_qr_artifacts',
    # Batch management
    'register_product',
    'create_batch',
    'issue_codes_for_batch',
    'recall_batch',
    'close_batch_recall',
    'withdraw_product',
    'get_batch_code_summary',
    # Exceptions
    'ProductNotFoundError',
    'BatchNotFoundError',
    'RecallNotFoundError',
    'CodeGenerationError',
    'DuplicateBatchNumberError',
    'RecallAlreadyClosedError',
    'BatchRecalledError',
    'InvalidQuantityError',
    'InvalidBatchDatesError',
    'MissingBatchNumberError',
    'InvalidProductDataError',
    'MissingRecallReasonError',
    'InvalidQRPayloadError',
    'QRArtifactError',
]
