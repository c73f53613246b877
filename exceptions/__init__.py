"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,

    # Import
    TabularFileError,
    OrderExistsError,
    UnsupportedImportTypeError,
    PreviewNotFoundError,

    # Stock receipt
    ReceiptValidationError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",

    # Import
    "TabularFileError",
    "OrderExistsError",
    "UnsupportedImportTypeError",
    "PreviewNotFoundError",

    # Stock receipt
    "ReceiptValidationError",
]
