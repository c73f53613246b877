"""
Custom exception classes for the import engine.

Row-level and cross-entity problems are never raised; they are collected
as diagnostics. These exceptions cover bad requests and unusable input at
the edges of the engine.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PREVIEW_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP-style status code for the calling layer
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


# ===================
# IMPORT ERRORS
# ===================

class TabularFileError(ValidationError):
    """Spreadsheet or delimited file could not be decoded."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="TABULAR_FILE_ERROR",
            message=message,
            details=details
        )


class UnsupportedImportTypeError(ValidationError):
    """Import type is neither products nor orders."""

    def __init__(self, import_type: str):
        super().__init__(
            code="UNSUPPORTED_IMPORT_TYPE",
            message=f"Unsupported import type: {import_type}",
            details={"import_type": import_type, "allowed": ["products", "orders"]}
        )


class OrderExistsError(ConflictError):
    """Order number already persisted."""

    def __init__(self, order_number: str):
        super().__init__(
            code="ORDER_EXISTS",
            message="Order already exists",
            details={"order_number": order_number}
        )


class PreviewNotFoundError(NotFoundError):
    """Preview expired or never existed."""

    def __init__(self, preview_id: str):
        super().__init__(
            resource="Preview",
            identifier=preview_id,
            code="PREVIEW_NOT_FOUND"
        )


# ===================
# STOCK RECEIPT ERRORS
# ===================

class ReceiptValidationError(ValidationError):
    """Stock receipt request is missing required data."""

    def __init__(self, message: str, field: str):
        super().__init__(
            code="RECEIPT_VALIDATION_ERROR",
            message=message,
            details={"field": field}
        )
