"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict so
routes can return the same envelope for all failures.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "MENU_FILE_PARSE_ERROR")
        message: Human-readable message
        status_code: HTTP status code
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
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


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


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# SPREADSHEET ERRORS
# ===================

class MenuFileParseError(ValidationError):
    """Uploaded menu spreadsheet could not be read."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="MENU_FILE_PARSE_ERROR",
            message=message,
            details=details
        )


class UnsupportedFileTypeError(ValidationError):
    """File extension is not .csv, .xls or .xlsx."""

    def __init__(self, filename: str):
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message="Please select a valid file (.xls, .xlsx, or .csv)",
            details={"filename": filename, "valid": [".csv", ".xls", ".xlsx"]}
        )


class InvalidColumnMappingError(ValidationError):
    """Manual column selection points outside the header row."""

    def __init__(self, field: str, index: int, column_count: int):
        super().__init__(
            code="INVALID_COLUMN_MAPPING",
            message=f"Column {index} for '{field}' is out of range",
            details={"field": field, "index": index, "column_count": column_count}
        )


# ===================
# MENU UPLOAD ERRORS
# ===================

class CategoryWriteError(DatabaseError):
    """Fetching or creating categories failed; the whole batch is aborted."""

    def __init__(self, operation: str, message: str, restaurant_id: str):
        super().__init__(
            operation=operation,
            message=f"Failed to upsert categories: {message}",
            details={"restaurant_id": restaurant_id, "table": "categories"}
        )
        self.code = "CATEGORY_WRITE_ERROR"


class ProductWriteError(DatabaseError):
    """Bulk product insert failed; the whole batch is aborted."""

    def __init__(self, message: str, restaurant_id: str, row_count: int):
        super().__init__(
            operation="insert",
            message=f"Failed to insert products: {message}",
            details={
                "restaurant_id": restaurant_id,
                "table": "products",
                "row_count": row_count
            }
        )
        self.code = "PRODUCT_WRITE_ERROR"
