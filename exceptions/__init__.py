"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Spreadsheet
    MenuFileParseError,
    UnsupportedFileTypeError,
    InvalidColumnMappingError,

    # Menu upload
    CategoryWriteError,
    ProductWriteError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Spreadsheet
    "MenuFileParseError",
    "UnsupportedFileTypeError",
    "InvalidColumnMappingError",

    # Menu upload
    "CategoryWriteError",
    "ProductWriteError",
]
