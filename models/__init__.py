"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.menu_upload import (
    CellValue,
    DetectionMethod,
    ColumnMappingSchema,
    ParsedRowSchema,
    DetectionResponse,
    ManualMappingRequest,
    UploadRequest,
    FailedRowSchema,
    UploadReportResponse,
    CategoryResponse,
)

__all__ = [
    "BaseSchema",
    "CellValue",
    "DetectionMethod",
    "ColumnMappingSchema",
    "ParsedRowSchema",
    "DetectionResponse",
    "ManualMappingRequest",
    "UploadRequest",
    "FailedRowSchema",
    "UploadReportResponse",
    "CategoryResponse",
]
