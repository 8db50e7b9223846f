"""
Menu upload schemas for validation and serialization.

Field names on the wire are camelCase (allData, missingFields...),
matching what the admin dashboard sends and reads.
"""

from pydantic import Field
from typing import Optional, Union
from enum import Enum

from models.base import BaseSchema
from parsers.column_synonyms import ColumnMapping


CellValue = Optional[Union[int, float, str]]


class DetectionMethod(str, Enum):
    """Which mechanism produced the column mapping."""
    SYNONYM = "synonym"
    AI = "ai"
    HYBRID = "hybrid"
    MANUAL = "manual"


class ColumnMappingSchema(BaseSchema):
    """Zero-based column index per canonical field (null = unresolved)."""

    name: Optional[int] = Field(None, ge=0, description="Product name column")
    category: Optional[int] = Field(None, ge=0, description="Category column")
    description: Optional[int] = Field(None, ge=0, description="Description column")
    price: Optional[int] = Field(None, ge=0, description="Price column")

    def to_mapping(self) -> ColumnMapping:
        return ColumnMapping(
            name=self.name,
            category=self.category,
            description=self.description,
            price=self.price,
        )


class ParsedRowSchema(BaseSchema):
    """Menu item read from one spreadsheet row."""

    name: str = ""
    category: str = ""
    description: str = ""
    price: float = 0


class DetectionResponse(BaseSchema):
    """Column detection result for an uploaded file."""

    mapping: ColumnMappingSchema
    headers: list[str]
    preview_data: list[ParsedRowSchema] = Field(default_factory=list, alias="previewData")
    missing_fields: list[str] = Field(default_factory=list, alias="missingFields")
    all_data: list[list[CellValue]] = Field(default_factory=list, alias="allData")
    detection_method: DetectionMethod = Field(DetectionMethod.SYNONYM, alias="detectionMethod")
    synonym_matches: dict[str, Optional[str]] = Field(default_factory=dict, alias="synonymMatches")
    ai_matches: dict[str, Optional[str]] = Field(default_factory=dict, alias="aiMatches")
    skipped_columns: list[str] = Field(default_factory=list, alias="skippedColumns")


class ManualMappingRequest(BaseSchema):
    """
    Columns chosen by the user after automatic detection.

    Only the fields present in `mapping` are changed; null clears a field.
    """

    headers: list[str] = Field(..., min_length=1)
    all_data: list[list[CellValue]] = Field(default_factory=list, alias="allData")
    detected: Optional[ColumnMappingSchema] = Field(
        None,
        description="Mapping returned by /detect, used as the starting point"
    )
    mapping: dict[str, Optional[int]] = Field(
        ...,
        description="Field name -> column index overrides",
        examples=[{"description": 2}]
    )


class UploadRequest(BaseSchema):
    """Rows to persist with their final column mapping."""

    mapping: ColumnMappingSchema
    all_data: list[list[CellValue]] = Field(..., min_length=1, alias="allData")


class FailedRowSchema(BaseSchema):
    """One row that was not saved."""

    row: int
    error: str
    data: ParsedRowSchema


class UploadReportResponse(BaseSchema):
    """Upload outcome."""

    success: int
    failed: int
    failed_rows: list[FailedRowSchema] = Field(default_factory=list, alias="failedRows")
    failed_preview: list[FailedRowSchema] = Field(default_factory=list, alias="failedPreview")
    total_rows: int = Field(0, alias="totalRows")
    validation_failed: int = Field(0, alias="validationFailed")
    error: Optional[str] = None


class CategoryResponse(BaseSchema):
    """Category owned by a restaurant."""

    id: str
    name: str
    restaurant_id: Optional[str] = None
