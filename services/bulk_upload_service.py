"""
Bulk menu upload workflow.

file -> spreadsheet parser -> column detection -> (manual mapping)
     -> row parsing/validation -> description enrichment -> menu upload

Row numbers in reports are 1-based positions among the data rows
(the header row is not counted).
"""

from dataclasses import dataclass, field, replace
from typing import Optional
import structlog

from supabase import Client

from exceptions import DatabaseError, ValidationError
from parsers.column_synonyms import ColumnMapping
from parsers.row_parser import ParsedRow, RawCell, parse_row, validate_row
from parsers.spreadsheet_parser import parse_spreadsheet
from services.column_detection_service import (
    ColumnDetectionService,
    DetectionResult,
    get_column_detection_service,
)
from services.description_service import DescriptionGenerator, get_description_generator
from services.menu_upload_service import FailedRow, MenuUploadService

logger = structlog.get_logger(__name__)

# Failure details shown inline; the full list stays in failed_rows
FAILURE_PREVIEW_LIMIT = 10


@dataclass
class UploadReport:
    """What the caller shows after an upload."""
    success: int = 0
    failed: int = 0
    failed_rows: list[FailedRow] = field(default_factory=list)
    total_rows: int = 0
    validation_failed: int = 0
    error: Optional[str] = None

    @property
    def failure_preview(self) -> list[FailedRow]:
        return self.failed_rows[:FAILURE_PREVIEW_LIMIT]

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "success": self.success,
            "failed": self.failed,
            "failedRows": [row.to_dict() for row in self.failed_rows],
            "failedPreview": [row.to_dict() for row in self.failure_preview],
            "totalRows": self.total_rows,
            "validationFailed": self.validation_failed,
            "error": self.error,
        }


class BulkUploadService:
    """Run a menu spreadsheet from upload to persisted products."""

    def __init__(
        self,
        detection_service: Optional[ColumnDetectionService] = None,
        description_generator: Optional[DescriptionGenerator] = None,
        client: Optional[Client] = None,
    ):
        self.detection_service = detection_service or get_column_detection_service()
        self.description_generator = description_generator or get_description_generator()
        self.client = client

    def detect(
        self,
        content: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> DetectionResult:
        """
        Read an uploaded file and detect its column mapping.

        Raises:
            UnsupportedFileTypeError: Unknown file format
            MenuFileParseError: Unreadable file
        """
        data = parse_spreadsheet(content, filename, content_type)
        return self.detection_service.detect(data)

    def upload(
        self,
        restaurant_id: str,
        all_data: list[list[RawCell]],
        mapping: ColumnMapping,
    ) -> UploadReport:
        """
        Validate every row and persist the valid ones.

        A fatal database error reports every submitted row as failed with
        the error message instead of raising.

        Args:
            restaurant_id: Owner of the categories and products
            all_data: Raw data rows as returned by detection
            mapping: Final column mapping (detected or manual)

        Returns:
            UploadReport combining validation and insert failures

        Raises:
            ValidationError: If no row is valid
        """
        logger.info(
            "bulk_upload_started",
            restaurant_id=restaurant_id,
            rows=len(all_data),
            mapping=mapping.to_dict()
        )

        valid_rows: list[ParsedRow] = []
        row_numbers: list[int] = []
        validation_failures: list[FailedRow] = []

        for row_number, raw in enumerate(all_data, start=1):
            parsed = parse_row(raw, mapping)
            validation = validate_row(parsed)

            if validation.is_valid:
                valid_rows.append(parsed)
                row_numbers.append(row_number)
            else:
                validation_failures.append(FailedRow(
                    row=row_number,
                    error=", ".join(validation.errors),
                    data=parsed
                ))

        logger.info(
            "bulk_upload_validated",
            restaurant_id=restaurant_id,
            valid=len(valid_rows),
            invalid=len(validation_failures)
        )

        valid_rows = self._fill_missing_descriptions(valid_rows)

        kept = [
            (row, number)
            for row, number in zip(valid_rows, row_numbers)
            if row.name.strip() and row.price > 0
        ]

        if not kept:
            raise ValidationError(
                "No valid rows found. Each row must have a product name and price.",
                code="NO_VALID_ROWS",
                details={
                    "total_rows": len(all_data),
                    "errors": [f.to_dict() for f in validation_failures[:FAILURE_PREVIEW_LIMIT]]
                }
            )

        rows = [row for row, _ in kept]
        numbers = [number for _, number in kept]

        try:
            uploader = MenuUploadService(restaurant_id, client=self.client)
            result = uploader.upload_menu(rows, row_numbers=numbers)
        except DatabaseError as e:
            logger.error(
                "bulk_upload_failed",
                restaurant_id=restaurant_id,
                error=e.message,
                code=e.code
            )
            failed_rows = [
                FailedRow(row=number, error=e.message, data=parse_row(raw, mapping))
                for number, raw in enumerate(all_data, start=1)
            ]
            return UploadReport(
                success=0,
                failed=len(failed_rows),
                failed_rows=failed_rows,
                total_rows=len(all_data),
                validation_failed=len(validation_failures),
                error=e.message
            )

        failed_rows = validation_failures + result.failed_rows

        report = UploadReport(
            success=result.success,
            failed=len(failed_rows),
            failed_rows=failed_rows,
            total_rows=len(all_data),
            validation_failed=len(validation_failures)
        )

        logger.info(
            "bulk_upload_complete",
            restaurant_id=restaurant_id,
            success=report.success,
            failed=report.failed
        )

        return report

    def _fill_missing_descriptions(self, rows: list[ParsedRow]) -> list[ParsedRow]:
        """Ask the description generator for rows without a description."""
        if not self.description_generator.available:
            return rows

        missing = [i for i, row in enumerate(rows) if not row.description.strip()]
        if not missing:
            return rows

        try:
            descriptions = self.description_generator.generate_descriptions(
                [rows[i].name.strip() for i in missing]
            )
        except Exception as e:
            logger.warning("description_generation_failed", error=str(e), rows=len(missing))
            return rows

        enriched = list(rows)
        for index, description in zip(missing, descriptions):
            if description:
                enriched[index] = replace(enriched[index], description=description)

        return enriched


# Singleton instance for convenience
_bulk_upload_service: Optional[BulkUploadService] = None


def get_bulk_upload_service() -> BulkUploadService:
    """Get or create BulkUploadService instance."""
    global _bulk_upload_service
    if _bulk_upload_service is None:
        _bulk_upload_service = BulkUploadService()
    return _bulk_upload_service
