"""
Column detection for menu spreadsheets.

Synonym matching first; the semantic matcher is only consulted for the
canonical fields the keyword lists left unresolved. Synonym results are
never overwritten.
"""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from exceptions import InvalidColumnMappingError, ValidationError
from models.menu_upload import DetectionMethod
from parsers.column_synonyms import (
    CANONICAL_FIELDS,
    ColumnMapping,
    get_skipped_columns,
    match_columns_by_synonym,
    should_ignore_column,
)
from parsers.row_parser import ParsedRow, RawCell, parse_row
from parsers.spreadsheet_parser import PREVIEW_ROW_COUNT, SpreadsheetData
from services.column_matcher_service import ColumnMatcher, get_column_matcher

logger = structlog.get_logger(__name__)


@dataclass
class DetectionResult:
    """Outcome of column detection for one spreadsheet."""
    mapping: ColumnMapping
    headers: list[str]
    preview_data: list[ParsedRow] = field(default_factory=list)
    missing_fields: list[str] = field(default_factory=list)
    all_data: list[list[RawCell]] = field(default_factory=list)
    detection_method: DetectionMethod = DetectionMethod.SYNONYM
    synonym_matches: dict[str, Optional[str]] = field(default_factory=dict)
    ai_matches: dict[str, Optional[str]] = field(default_factory=dict)
    skipped_columns: list[str] = field(default_factory=list)

    @property
    def needs_manual_selection(self) -> bool:
        return bool(self.missing_fields)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "mapping": self.mapping.to_dict(),
            "headers": list(self.headers),
            "previewData": [row.to_dict() for row in self.preview_data],
            "missingFields": list(self.missing_fields),
            "allData": [list(row) for row in self.all_data],
            "detectionMethod": self.detection_method.value,
            "synonymMatches": dict(self.synonym_matches),
            "aiMatches": dict(self.ai_matches),
            "skippedColumns": list(self.skipped_columns),
        }


class ColumnDetectionService:
    """
    Resolve which spreadsheet column holds each canonical field.

    Paths:
        1. Synonyms resolve all four fields -> "synonym", matcher not called
        2. Gaps remain and the matcher is available -> merge its suggestions
           into the empty fields only -> "hybrid" (or "ai" if synonyms
           resolved nothing)
        3. Matcher unavailable or failing -> "synonym" with a partial mapping
    """

    def __init__(self, matcher: Optional[ColumnMatcher] = None):
        self.matcher = matcher if matcher is not None else get_column_matcher()

    def detect_columns(
        self,
        headers: list[str],
        rows: Optional[list[list[RawCell]]] = None,
    ) -> DetectionResult:
        """
        Detect the column mapping for a header row.

        Args:
            headers: Header row in column order
            rows: Data rows, used for preview_data and all_data

        Returns:
            DetectionResult; unresolved fields are listed in missing_fields
        """
        headers = [str(header) for header in headers]
        rows = rows or []

        logger.info("column_detection_started", headers=headers)

        synonym_result = match_columns_by_synonym(headers)
        mapping = synonym_result.mapping.copy()
        method = DetectionMethod.SYNONYM
        ai_matches: dict[str, Optional[str]] = {}

        if mapping.is_complete:
            logger.info("column_detection_synonyms_complete")
        elif not self.matcher.available:
            logger.info(
                "semantic_matcher_unavailable",
                missing=mapping.missing_fields
            )
        else:
            logger.info(
                "semantic_matching_needed",
                matched=mapping.resolved_count,
                missing=mapping.missing_fields
            )
            try:
                ai_matches = self.matcher.match_columns(headers) or {}
            except Exception as e:
                logger.warning(
                    "semantic_matching_failed",
                    error=str(e),
                    error_type=type(e).__name__
                )
                ai_matches = {}
            else:
                self._merge_suggestions(headers, mapping, ai_matches)
                if synonym_result.mapping.resolved_count > 0:
                    method = DetectionMethod.HYBRID
                else:
                    method = DetectionMethod.AI

        result = _build_result(
            headers=headers,
            rows=rows,
            mapping=mapping,
            method=method,
            synonym_matches=synonym_result.matches,
            ai_matches=ai_matches,
        )

        logger.info(
            "column_detection_complete",
            method=result.detection_method.value,
            mapping=result.mapping.to_dict(),
            missing=result.missing_fields
        )

        return result

    def detect(self, data: SpreadsheetData) -> DetectionResult:
        """Detect columns for a parsed spreadsheet."""
        return self.detect_columns(data.headers, data.rows)

    @staticmethod
    def _merge_suggestions(
        headers: list[str],
        mapping: ColumnMapping,
        suggestions: dict[str, Optional[str]],
    ) -> None:
        """Fill empty fields from matcher suggestions, in column order."""
        for index, header in enumerate(headers):
            suggested = suggestions.get(header)

            if suggested not in CANONICAL_FIELDS:
                continue
            if mapping.get_field(suggested) is not None:
                continue
            if index in mapping.claimed_columns() or should_ignore_column(header):
                continue

            mapping.set_field(suggested, index)
            logger.debug("semantic_match_applied", header=header, field=suggested, index=index)


def apply_manual_mapping(
    headers: list[str],
    all_data: list[list[RawCell]],
    overrides: dict[str, Optional[int]],
    base: Optional[ColumnMapping] = None,
) -> DetectionResult:
    """
    Apply columns chosen by the user on top of a detected mapping.

    Only fields present in `overrides` change; an explicit None clears a
    field.

    Raises:
        ValidationError: Unknown field name
        InvalidColumnMappingError: Index outside the header row
    """
    headers = [str(header) for header in headers]
    mapping = base.copy() if base is not None else ColumnMapping()

    for field_name, index in overrides.items():
        if field_name not in CANONICAL_FIELDS:
            raise ValidationError(
                f"Unknown field '{field_name}'",
                code="INVALID_COLUMN_FIELD",
                details={"field": field_name, "valid": list(CANONICAL_FIELDS)}
            )
        if index is not None and not 0 <= index < len(headers):
            raise InvalidColumnMappingError(field_name, index, len(headers))
        mapping.set_field(field_name, index)

    logger.info(
        "manual_mapping_applied",
        mapping=mapping.to_dict(),
        missing=mapping.missing_fields
    )

    return _build_result(
        headers=headers,
        rows=all_data,
        mapping=mapping,
        method=DetectionMethod.MANUAL,
    )


def _build_result(
    headers: list[str],
    rows: list[list[RawCell]],
    mapping: ColumnMapping,
    method: DetectionMethod,
    synonym_matches: Optional[dict[str, Optional[str]]] = None,
    ai_matches: Optional[dict[str, Optional[str]]] = None,
) -> DetectionResult:
    return DetectionResult(
        mapping=mapping,
        headers=headers,
        preview_data=[parse_row(row, mapping) for row in rows[:PREVIEW_ROW_COUNT]],
        missing_fields=mapping.missing_fields,
        all_data=rows,
        detection_method=method,
        synonym_matches=synonym_matches or {},
        ai_matches=ai_matches or {},
        skipped_columns=get_skipped_columns(headers, mapping),
    )


# Singleton instance for convenience
_column_detection_service: Optional[ColumnDetectionService] = None


def get_column_detection_service() -> ColumnDetectionService:
    """Get or create ColumnDetectionService instance."""
    global _column_detection_service
    if _column_detection_service is None:
        _column_detection_service = ColumnDetectionService()
    return _column_detection_service
