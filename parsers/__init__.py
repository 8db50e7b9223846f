"""
Spreadsheet parsing for menu uploads.

Column synonym matching, row parsing/validation and file reading.
"""

from parsers.column_synonyms import (
    CANONICAL_FIELDS,
    TEMPLATE_HEADERS,
    ColumnMapping,
    SynonymMatchResult,
    match_columns_by_synonym,
    should_ignore_column,
    get_skipped_columns,
)
from parsers.row_parser import (
    ParsedRow,
    ValidationResult,
    parse_row,
    parse_price,
    validate_row,
)
from parsers.spreadsheet_parser import (
    SpreadsheetData,
    parse_spreadsheet,
    detect_file_format,
)

__all__ = [
    "CANONICAL_FIELDS",
    "TEMPLATE_HEADERS",
    "ColumnMapping",
    "SynonymMatchResult",
    "match_columns_by_synonym",
    "should_ignore_column",
    "get_skipped_columns",
    "ParsedRow",
    "ValidationResult",
    "parse_row",
    "parse_price",
    "validate_row",
    "SpreadsheetData",
    "parse_spreadsheet",
    "detect_file_format",
]
