"""
Spreadsheet reader for menu uploads.

Reads a .csv, .xls or .xlsx payload into a header row and a matrix of
data rows. Both formats follow the same row policy:

- short rows are padded with None up to the header count
- cells beyond the header count are dropped
- fully blank rows are skipped
- leading blank rows are skipped before the header row
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from io import BytesIO
from pathlib import PurePath
from typing import Any, Optional
import math
import structlog

import pandas as pd

from config import settings
from exceptions import MenuFileParseError, UnsupportedFileTypeError
from parsers.column_synonyms import ColumnMapping
from parsers.row_parser import ParsedRow, RawCell, parse_row

logger = structlog.get_logger(__name__)

PREVIEW_ROW_COUNT = 5

CSV_CONTENT_TYPES = {"text/csv", "application/csv"}
EXCEL_CONTENT_TYPES = {
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
}


@dataclass
class SpreadsheetData:
    """Header row plus every data row of the first sheet."""
    headers: list[str] = field(default_factory=list)
    rows: list[list[RawCell]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def preview(self, mapping: ColumnMapping, limit: int = PREVIEW_ROW_COUNT) -> list[ParsedRow]:
        """First `limit` rows parsed with the given mapping."""
        return [parse_row(row, mapping) for row in self.rows[:limit]]


def detect_file_format(filename: str, content_type: Optional[str] = None) -> str:
    """
    Decide how to read an upload.

    Extension wins; the content type is only used when the extension
    is missing or unknown.

    Returns:
        "csv", "xls" or "xlsx"

    Raises:
        UnsupportedFileTypeError: If neither identifies a supported format
    """
    suffix = PurePath(filename or "").suffix.lower()
    if suffix in (".csv", ".xls", ".xlsx"):
        return suffix[1:]

    if content_type in CSV_CONTENT_TYPES:
        return "csv"
    if content_type in EXCEL_CONTENT_TYPES:
        return EXCEL_CONTENT_TYPES[content_type]

    raise UnsupportedFileTypeError(filename or "")


def parse_spreadsheet(
    content: bytes,
    filename: str,
    content_type: Optional[str] = None,
) -> SpreadsheetData:
    """
    Read an uploaded menu spreadsheet.

    Args:
        content: Raw file bytes
        filename: Original file name (used for the format)
        content_type: Optional MIME type from the upload

    Returns:
        SpreadsheetData with headers and all data rows

    Raises:
        UnsupportedFileTypeError: Unknown format
        MenuFileParseError: Empty, oversized or unreadable file
    """
    file_format = detect_file_format(filename, content_type)

    logger.info(
        "parsing_spreadsheet",
        filename=filename,
        format=file_format,
        size=len(content)
    )

    if not content:
        raise MenuFileParseError("The uploaded file is empty", details={"filename": filename})

    if len(content) > settings.max_upload_bytes:
        raise MenuFileParseError(
            "The uploaded file is too large",
            details={"size": len(content), "max_bytes": settings.max_upload_bytes}
        )

    if file_format == "csv":
        matrix = _read_csv(content)
    else:
        matrix = _read_excel(content, engine="openpyxl" if file_format == "xlsx" else "xlrd")

    data = _build_spreadsheet_data(matrix)

    if data.row_count > settings.max_upload_rows:
        raise MenuFileParseError(
            f"Too many rows (max {settings.max_upload_rows})",
            details={"rows": data.row_count, "max_rows": settings.max_upload_rows}
        )

    logger.info(
        "spreadsheet_parsed",
        filename=filename,
        columns=len(data.headers),
        rows=data.row_count
    )

    return data


# ===================
# READERS
# ===================

def _read_csv(content: bytes) -> list[list[Any]]:
    """Comma-delimited, double-quote escaped, UTF-8 (BOM tolerated)."""
    read_options = dict(
        header=None,
        index_col=False,
        dtype=str,
        sep=",",
        quotechar='"',
        encoding="utf-8-sig",
        keep_default_na=False,
        skip_blank_lines=True,
        engine="python",
    )

    try:
        width = _csv_header_width(content, read_options)

        df = pd.read_csv(
            BytesIO(content),
            names=list(range(width)),
            on_bad_lines=lambda bad_line: bad_line[:width],
            **read_options
        )
    except pd.errors.EmptyDataError:
        raise MenuFileParseError("The uploaded file has no header row")
    except UnicodeDecodeError as e:
        logger.error("csv_decode_failed", error=str(e))
        raise MenuFileParseError(
            "CSV files must be UTF-8 encoded",
            details={"original_error": str(e)}
        )
    except Exception as e:
        logger.error("csv_read_failed", error=str(e))
        raise MenuFileParseError(
            "Failed to read CSV file",
            details={"original_error": str(e)}
        )

    return df.values.tolist()


def _csv_header_width(content: bytes, read_options: dict) -> int:
    """Field count of the first line with a non-empty cell (the header row)."""
    skip = 0
    while True:
        first = pd.read_csv(BytesIO(content), nrows=1, skiprows=skip, **read_options)
        if first.empty:
            raise pd.errors.EmptyDataError("No header row")
        if any(str(value).strip() for value in first.iloc[0]):
            return len(first.columns)
        skip += 1


def _read_excel(content: bytes, engine: str) -> list[list[Any]]:
    """First worksheet only; the first non-blank row is the header row."""
    try:
        df = pd.read_excel(BytesIO(content), sheet_name=0, header=None, engine=engine)
    except Exception as e:
        logger.error("excel_read_failed", engine=engine, error=str(e))
        raise MenuFileParseError(
            "Failed to read Excel file",
            details={"original_error": str(e)}
        )

    return df.astype(object).values.tolist()


# ===================
# HELPER FUNCTIONS
# ===================

def _build_spreadsheet_data(matrix: list[list[Any]]) -> SpreadsheetData:
    """Split header row from data rows and apply the row policy."""
    start = 0
    while start < len(matrix) and all(_coerce_cell(value) is None for value in matrix[start]):
        start += 1

    if start == len(matrix):
        raise MenuFileParseError("The uploaded file has no header row")

    headers = [_coerce_header(value) for value in matrix[start]]
    while headers and headers[-1] == "":
        headers.pop()

    if not headers:
        raise MenuFileParseError("The uploaded file has no header row")

    width = len(headers)
    rows: list[list[RawCell]] = []

    for raw in matrix[start + 1:]:
        cells = [_coerce_cell(value) for value in raw[:width]]
        cells.extend([None] * (width - len(cells)))

        if all(cell is None for cell in cells):
            continue

        rows.append(cells)

    return SpreadsheetData(headers=headers, rows=rows)


def _coerce_header(value: Any) -> str:
    cell = _coerce_cell(value)
    if cell is None:
        return ""
    return str(cell)


def _coerce_cell(value: Any) -> RawCell:
    """
    Reduce a cell to str, int, float or None.

    "  Pizza " -> "Pizza"
    "" / NaN   -> None
    12.0       -> 12
    datetime   -> "2025-01-15 00:00:00"
    """
    if value is None or value is pd.NaT:
        return None

    if isinstance(value, (datetime, date, time)):
        return str(value)

    # numpy scalars -> python
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            value = value.item()
        except (ValueError, AttributeError):
            pass

    if isinstance(value, bool):
        return str(value)

    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        value = value.strip()
        return value or None

    return str(value)
