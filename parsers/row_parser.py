"""
Row parsing and validation for menu spreadsheets.

Turns a raw data row into a ParsedRow under a ColumnMapping and checks
field-level validity. Never raises on malformed rows: unreachable or
unmapped cells fall back to empty values.
"""

from dataclasses import dataclass, field, asdict
import math
import re
from typing import Any, Optional, Sequence

from parsers.column_synonyms import ColumnMapping

# Validation limits
MIN_NAME_LENGTH = 2
MAX_PRICE = 999_999
MAX_DESCRIPTION_LENGTH = 500

# Leading number, same reading as a lenient float parse ("12.50 RON" -> 12.5)
_LEADING_NUMBER = re.compile(r"^\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")

RawCell = Optional[Any]
RawRow = Sequence[RawCell]


@dataclass
class ParsedRow:
    """Canonical menu item read from one spreadsheet row."""
    name: str = ""
    category: str = ""
    description: str = ""
    price: float = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ValidationResult:
    """Validation outcome for one ParsedRow."""
    is_valid: bool
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"isValid": self.is_valid, "errors": list(self.errors)}


def _cell(row: RawRow, index: Optional[int]) -> RawCell:
    """Cell at index, None when unmapped or out of range."""
    if index is None or index < 0 or index >= len(row):
        return None
    return row[index]


def _cell_to_text(value: RawCell) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def parse_price(value: RawCell) -> float:
    """
    Read a price cell.

    Numbers pass through. Text is read up to the first non-numeric
    character; a lone decimal comma ("12,50") counts as a decimal point.
    Anything unreadable is 0.

    Examples:
        "15.99" -> 15.99
        "12,50" -> 12.5
        "8 RON" -> 8.0
        "free"  -> 0
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        price = float(value)
        return 0 if math.isnan(price) else price

    text = str(value).strip()
    if "," in text and "." not in text:
        text = text.replace(",", ".", 1)

    match = _LEADING_NUMBER.match(text)
    if not match:
        return 0

    try:
        price = float(match.group(0))
    except ValueError:
        return 0

    return 0 if math.isnan(price) else price


def parse_row(row: RawRow, mapping: ColumnMapping) -> ParsedRow:
    """
    Build a ParsedRow from a raw row.

    Args:
        row: Cell values aligned with the header row
        mapping: Column index per canonical field

    Returns:
        ParsedRow; unmapped or missing cells become "" / 0
    """
    row = row or []

    return ParsedRow(
        name=_cell_to_text(_cell(row, mapping.name)),
        category=_cell_to_text(_cell(row, mapping.category)),
        description=_cell_to_text(_cell(row, mapping.description)),
        price=parse_price(_cell(row, mapping.price)),
    )


def validate_row(row: ParsedRow) -> ValidationResult:
    """
    Check a ParsedRow.

    Returns every failing rule in fixed order: name, price, description.
    """
    errors: list[str] = []

    # Name
    name = row.name.strip()
    if not name:
        errors.append("Product name is required")
    elif len(name) < MIN_NAME_LENGTH:
        errors.append(f"Product name must be at least {MIN_NAME_LENGTH} characters")

    # Price
    if row.price <= 0:
        errors.append("Price must be greater than 0")
    elif not math.isfinite(row.price):
        errors.append("Price must be a valid number")
    elif row.price > MAX_PRICE:
        errors.append("Price is too high (max 999,999)")

    # Description
    if row.description and len(row.description) > MAX_DESCRIPTION_LENGTH:
        errors.append(f"Description is too long (max {MAX_DESCRIPTION_LENGTH} characters)")

    return ValidationResult(is_valid=not errors, errors=errors)
