"""
Test data factories.

Uses factory pattern to generate consistent test data.
"""

from io import BytesIO
from typing import Optional
from uuid import uuid4

from openpyxl import Workbook

from parsers.row_parser import ParsedRow


class ParsedRowFactory:
    """
    Factory for creating ParsedRow objects.

    Usage:
        row = ParsedRowFactory.create()
        row = ParsedRowFactory.create(category="Desserts", price=7.5)
        rows = ParsedRowFactory.create_batch(5, category="Pizza")
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        name: Optional[str] = None,
        category: str = "Pizza",
        description: str = "",
        price: float = 12.5
    ) -> ParsedRow:
        counter = cls._next_counter()
        return ParsedRow(
            name=name or f"Test Dish {counter}",
            category=category,
            description=description,
            price=price
        )

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list:
        return [cls.create(**overrides) for _ in range(count)]


class CategoryFactory:
    """Factory for category rows as stored in Supabase."""

    @classmethod
    def create(
        cls,
        name: str = "Pizza",
        restaurant_id: str = "rest-123",
        id: Optional[str] = None
    ) -> dict:
        return {
            "id": id or str(uuid4()),
            "name": name,
            "restaurant_id": restaurant_id
        }


def create_csv_file(lines: list[str], bom: bool = False) -> bytes:
    """Join CSV lines into UTF-8 bytes."""
    content = "\n".join(lines) + "\n"
    data = content.encode("utf-8")
    return b"\xef\xbb\xbf" + data if bom else data


def create_xlsx_file(rows: list[list], sheet_title: str = "Menu", extra_sheet: Optional[list] = None) -> bytes:
    """Build an .xlsx workbook in memory; first row is the header row."""
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    for row in rows:
        ws.append(row)

    if extra_sheet is not None:
        other = wb.create_sheet("Other")
        for row in extra_sheet:
            other.append(row)

    output = BytesIO()
    wb.save(output)
    return output.getvalue()
