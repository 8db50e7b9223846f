"""
Template service: the downloadable menu upload spreadsheet.

The header row is the vocabulary the column detection is tuned against.
"""

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
import structlog

from parsers.column_synonyms import TEMPLATE_HEADERS

logger = structlog.get_logger(__name__)

TEMPLATE_FILENAME = "menu-template.xlsx"
TEMPLATE_SHEET = "Menu Items"
TEMPLATE_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SAMPLE_ROWS = [
    ["Margherita Pizza", "Pizza", "Fresh mozzarella, tomato sauce, basil", "15.99"],
    ["Caesar Salad", "Salads", "Romaine lettuce, parmesan, croutons", "12.50"],
    ["Chicken Pasta", "Main Course", "Grilled chicken with creamy pasta", "18.75"],
    ["Tiramisu", "Desserts", "Classic Italian dessert", "8.99"],
    ["Coca Cola", "Beverages", "Refreshing soft drink", "3.50"],
]


def generate_menu_template() -> BytesIO:
    """
    Build the menu template workbook.

    Returns:
        BytesIO containing the .xlsx file, positioned at 0
    """
    logger.info("generating_menu_template", sample_rows=len(SAMPLE_ROWS))

    wb = Workbook()
    ws = wb.active
    ws.title = TEMPLATE_SHEET

    header_font = Font(bold=True)
    header_fill = PatternFill(fill_type="solid", fgColor="FFE0E0E0")

    ws.append(TEMPLATE_HEADERS)
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill

    for row in SAMPLE_ROWS:
        ws.append(row)

    for letter in ("A", "B", "C", "D"):
        ws.column_dimensions[letter].width = 20

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output
