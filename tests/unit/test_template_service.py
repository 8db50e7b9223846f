"""
Unit tests for the menu template generator.
"""

from openpyxl import load_workbook

from parsers.column_synonyms import TEMPLATE_HEADERS, match_columns_by_synonym
from parsers.spreadsheet_parser import parse_spreadsheet
from services.template_service import SAMPLE_ROWS, TEMPLATE_SHEET, generate_menu_template


class TestGenerateMenuTemplate:
    """Tests for generate_menu_template."""

    def test_header_row_and_samples(self):
        output = generate_menu_template()

        wb = load_workbook(output)
        ws = wb.active

        assert ws.title == TEMPLATE_SHEET
        assert [cell.value for cell in ws[1]] == TEMPLATE_HEADERS
        assert ws[1][0].font.bold is True
        assert ws.max_row == len(SAMPLE_ROWS) + 1

    def test_template_is_detected_without_gaps(self):
        """Uploading the untouched template resolves every field by synonym."""
        content = generate_menu_template().getvalue()

        data = parse_spreadsheet(content, "menu-template.xlsx")
        result = match_columns_by_synonym(data.headers)

        assert result.mapping.is_complete is True
        assert data.row_count == len(SAMPLE_ROWS)
