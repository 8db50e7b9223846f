"""
Unit tests for ColumnDetectionService and manual column mapping.

The semantic matcher is replaced with in-test fakes; no network calls.
"""

from typing import Optional
import pytest

from exceptions import InvalidColumnMappingError, ValidationError
from models.menu_upload import DetectionMethod
from parsers.column_synonyms import ColumnMapping
from services.column_detection_service import (
    ColumnDetectionService,
    apply_manual_mapping,
)
from services.column_matcher_service import ColumnMatcher, NullColumnMatcher


# ===================
# FAKE MATCHERS
# ===================

class FakeMatcher(ColumnMatcher):
    """Returns canned suggestions and records calls."""

    available = True

    def __init__(self, suggestions: dict[str, Optional[str]]):
        self.suggestions = suggestions
        self.calls: list[list[str]] = []

    def match_columns(self, headers):
        self.calls.append(list(headers))
        return {header: self.suggestions.get(header) for header in headers}


class FailingMatcher(ColumnMatcher):
    available = True

    def match_columns(self, headers):
        raise ValueError("Claude API error: overloaded")


# ===================
# DETECTION PATHS
# ===================

class TestDetectColumns:
    """Tests for the three detection paths."""

    def test_synonyms_complete_skips_matcher(self, sample_headers, sample_rows):
        matcher = FakeMatcher({})
        service = ColumnDetectionService(matcher=matcher)

        result = service.detect_columns(sample_headers, sample_rows)

        assert matcher.calls == []
        assert result.detection_method == DetectionMethod.SYNONYM
        assert result.missing_fields == []
        assert result.ai_matches == {}
        assert result.needs_manual_selection is False

    def test_romanian_headers_resolved_by_synonyms(self):
        """Produs / Categorie / Descriere / Pret never reaches the matcher."""
        headers = ["Produs", "Categorie", "Descriere", "Pret"]
        matcher = FakeMatcher({})
        service = ColumnDetectionService(matcher=matcher)

        result = service.detect_columns(headers, [["Ciorbă", "Supe", "Ciorbă de legume", "18"]])

        assert matcher.calls == []
        assert result.detection_method == DetectionMethod.SYNONYM
        assert result.mapping.to_dict() == {
            "name": 0, "category": 1, "description": 2, "price": 3
        }
        assert result.missing_fields == []
        assert result.preview_data[0].price == 18

    def test_hybrid_fills_only_missing_fields(self):
        """Item Title / Menu Group / SKU / Cost: matcher supplies description."""
        headers = ["Item Title", "Menu Group", "SKU", "Cost", "Blurb"]
        matcher = FakeMatcher({
            "Item Title": "description",  # must not override synonyms
            "Blurb": "description",
        })
        service = ColumnDetectionService(matcher=matcher)

        result = service.detect_columns(headers)

        assert matcher.calls == [headers]
        assert result.detection_method == DetectionMethod.HYBRID
        assert result.mapping.to_dict() == {
            "name": 0, "category": 1, "description": 4, "price": 3
        }
        assert result.missing_fields == []

    def test_matcher_never_overrides_synonym_field(self):
        headers = ["Fel de mancare", "Grp", "Lei"]
        matcher = FakeMatcher({
            "Fel de mancare": "name",
            "Grp": "category",
            "Lei": "price",
        })

        result = ColumnDetectionService(matcher=matcher).detect_columns(headers)

        # "fel" is a name synonym, so only the other two come from the matcher
        assert result.mapping.name == 0
        assert result.mapping.category == 1
        assert result.mapping.price == 2
        assert result.detection_method == DetectionMethod.HYBRID

    def test_pure_ai_detection(self):
        headers = ["Xyz", "Qwe"]
        matcher = FakeMatcher({"Xyz": "name", "Qwe": "price"})

        result = ColumnDetectionService(matcher=matcher).detect_columns(headers)

        assert result.detection_method == DetectionMethod.AI
        assert result.mapping.name == 0
        assert result.mapping.price == 1
        assert result.missing_fields == ["category", "description"]

    def test_matcher_suggestion_on_claimed_column_is_discarded(self):
        headers = ["Name", "Price", "Misc"]
        matcher = FakeMatcher({"Name": "category", "Misc": "category"})

        result = ColumnDetectionService(matcher=matcher).detect_columns(headers)

        assert result.mapping.category == 2
        indices = [i for i in result.mapping.to_dict().values() if i is not None]
        assert len(indices) == len(set(indices))

    def test_matcher_suggestion_on_ignored_column_is_discarded(self):
        headers = ["Name", "Price", "SKU"]
        matcher = FakeMatcher({"SKU": "category"})

        result = ColumnDetectionService(matcher=matcher).detect_columns(headers)

        assert result.mapping.category is None
        assert "category" in result.missing_fields

    def test_failing_matcher_falls_back_to_synonyms(self):
        headers = ["Item Title", "Menu Group", "SKU", "Cost"]

        result = ColumnDetectionService(matcher=FailingMatcher()).detect_columns(headers)

        assert result.detection_method == DetectionMethod.SYNONYM
        assert result.missing_fields == ["description"]
        assert result.needs_manual_selection is True

    def test_unavailable_matcher_falls_back_to_synonyms(self):
        headers = ["Item Title", "Cost"]

        result = ColumnDetectionService(matcher=NullColumnMatcher()).detect_columns(headers)

        assert result.detection_method == DetectionMethod.SYNONYM
        assert result.missing_fields == ["category", "description"]

    def test_preview_limited_to_five_rows(self, sample_headers):
        rows = [[f"Dish {i}", "Main", "", i + 1] for i in range(12)]

        result = ColumnDetectionService(matcher=NullColumnMatcher()).detect_columns(sample_headers, rows)

        assert len(result.preview_data) == 5
        assert len(result.all_data) == 12
        assert result.preview_data[2].name == "Dish 2"

    def test_to_dict_uses_camel_case(self, sample_headers, sample_rows):
        result = ColumnDetectionService(matcher=NullColumnMatcher()).detect_columns(sample_headers, sample_rows)

        data = result.to_dict()

        assert data["detectionMethod"] == "synonym"
        assert data["missingFields"] == []
        assert len(data["previewData"]) == 3
        assert data["allData"] == sample_rows
        assert set(data) >= {"mapping", "headers", "synonymMatches", "aiMatches", "skippedColumns"}


# ===================
# MANUAL MAPPING
# ===================

class TestApplyManualMapping:
    """Tests for apply_manual_mapping."""

    def test_overrides_merge_into_detected_mapping(self):
        headers = ["Item Title", "Menu Group", "SKU", "Cost", "Blurb"]
        rows = [["Soup", "Starters", "S-1", "7", "Hot tomato soup"]]
        detected = ColumnMapping(name=0, category=1, price=3)

        result = apply_manual_mapping(headers, rows, {"description": 4}, base=detected)

        assert result.detection_method == DetectionMethod.MANUAL
        assert result.mapping.to_dict() == {
            "name": 0, "category": 1, "description": 4, "price": 3
        }
        assert result.missing_fields == []
        assert result.preview_data[0].description == "Hot tomato soup"
        assert detected.description is None

    def test_none_clears_a_field(self):
        detected = ColumnMapping(name=0, category=1, description=2, price=3)

        result = apply_manual_mapping(
            ["A", "B", "C", "D"], [], {"category": None}, base=detected
        )

        assert result.mapping.category is None
        assert result.missing_fields == ["category"]

    def test_out_of_range_index_raises(self):
        with pytest.raises(InvalidColumnMappingError) as exc_info:
            apply_manual_mapping(["Name", "Price"], [], {"price": 5})

        assert exc_info.value.details["column_count"] == 2

    def test_unknown_field_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            apply_manual_mapping(["Name", "Price"], [], {"calories": 1})

        assert exc_info.value.code == "INVALID_COLUMN_FIELD"
