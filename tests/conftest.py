"""
Shared test fixtures.

The Supabase mock keeps rows in memory per table so category reuse and
product inserts can be asserted against what was actually written.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are loaded at import time; keep tests off real services
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["AI_COLUMN_MATCHING_ENABLED"] = "false"
os.environ["AI_DESCRIPTIONS_ENABLED"] = "false"

import pytest
from unittest.mock import patch
from typing import Generator, Optional

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, table: "MockSupabaseTable", operation: str, payload: list = None, **options):
        self._table = table
        self._operation = operation
        self._payload = payload or []
        self._options = options
        self._filters: list[tuple[str, object]] = []
        self._order: Optional[tuple[str, bool]] = None
        self._limit: Optional[int] = None

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        self._table.calls.append(self._operation)

        if self._operation in self._table.failures:
            raise Exception(self._table.failures[self._operation])

        if self._operation == "select":
            return self._execute_select()
        if self._operation == "insert":
            return MockSupabaseResponse(data=self._table.add_rows(self._payload))
        if self._operation == "upsert":
            return self._execute_upsert()

        raise ValueError(f"Unsupported operation: {self._operation}")

    def _execute_select(self) -> MockSupabaseResponse:
        rows = [
            dict(row) for row in self._table.rows
            if all(row.get(column) == value for column, value in self._filters)
        ]
        total = len(rows)
        if self._order:
            column, desc = self._order
            rows.sort(key=lambda row: str(row.get(column) or ""), reverse=desc)
        if self._limit is not None:
            rows = rows[:self._limit]
        return MockSupabaseResponse(data=rows, count=total)

    def _execute_upsert(self) -> MockSupabaseResponse:
        conflict_columns = [
            c.strip() for c in (self._options.get("on_conflict") or "").split(",") if c.strip()
        ]

        def conflict_key(row: dict) -> tuple:
            return tuple(row.get(c) for c in conflict_columns)

        existing = {conflict_key(row) for row in self._table.rows}
        new_rows = []
        for item in self._payload:
            if conflict_columns and conflict_key(item) in existing:
                continue
            existing.add(conflict_key(item))
            new_rows.append(item)

        return MockSupabaseResponse(data=self._table.add_rows(new_rows))


class MockSupabaseTable:
    """In-memory table that assigns ids on insert."""

    def __init__(self, name: str, rows: list = None):
        self.name = name
        self.rows: list[dict] = [dict(row) for row in (rows or [])]
        self.failures: dict[str, str] = {}
        self.calls: list[str] = []
        self.inserted_batches: list[list[dict]] = []
        # Cap on rows echoed back by insert (simulates a partial result)
        self.return_limit: Optional[int] = None
        self._counter = 0

    def add_rows(self, items: list[dict]) -> list[dict]:
        created = []
        for item in items:
            self._counter += 1
            row = {"id": f"{self.name}-{self._counter}", **item}
            self.rows.append(row)
            created.append(dict(row))
        self.inserted_batches.append(created)
        if self.return_limit is not None:
            return created[:self.return_limit]
        return created

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self, "select")

    def insert(self, data):
        payload = [data] if isinstance(data, dict) else list(data)
        return MockSupabaseQuery(self, "insert", payload)

    def upsert(self, data, on_conflict: str = None, ignore_duplicates: bool = False, **kwargs):
        payload = [data] if isinstance(data, dict) else list(data)
        return MockSupabaseQuery(
            self, "upsert", payload,
            on_conflict=on_conflict,
            ignore_duplicates=ignore_duplicates
        )


class MockSupabaseClient:
    """Mock Supabase client backed by MockSupabaseTable instances."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list):
        """Seed rows for a table."""
        self._tables[table_name] = MockSupabaseTable(table_name, data)

    def fail(self, table_name: str, operation: str, message: str = "connection refused"):
        """Make every `operation` on a table raise."""
        self.table(table_name).failures[operation] = message

    def rows(self, table_name: str) -> list[dict]:
        return self.table(table_name).rows

    def table(self, name: str) -> MockSupabaseTable:
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable(name)
        return self._tables[name]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("categories", [
                {"id": "cat-1", "name": "Pizza", "restaurant_id": "rest-1"}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("categories", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.menu_upload_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def restaurant_id() -> str:
    return "rest-123"


@pytest.fixture
def sample_headers() -> list:
    """Header row in the template layout."""
    return ["Product Name", "Category", "Description", "Price"]


@pytest.fixture
def sample_rows() -> list:
    """Raw data rows matching sample_headers."""
    return [
        ["Margherita Pizza", "Pizza", "Tomato, mozzarella, basil", 15.99],
        ["Pepperoni Pizza", "Pizza", None, "17.50"],
        ["Tiramisu", "Desserts", "Classic Italian dessert", 8.99],
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_supabase):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("categories", [...])
            response = test_client_with_mock_db.get("/api/menu-upload/template")
    """
    from fastapi.testclient import TestClient
    import services.bulk_upload_service as bulk_upload_service
    from main import app

    bulk_upload_service._bulk_upload_service = None

    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.menu_upload_service.get_supabase_client", return_value=mock_supabase):
            yield TestClient(app)

    bulk_upload_service._bulk_upload_service = None
