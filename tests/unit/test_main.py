"""
Unit tests for the application entry point.
"""

import structlog


class TestAppSetup:
    """Tests for main.py wiring."""

    def test_structlog_uses_stdlib_integration(self, test_client_with_mock_db):
        config = structlog.get_config()

        assert config["wrapper_class"] is structlog.stdlib.BoundLogger
        assert isinstance(config["logger_factory"], structlog.stdlib.LoggerFactory)

    def test_root_lists_menu_upload_endpoints(self, test_client_with_mock_db):
        response = test_client_with_mock_db.get("/")

        assert response.status_code == 200
        assert response.json()["endpoints"]["detect"] == "/api/menu-upload/detect"

    def test_health_reports_database(self, test_client_with_mock_db, mock_supabase):
        mock_supabase.set_table_data("categories", [{"id": "cat-1", "name": "Pizza"}])

        response = test_client_with_mock_db.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"]["categories_count"] == 1
