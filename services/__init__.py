"""
Business logic services.

Each service handles one step of the menu upload workflow.
"""

from services.column_matcher_service import (
    ColumnMatcher,
    NullColumnMatcher,
    ClaudeColumnMatcher,
    get_column_matcher,
)
from services.column_detection_service import (
    ColumnDetectionService,
    DetectionResult,
    apply_manual_mapping,
    get_column_detection_service,
)
from services.description_service import (
    DescriptionGenerator,
    NullDescriptionGenerator,
    ClaudeDescriptionGenerator,
    get_description_generator,
)
from services.menu_upload_service import (
    MenuUploadService,
    UploadResult,
    FailedRow,
    CategoryRecord,
)
from services.bulk_upload_service import (
    BulkUploadService,
    UploadReport,
    get_bulk_upload_service,
)
from services.template_service import generate_menu_template

__all__ = [
    "ColumnMatcher",
    "NullColumnMatcher",
    "ClaudeColumnMatcher",
    "get_column_matcher",
    "ColumnDetectionService",
    "DetectionResult",
    "apply_manual_mapping",
    "get_column_detection_service",
    "DescriptionGenerator",
    "NullDescriptionGenerator",
    "ClaudeDescriptionGenerator",
    "get_description_generator",
    "MenuUploadService",
    "UploadResult",
    "FailedRow",
    "CategoryRecord",
    "BulkUploadService",
    "UploadReport",
    "get_bulk_upload_service",
    "generate_menu_template",
]
