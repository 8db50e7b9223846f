"""
Menu bulk upload routes.

Flow used by the admin dashboard:
    1. GET  /template                         download the spreadsheet template
    2. POST /detect                           upload a file, get the detected columns
    3. POST /detect/manual                    (optional) fix columns by hand
    4. POST /restaurants/{id}/upload          save the rows
"""

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
import structlog

from models.menu_upload import (
    CategoryResponse,
    DetectionResponse,
    ManualMappingRequest,
    UploadReportResponse,
    UploadRequest,
)
from services.bulk_upload_service import get_bulk_upload_service
from services.column_detection_service import apply_manual_mapping
from services.menu_upload_service import MenuUploadService
from services.template_service import (
    TEMPLATE_FILENAME,
    TEMPLATE_MEDIA_TYPE,
    generate_menu_template,
)
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/menu-upload", tags=["Menu Upload"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("/template")
async def download_template():
    """Download the menu spreadsheet template (.xlsx)."""
    try:
        output = generate_menu_template()
        return StreamingResponse(
            output,
            media_type=TEMPLATE_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'}
        )
    except Exception as e:
        return handle_error(e)


@router.post("/detect", response_model=DetectionResponse)
async def detect_columns(file: UploadFile = File(...)):
    """
    Parse an uploaded spreadsheet and detect its columns.

    Returns every data row (allData) plus a 5-row preview. A non-empty
    missingFields means the user has to pick those columns by hand.

    Raises:
        422: Unsupported, empty or unreadable file
    """
    try:
        content = await file.read()
        service = get_bulk_upload_service()
        result = service.detect(content, file.filename or "", file.content_type)
        return DetectionResponse.model_validate(result.to_dict())

    except Exception as e:
        return handle_error(e)


@router.post("/detect/manual", response_model=DetectionResponse)
async def apply_manual_columns(data: ManualMappingRequest):
    """
    Apply columns chosen by the user.

    Raises:
        422: Unknown field or column index out of range
    """
    try:
        base = data.detected.to_mapping() if data.detected else None
        result = apply_manual_mapping(
            headers=data.headers,
            all_data=data.all_data,
            overrides=data.mapping,
            base=base,
        )
        return DetectionResponse.model_validate(result.to_dict())

    except Exception as e:
        return handle_error(e)


@router.post("/restaurants/{restaurant_id}/upload", response_model=UploadReportResponse)
async def upload_menu(restaurant_id: str, data: UploadRequest):
    """
    Validate and save menu rows for a restaurant.

    Invalid rows are reported in failedRows and do not stop the upload.
    A database failure reports every row as failed.

    Raises:
        422: No valid rows
    """
    try:
        service = get_bulk_upload_service()
        report = service.upload(
            restaurant_id=restaurant_id,
            all_data=data.all_data,
            mapping=data.mapping.to_mapping(),
        )
        return UploadReportResponse.model_validate(report.to_dict())

    except Exception as e:
        return handle_error(e)


@router.get("/restaurants/{restaurant_id}/categories", response_model=list[CategoryResponse])
async def list_categories(restaurant_id: str):
    """List the categories a restaurant already has."""
    try:
        categories = MenuUploadService(restaurant_id).get_categories()
        return [
            CategoryResponse(id=c.id, name=c.name, restaurant_id=c.restaurant_id)
            for c in categories
        ]

    except Exception as e:
        return handle_error(e)
