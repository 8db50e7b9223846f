"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.menu_upload import router as menu_upload_router

__all__ = [
    "menu_upload_router",
]
