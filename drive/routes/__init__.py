"""HTTP routes package."""

from drive.routes.auth_routes import router as auth_router
from drive.routes.drive_routes import router as drive_router
from drive.routes.file_routes import router as file_router

__all__ = ["auth_router", "drive_router", "file_router"]
