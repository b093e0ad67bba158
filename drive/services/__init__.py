"""Service layer for business logic."""

from drive.services.auth_service import AuthService
from drive.services.drive_service import DriveService
from drive.services.file_service import FileService

__all__ = [
    "AuthService",
    "DriveService",
    "FileService",
]
