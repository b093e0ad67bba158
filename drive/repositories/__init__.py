"""Repository layer for data access."""

from drive.repositories.user_repository import User, UserRepository
from drive.repositories.file_repository import File, FileMeta, FileRepository
from drive.repositories.folder_repository import Folder, FolderRepository

__all__ = [
    "User",
    "UserRepository",
    "File",
    "FileMeta",
    "FileRepository",
    "Folder",
    "FolderRepository",
]
