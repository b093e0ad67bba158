"""Drive service: browsing and managing the folder tree."""

from typing import Optional

from common.logging_config import get_logger
from drive import storage
from drive.exceptions import NotFoundError, StorageIOError
from drive.repositories.file_repository import FileRepository
from drive.repositories.folder_repository import Folder, FolderRepository
from drive.types import FolderListing

logger = get_logger(__name__)


class DriveService:
    def __init__(self):
        self.folder_repo = FolderRepository()
        self.file_repo = FileRepository()

    def root_listing(self, owner_id: str) -> FolderListing:
        return FolderListing(
            current_folder=None,
            folders=self.folder_repo.list_root_folders(owner_id),
        )

    def folder_listing(self, folder_id: str, owner_id: str) -> FolderListing:
        """
        Raises:
            NotFoundError: The folder does not exist for owner_id
        """
        folder = self.folder_repo.get_folder(folder_id, owner_id)
        if folder is None:
            raise NotFoundError("Folder not found")

        return FolderListing(
            current_folder=folder,
            parent_chain=self.folder_repo.get_parent_chain(folder_id, owner_id),
            folders=self.folder_repo.list_child_folders(folder_id, owner_id),
            files=self.file_repo.list_files_in_folder(folder_id, owner_id),
        )

    def create_folder(self, name: str, owner_id: str, parent_id: Optional[str] = None) -> Folder:
        return self.folder_repo.create_folder(name, owner_id, parent_id or None)

    def rename_folder(self, folder_id: str, owner_id: str, new_name: str) -> Folder:
        return self.folder_repo.rename_folder(folder_id, owner_id, new_name)

    def delete_folder(self, folder_id: str, owner_id: str) -> Optional[str]:
        """
        Delete an empty-of-subfolders folder together with its files.

        Records go first (the cascade), blobs after. A crash in between leaves
        orphaned blobs but never a record pointing at a missing blob.

        Returns:
            The parent folder id, or None for a root folder

        Raises:
            NotFoundError: The folder does not exist for owner_id
            HasChildrenError: The folder has subfolders
        """
        folder = self.folder_repo.get_folder(folder_id, owner_id)
        if folder is None:
            raise NotFoundError("Folder not found")

        cascaded = self.folder_repo.delete_folder(folder_id, owner_id)

        try:
            removed = storage.delete_folder_blobs(folder_id, [meta.key for meta in cascaded])
            logger.info(f"Removed {removed}/{len(cascaded)} blobs of deleted folder [folder_id={folder_id}]")
        except StorageIOError as e:
            logger.error(f"Blob cleanup failed for deleted folder [folder_id={folder_id}]: {e}")

        return folder.parent_id
