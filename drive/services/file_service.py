"""File service for business logic."""

from typing import BinaryIO, Optional

from common.logging_config import get_logger
from drive import storage
from drive.config import MAX_UPLOAD_BYTES
from drive.exceptions import DriveException, FolderNotFoundError, NotFoundError, ValidationError
from drive.repositories.file_repository import File, FileMeta, FileRepository
from drive.repositories.folder_repository import FolderRepository
from drive.types import Download
from drive.utils import normalize_name

logger = get_logger(__name__)


class FileService:
    def __init__(self):
        self.file_repo = FileRepository()
        self.folder_repo = FolderRepository()

    def upload_file(
        self,
        owner_id: str,
        folder_id: str,
        original_name: Optional[str],
        content_type: Optional[str],
        file_data: Optional[BinaryIO],
        max_bytes: Optional[int] = None,
    ) -> File:
        """
        Store an uploaded file in an owned folder.

        The folder is checked before any bytes are written so a bad folderId
        never leaves a blob behind. If the record cannot be created afterwards
        (lost race on the name, folder deleted meanwhile) the blob is removed.

        Raises:
            ValidationError: Missing folder id or file
            FolderNotFoundError: The folder does not exist for owner_id
            FileTooLargeError: Upload exceeds the size limit
            DuplicateNameError: A file with this name already exists in the folder
        """
        if not folder_id:
            raise ValidationError("folderId is required")
        original_name = normalize_name(original_name)
        if file_data is None or not original_name:
            raise ValidationError("No file uploaded")

        if self.folder_repo.get_folder(folder_id, owner_id) is None:
            raise FolderNotFoundError("Folder not found")

        key = storage.generate_key(original_name)
        size = storage.write_blob(
            folder_id,
            key,
            file_data,
            max_bytes=MAX_UPLOAD_BYTES if max_bytes is None else max_bytes,
        )
        logger.info(f"Wrote blob for upload '{original_name}' [folder_id={folder_id}] [key={key}] size={size}")

        try:
            return self.file_repo.create_file(
                owner_id=owner_id,
                folder_id=folder_id,
                original_name=original_name,
                key=key,
                mime_type=content_type,
                size_bytes=size,
                ext=storage.get_extension(original_name),
            )
        except DriveException as e:
            logger.warning(f"Upload rejected after write, removing blob [key={key}]: {e}")
            storage.delete_blob(folder_id, key)
            raise

    def get_details(self, file_id: str, owner_id: str) -> File:
        file = self.file_repo.get_file_details(file_id, owner_id)
        if file is None:
            raise NotFoundError("File not found")
        return file

    def open_download(self, file_id: str, owner_id: str) -> Download:
        """
        Raises:
            NotFoundError: No such file for owner_id, or its blob is missing on disk
        """
        file = self.get_details(file_id, owner_id)
        if not storage.blob_exists(file.folder_id, file.key):
            logger.error(f"Blob missing on disk [file_id={file_id}] [key={file.key}]")
            raise NotFoundError("File missing on disk")

        return Download(
            meta=FileMeta(
                file_id=file.file_id,
                folder_id=file.folder_id,
                key=file.key,
                original_name=file.original_name,
            ),
            mime_type=file.mime_type,
            size_bytes=file.size_bytes,
            content=storage.read_blob_streaming(file.folder_id, file.key),
        )

    def rename_file(self, file_id: str, owner_id: str, new_name: str) -> File:
        return self.file_repo.rename_file(file_id, owner_id, new_name)

    def delete_file(self, file_id: str, owner_id: str) -> FileMeta:
        """
        Delete a file: blob from disk first, then the record.

        An already-missing blob is ignored. Any other disk error aborts before
        the record is touched.

        Returns:
            Metadata of the deleted file

        Raises:
            NotFoundError: No such file for owner_id
            StorageIOError: The blob exists but could not be removed
        """
        meta = self.file_repo.get_file_meta(file_id, owner_id)
        if meta is None:
            raise NotFoundError("File not found")

        if not storage.delete_blob(meta.folder_id, meta.key):
            logger.warning(f"Blob already absent, deleting record anyway [file_id={file_id}]")

        self.file_repo.delete_file_record(file_id)
        return meta
