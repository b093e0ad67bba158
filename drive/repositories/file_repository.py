"""File repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.constants import DEFAULT_MIME_TYPE
from common.logging_config import get_logger
from drive.database import get_db_connection, transaction
from drive.exceptions import DuplicateNameError, FolderNotFoundError, NotFoundError, ValidationError
from drive.utils import generate_uuid, get_current_timestamp, normalize_name

logger = get_logger(__name__)

FILE_COLUMNS = """f.file_id, f.owner_id, f.folder_id, f.original_name, f.key,
                  f.mime_type, f.size_bytes, f.ext, f.created_at"""


@dataclass
class File:
    file_id: str
    owner_id: str
    folder_id: str
    original_name: str
    key: str
    mime_type: str
    size_bytes: int
    ext: str
    created_at: datetime
    folder_name: Optional[str] = None


@dataclass(frozen=True)
class FileMeta:
    """
    Minimal projection needed to locate a file's blob on disk.
    """
    file_id: str
    folder_id: str
    key: str
    original_name: str


def _row_to_file(row: sqlite3.Row) -> File:
    return File(
        file_id=row["file_id"],
        owner_id=row["owner_id"],
        folder_id=row["folder_id"],
        original_name=row["original_name"],
        key=row["key"],
        mime_type=row["mime_type"],
        size_bytes=row["size_bytes"],
        ext=row["ext"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class FileRepository:
    @staticmethod
    def list_files_in_folder(folder_id: str, owner_id: str) -> List[File]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""SELECT {FILE_COLUMNS} FROM files f
                    WHERE f.owner_id = ? AND f.folder_id = ?
                    ORDER BY f.original_name ASC""",
                (owner_id, folder_id)
            )
            return [_row_to_file(row) for row in cursor.fetchall()]

    @staticmethod
    def create_file(
        owner_id: str,
        folder_id: str,
        original_name: str,
        key: str,
        mime_type: Optional[str] = None,
        size_bytes: Optional[int] = None,
        ext: Optional[str] = None,
    ) -> File:
        """
        Record an uploaded blob as a file inside an owned folder.

        The folder ownership check, the name check and the insert share one
        transaction.

        Raises:
            ValidationError: owner_id, folder_id, original_name or key missing
            FolderNotFoundError: folder_id is not a folder of owner_id
            DuplicateNameError: The folder already holds a file with this name
        """
        original_name = normalize_name(original_name)
        if not owner_id or not folder_id or not original_name or not key:
            raise ValidationError("ownerId, folderId, originalName, and key are required")

        file = File(
            file_id=generate_uuid(),
            owner_id=owner_id,
            folder_id=folder_id,
            original_name=original_name,
            key=key,
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            size_bytes=int(size_bytes or 0),
            ext=ext or "",
            created_at=get_current_timestamp(),
        )

        with transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM folders WHERE folder_id = ? AND owner_id = ?",
                (folder_id, owner_id)
            )
            folder_row = cursor.fetchone()
            if folder_row is None:
                logger.warning(f"Folder not found for upload [folder_id={folder_id}] [owner_id={owner_id}]")
                raise FolderNotFoundError("Folder not found")

            if FileRepository._find_by_name(cursor, folder_id, original_name) is not None:
                raise DuplicateNameError("A file with that name already exists in this folder")

            try:
                cursor.execute(
                    """
                    INSERT INTO files (file_id, owner_id, folder_id, original_name, key,
                                       mime_type, size_bytes, ext, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (file.file_id, file.owner_id, file.folder_id, file.original_name, file.key,
                     file.mime_type, file.size_bytes, file.ext, file.created_at.isoformat())
                )
            except sqlite3.IntegrityError:
                raise DuplicateNameError("A file with that name already exists in this folder")

        file.folder_name = folder_row["name"]
        logger.info(f"File created: {original_name} [file_id={file.file_id}] [folder_id={folder_id}]")
        return file

    @staticmethod
    def rename_file(file_id: str, owner_id: str, new_name: str) -> File:
        """
        Change a file's display name. The storage key never changes.

        Raises:
            ValidationError: Empty name
            NotFoundError: No such file for owner_id
            DuplicateNameError: Another file in the same folder has new_name
        """
        name = normalize_name(new_name)
        if not name:
            raise ValidationError("New filename is required")

        with transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {FILE_COLUMNS} FROM files f WHERE f.file_id = ? AND f.owner_id = ?",
                (file_id, owner_id)
            )
            row = cursor.fetchone()
            if row is None:
                raise NotFoundError("File not found")

            file = _row_to_file(row)

            duplicate_id = FileRepository._find_by_name(cursor, file.folder_id, name)
            if duplicate_id is not None and duplicate_id != file_id:
                raise DuplicateNameError("A file with that name already exists in this folder")

            try:
                cursor.execute(
                    "UPDATE files SET original_name = ? WHERE file_id = ? AND owner_id = ?",
                    (name, file_id, owner_id)
                )
            except sqlite3.IntegrityError:
                raise DuplicateNameError("A file with that name already exists in this folder")

        logger.info(f"File renamed [file_id={file_id}] '{file.original_name}' -> '{name}'")
        file.original_name = name
        return file

    @staticmethod
    def get_file_meta(file_id: str, owner_id: str) -> Optional[FileMeta]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT file_id, folder_id, key, original_name
                   FROM files WHERE file_id = ? AND owner_id = ?""",
                (file_id, owner_id)
            )
            row = cursor.fetchone()

        if row is None:
            return None

        return FileMeta(
            file_id=row["file_id"],
            folder_id=row["folder_id"],
            key=row["key"],
            original_name=row["original_name"],
        )

    @staticmethod
    def get_file_details(file_id: str, owner_id: str) -> Optional[File]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""SELECT {FILE_COLUMNS}, d.name AS folder_name
                    FROM files f
                    JOIN folders d ON d.folder_id = f.folder_id
                    WHERE f.file_id = ? AND f.owner_id = ?""",
                (file_id, owner_id)
            )
            row = cursor.fetchone()

        if row is None:
            return None

        file = _row_to_file(row)
        file.folder_name = row["folder_name"]
        return file

    @staticmethod
    def delete_file_record(file_id: str) -> None:
        """
        Remove a file row. Callers remove (or try to remove) the blob first.
        """
        logger.debug(f"Deleting file record [file_id={file_id}]")
        with get_db_connection() as conn:
            try:
                conn.execute("DELETE FROM files WHERE file_id = ?", (file_id,))
                conn.commit()
            except Exception as e:
                logger.error(f"Failed to delete file record [file_id={file_id}]: {e}", exc_info=True)
                raise
        logger.info(f"File record deleted [file_id={file_id}]")

    @staticmethod
    def _find_by_name(cursor: sqlite3.Cursor, folder_id: str, original_name: str) -> Optional[str]:
        cursor.execute(
            "SELECT file_id FROM files WHERE folder_id = ? AND original_name = ?",
            (folder_id, original_name)
        )
        row = cursor.fetchone()
        return row["file_id"] if row is not None else None
