"""Folder repository: the per-owner folder forest."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from drive.database import get_db_connection, transaction
from drive.exceptions import (
    DuplicateNameError,
    HasChildrenError,
    NotFoundError,
    ParentNotFoundError,
    ValidationError,
)
from drive.repositories.file_repository import FileMeta
from drive.utils import generate_uuid, get_current_timestamp, normalize_name

logger = get_logger(__name__)

MAX_FOLDER_DEPTH = 1000


@dataclass
class Folder:
    folder_id: str
    name: str
    owner_id: str
    parent_id: Optional[str]
    created_at: datetime
    parent: Optional["Folder"] = None


def _row_to_folder(row: sqlite3.Row) -> Folder:
    return Folder(
        folder_id=row["folder_id"],
        name=row["name"],
        owner_id=row["owner_id"],
        parent_id=row["parent_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class FolderRepository:
    @staticmethod
    def list_root_folders(owner_id: str) -> List[Folder]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT folder_id, name, owner_id, parent_id, created_at
                   FROM folders WHERE owner_id = ? AND parent_id IS NULL
                   ORDER BY name ASC""",
                (owner_id,)
            )
            return [_row_to_folder(row) for row in cursor.fetchall()]

    @staticmethod
    def get_folder(folder_id: str, owner_id: str) -> Optional[Folder]:
        """
        Fetch one folder owned by owner_id, with its immediate parent attached.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT f.folder_id, f.name, f.owner_id, f.parent_id, f.created_at,
                       p.folder_id AS p_folder_id, p.name AS p_name, p.parent_id AS p_parent_id,
                       p.created_at AS p_created_at
                FROM folders f
                LEFT JOIN folders p ON p.folder_id = f.parent_id AND p.owner_id = f.owner_id
                WHERE f.folder_id = ? AND f.owner_id = ?
                """,
                (folder_id, owner_id)
            )
            row = cursor.fetchone()

        if row is None:
            return None

        folder = _row_to_folder(row)
        if row["p_folder_id"] is not None:
            folder.parent = Folder(
                folder_id=row["p_folder_id"],
                name=row["p_name"],
                owner_id=row["owner_id"],
                parent_id=row["p_parent_id"],
                created_at=datetime.fromisoformat(row["p_created_at"]),
            )
        return folder

    @staticmethod
    def get_parent_chain(folder_id: str, owner_id: str) -> List[Folder]:
        """
        Ancestors of a folder ordered from the root down to its immediate parent.

        Returns an empty list for root folders and for folders the owner does not have.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                WITH RECURSIVE ancestors(folder_id, name, owner_id, parent_id, created_at, depth) AS (
                    SELECT p.folder_id, p.name, p.owner_id, p.parent_id, p.created_at, 1
                    FROM folders f
                    JOIN folders p ON p.folder_id = f.parent_id
                    WHERE f.folder_id = ? AND f.owner_id = ? AND p.owner_id = ?
                    UNION ALL
                    SELECT p.folder_id, p.name, p.owner_id, p.parent_id, p.created_at, a.depth + 1
                    FROM folders p
                    JOIN ancestors a ON p.folder_id = a.parent_id
                    WHERE p.owner_id = ? AND a.depth < ?
                )
                SELECT folder_id, name, owner_id, parent_id, created_at
                FROM ancestors ORDER BY depth DESC
                """,
                (folder_id, owner_id, owner_id, owner_id, MAX_FOLDER_DEPTH)
            )
            return [_row_to_folder(row) for row in cursor.fetchall()]

    @staticmethod
    def list_child_folders(parent_id: str, owner_id: str) -> List[Folder]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT folder_id, name, owner_id, parent_id, created_at
                   FROM folders WHERE owner_id = ? AND parent_id = ?
                   ORDER BY name ASC""",
                (owner_id, parent_id)
            )
            return [_row_to_folder(row) for row in cursor.fetchall()]

    @staticmethod
    def create_folder(name: str, owner_id: str, parent_id: Optional[str] = None) -> Folder:
        """
        Create a folder at the root (parent_id None) or under an owned parent.

        The parent check, the sibling-name check and the insert share one
        transaction.

        Raises:
            ValidationError: Empty name or missing owner
            ParentNotFoundError: parent_id is not a folder of owner_id
            DuplicateNameError: A sibling already has this name
        """
        folder_name = normalize_name(name)
        if not folder_name:
            raise ValidationError("Folder name is required")
        if not owner_id:
            raise ValidationError("Folder owner is required")

        folder_id = generate_uuid()
        created_at = get_current_timestamp()

        with transaction() as conn:
            cursor = conn.cursor()

            if parent_id is not None:
                cursor.execute(
                    "SELECT folder_id FROM folders WHERE folder_id = ? AND owner_id = ?",
                    (parent_id, owner_id)
                )
                if cursor.fetchone() is None:
                    logger.warning(f"Parent folder not found [parent_id={parent_id}] [owner_id={owner_id}]")
                    raise ParentNotFoundError("Parent folder not found")

            if FolderRepository._find_sibling(cursor, owner_id, parent_id, folder_name) is not None:
                if parent_id is None:
                    raise DuplicateNameError("A root folder with that name already exists")
                raise DuplicateNameError("A folder with that name already exists here")

            try:
                cursor.execute(
                    """
                    INSERT INTO folders (folder_id, name, owner_id, parent_id, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (folder_id, folder_name, owner_id, parent_id, created_at.isoformat())
                )
            except sqlite3.IntegrityError:
                raise DuplicateNameError("A folder with that name already exists here")

        logger.info(f"Folder created: {folder_name} [folder_id={folder_id}] [parent_id={parent_id}]")
        return Folder(
            folder_id=folder_id,
            name=folder_name,
            owner_id=owner_id,
            parent_id=parent_id,
            created_at=created_at,
        )

    @staticmethod
    def rename_folder(folder_id: str, owner_id: str, new_name: str) -> Folder:
        """
        Rename a folder. Renaming to its current name is a no-op, not a collision.

        Raises:
            ValidationError: Empty name
            NotFoundError: No such folder for owner_id
            DuplicateNameError: A different sibling already has new_name
        """
        name = normalize_name(new_name)
        if not name:
            raise ValidationError("New folder name is required")

        with transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT folder_id, name, owner_id, parent_id, created_at
                   FROM folders WHERE folder_id = ? AND owner_id = ?""",
                (folder_id, owner_id)
            )
            row = cursor.fetchone()
            if row is None:
                raise NotFoundError("Folder not found")

            folder = _row_to_folder(row)

            duplicate_id = FolderRepository._find_sibling(cursor, owner_id, folder.parent_id, name)
            if duplicate_id is not None and duplicate_id != folder_id:
                raise DuplicateNameError("A folder with that name already exists here")

            try:
                cursor.execute(
                    "UPDATE folders SET name = ? WHERE folder_id = ? AND owner_id = ?",
                    (name, folder_id, owner_id)
                )
            except sqlite3.IntegrityError:
                raise DuplicateNameError("A folder with that name already exists here")

        logger.info(f"Folder renamed [folder_id={folder_id}] '{folder.name}' -> '{name}'")
        folder.name = name
        return folder

    @staticmethod
    def delete_folder(folder_id: str, owner_id: str) -> List[FileMeta]:
        """
        Delete a folder that has no subfolders.

        File records inside the folder go with it through ON DELETE CASCADE.
        Their blobs are untouched; the metadata of those records is returned so
        the caller can remove them.

        Raises:
            NotFoundError: No such folder for owner_id
            HasChildrenError: The folder still has subfolders
        """
        with transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT folder_id FROM folders WHERE folder_id = ? AND owner_id = ?",
                (folder_id, owner_id)
            )
            if cursor.fetchone() is None:
                raise NotFoundError("Folder not found")

            cursor.execute(
                "SELECT COUNT(*) FROM folders WHERE owner_id = ? AND parent_id = ?",
                (owner_id, folder_id)
            )
            child_count = cursor.fetchone()[0]
            if child_count > 0:
                logger.warning(f"Folder delete blocked, {child_count} subfolders [folder_id={folder_id}]")
                raise HasChildrenError("Folder has subfolders. Delete them first.")

            cursor.execute(
                """SELECT file_id, folder_id, key, original_name
                   FROM files WHERE folder_id = ? AND owner_id = ?""",
                (folder_id, owner_id)
            )
            cascaded = [
                FileMeta(
                    file_id=row["file_id"],
                    folder_id=row["folder_id"],
                    key=row["key"],
                    original_name=row["original_name"],
                )
                for row in cursor.fetchall()
            ]

            cursor.execute(
                "DELETE FROM folders WHERE folder_id = ? AND owner_id = ?",
                (folder_id, owner_id)
            )

        logger.info(f"Folder deleted [folder_id={folder_id}] with {len(cascaded)} file records")
        return cascaded

    @staticmethod
    def _find_sibling(
        cursor: sqlite3.Cursor,
        owner_id: str,
        parent_id: Optional[str],
        name: str,
    ) -> Optional[str]:
        # "IS" matches NULL parent_id for root folders as well as concrete ids.
        cursor.execute(
            """SELECT folder_id FROM folders
               WHERE owner_id = ? AND parent_id IS ? AND name = ?""",
            (owner_id, parent_id, name)
        )
        row = cursor.fetchone()
        return row["folder_id"] if row is not None else None
