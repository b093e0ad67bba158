"""Database schema and connection management for SQLite."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from drive.config import DATABASE_PATH, DB_TIMEOUT_SECONDS


def init_database() -> None:
    """
    Initialize database and create tables if they don't exist.
    """
    db_path = Path(DATABASE_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection() as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS users (
                user_id TEXT PRIMARY KEY,
                username TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS folders (
                folder_id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                owner_id TEXT NOT NULL,
                parent_id TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY(owner_id) REFERENCES users(user_id) ON DELETE CASCADE,
                FOREIGN KEY(parent_id) REFERENCES folders(folder_id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS files (
                file_id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                folder_id TEXT NOT NULL,
                original_name TEXT NOT NULL,
                key TEXT UNIQUE NOT NULL,
                mime_type TEXT NOT NULL,
                size_bytes INTEGER NOT NULL,
                ext TEXT NOT NULL,
                created_at TEXT NOT NULL,
                UNIQUE(folder_id, original_name),
                FOREIGN KEY(owner_id) REFERENCES users(user_id) ON DELETE CASCADE,
                FOREIGN KEY(folder_id) REFERENCES folders(folder_id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_folders_owner_parent ON folders(owner_id, parent_id)
        """)

        cursor.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_folders_root_name_unique
            ON folders(owner_id, name) WHERE parent_id IS NULL
        """)

        cursor.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_folders_sibling_name_unique
            ON folders(parent_id, name) WHERE parent_id IS NOT NULL
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_files_owner_folder ON files(owner_id, folder_id)
        """)

        conn.commit()


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.

    Foreign keys are off by default in SQLite and must be enabled per connection.
    """
    conn = sqlite3.connect(DATABASE_PATH, timeout=DB_TIMEOUT_SECONDS)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def transaction() -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager running its body as one write transaction.

    BEGIN IMMEDIATE takes the write lock before the first read, so a
    check-then-insert inside the block cannot interleave with another writer.
    Commits on success, rolls back on any exception.
    """
    with get_db_connection() as conn:
        conn.isolation_level = None
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
