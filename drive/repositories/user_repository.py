"""User repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from drive.database import get_db_connection
from drive.exceptions import DuplicateUsernameError
from drive.utils import generate_uuid, get_current_timestamp

logger = get_logger(__name__)


@dataclass
class User:
    user_id: str
    username: str
    password_hash: str
    created_at: datetime


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        user_id=row["user_id"],
        username=row["username"],
        password_hash=row["password_hash"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class UserRepository:
    @staticmethod
    def create_user(username: str, password_hash: str) -> User:
        """
        Insert a new user.

        Uniqueness is left to the UNIQUE constraint on username, so two
        concurrent sign-ups with the same name cannot both succeed.

        Raises:
            DuplicateUsernameError: If the username is already taken
        """
        user_id = generate_uuid()
        created_at = get_current_timestamp()
        logger.debug(f"Creating user: {username} [user_id={user_id}]")

        with get_db_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    """
                    INSERT INTO users (user_id, username, password_hash, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (user_id, username, password_hash, created_at.isoformat())
                )
                conn.commit()
            except sqlite3.IntegrityError:
                logger.warning(f"Username already exists: {username}")
                raise DuplicateUsernameError(f"Username '{username}' already exists")
            except Exception as e:
                logger.error(f"Failed to create user {username}: {e}", exc_info=True)
                raise

        logger.info(f"User created successfully: {username} [user_id={user_id}]")
        return User(
            user_id=user_id,
            username=username,
            password_hash=password_hash,
            created_at=created_at,
        )

    @staticmethod
    def get_by_username(username: str) -> Optional[User]:
        logger.debug(f"Fetching user by username: {username}")
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT user_id, username, password_hash, created_at
                   FROM users WHERE username = ?""",
                (username,)
            )
            row = cursor.fetchone()

        if row is None:
            logger.debug(f"User not found: {username}")
            return None

        return _row_to_user(row)

    @staticmethod
    def get_by_user_id(user_id: str) -> Optional[User]:
        logger.debug(f"Fetching user by user_id: {user_id}")
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """SELECT user_id, username, password_hash, created_at
                   FROM users WHERE user_id = ?""",
                (user_id,)
            )
            row = cursor.fetchone()

        if row is None:
            logger.debug(f"User not found: {user_id}")
            return None

        return _row_to_user(row)
