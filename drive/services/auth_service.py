"""Authentication service for business logic."""

from typing import Optional

from common.constants import MAX_PASSWORD_BYTES
from common.logging_config import get_logger
from drive.auth import hash_password, verify_password
from drive.exceptions import ValidationError
from drive.repositories.user_repository import User, UserRepository

logger = get_logger(__name__)


class AuthService:
    def __init__(self):
        self.user_repo = UserRepository()

    def register_user(self, username: str, password: str) -> User:
        """
        Create an account. Username uniqueness is decided by the store.

        Raises:
            ValidationError: Empty username or password
            DuplicateUsernameError: Username already taken
        """
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        logger.info(f"Attempting to register user: {username}")
        user = self.user_repo.create_user(username=username, password_hash=hash_password(password))
        logger.info(f"Successfully registered user: {username} [user_id={user.user_id}]")
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """
        Check a username/password pair.

        Returns:
            The user on success, None for an unknown user or a wrong password
        """
        username = (username or "").strip()
        logger.info(f"Login attempt for user: {username}")
        if not username or not password or len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            logger.warning("Login failed: missing or oversized credentials")
            return None

        user = self.user_repo.get_by_username(username)
        if user is None:
            logger.warning(f"Login failed: username '{username}' not found")
            return None

        if not verify_password(password, user.password_hash):
            logger.warning(f"Login failed: invalid password for username '{username}'")
            return None

        logger.info(f"Successfully logged in user: {username} [user_id={user.user_id}]")
        return user
