"""Authentication and session utilities."""

import bcrypt
from fastapi import Request

from common.constants import SESSION_USER_KEY
from common.logging_config import get_logger
from drive.exceptions import NotAuthenticatedError
from drive.repositories.user_repository import User, UserRepository

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        password_hash: Bcrypt hash to verify against

    Returns:
        True if password matches hash, False otherwise
    """
    password_bytes = password.encode('utf-8')
    hash_bytes = password_hash.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hash_bytes)


def log_in(request: Request, user: User) -> None:
    """
    Bind the session to a user. Only the user id is stored in the cookie.
    """
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.user_id


def log_out(request: Request) -> None:
    request.session.clear()


def get_current_user(request: Request) -> User:
    """
    FastAPI dependency resolving the logged-in user from the session.

    The user is reloaded on every request so a deleted account loses access
    immediately.

    Raises:
        NotAuthenticatedError: No session, or the session's user no longer exists
    """
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        raise NotAuthenticatedError("Login required")

    user = UserRepository.get_by_user_id(user_id)
    if user is None:
        logger.warning(f"Session refers to unknown user [user_id={user_id}], clearing it")
        request.session.clear()
        raise NotAuthenticatedError("Login required")

    request.state.user_id = user.user_id
    return user
