"""Project-wide constants (upload limits, streaming sizes, session lifetime)."""

MAX_UPLOAD_SIZE_BYTES: int = 10 * 1024 * 1024  # 10 MiB per uploaded file
UPLOAD_PIECE_SIZE_BYTES: int = 1024 * 1024
DOWNLOAD_PIECE_SIZE_BYTES: int = 64 * 1024

DEFAULT_MIME_TYPE: str = "application/octet-stream"

SESSION_MAX_AGE_SECONDS: int = 7 * 24 * 60 * 60
SESSION_COOKIE_NAME: str = "drive_session"
SESSION_USER_KEY: str = "user_id"

DEFAULT_DATABASE_PATH: str = "data/drive.db"
DEFAULT_UPLOADS_DIR: str = "uploads"

MAX_PASSWORD_BYTES: int = 72  # bcrypt input limit
