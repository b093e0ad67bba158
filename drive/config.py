"""Configuration settings for the Drive web application."""

import os
import secrets

from common.constants import (
    DEFAULT_DATABASE_PATH,
    DEFAULT_UPLOADS_DIR,
    MAX_UPLOAD_SIZE_BYTES,
    SESSION_MAX_AGE_SECONDS,
)


DATABASE_PATH = os.environ.get("DRIVE_DATABASE_PATH", DEFAULT_DATABASE_PATH)

DB_TIMEOUT_SECONDS = float(os.environ.get("DRIVE_DB_TIMEOUT", "5.0"))

UPLOADS_DIR = os.environ.get("DRIVE_UPLOADS_DIR", DEFAULT_UPLOADS_DIR)

MAX_UPLOAD_BYTES = int(os.environ.get("DRIVE_MAX_UPLOAD_BYTES", str(MAX_UPLOAD_SIZE_BYTES)))

# Without DRIVE_SECRET_KEY sessions do not survive a restart.
SECRET_KEY = os.environ.get("DRIVE_SECRET_KEY") or secrets.token_hex(32)

SESSION_MAX_AGE = int(os.environ.get("DRIVE_SESSION_MAX_AGE", str(SESSION_MAX_AGE_SECONDS)))

SESSION_HTTPS_ONLY = os.environ.get("DRIVE_SESSION_HTTPS_ONLY", "false").lower() == "true"

DRIVE_HOST = os.environ.get("DRIVE_HOST", "0.0.0.0")

DRIVE_PORT = int(os.environ.get("DRIVE_PORT", "3000"))
