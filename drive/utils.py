"""Utility helper functions for the Drive application."""

import uuid
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote, urlparse


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def is_valid_id(value: str) -> bool:
    """
    Check that a path parameter looks like an id we generated.
    """
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def get_current_timestamp() -> datetime:
    """
    Get current UTC time.
    """
    return datetime.now(timezone.utc)


def normalize_name(name: Optional[str]) -> str:
    """
    Trim a user-supplied folder or file name; None becomes an empty string.
    """
    return str(name or "").strip()


def safe_redirect_target(
    return_to: Optional[str],
    referer: Optional[str],
    request_netloc: str,
    default: str,
) -> str:
    """
    Pick where to send the browser after a form post.

    Args:
        return_to: Explicit returnTo form value
        referer: Referer header value
        request_netloc: Host of the current request; referers from other hosts are ignored
        default: Fallback path

    Returns:
        A site-relative path
    """
    if return_to and _is_local_path(return_to):
        return return_to

    if referer:
        parsed = urlparse(referer)
        if parsed.netloc == request_netloc and _is_local_path(parsed.path):
            return f"{parsed.path}?{parsed.query}" if parsed.query else parsed.path

    return default


def _is_local_path(path: str) -> bool:
    return path.startswith("/") and not path.startswith("//") and "\\" not in path


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header carrying the original name.

    Names that are not plain ASCII are sent twice: an ASCII approximation in
    filename for old clients and the exact name in the RFC 5987 filename*
    parameter.
    """
    quoted = quote(filename, safe="")
    if quoted == filename:
        return f'attachment; filename="{filename}"'
    fallback = _ascii_filename(filename)
    return f"attachment; filename=\"{fallback}\"; filename*=utf-8''{quoted}"


def _ascii_filename(filename: str) -> str:
    return "".join(
        ch if " " <= ch <= "~" and ch not in '"\\' else "_"
        for ch in filename
    )
