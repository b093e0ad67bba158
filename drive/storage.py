"""Manages uploaded blobs on disk under uploads/<folder_id>/<key>."""

import re
import uuid
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator

from common.constants import DOWNLOAD_PIECE_SIZE_BYTES, UPLOAD_PIECE_SIZE_BYTES
from common.logging_config import get_logger
from drive.config import UPLOADS_DIR as _UPLOADS_DIR
from drive.exceptions import FileTooLargeError, StorageIOError

logger = get_logger(__name__)

UPLOADS_DIR = Path(_UPLOADS_DIR)

MAX_KEY_EXTENSION_LENGTH = 16

_KEY_EXTENSION_PATTERN = re.compile(r"\.[A-Za-z0-9]{1,%d}" % MAX_KEY_EXTENSION_LENGTH)


def generate_key(original_name: str) -> str:
    """
    Generate a storage key for a new upload.

    The key is a random 128-bit hex id plus the original extension, so it never
    depends on (or collides through) the user-supplied name. Extensions that are
    long or not plain alphanumeric are left off the key so it always fits a
    single path component.
    """
    ext = get_extension(original_name)
    if not _KEY_EXTENSION_PATTERN.fullmatch(ext):
        ext = ""
    return f"{uuid.uuid4().hex}{ext}"


def get_extension(original_name: str) -> str:
    """
    Extension of a user-supplied filename including the dot, or "".
    """
    return Path(original_name or "").suffix


def get_folder_dir(folder_id: str) -> Path:
    return UPLOADS_DIR / folder_id


def get_blob_path(folder_id: str, key: str) -> Path:
    """
    Get the disk path for a blob.

    Args:
        folder_id: Id of the folder the file lives in
        key: Generated storage key

    Returns:
        Path object for the blob
    """
    return get_folder_dir(folder_id) / key


def write_blob(
    folder_id: str,
    key: str,
    source: BinaryIO,
    max_bytes: int,
    piece_size: int = UPLOAD_PIECE_SIZE_BYTES,
) -> int:
    """
    Stream an upload to disk, enforcing a size limit.

    Args:
        folder_id: Id of the target folder
        key: Generated storage key
        source: Readable binary stream
        max_bytes: Largest accepted size

    Returns:
        Number of bytes written

    Raises:
        FileTooLargeError: The stream is longer than max_bytes; nothing is left on disk
        StorageIOError: Any other write failure
    """
    filepath = get_blob_path(folder_id, key)
    written = 0
    created = False

    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "xb") as out:
            created = True
            while True:
                piece = source.read(piece_size)
                if not piece:
                    break
                written += len(piece)
                if written > max_bytes:
                    raise FileTooLargeError(max_bytes)
                out.write(piece)
    except FileTooLargeError:
        logger.warning(f"Upload over limit, discarding partial blob [folder_id={folder_id}] [key={key}]")
        _discard(filepath)
        raise
    except OSError as e:
        logger.error(f"Failed to write blob {filepath}: {e}", exc_info=True)
        if created:
            _discard(filepath)
        raise StorageIOError(f"Failed to store file: {e}") from e

    logger.debug(f"Blob written [folder_id={folder_id}] [key={key}] size={written}")
    return written


def read_blob_streaming(
    folder_id: str,
    key: str,
    piece_size: int = DOWNLOAD_PIECE_SIZE_BYTES,
) -> Iterator[bytes]:
    """
    Stream blob data in pieces.

    Raises:
        FileNotFoundError: If the blob does not exist
    """
    filepath = get_blob_path(folder_id, key)
    with open(filepath, "rb") as f:
        while True:
            piece = f.read(piece_size)
            if not piece:
                break
            yield piece


def blob_exists(folder_id: str, key: str) -> bool:
    return get_blob_path(folder_id, key).is_file()


def delete_blob(folder_id: str, key: str) -> bool:
    """
    Delete a blob from disk. A blob that is already gone is not an error.

    Returns:
        True if the blob was deleted, False if it didn't exist

    Raises:
        StorageIOError: Any failure other than the blob being absent
    """
    filepath = get_blob_path(folder_id, key)
    try:
        filepath.unlink()
    except FileNotFoundError:
        logger.debug(f"Blob already absent: {filepath}")
        return False
    except OSError as e:
        logger.error(f"Failed to delete blob {filepath}: {e}", exc_info=True)
        raise StorageIOError(f"Failed to delete file from disk: {e}") from e
    return True


def delete_folder_blobs(folder_id: str, keys: Iterable[str]) -> int:
    """
    Delete the blobs of a folder's files and then its directory if empty.

    Every key is attempted even when an earlier one fails.

    Returns:
        Number of blobs actually removed

    Raises:
        StorageIOError: After all keys were tried, if any blob could not be removed
    """
    removed = 0
    failed = []
    for key in keys:
        try:
            if delete_blob(folder_id, key):
                removed += 1
        except StorageIOError:
            failed.append(key)

    folder_dir = get_folder_dir(folder_id)
    try:
        folder_dir.rmdir()
    except FileNotFoundError:
        pass
    except OSError as e:
        # Non-empty (orphans from an interrupted upload) or busy; leave it.
        logger.warning(f"Could not remove upload directory {folder_dir}: {e}")

    if failed:
        raise StorageIOError(
            f"Failed to delete {len(failed)} of the folder's files from disk [folder_id={folder_id}]"
        )
    return removed


def _discard(filepath: Path) -> None:
    try:
        filepath.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove partial blob {filepath}: {e}")
