"""
Local-filesystem object storage.

Objects are addressed by slash-separated keys relative to STORAGE_DIR and are
served by the API under STORAGE_BASE_URL (see main.py).
"""
import base64
import binascii
import logging
import os
import time
from pathlib import Path, PurePosixPath
from typing import Dict

from resume_tailor.core.config import settings
from resume_tailor.core.exceptions import NotFoundError, StorageError, ValidationFailedError

logger = logging.getLogger(__name__)


def normalize_key(key: str) -> str:
    """Strip leading slashes and reject keys that would leave the storage root."""
    cleaned = (key or "").replace("\\", "/").lstrip("/")
    parts = PurePosixPath(cleaned).parts
    if not parts or any(part in ("..", ".") for part in parts):
        raise StorageError(f"Invalid storage key: {key!r}")
    return "/".join(parts)


def _path_for(key: str) -> Path:
    root = Path(settings.storage.root_dir).resolve()
    path = (root / normalize_key(key)).resolve()
    if root not in path.parents:
        raise StorageError(f"Invalid storage key: {key!r}")
    return path


def public_url(key: str) -> str:
    return f"{settings.storage.base_url.rstrip('/')}/{normalize_key(key)}"


def make_upload_key(prefix: str, user_id: int, file_name: str) -> str:
    """`<prefix>/<user_id>/<ms timestamp>_<file_name>`."""
    base_name = os.path.basename(file_name.replace("\\", "/")) or "upload"
    return f"{prefix}/{user_id}/{int(time.time() * 1000)}_{base_name}"


def storage_put(key: str, data: bytes, mime_type: str) -> Dict[str, str]:
    """Write an object and return its public URL and normalized key."""
    normalized = normalize_key(key)
    path = _path_for(normalized)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        logger.error(f"Storage write failed for {normalized}: {e}")
        raise StorageError(f"Failed to store file: {normalized}")

    logger.info(f"Stored {normalized} ({len(data)} bytes, {mime_type})")
    return {"url": public_url(normalized), "key": normalized}


def storage_get(key: str) -> bytes:
    path = _path_for(key)
    if not path.is_file():
        raise NotFoundError(f"File not found: {normalize_key(key)}")
    try:
        return path.read_bytes()
    except OSError as e:
        logger.error(f"Storage read failed for {key}: {e}")
        raise StorageError(f"Failed to read file: {normalize_key(key)}")


def decode_upload(file_data: str) -> bytes:
    """Decode a base64 upload body, tolerating a `data:<mime>;base64,` prefix."""
    if file_data.startswith("data:") and "," in file_data:
        file_data = file_data.split(",", 1)[1]
    try:
        return base64.b64decode(file_data, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationFailedError("Invalid file data: expected base64")
