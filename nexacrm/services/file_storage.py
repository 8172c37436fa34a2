"""On-disk storage for uploaded files."""

import logging
import os
import uuid
from pathlib import Path

from fastapi import UploadFile

from nexacrm.core.errors import ValidationError
from nexacrm.core.settings import get_settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".png", ".jpg", ".jpeg", ".gif", ".zip", ".txt", ".csv",
}
MAX_FILE_SIZE = 50 * 1024 * 1024
MAX_FILES_PER_UPLOAD = 10
CHUNK_SIZE = 1024 * 1024


def upload_dir() -> Path:
    path = Path(get_settings().upload_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def blob_path(stored_name: str) -> Path:
    return upload_dir() / stored_name


def extension_of(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def check_extension(filename: str) -> str:
    ext = extension_of(filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"Unsupported file type: {filename}")
    return ext


async def save_upload(upload: UploadFile) -> tuple[str, int]:
    """Write the upload under a fresh random name; returns (stored_name, size)."""
    stored_name = f"{uuid.uuid4().hex}{check_extension(upload.filename)}"
    target = blob_path(stored_name)
    size = 0
    try:
        with target.open("wb") as out:
            while chunk := await upload.read(CHUNK_SIZE):
                size += len(chunk)
                if size > MAX_FILE_SIZE:
                    raise ValidationError(f"{upload.filename} exceeds the 50 MB limit")
                out.write(chunk)
    except Exception:
        target.unlink(missing_ok=True)
        raise
    return stored_name, size


def remove_blob(stored_name: str) -> bool:
    """Delete a stored blob; a missing blob is not an error."""
    try:
        blob_path(stored_name).unlink()
    except FileNotFoundError:
        logger.warning("Blob %s already missing", stored_name)
        return False
    return True
