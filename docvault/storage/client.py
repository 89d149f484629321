"""
Local File Storage
Upload validation, storage, streaming and removal of document files
"""

import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from fastapi import UploadFile

from docvault.core.config import settings
from docvault.core.exceptions import (
    NotFoundException,
    PayloadTooLargeException,
    StorageException,
    ValidationException,
)
from docvault.core.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class StoredFile:
    """A file written to the upload directory"""
    path: str
    original_name: str
    content_type: str
    size: int


def init_storage() -> None:
    """Create the upload directory if needed"""
    upload_dir = Path(settings.UPLOAD_DIR)
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Upload directory ready: {upload_dir.resolve()}")
    except OSError as e:
        logger.error(f"Failed to create upload directory {upload_dir}: {e}")
        raise StorageException("Failed to initialize file storage", path=str(upload_dir))


def unique_filename(original_name: Optional[str]) -> str:
    """<millis>-<random hex><original extension>"""
    ext = Path(original_name or "").suffix.lower()
    return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{ext}"


def validate_content_type(content_type: Optional[str]) -> str:
    if not content_type or content_type not in settings.ALLOWED_FILE_TYPES:
        raise ValidationException(
            "Invalid file type. Only PDF, Word documents, and images are allowed.",
            details={"content_type": content_type, "allowed": settings.ALLOWED_FILE_TYPES},
        )
    return content_type


async def save_upload(upload: UploadFile) -> StoredFile:
    """
    Validate and write an uploaded file to the upload directory

    The size limit is enforced while streaming so oversized bodies never
    land on disk in full.

    Raises:
        ValidationException: Missing file or disallowed content type
        PayloadTooLargeException: File exceeds MAX_FILE_SIZE
        StorageException: Disk write failed
    """
    if upload is None or not upload.filename:
        raise ValidationException("Please upload a file")

    content_type = validate_content_type(upload.content_type)

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    target = upload_dir / unique_filename(upload.filename)

    size = 0
    try:
        with open(target, "wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > settings.MAX_FILE_SIZE:
                    raise PayloadTooLargeException(settings.MAX_FILE_SIZE)
                out.write(chunk)
    except PayloadTooLargeException:
        remove_file(str(target))
        raise
    except OSError as e:
        remove_file(str(target))
        logger.error(f"Failed to store upload {upload.filename}: {e}")
        raise StorageException("Failed to store uploaded file", path=str(target))

    logger.debug(f"Stored upload {upload.filename} as {target} ({size} bytes)")
    return StoredFile(
        path=str(target),
        original_name=upload.filename,
        content_type=content_type,
        size=size,
    )


def remove_file(path: Optional[str]) -> bool:
    """Best-effort unlink; failures are logged, not raised"""
    if not path:
        return False
    try:
        os.remove(path)
        logger.debug(f"Deleted file: {path}")
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Failed to delete file {path}: {e}")
        return False


def ensure_exists(path: str) -> Path:
    """Resolve a stored path or raise 404 when it is gone from disk"""
    file_path = Path(path)
    if not file_path.is_file():
        logger.warning(f"Stored file missing on disk: {path}")
        raise NotFoundException("File")
    return file_path


def iter_file(path: str) -> Iterator[bytes]:
    """Yield the file in chunks for streaming responses"""
    with open(path, "rb") as f:
        while True:
            chunk = f.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk


def read_text(path: str, limit: int = 5000) -> str:
    """Read a file as UTF-8 (undecodable bytes dropped), truncated to `limit` characters"""
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        return f.read(limit)
