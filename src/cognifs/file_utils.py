"""Utilities for file operations."""

import hashlib
from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from cognifs.models import FileRecord


class FileError(Exception):
    """Base exception for file operations."""

    pass


class FileWriteError(FileError):
    """Raised when file operations fail."""

    pass


def compute_file_hash(path: Path, chunk_size: int = 64 * 1024) -> str:
    """
    Compute SHA-256 checksum of a file's bytes.

    The file is read in fixed-size chunks so memory use does not depend on
    file size.

    Args:
        path: File to hash
        chunk_size: Bytes read per iteration

    Returns:
        SHA-256 hex digest

    Raises:
        OSError: If the file cannot be read
    """
    sha256_hash = hashlib.sha256()
    with path.open("rb") as f:
        while chunk := f.read(chunk_size):
            sha256_hash.update(chunk)
    return sha256_hash.hexdigest()


def get_extension(path: Path) -> str:
    """Lowercase extension without the dot, empty when there is none."""
    return path.suffix[1:].lower() if path.suffix else ""


def build_file_record(path: Path, chunk_size: int = 64 * 1024) -> FileRecord:
    """
    Stat and hash a file into a FileRecord.

    Args:
        path: Absolute, normalized file path

    Raises:
        OSError: If the file vanished or cannot be read
    """
    stats = path.stat()
    # st_birthtime only exists on some platforms
    created = getattr(stats, "st_birthtime", None) or stats.st_ctime
    return FileRecord(
        path=path,
        size=stats.st_size,
        extension=get_extension(path),
        created_at=datetime.fromtimestamp(created, tz=timezone.utc),
        modified_at=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
        content_hash=compute_file_hash(path, chunk_size),
    )


def ensure_directory(path: Path) -> None:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure

    Raises:
        FileWriteError: If directory creation fails
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create directory: {path}: {e}")
        raise FileWriteError(f"Failed to create directory {path}: {e}")


def write_file_atomic(path: Path, content: str) -> None:
    """
    Write file with atomic operation using temporary file.

    Args:
        path: Target file path
        content: Content to write

    Raises:
        FileWriteError: If write operation fails
    """
    temp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        temp_path.write_text(content, encoding="utf-8")
        temp_path.replace(path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        logger.error(f"Failed to write file: {path}: {e}")
        raise FileWriteError(f"Failed to write file {path}: {e}")


def is_relative_to(path: Path, root: Path) -> bool:
    """True when path equals root or lies beneath it."""
    return path == root or root in path.parents
