"""Local disk storage for accepted images.

Files are written flat into the storage directory as
``<millisecond-timestamp><original-extension>``. Two uploads landing in the
same millisecond with the same extension overwrite each other.
"""
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Union

from ..config import MAX_FILE_SIZE_BYTES

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}
ALLOWED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png"}

INVALID_TYPE_MESSAGE = "Only .jpg, .jpeg, and .png files are allowed!"


class UploadRejected(ValueError):
    """The uploaded file failed validation."""


class InvalidFileType(UploadRejected):
    def __init__(self) -> None:
        super().__init__(INVALID_TYPE_MESSAGE)


def _format_limit(limit_bytes: int) -> str:
    mib = 1024 * 1024
    if limit_bytes % mib == 0:
        return f"{limit_bytes // mib}MB"
    return f"{limit_bytes} bytes"


class FileTooLarge(UploadRejected):
    def __init__(self, limit_bytes: int) -> None:
        super().__init__(f"File size exceeds limit of {_format_limit(limit_bytes)}")
        self.limit_bytes = limit_bytes


def ensure_storage_dir(path: Union[str, Path]) -> Path:
    """Create the storage directory (and parents) if it does not exist."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def generate_filename(original_filename: str) -> str:
    """Timestamped name keeping the original extension as supplied."""
    ext = os.path.splitext(original_filename)[1]
    return f"{int(time.time() * 1000)}{ext}"


class ImageStorage:
    """Validates uploaded images and writes accepted ones to disk."""

    def __init__(self, upload_dir: Union[str, Path], max_file_size_bytes: int = MAX_FILE_SIZE_BYTES) -> None:
        self.upload_dir = Path(upload_dir)
        self.max_file_size_bytes = max_file_size_bytes

    def validate(self, filename: str, mime_type: str, size_bytes: int) -> None:
        """Raise UploadRejected if the file may not be stored.

        Extension and declared MIME type must both be allowed. The MIME type
        is whatever the client sent; contents are not inspected.
        """
        ext = os.path.splitext(filename)[1].lower()
        # Parameters such as "; charset=binary" are ignored.
        media_type = (mime_type or "").split(";", 1)[0].strip().lower()
        if ext not in ALLOWED_EXTENSIONS or media_type not in ALLOWED_MIME_TYPES:
            raise InvalidFileType()
        if size_bytes > self.max_file_size_bytes:
            raise FileTooLarge(self.max_file_size_bytes)

    def save(self, filename: str, mime_type: str, content: bytes) -> str:
        """Validate and store an upload.

        Args:
            filename: Original client filename
            mime_type: Client-declared MIME type
            content: File bytes

        Returns:
            The generated filename under the storage directory

        Raises:
            UploadRejected: If validation fails (nothing is written)
            OSError: If the directory or file cannot be written
        """
        self.validate(filename, mime_type, len(content))

        directory = ensure_storage_dir(self.upload_dir)
        stored_filename = generate_filename(filename)
        file_path = directory / stored_filename

        # Write beside the target, then rename, so the final name never
        # holds a partial file.
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".partial-")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(content)
            os.replace(tmp_name, file_path)
        except OSError:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

        logger.info("Saved file: %s (%d bytes)", file_path, len(content))
        return stored_filename

    def resolve(self, filename: str) -> Path:
        """Path of a stored file, or FileNotFoundError.

        Names with directory components, or that point outside the storage
        directory, are reported as missing.
        """
        if not filename or Path(filename).name != filename or filename.startswith("."):
            raise FileNotFoundError(filename)
        file_path = self.upload_dir / filename
        if not file_path.is_file():
            raise FileNotFoundError(filename)
        return file_path
