"""Storage for uploaded files under generated unique names."""

import mimetypes
import re
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

import structlog

log = structlog.stdlib.get_logger()

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_EXTENSION = re.compile(r"[A-Za-z0-9]+")


class StoredFileNotFoundError(FileNotFoundError):
    """Raised when a requested stored file does not exist."""


def file_extension(filename: str | None) -> str:
    """Return the lower-cased extension of a file name without the dot.

    Only alphanumeric extensions are kept; anything else yields ``""``.
    """
    if not filename or "." not in filename:
        return ""
    extension = filename.rsplit(".", 1)[1]
    if not _EXTENSION.fullmatch(extension):
        return ""
    return extension.lower()


class FileStore:
    """Saves uploads into a directory and serves them back by stored name."""

    def __init__(self, upload_dir: str | Path):
        """
        Initialize the file store.

        Args:
            upload_dir: Directory files are written to; created on first save
        """
        self._upload_dir = Path(upload_dir)
        log.info("file_store_initialized", upload_dir=str(self._upload_dir))

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    def generate_name(self, original_filename: str | None, now: datetime | None = None) -> str:
        """Build ``<yyyyMMddHHmmss>-<uuid4>[.ext]`` for an upload."""
        timestamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
        extension = file_extension(original_filename)
        name = f"{timestamp}-{uuid.uuid4()}"
        return f"{name}.{extension}" if extension else name

    def save(self, stream: BinaryIO, original_filename: str | None) -> str:
        """
        Write an uploaded stream to the store.

        Args:
            stream: Readable binary stream with the file content
            original_filename: Name the client sent; only its extension is kept

        Returns:
            The generated stored name

        Raises:
            OSError: If the directory or file cannot be written
        """
        self._upload_dir.mkdir(parents=True, exist_ok=True)

        stored_name = self.generate_name(original_filename)
        destination = self._upload_dir / stored_name

        with open(destination, "xb") as out:
            shutil.copyfileobj(stream, out)

        log.info(
            "file_saved",
            original_filename=original_filename,
            stored_name=stored_name,
            size_bytes=destination.stat().st_size,
        )
        return stored_name

    def resolve(self, name: str) -> Path:
        """
        Find a stored file by its exact name.

        Raises:
            StoredFileNotFoundError: If the name is not a plain file name or no such file exists
        """
        if not name or name in (".", "..") or Path(name).name != name or "\\" in name:
            raise StoredFileNotFoundError(name)

        path = self._upload_dir / name
        if not path.is_file():
            raise StoredFileNotFoundError(name)
        return path

    @staticmethod
    def content_type(path: Path) -> str:
        """Guess the media type of a stored file."""
        content_type, _ = mimetypes.guess_type(path.name)
        return content_type or DEFAULT_CONTENT_TYPE
