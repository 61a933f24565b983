"""File upload and download storage."""

from dbsync.files.file_store import FileStore, StoredFileNotFoundError

__all__ = ["FileStore", "StoredFileNotFoundError"]
