"""Exceptions raised by comparison and migration."""


class SyncError(Exception):
    """Base class for comparison and migration failures."""


class HandleValidationError(SyncError):
    """Raised when ``from``/``to`` are not recognised handles or are equal."""


class ConnectivityError(SyncError):
    """Raised when a data source cannot be reached."""


class SchemaError(SyncError):
    """Raised when tables or columns cannot be introspected."""


class ComparisonError(SyncError):
    """Raised when a single table cannot be compared."""

    def __init__(self, table_name: str, message: str):
        super().__init__(f"Comparison of table {table_name} failed: {message}")
        self.table_name = table_name
        self.detail = message


class MergeError(SyncError):
    """Raised when a single table cannot be merged."""

    def __init__(self, table_name: str, message: str):
        super().__init__(f"Merge of table {table_name} failed: {message}")
        self.table_name = table_name
        self.detail = message
