"""Table and column discovery through SQLAlchemy reflection."""

from typing import Any, Iterable, Mapping

import structlog
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from dbsync.errors import SchemaError

log = structlog.stdlib.get_logger()


class SchemaIntrospector:
    """Lists tables and writable columns of one schema."""

    def __init__(self, schema_name: str | None = None):
        """
        Initialize the introspector.

        Args:
            schema_name: Schema to inspect. None uses the connection default.
        """
        self._schema_name: str | None = schema_name

    @property
    def schema_name(self) -> str | None:
        return self._schema_name

    def list_tables(self, engine: Engine) -> list[str]:
        """
        List the base tables of the schema.

        Args:
            engine: Engine of the data source

        Returns:
            Table names in the order the database reports them

        Raises:
            SchemaError: If the database cannot be reached or reflected
        """
        try:
            tables = inspect(engine).get_table_names(schema=self._schema_name)
        except SQLAlchemyError as e:
            log.error(
                "list_tables_failed",
                database=engine.url.database,
                schema=self._schema_name,
                error=str(e),
            )
            raise SchemaError(f"Failed to list tables of {engine.url.database}: {e}") from e

        log.debug("tables_listed", database=engine.url.database, table_count=len(tables))
        return list(tables)

    def list_columns(self, engine: Engine, table_name: str) -> list[str]:
        """
        List the columns of a table, excluding generated columns.

        Args:
            engine: Engine of the data source
            table_name: Table to inspect

        Returns:
            Column names in ordinal order

        Raises:
            SchemaError: If the database cannot be reached or reflected
        """
        try:
            column_infos = inspect(engine).get_columns(table_name, schema=self._schema_name)
        except SQLAlchemyError as e:
            log.error("list_columns_failed", table=table_name, error=str(e))
            raise SchemaError(f"Failed to list columns of {table_name}: {e}") from e

        columns = self.writable_columns(column_infos)
        log.debug("table_columns_listed", table=table_name, columns=columns)
        return columns

    @staticmethod
    def writable_columns(column_infos: Iterable[Mapping[str, Any]]) -> list[str]:
        """Drop columns that carry a generation expression."""
        columns = []
        for info in column_infos:
            computed = info.get("computed") or {}
            if str(computed.get("sqltext") or "").strip():
                continue
            columns.append(info["name"])
        return columns

    def filter_to_sample(
        self,
        table_name: str,
        columns: list[str],
        sample_row: Mapping[str, Any] | None,
    ) -> list[str]:
        """
        Keep only the columns actually present in a sample row.

        Args:
            table_name: Table the columns belong to
            columns: Columns reported by the metadata
            sample_row: A row read from the table, or None

        Returns:
            Columns present both in the metadata and in the row
        """
        if sample_row is None:
            return columns

        valid_columns = [column for column in columns if column in sample_row]

        if len(valid_columns) != len(columns):
            log.warning(
                "column_metadata_mismatch",
                table=table_name,
                metadata_columns=columns,
                row_columns=list(sample_row.keys()),
                using_columns=valid_columns,
            )

        return valid_columns
