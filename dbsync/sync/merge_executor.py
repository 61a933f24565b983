"""One-way merge of windowed source rows into a target table."""

from typing import Any

import structlog
from sqlalchemy import bindparam, insert, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import Insert, Update

from dbsync.errors import MergeError, SchemaError
from dbsync.models.config import SyncConfig
from dbsync.models.rows import Row, normalize_row, normalize_value
from dbsync.models.window import TimeWindow
from dbsync.storage.schema_introspector import SchemaIntrospector
from dbsync.storage.table_reader import TableReader, table_clause
from dbsync.sync.models import MergeResult

log = structlog.stdlib.get_logger()


def database_message(error: Exception) -> str:
    """Return the driver's message for a database error, without the SQL echo."""
    original = getattr(error, "orig", None)
    return str(original) if original is not None else str(error)


def bind_params(row: Row, columns: list[str]) -> dict[str, Any]:
    """Map a row onto the ``p_<i>`` bind names of a statement built over ``columns``."""
    return {f"p_{i}": value for i, value in enumerate(normalize_row(row, columns))}


class MergeExecutor:
    """Applies inserts and updates from a source table to a target table.

    Every row statement is committed on its own. A failure part way through a
    table leaves the rows merged so far in place.
    """

    def __init__(
        self,
        sync_config: SyncConfig,
        introspector: SchemaIntrospector | None = None,
        reader: TableReader | None = None,
    ):
        """
        Initialize the merge executor.

        Args:
            sync_config: Per-table key and timestamp settings
            introspector: Optional introspector (created from sync_config if None)
            reader: Optional table reader (created from sync_config if None)
        """
        self._sync_config: SyncConfig = sync_config
        self._introspector: SchemaIntrospector = introspector or SchemaIntrospector(
            sync_config.schema_name
        )
        self._reader: TableReader = reader or TableReader(sync_config.schema_name)

    def merge(
        self,
        source: Engine,
        target: Engine,
        table_name: str,
        window: TimeWindow,
    ) -> MergeResult:
        """
        Merge the windowed source rows of a table into the target.

        Source rows whose key exists anywhere in the target are updated,
        all others are inserted. Target-only rows are never touched.

        Args:
            source: Engine of the source database
            target: Engine of the target database
            table_name: Table to merge
            window: Window applied to the source rows

        Returns:
            MergeResult with the number of inserted and updated rows

        Raises:
            MergeError: If reading, introspecting or writing fails
        """
        settings = self._sync_config.settings_for(table_name)
        primary_key = settings.primary_key

        log.info(
            "merging_table",
            table=table_name,
            primary_key=primary_key,
            timestamp_column=settings.timestamp_column,
            time_range=window.describe(),
        )

        try:
            source_rows = self._reader.read_rows(
                source, table_name, settings.timestamp_column, window
            )

            if not source_rows:
                log.info("no_rows_to_merge", table=table_name)
                return MergeResult()

            # The whole target key space: a windowed source row may match a
            # target row created outside the window.
            target_keys = self._reader.read_keys(target, table_name, primary_key)

            columns = self._introspector.list_columns(source, table_name)
            columns = self._introspector.filter_to_sample(table_name, columns, source_rows[0])

            result = self._apply(target, table_name, columns, primary_key, source_rows, target_keys)

        except (SQLAlchemyError, SchemaError) as e:
            log.error("merge_table_failed", table=table_name, error=database_message(e))
            raise MergeError(table_name, database_message(e)) from e

        log.info(
            "table_merged",
            table=table_name,
            inserted_count=result.inserted_count,
            updated_count=result.updated_count,
        )
        return result

    def _apply(
        self,
        target: Engine,
        table_name: str,
        columns: list[str],
        primary_key: str,
        source_rows: list[dict[str, Any]],
        target_keys: set[Any],
    ) -> MergeResult:
        non_key_columns = [column for column in columns if column != primary_key]
        insert_stmt = self.build_insert(table_name, columns)
        update_stmt = self.build_update(table_name, non_key_columns, primary_key)

        if update_stmt is None:
            log.warning("table_has_no_updatable_columns", table=table_name)

        inserted = 0
        updated = 0

        with target.connect() as conn:
            for row in source_rows:
                key = row.get(primary_key)

                if key in target_keys:
                    if update_stmt is None:
                        continue
                    params = bind_params(row, non_key_columns)
                    params["pk_value"] = normalize_value(key)
                    conn.execute(update_stmt, params)
                    updated += 1
                else:
                    params = bind_params(row, columns)
                    conn.execute(insert_stmt, params)
                    inserted += 1

                conn.commit()

        return MergeResult(inserted_count=inserted, updated_count=updated)

    def build_insert(self, table_name: str, columns: list[str]) -> Insert:
        """Build ``INSERT INTO table (columns...) VALUES (...)`` with positional bind names."""
        target = table_clause(table_name, columns, self._sync_config.schema_name)
        return insert(target).values(
            {target.c[column]: bindparam(f"p_{i}") for i, column in enumerate(columns)}
        )

    def build_update(
        self, table_name: str, non_key_columns: list[str], primary_key: str
    ) -> Update | None:
        """Build ``UPDATE table SET ... WHERE primary_key = :pk_value``; None without columns to set."""
        if not non_key_columns:
            return None

        target = table_clause(
            table_name, [*non_key_columns, primary_key], self._sync_config.schema_name
        )
        return (
            update(target)
            .where(target.c[primary_key] == bindparam("pk_value"))
            .values({target.c[column]: bindparam(f"p_{i}") for i, column in enumerate(non_key_columns)})
        )
