"""Row reads from a single table."""

from typing import Any

import structlog
from sqlalchemy import column, literal_column, select, table
from sqlalchemy.engine import Engine
from sqlalchemy.sql.expression import TableClause

from dbsync.models.window import TIME_FORMAT, TimeWindow

log = structlog.stdlib.get_logger()


def table_clause(table_name: str, columns: list[str], schema_name: str | None = None) -> TableClause:
    """Build a lightweight table construct; the dialect quotes every identifier."""
    return table(table_name, *(column(name) for name in columns), schema=schema_name)


class TableReader:
    """Reads rows and keys of tables in one schema."""

    def __init__(self, schema_name: str | None = None):
        self._schema_name: str | None = schema_name

    def read_rows(
        self,
        engine: Engine,
        table_name: str,
        timestamp_column: str | None = None,
        window: TimeWindow | None = None,
    ) -> list[dict[str, Any]]:
        """
        Read every row of a table, optionally restricted to a time window.

        Args:
            engine: Engine of the data source
            table_name: Table to read
            timestamp_column: Column the window applies to
            window: Window to apply; ignored when timestamp_column is None

        Returns:
            Rows as dictionaries in select order
        """
        windowed = window is not None and timestamp_column is not None
        if window is not None and timestamp_column is None:
            log.warning("table_has_no_timestamp_column", table=table_name)

        if windowed:
            target = table_clause(table_name, [timestamp_column], self._schema_name)
            timestamp = target.c[timestamp_column]
            # Second-precision text keeps both bounds inclusive against text-stored timestamps
            stmt = (
                select(literal_column("*"))
                .select_from(target)
                .where(
                    timestamp >= window.start.strftime(TIME_FORMAT),
                    timestamp <= window.end.strftime(TIME_FORMAT),
                )
            )
        else:
            stmt = select(literal_column("*")).select_from(table(table_name, schema=self._schema_name))

        with engine.connect() as conn:
            rows = [dict(row) for row in conn.execute(stmt).mappings()]

        log.debug(
            "table_rows_read",
            database=engine.url.database,
            table=table_name,
            row_count=len(rows),
            windowed=windowed,
        )
        return rows

    def read_keys(self, engine: Engine, table_name: str, primary_key: str) -> set[Any]:
        """
        Read the full key space of a table.

        Args:
            engine: Engine of the data source
            table_name: Table to read
            primary_key: Key column

        Returns:
            Set of key values
        """
        target = table_clause(table_name, [primary_key], self._schema_name)
        stmt = select(target.c[primary_key])

        with engine.connect() as conn:
            keys = set(conn.execute(stmt).scalars())

        log.debug("table_keys_read", database=engine.url.database, table=table_name, key_count=len(keys))
        return keys
