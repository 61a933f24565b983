"""Synchronization coordinator for comparing and migrating two databases."""

from datetime import datetime
from typing import Callable

import structlog
from sqlalchemy.engine import Engine

from dbsync.errors import ComparisonError, HandleValidationError
from dbsync.models.config import DATA_SOURCE_HANDLES, SyncConfig
from dbsync.models.window import TimeWindow
from dbsync.storage.data_sources import DataSourceRegistry
from dbsync.storage.schema_introspector import SchemaIntrospector
from dbsync.storage.table_reader import TableReader
from dbsync.sync.diff_engine import DiffEngine
from dbsync.sync.merge_executor import MergeExecutor, database_message
from dbsync.sync.models import (
    CompareReport,
    MigrateReport,
    TableComparison,
    TableDifference,
)

log = structlog.stdlib.get_logger()


class SyncCoordinator:
    """Orchestrates comparison and one-way migration between two data sources.

    Tables are processed one after another. A failing table is recorded and
    the next table is processed; nothing is retried and nothing is rolled
    back across tables.
    """

    def __init__(
        self,
        data_sources: DataSourceRegistry,
        sync_config: SyncConfig | None = None,
        diff_engine: DiffEngine | None = None,
        merge_executor: MergeExecutor | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize sync coordinator.

        Args:
            data_sources: Registry resolving handles to engines
            sync_config: Optional sync configuration (defaults used if None)
            diff_engine: Optional diff engine
            merge_executor: Optional merge executor (created from sync_config if None)
            clock: Returns the current time; the window ends there
        """
        self._data_sources: DataSourceRegistry = data_sources
        self._sync_config: SyncConfig = sync_config or SyncConfig()
        self._introspector: SchemaIntrospector = SchemaIntrospector(self._sync_config.schema_name)
        self._reader: TableReader = TableReader(self._sync_config.schema_name)
        self._diff_engine: DiffEngine = diff_engine or DiffEngine()
        self._merge_executor: MergeExecutor = merge_executor or MergeExecutor(
            self._sync_config, self._introspector, self._reader
        )
        self._clock: Callable[[], datetime] = clock

        log.info("sync_coordinator_initialized", window_days=self._sync_config.window_days)

    def validate_handles(self, from_: str | None, to: str | None) -> None:
        """
        Check that both handles are recognised and distinct.

        Raises:
            HandleValidationError: If a handle is unknown or both are equal
        """
        allowed = " or ".join(f"'{handle}'" for handle in DATA_SOURCE_HANDLES)

        if not self._data_sources.is_valid(from_) or not self._data_sources.is_valid(to):
            raise HandleValidationError(f"Invalid parameters: from and to must be {allowed}")

        if from_ == to:
            raise HandleValidationError("Invalid parameters: from and to must be different")

    def current_window(self) -> TimeWindow:
        """Compute the rolling window ending now."""
        return TimeWindow.last_days(self._sync_config.window_days, now=self._clock())

    def compare(self, from_: str, to: str) -> CompareReport:
        """
        Compare every table the two data sources have in common.

        Both sides are read with the same window, so only rows that a
        migration would consider are evaluated.

        Args:
            from_: Source handle
            to: Target handle

        Returns:
            CompareReport with per-table differences

        Raises:
            HandleValidationError: If the handles are invalid
            SchemaError: If the table lists cannot be read
        """
        self.validate_handles(from_, to)

        start_time = datetime.now()
        window = self.current_window()
        source = self._data_sources.resolve(from_)
        target = self._data_sources.resolve(to)

        log.info("compare_started", source=from_, target=to, time_range=window.describe())

        common_tables = self.common_tables(from_, to)

        table_differences: dict[str, TableDifference | str] = {}
        consistent_tables = 0
        inconsistent_tables = 0

        for table_name in common_tables:
            try:
                comparison = self.compare_table(source, target, table_name, window)
            except ComparisonError as e:
                log.error("compare_table_failed", table=table_name, error=str(e))
                table_differences[table_name] = f"Comparison failed: {e.detail}"
                continue

            table_differences[table_name] = TableDifference.from_comparison(comparison)
            if comparison.consistent:
                consistent_tables += 1
            else:
                inconsistent_tables += 1

        report = CompareReport(
            time_range=window.describe(),
            total_tables=len(common_tables),
            consistent_tables=consistent_tables,
            inconsistent_tables=inconsistent_tables,
            table_differences=table_differences,
        )

        log.info(
            "compare_completed",
            source=from_,
            target=to,
            total_tables=report.total_tables,
            consistent_tables=report.consistent_tables,
            inconsistent_tables=report.inconsistent_tables,
            failed_tables=len(report.failed_tables),
            duration_seconds=(datetime.now() - start_time).total_seconds(),
        )

        return report

    def common_tables(self, from_: str, to: str) -> list[str]:
        """Source tables that also exist on the target, in source order."""
        source_tables = self._introspector.list_tables(self._data_sources.resolve(from_))
        target_tables = set(self._introspector.list_tables(self._data_sources.resolve(to)))
        return [table_name for table_name in source_tables if table_name in target_tables]

    def compare_table(
        self, source: Engine, target: Engine, table_name: str, window: TimeWindow
    ) -> TableComparison:
        """
        Diff one table over the window.

        Raises:
            ComparisonError: If either side cannot be read
        """
        settings = self._sync_config.settings_for(table_name)

        try:
            source_rows = self._reader.read_rows(
                source, table_name, settings.timestamp_column, window
            )
            target_rows = self._reader.read_rows(
                target, table_name, settings.timestamp_column, window
            )
            diff = self._diff_engine.diff(source_rows, target_rows, settings.primary_key)
        except Exception as e:
            raise ComparisonError(table_name, database_message(e)) from e

        comparison = TableComparison(
            table_name=table_name,
            diff=diff,
            source_row_count=len(source_rows),
            target_row_count=len(target_rows),
        )

        log.info(
            "table_compared",
            table=table_name,
            source_row_count=comparison.source_row_count,
            target_row_count=comparison.target_row_count,
            merge_operation_count=comparison.merge_operation_count,
            description=comparison.merge_description(),
        )

        return comparison

    def migrate(self, from_: str, to: str) -> MigrateReport:
        """
        Merge the windowed rows of every source table into the target.

        Tables missing on the target are attempted too; they fail at the SQL
        layer and are reported in ``failed_tables``.

        Args:
            from_: Source handle
            to: Target handle

        Returns:
            MigrateReport listing migrated and failed tables

        Raises:
            HandleValidationError: If the handles are invalid
            SchemaError: If the source table list cannot be read
        """
        self.validate_handles(from_, to)

        start_time = datetime.now()
        window = self.current_window()
        source = self._data_sources.resolve(from_)
        target = self._data_sources.resolve(to)

        log.info("migrate_started", source=from_, target=to, time_range=window.describe())

        all_tables = self._introspector.list_tables(source)

        migrated_tables: list[str] = []
        failed_tables: list[str] = []

        for table_name in all_tables:
            try:
                self._merge_executor.merge(source, target, table_name, window)
                migrated_tables.append(table_name)
            except Exception as e:
                log.error("migrate_table_failed", table=table_name, error=str(e))
                failed_tables.append(f"{table_name}: {getattr(e, 'detail', e)}")

        report = MigrateReport(
            migrated_tables=migrated_tables,
            failed_tables=failed_tables,
            total_tables=len(all_tables),
            success_count=len(migrated_tables),
            failed_count=len(failed_tables),
            time_range=window.describe(),
        )

        log.info(
            "migrate_completed",
            source=from_,
            target=to,
            total_tables=report.total_tables,
            success_count=report.success_count,
            failed_count=report.failed_count,
            duration_seconds=(datetime.now() - start_time).total_seconds(),
        )

        return report
