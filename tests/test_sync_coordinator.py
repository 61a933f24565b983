"""Tests for comparison and migration across the master and backup databases."""

import pytest

from db_helpers import create_table, days_ago, fetch_rows, fixed_clock, insert_rows
from dbsync.errors import HandleValidationError, SchemaError
from dbsync.models.config import BACKUP, MASTER, SyncConfig, TableSettings
from dbsync.sync.models import TableDifference
from dbsync.sync.sync_coordinator import SyncCoordinator

SYNC_CONFIG = SyncConfig(tables={"task": TableSettings(timestamp_column="created_time")})


@pytest.fixture
def coordinator(registry) -> SyncCoordinator:
    return SyncCoordinator(registry, SYNC_CONFIG, clock=fixed_clock)


class TestHandleValidation:
    """Handles are checked before any database is touched."""

    @pytest.mark.parametrize(
        "from_,to",
        [(MASTER, MASTER), (BACKUP, BACKUP)],
    )
    def test_equal_handles_rejected(self, unreachable_registry, from_, to) -> None:
        coordinator = SyncCoordinator(unreachable_registry, SYNC_CONFIG, clock=fixed_clock)

        with pytest.raises(HandleValidationError, match="must be different"):
            coordinator.compare(from_, to)
        with pytest.raises(HandleValidationError, match="must be different"):
            coordinator.migrate(from_, to)

    @pytest.mark.parametrize(
        "from_,to",
        [(None, BACKUP), (MASTER, None), ("primary", BACKUP), (MASTER, "Backup"), (None, None)],
    )
    def test_unknown_handles_rejected(self, unreachable_registry, from_, to) -> None:
        coordinator = SyncCoordinator(unreachable_registry, SYNC_CONFIG, clock=fixed_clock)

        with pytest.raises(HandleValidationError) as exc_info:
            coordinator.compare(from_, to)

        assert str(exc_info.value) == (
            "Invalid parameters: from and to must be 'master' or 'backup'"
        )

    def test_unreachable_database_is_fatal_for_compare(self, unreachable_registry) -> None:
        coordinator = SyncCoordinator(unreachable_registry, SYNC_CONFIG, clock=fixed_clock)

        with pytest.raises(SchemaError):
            coordinator.compare(MASTER, BACKUP)


class TestCompare:
    def test_missing_row_reported_as_insert(self, coordinator, master_engine, backup_engine) -> None:
        create_table(master_engine, "task", "created_time")
        create_table(backup_engine, "task", "created_time")
        insert_rows(master_engine, "task", [{"id": 1, "name": "a", "created_time": days_ago(1)}])

        report = coordinator.compare(MASTER, BACKUP)

        assert report.success
        assert report.total_tables == 1
        assert report.inconsistent_tables == 1
        assert report.table_differences["task"] == TableDifference(
            consistent=False, insert_count=1, update_count=0, description="Missing 1 rows"
        )
        assert report.time_range == "2026-09-17 12:00:00 to 2026-10-17 12:00:00"

    def test_only_common_tables_are_compared(self, coordinator, master_engine, backup_engine) -> None:
        create_table(master_engine, "orders")
        create_table(master_engine, "master_only")
        create_table(backup_engine, "orders")
        create_table(backup_engine, "backup_only")

        report = coordinator.compare(MASTER, BACKUP)

        assert list(report.table_differences) == ["orders"]
        assert report.consistent_tables == 1

    def test_consistent_tables_symmetric(self, coordinator, master_engine, backup_engine) -> None:
        for engine in (master_engine, backup_engine):
            create_table(engine, "orders")
            create_table(engine, "customers")
        insert_rows(master_engine, "orders", [{"id": 1, "name": "a", "update_time": days_ago(1)}])
        insert_rows(backup_engine, "orders", [{"id": 1, "name": "b", "update_time": days_ago(1)}])
        rows = [{"id": 5, "name": "same", "update_time": days_ago(3)}]
        insert_rows(master_engine, "customers", rows)
        insert_rows(backup_engine, "customers", rows)

        forward = coordinator.compare(MASTER, BACKUP)
        backward = coordinator.compare(BACKUP, MASTER)

        assert forward.consistent_tables == backward.consistent_tables == 1
        assert forward.table_differences["orders"].description == "1 rows need update"
        assert backward.table_differences["orders"].description == "1 rows need update"

    def test_failed_table_recorded_and_others_continue(
        self, coordinator, master_engine, backup_engine
    ) -> None:
        create_table(master_engine, "orders")
        create_table(backup_engine, "orders", timestamp_column="modified")
        create_table(master_engine, "customers")
        create_table(backup_engine, "customers")

        report = coordinator.compare(MASTER, BACKUP)

        assert report.table_differences["orders"].startswith("Comparison failed: ")
        assert "update_time" in report.table_differences["orders"]
        assert isinstance(report.table_differences["customers"], TableDifference)
        assert report.failed_tables == ["orders"]
        assert report.consistent_tables + report.inconsistent_tables + len(report.failed_tables) == (
            report.total_tables
        )


class TestMigrate:
    def test_missing_row_inserted_once(self, coordinator, master_engine, backup_engine) -> None:
        create_table(master_engine, "task", "created_time")
        create_table(backup_engine, "task", "created_time")
        insert_rows(master_engine, "task", [{"id": 1, "name": "a", "created_time": days_ago(1)}])

        report = coordinator.migrate(MASTER, BACKUP)

        assert report.migrated_tables == ["task"]
        assert report.failed_tables == []
        assert fetch_rows(backup_engine, "task") == fetch_rows(master_engine, "task")
        assert coordinator.compare(MASTER, BACKUP).consistent_tables == 1

        coordinator.migrate(MASTER, BACKUP)
        assert len(fetch_rows(backup_engine, "task")) == 1

    def test_missing_target_table_reported(self, coordinator, master_engine, backup_engine) -> None:
        create_table(master_engine, "orders")
        create_table(master_engine, "customers")
        create_table(backup_engine, "customers")
        insert_rows(master_engine, "orders", [{"id": 1, "name": "a", "update_time": days_ago(1)}])
        insert_rows(master_engine, "customers", [{"id": 1, "name": "c", "update_time": days_ago(1)}])

        report = coordinator.migrate(MASTER, BACKUP)

        assert report.migrated_tables == ["customers"]
        assert len(report.failed_tables) == 1
        assert report.failed_tables[0].startswith("orders: ")
        assert "no such table" in report.failed_tables[0]
        assert report.success_count + report.failed_count == report.total_tables == 2

    def test_migrate_in_reverse_direction(self, coordinator, master_engine, backup_engine) -> None:
        create_table(master_engine, "orders")
        create_table(backup_engine, "orders")
        insert_rows(backup_engine, "orders", [{"id": 3, "name": "from backup", "update_time": days_ago(1)}])

        report = coordinator.migrate(BACKUP, MASTER)

        assert report.success_count == 1
        assert [row["name"] for row in fetch_rows(master_engine, "orders")] == ["from backup"]
