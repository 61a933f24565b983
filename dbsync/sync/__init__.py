"""Comparison and one-way migration between two databases."""

from dbsync.sync.diff_engine import DiffEngine
from dbsync.sync.merge_executor import MergeExecutor
from dbsync.sync.models import (
    CompareReport,
    MergeResult,
    MigrateReport,
    TableComparison,
    TableDiff,
    TableDifference,
)
from dbsync.sync.row_comparator import RowComparator, rows_equal
from dbsync.sync.sync_coordinator import SyncCoordinator

__all__ = [
    "CompareReport",
    "DiffEngine",
    "MergeExecutor",
    "MergeResult",
    "MigrateReport",
    "RowComparator",
    "SyncCoordinator",
    "TableComparison",
    "TableDiff",
    "TableDifference",
    "rows_equal",
]
