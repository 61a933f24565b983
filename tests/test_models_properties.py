"""Property-based tests for row values, time windows and report models."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from dbsync.errors import ComparisonError, MergeError
from dbsync.models.rows import normalize_row, normalize_value
from dbsync.models.window import TimeWindow
from dbsync.sync.models import (
    CompareReport,
    ErrorReport,
    MigrateReport,
    TableComparison,
    TableDiff,
    TableDifference,
)


class FakeLob:
    """Stands in for a driver large-object handle."""

    def __init__(self, content=None, error: Exception | None = None):
        self._content = content
        self._error = error

    def read(self):
        if self._error is not None:
            raise self._error
        return self._content


class TestNormalizeValue:
    @given(
        value=st.one_of(
            st.none(),
            st.booleans(),
            st.integers(),
            st.text(),
            st.binary(),
            st.decimals(allow_nan=False),
            st.datetimes(),
            st.times(),
        )
    )
    @settings(max_examples=100)
    def test_bindable_values_pass_through(self, value) -> None:
        assert normalize_value(value) is value

    @given(value=st.dates())
    def test_dates_become_midnight_datetimes(self, value: date) -> None:
        normalized = normalize_value(value)

        assert isinstance(normalized, datetime)
        assert normalized.date() == value
        assert normalized.time() == time.min

    @given(content=st.binary())
    def test_buffers_become_bytes(self, content: bytes) -> None:
        assert normalize_value(bytearray(content)) == content
        assert isinstance(normalize_value(memoryview(content)), bytes)

    def test_lob_is_read(self) -> None:
        assert normalize_value(FakeLob("clob text")) == "clob text"
        assert normalize_value(FakeLob(bytearray(b"blob"))) == b"blob"

    def test_unreadable_lob_passed_through(self) -> None:
        lob = FakeLob(error=OSError("connection closed"))

        assert normalize_value(lob) is lob

    def test_normalize_row_follows_column_order(self) -> None:
        row = {"name": "a", "id": 1, "amount": Decimal("2.50")}

        assert normalize_row(row, ["id", "amount", "missing"]) == [1, Decimal("2.50"), None]


class TestTimeWindow:
    @given(
        days=st.integers(min_value=1, max_value=3650),
        now=st.datetimes(min_value=datetime(2000, 1, 1), max_value=datetime(2100, 1, 1)),
    )
    def test_last_days_spans_requested_length(self, days: int, now: datetime) -> None:
        window = TimeWindow.last_days(days, now=now)

        assert window.end == now
        assert window.end - window.start == timedelta(days=days)

    def test_describe(self) -> None:
        window = TimeWindow(start=datetime(2026, 9, 17, 12, 0, 0), end=datetime(2026, 10, 17, 12, 0, 0, 5000))

        assert window.describe() == "2026-09-17 12:00:00 to 2026-10-17 12:00:00"


class TestTableComparison:
    def comparison(self, **counts) -> TableComparison:
        return TableComparison(table_name="orders", diff=TableDiff(**counts))

    def test_descriptions(self) -> None:
        assert self.comparison().describe() == "Data consistent"
        assert self.comparison(unchanged_count=4, target_only_count=2).describe() == "Data consistent"
        assert self.comparison(insert_count=2).describe() == "Missing 2 rows"
        assert self.comparison(update_count=1).describe() == "1 rows need update"
        assert (
            self.comparison(insert_count=2, update_count=1).describe()
            == "Missing 2 rows, 1 rows need update"
        )

    def test_merge_description(self) -> None:
        assert self.comparison().merge_description() == "No rows to merge"
        assert (
            self.comparison(insert_count=1, unchanged_count=3, target_only_count=2).merge_description()
            == "1 rows to insert, 3 rows unchanged, 2 rows only in target"
        )


class TestReportSerialization:
    """Reports are rendered with camelCase keys."""

    def test_compare_report(self) -> None:
        comparison = TableComparison(table_name="task", diff=TableDiff(insert_count=1))
        report = CompareReport(
            time_range="a to b",
            total_tables=2,
            consistent_tables=0,
            inconsistent_tables=1,
            table_differences={
                "task": TableDifference.from_comparison(comparison),
                "orders": "Comparison failed: boom",
            },
        )

        body = report.model_dump(by_alias=True)

        assert set(body) == {
            "success",
            "timeRange",
            "totalTables",
            "consistentTables",
            "inconsistentTables",
            "tableDifferences",
        }
        assert body["tableDifferences"]["task"]["insertCount"] == 1
        assert body["tableDifferences"]["orders"] == "Comparison failed: boom"
        assert report.failed_tables == ["orders"]

    def test_migrate_report(self) -> None:
        report = MigrateReport(
            migrated_tables=["a"],
            failed_tables=["b: no such table: b"],
            total_tables=2,
            success_count=1,
            failed_count=1,
            time_range="a to b",
        )

        body = report.model_dump(by_alias=True)

        assert body["migratedTables"] == ["a"]
        assert body["failedTables"] == ["b: no such table: b"]
        assert body["successCount"] == 1
        assert body["failedCount"] == 1

    def test_error_report(self) -> None:
        assert ErrorReport(error="nope").model_dump(by_alias=True) == {"success": False, "error": "nope"}


def test_table_errors_keep_table_and_detail() -> None:
    comparison_error = ComparisonError("orders", "no such column: update_time")
    merge_error = MergeError("orders", "no such table: orders")

    assert str(comparison_error) == "Comparison of table orders failed: no such column: update_time"
    assert comparison_error.detail == "no such column: update_time"
    assert merge_error.table_name == "orders"
    assert str(merge_error) == "Merge of table orders failed: no such table: orders"
