"""Property-based tests for row equality.

Timestamp columns tolerate sub-second differences so that rows copied
between databases with different timestamp precision still compare equal.
"""

from datetime import datetime, timedelta, timezone

import structlog
from hypothesis import given, settings
from hypothesis import strategies as st

from dbsync.sync.row_comparator import (
    RowComparator,
    is_timestamp_column,
    rows_equal,
    timestamps_equal,
)

log = structlog.stdlib.get_logger()

BASE_TIME = datetime(2026, 10, 1, 8, 30, 0)

name_strategy = st.text(min_size=0, max_size=30)


class TestTimestampTolerance:
    """Rows differing only in a timestamp column."""

    @given(offset_ms=st.integers(min_value=0, max_value=999), name=name_strategy)
    @settings(max_examples=100)
    def test_sub_second_difference_is_equal(self, offset_ms: int, name: str) -> None:
        """Differences below one second are ignored in both directions."""
        row_a = {"id": 1, "name": name, "update_time": BASE_TIME}
        row_b = {"id": 1, "name": name, "update_time": BASE_TIME + timedelta(milliseconds=offset_ms)}

        assert rows_equal(row_a, row_b), f"{offset_ms}ms apart should be equal"
        assert rows_equal(row_b, row_a), f"{offset_ms}ms apart should be equal in reverse"

    @given(offset_ms=st.integers(min_value=1000, max_value=10**9), name=name_strategy)
    @settings(max_examples=100)
    def test_difference_of_a_second_or_more_is_unequal(self, offset_ms: int, name: str) -> None:
        row_a = {"id": 1, "name": name, "created_time": BASE_TIME}
        row_b = {"id": 1, "name": name, "created_time": BASE_TIME + timedelta(milliseconds=offset_ms)}

        assert not rows_equal(row_a, row_b), f"{offset_ms}ms apart should be unequal"
        assert not rows_equal(row_b, row_a)

    @given(fraction=st.integers(min_value=0, max_value=999999))
    def test_fractional_seconds_ignored_in_strings(self, fraction: int) -> None:
        """String timestamps compare with their fractional part stripped."""
        assert timestamps_equal(f"2026-10-01 08:30:00.{fraction}", "2026-10-01 08:30:00")

    def test_string_timestamps_in_different_seconds_are_unequal(self) -> None:
        assert not timestamps_equal("2026-10-01 08:30:00.999", "2026-10-01 08:30:01")

    def test_naive_and_aware_datetimes_fall_back_to_equality(self) -> None:
        aware = BASE_TIME.replace(tzinfo=timezone.utc)

        assert not timestamps_equal(BASE_TIME, aware)
        assert timestamps_equal(aware, aware)


class TestRowEquality:
    """Column-by-column equality rules."""

    @given(name_a=name_strategy, name_b=name_strategy)
    @settings(max_examples=100)
    def test_non_timestamp_columns_use_exact_equality(self, name_a: str, name_b: str) -> None:
        row_a = {"id": 7, "name": name_a}
        row_b = {"id": 7, "name": name_b}

        assert rows_equal(row_a, row_b) == (name_a == name_b)

    def test_nulls(self) -> None:
        """Null equals null and differs from any value."""
        comparator = RowComparator()

        assert comparator.rows_equal({"id": 1, "name": None}, {"id": 1, "name": None})
        assert not comparator.rows_equal({"id": 1, "name": None}, {"id": 1, "name": "a"})
        assert not comparator.rows_equal({"id": 1, "update_time": BASE_TIME}, {"id": 1, "update_time": None})

    def test_different_column_counts_are_unequal(self) -> None:
        assert not rows_equal({"id": 1, "name": "a"}, {"id": 1, "name": "a", "extra": 1})

    def test_missing_column_is_treated_as_null(self) -> None:
        assert not rows_equal({"id": 1, "name": "a"}, {"id": 1, "title": "a"})

    @given(value=st.one_of(st.integers(), st.text(), st.booleans(), st.binary()))
    def test_row_equals_itself(self, value) -> None:
        row = {"id": 1, "payload": value, "update_time": BASE_TIME}
        assert rows_equal(row, dict(row))


def test_timestamp_column_detection() -> None:
    log.info("test_timestamp_column_detection")

    for name in ("created_time", "UPDATE_TIME", "birth_date", "event_timestamp", "Deadline_Date"):
        assert is_timestamp_column(name), f"{name} should be treated as a timestamp"

    for name in ("id", "name", "amount", "status"):
        assert not is_timestamp_column(name), f"{name} should not be treated as a timestamp"
