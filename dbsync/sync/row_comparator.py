"""Row equality with tolerance for timestamp round-trips."""

import re
from datetime import datetime, timedelta
from typing import Any

import structlog

from dbsync.models.rows import Row

log = structlog.stdlib.get_logger()

TIMESTAMP_TOLERANCE = timedelta(seconds=1)

_TIMESTAMP_NAME_MARKERS = ("time", "date", "timestamp")
_FRACTIONAL_SECONDS = re.compile(r"\.\d+")


def is_timestamp_column(column_name: str) -> bool:
    """Check whether a column name marks it as holding a timestamp."""
    lowered = column_name.lower()
    return any(marker in lowered for marker in _TIMESTAMP_NAME_MARKERS)


def timestamps_equal(value_a: Any, value_b: Any) -> bool:
    """
    Compare two timestamp values ignoring sub-second jitter.

    Args:
        value_a: First value (datetime, string or anything else)
        value_b: Second value

    Returns:
        True if the values denote the same second
    """
    try:
        if isinstance(value_a, datetime) and isinstance(value_b, datetime):
            return abs(value_a - value_b) < TIMESTAMP_TOLERANCE

        if isinstance(value_a, str) and isinstance(value_b, str):
            return _FRACTIONAL_SECONDS.sub("", value_a) == _FRACTIONAL_SECONDS.sub("", value_b)
    except TypeError as e:
        # naive vs aware datetimes cannot be subtracted
        log.debug("timestamp_comparison_fallback", error=str(e))

    return value_a == value_b


class RowComparator:
    """Decides whether a source row and a target row carry the same data."""

    def rows_equal(self, row_a: Row, row_b: Row) -> bool:
        """
        Compare two rows column by column.

        Null equals null. Timestamp columns are compared with a one second
        tolerance, every other column with ``==``.

        Args:
            row_a: Row from the source
            row_b: Row from the target

        Returns:
            True if the rows are equal
        """
        if len(row_a) != len(row_b):
            return False

        for column, value_a in row_a.items():
            value_b = row_b.get(column)

            if value_a is None and value_b is None:
                continue
            if value_a is None or value_b is None:
                return False

            if is_timestamp_column(column):
                if not timestamps_equal(value_a, value_b):
                    return False
            elif value_a != value_b:
                return False

        return True


def rows_equal(row_a: Row, row_b: Row) -> bool:
    """Module-level shortcut for :meth:`RowComparator.rows_equal`."""
    return RowComparator().rows_equal(row_a, row_b)
