"""Row value types and driver value normalisation."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Mapping, Union

import structlog

log = structlog.stdlib.get_logger()

ScalarValue = Union[None, bool, int, float, Decimal, str, bytes, datetime, date, time]

# A row as read from a table: column name -> value, in select order.
Row = Mapping[str, Any]


def normalize_value(value: Any) -> ScalarValue:
    """Convert a driver value into a value every DBAPI driver can bind.

    Large-object handles are read into memory, buffer types become ``bytes``
    and plain dates become midnight datetimes. A value that cannot be
    converted is passed through unchanged.

    Args:
        value: Value as returned by the source driver

    Returns:
        The normalised value
    """
    if value is None:
        return None

    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime.combine(value, time.min)

    if isinstance(value, (bool, int, float, Decimal, str, bytes, time)):
        return value

    # LOB handles (e.g. oracledb.LOB) expose read()
    read = getattr(value, "read", None)
    if callable(read):
        try:
            content = read()
        except Exception as e:
            log.warning(
                "lob_conversion_failed",
                value_type=type(value).__name__,
                error=str(e),
            )
            return value
        if isinstance(content, (bytearray, memoryview)):
            return bytes(content)
        return content

    return value


def normalize_row(row: Row, columns: list[str]) -> list[ScalarValue]:
    """Return the normalised values of ``columns`` from ``row`` in order."""
    return [normalize_value(row.get(column)) for column in columns]
