"""Convert what the driver returns into JSON-safe values.

Rows come back with columns of types unknown until run time. Each value is
passed through ``coerce_value``, which maps every driver-native type onto one
of the JSON shapes: null, boolean, number, string, list or object.
"""

from __future__ import annotations

import math
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from query_runner.application.exceptions import ColumnIntrospectionFailure, ScanFailure
from query_runner.domain.protocols import Cursor

OK = "OK"

JSONValue = None | bool | int | float | str | list[Any] | dict[str, Any]


def decode_bytes(value: bytes | bytearray | memoryview) -> str:
    return bytes(value).decode("utf-8", errors="replace")


def coerce_value(value: Any) -> JSONValue:
    """Map one column value onto a JSON-representable value."""
    # bool is checked before int because it is a subclass of it.
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        return "NaN" if math.isnan(value) else ("Infinity" if value > 0 else "-Infinity")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return decode_bytes(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, dict):
        return {str(k): coerce_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [coerce_value(v) for v in value]
    return str(value)


def describe(cursor: Cursor) -> list[Any] | None:
    """Return the cursor description, or ``None`` when there is no result set."""
    try:
        description = cursor.description
    except Exception as e:
        raise ColumnIntrospectionFailure(f"columns error: {e}") from e
    return None if description is None else list(description)


def column_names(description: list[Any]) -> list[str]:
    """Column names of a result set, in source order."""
    try:
        return [str(column[0]) for column in description]
    except (IndexError, TypeError) as e:
        raise ColumnIntrospectionFailure(f"columns error: {e}") from e


def normalize_rows(cursor: Cursor) -> list[dict[str, JSONValue]]:
    """Materialize every row of the cursor as a column-name keyed mapping.

    A failure on any row aborts the whole result; no partial list is returned.
    """
    description = describe(cursor)
    columns = column_names(description or [])
    try:
        rows = cursor.fetchall()
        return [
            {name: coerce_value(value) for name, value in zip(columns, row, strict=True)}
            for row in rows
        ]
    except Exception as e:
        raise ScanFailure(f"scan error: {e}") from e


def normalize_rowcount(rowcount: int | None) -> dict[str, int]:
    """Report the affected-row count; an unknown count is reported as 0."""
    if rowcount is None or rowcount < 0:
        rowcount = 0
    return {"rows_affected": rowcount}


def normalize_outcome(cursor: Cursor, expects_rows: bool) -> JSONValue:
    """Produce the ``result`` value for an executed statement.

    Row-producing statements give a list of rows. A row-producing statement
    that returned no result set at all (a procedure without OUT parameters,
    for example) gives ``"OK"``. Commands give their affected-row count.
    """
    if expects_rows:
        if describe(cursor) is None:
            return OK
        return normalize_rows(cursor)
    return normalize_rowcount(cursor.rowcount)
