"""Domain service interfaces (ports).

The executor only talks to the database through these protocols. They are
the subset of the DB-API 2.0 connection and cursor that a run needs, so a
psycopg connection satisfies them directly and tests can pass a fake.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from query_runner.domain.models import ConnectionParams

# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@runtime_checkable
class Cursor(Protocol):
    """A DB-API cursor.

    ``description`` is ``None`` when the last statement produced no result
    set. ``rowcount`` is ``-1`` (or ``None``) when the driver cannot tell.
    """

    @property
    def description(self) -> Sequence[Sequence[Any]] | None: ...

    @property
    def rowcount(self) -> int | None: ...

    def execute(self, query: str, params: Sequence[Any] | None = None) -> Any: ...

    def fetchall(self) -> list[Sequence[Any]]: ...

    def close(self) -> None: ...


@runtime_checkable
class DatabaseSession(Protocol):
    """An open connection that hands out cursors."""

    def cursor(self) -> Cursor: ...


# ---------------------------------------------------------------------------
# Connector
# ---------------------------------------------------------------------------


@runtime_checkable
class Connector(Protocol):
    """Opens a live, already health-checked session for one run.

    Implementations: PostgresConnector (psycopg).
    """

    def open(self, params: ConnectionParams) -> AbstractContextManager[DatabaseSession]: ...
