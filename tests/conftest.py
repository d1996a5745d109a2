"""Shared fixtures: a scripted DB-API session and connector."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import pytest

# Add src/ to sys.path so tests run without installing the package.
_SRC = str(Path(__file__).resolve().parent.parent / "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

from query_runner.config import Settings  # noqa: E402
from query_runner.domain.models import ConnectionParams  # noqa: E402


class FakeCursor:
    """A cursor that replays a scripted result and records what it was asked."""

    def __init__(
        self,
        columns: list[str] | None = None,
        rows: list[tuple] | None = None,
        rowcount: int | None = -1,
        execute_error: Exception | None = None,
        fetch_error: Exception | None = None,
    ):
        self._columns = columns
        self.rows = rows or []
        self.rowcount = rowcount
        self.execute_error = execute_error
        self.fetch_error = fetch_error
        self.executed: list[tuple[str, Any]] = []
        self.closed = False

    @property
    def description(self):
        if self._columns is None:
            return None
        return [(name, None, None, None, None, None, None) for name in self._columns]

    def execute(self, query: str, params=None):
        self.executed.append((query, params))
        if self.execute_error:
            raise self.execute_error
        return self

    def fetchall(self):
        if self.fetch_error:
            raise self.fetch_error
        return list(self.rows)

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """A connection that always hands out the same scripted cursor."""

    def __init__(self, cursor: FakeCursor):
        self._cursor = cursor

    def cursor(self) -> FakeCursor:
        return self._cursor


class FakeConnector:
    """Connector that yields a FakeSession, or fails with a scripted error."""

    def __init__(self, session: FakeSession, error: Exception | None = None):
        self.session = session
        self.error = error
        self.opened_with: list[ConnectionParams] = []
        self.closed = False

    @contextmanager
    def open(self, params: ConnectionParams):
        self.opened_with.append(params)
        if self.error:
            raise self.error
        try:
            yield self.session
        finally:
            self.closed = True


@pytest.fixture()
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None)


@pytest.fixture()
def cursor() -> FakeCursor:
    return FakeCursor(columns=["id", "name"], rows=[(1, "alpha"), (2, b"beta")])


@pytest.fixture()
def session(cursor: FakeCursor) -> FakeSession:
    return FakeSession(cursor)


@pytest.fixture()
def connector(session: FakeSession) -> FakeConnector:
    return FakeConnector(session)
