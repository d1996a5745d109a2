"""PostgreSQL connector backed by psycopg 3."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg
from loguru import logger
from psycopg.adapt import AdaptersMap, Dumper

from query_runner.application.exceptions import ConnectionFailure
from query_runner.config import Settings, get_settings
from query_runner.domain.models import ConnectionParams


class UntypedNumberDumper(Dumper):
    """Send numbers as text of unknown type so the server infers the type.

    With typed parameters a JSON number arrives as ``smallint`` or ``double
    precision`` and calls like ``f(text)`` or ``f(numeric)`` fail to resolve.
    """

    oid = 0

    def dump(self, obj: int | float) -> bytes:
        return str(obj).encode()


class UntypedBoolDumper(Dumper):
    oid = 0

    def dump(self, obj: bool) -> bytes:
        return b"true" if obj else b"false"


def register_untyped_dumpers(adapters: AdaptersMap) -> None:
    """Bind JSON scalars as untyped text parameters."""
    adapters.register_dumper(int, UntypedNumberDumper)
    adapters.register_dumper(float, UntypedNumberDumper)
    adapters.register_dumper(bool, UntypedBoolDumper)


class PostgresConnector:
    """Opens one autocommit connection per run.

    Connections use ``RawCursor`` so statements bind ``$1, $2, ...``
    placeholders natively. Every statement is committed on its own; no
    explicit transaction is opened.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def connect_kwargs(self, params: ConnectionParams) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "host": params.host,
            "port": params.port,
            "user": params.username,
            "password": params.password,
            "dbname": params.dbname,
            "sslmode": params.sslmode,
            "application_name": self.settings.application_name,
        }
        if self.settings.connect_timeout is not None:
            kwargs["connect_timeout"] = self.settings.connect_timeout
        return kwargs

    def connect(self, params: ConnectionParams) -> psycopg.Connection:
        """Open a connection.

        Raises:
            ConnectionFailure: if the server cannot be reached or rejects the login.
        """
        logger.info(
            "Connecting | host={} port={} dbname={} user={}",
            params.host,
            params.port,
            params.dbname,
            params.username,
        )
        try:
            conn = psycopg.connect(
                autocommit=True,
                cursor_factory=psycopg.RawCursor,
                **self.connect_kwargs(params),
            )
        except psycopg.Error as e:
            raise ConnectionFailure(f"failed to connect: {e}") from e
        register_untyped_dumpers(conn.adapters)
        return conn

    @staticmethod
    def ping(conn: psycopg.Connection) -> None:
        """Check the connection is usable.

        Raises:
            ConnectionFailure: if the liveness query fails.
        """
        try:
            conn.execute("SELECT 1")
        except psycopg.Error as e:
            raise ConnectionFailure(f"failed to ping db: {e}") from e

    @contextmanager
    def open(self, params: ConnectionParams) -> Iterator[psycopg.Connection]:
        """Yield a live connection and close it on every exit path."""
        conn = self.connect(params)
        try:
            self.ping(conn)
            yield conn
        finally:
            conn.close()
            logger.debug("Connection closed")
