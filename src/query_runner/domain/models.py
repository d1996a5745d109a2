"""Domain entities and value objects.

These are the data structures that flow through one run of the query
runner: the parsed request, the statement built from it, and the envelope
written back to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, model_serializer, model_validator

from query_runner.application.exceptions import InvalidMode, MissingParameter

# ---------------------------------------------------------------------------
# Operation request
# ---------------------------------------------------------------------------


class OperationMode(StrEnum):
    RAW_QUERY = "raw_query"
    TABLE_DUMP = "table_dump"
    STORED_PROCEDURE = "stored_procedure"
    STORED_FUNCTION = "stored_function"

    @classmethod
    def parse(cls, value: str | None, *, strict: bool = True) -> OperationMode:
        """Resolve a ``data_type`` input string to a mode.

        Empty input selects ``raw_query``. The legacy spellings ``query`` and
        ``table`` are accepted. Unknown spellings raise ``InvalidMode`` unless
        ``strict`` is off, in which case they fall back to ``raw_query``.
        """
        name = (value or "").strip().lower()
        if not name:
            return cls.RAW_QUERY
        mode = _MODE_ALIASES.get(name)
        if mode is not None:
            return mode
        if strict:
            known = ", ".join(sorted(_MODE_ALIASES))
            raise InvalidMode(f"unknown data_type '{value}' (expected one of: {known})")
        return cls.RAW_QUERY


_MODE_ALIASES: dict[str, OperationMode] = {
    "query": OperationMode.RAW_QUERY,
    "table": OperationMode.TABLE_DUMP,
    **{mode.value: mode for mode in OperationMode},
}

# Error messages keep the original data_type names.
_MODE_LABELS = {
    OperationMode.RAW_QUERY: "query",
    OperationMode.TABLE_DUMP: "table",
    OperationMode.STORED_PROCEDURE: "stored_procedure",
    OperationMode.STORED_FUNCTION: "stored_function",
}


@dataclass(frozen=True)
class OperationRequest:
    """One operation to run against the database."""

    mode: OperationMode = OperationMode.RAW_QUERY
    object_name: str | None = None
    raw_text: str | None = None
    arguments: list[Any] = field(default_factory=list)

    @property
    def label(self) -> str:
        return _MODE_LABELS[self.mode]

    def validate(self) -> None:
        """Check that the fields required by ``mode`` are present."""
        if self.mode is OperationMode.RAW_QUERY:
            if not (self.raw_text or "").strip():
                raise MissingParameter("query is required")
        elif not (self.object_name or "").strip():
            raise MissingParameter(f"object_name is required for {self.label}")


@dataclass(frozen=True)
class BuiltStatement:
    """A statement ready for execution.

    ``bound_arguments`` are passed to the driver separately from ``text``;
    they are never interpolated into it.
    """

    text: str
    bound_arguments: tuple[Any, ...] = ()
    expects_rows: bool = True

    def as_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "bound_arguments": list(self.bound_arguments),
            "expects_rows": self.expects_rows,
        }


# ---------------------------------------------------------------------------
# Connection parameters
# ---------------------------------------------------------------------------


class ConnectionParams(BaseModel):
    """Where to connect. Validated before any connection attempt."""

    host: str = ""
    port: int = 5432
    username: str = ""
    password: str = Field(default="", repr=False)
    dbname: str = ""
    sslmode: str = "disable"

    def validate_required(self) -> None:
        if not (self.host and self.username and self.dbname):
            raise MissingParameter("host, username, and dbname are required")


# ---------------------------------------------------------------------------
# Response envelope
# ---------------------------------------------------------------------------


class ResponseEnvelope(BaseModel):
    """The single output of a run: either ``result`` or ``error``, never both."""

    result: Any = None
    error: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> ResponseEnvelope:
        if (self.result is None) == (self.error is None):
            raise ValueError("exactly one of result or error must be set")
        return self

    @model_serializer
    def _serialize(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return {"result": self.result}

    @classmethod
    def success(cls, result: Any) -> ResponseEnvelope:
        return cls(result=result)

    @classmethod
    def failure(cls, error: Exception | str) -> ResponseEnvelope:
        return cls(error=str(error))

    @property
    def ok(self) -> bool:
        return self.error is None
