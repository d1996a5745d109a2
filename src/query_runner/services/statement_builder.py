"""Turn an operation request into a concrete SQL statement.

Caller-supplied *values* are always bound as positional arguments. Only
``object_name`` (a table, procedure or function name) is written into the
statement text, and it is written as-is: no quoting or escaping is applied,
so callers must only pass identifiers they trust.

Placeholders use PostgreSQL's native ``$1, $2, ...`` syntax.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from query_runner.application.exceptions import InvalidParameters
from query_runner.domain.models import BuiltStatement, OperationMode, OperationRequest

ROW_PRODUCING_PREFIXES = ("SELECT", "WITH", "SHOW", "EXPLAIN", "CALL")


def is_row_producing(sql: str) -> bool:
    """Guess from its leading keyword whether raw SQL returns rows.

    Only the prefix is inspected, so ``INSERT ... RETURNING`` and friends are
    treated as commands and their rows are not read.
    """
    return sql.strip().upper().startswith(ROW_PRODUCING_PREFIXES)


def parse_arguments(raw: str | list[Any] | None) -> list[Any]:
    """Decode the ``parameters`` field into a list of positional arguments."""
    if raw is None:
        return []
    if isinstance(raw, list):
        return list(raw)
    if not raw.strip():
        return []
    try:
        args = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidParameters(f"invalid parameters: {e}") from e
    if not isinstance(args, list):
        raise InvalidParameters(
            f"invalid parameters: expected a JSON array, got {type(args).__name__}"
        )
    return args


def placeholders(count: int) -> str:
    return ",".join(f"${i}" for i in range(1, count + 1))


def build_statement(request: OperationRequest) -> BuiltStatement:
    """Build the statement for ``request``.

    Raises:
        MissingParameter: if the field the mode needs is empty.
    """
    request.validate()

    match request.mode:
        case OperationMode.TABLE_DUMP:
            statement = BuiltStatement(text=f"SELECT * FROM {request.object_name}")
        case OperationMode.STORED_PROCEDURE:
            args = tuple(request.arguments)
            statement = BuiltStatement(
                text=f"CALL {request.object_name}({placeholders(len(args))})",
                bound_arguments=args,
            )
        case OperationMode.STORED_FUNCTION:
            # Selecting from the call handles scalar, composite and set-returning functions alike.
            args = tuple(request.arguments)
            statement = BuiltStatement(
                text=f"SELECT * FROM {request.object_name}({placeholders(len(args))})",
                bound_arguments=args,
            )
        case _:
            text = request.raw_text or ""
            statement = BuiltStatement(text=text, expects_rows=is_row_producing(text))

    logger.debug(
        "Built {} statement | expects_rows={} args={}",
        request.mode.value,
        statement.expects_rows,
        len(statement.bound_arguments),
    )
    return statement
