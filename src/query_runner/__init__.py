"""Single-shot PostgreSQL query runner.

Reads one request, runs one statement, and answers with one JSON envelope.
"""

from query_runner.domain.models import (
    BuiltStatement,
    ConnectionParams,
    OperationMode,
    OperationRequest,
    ResponseEnvelope,
)
from query_runner.services.executor import execute_payload, run_request
from query_runner.services.statement_builder import build_statement

__all__ = [
    "BuiltStatement",
    "ConnectionParams",
    "OperationMode",
    "OperationRequest",
    "ResponseEnvelope",
    "build_statement",
    "execute_payload",
    "run_request",
]

__version__ = "0.1.0"
