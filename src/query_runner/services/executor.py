"""Run one request end to end and produce its response envelope.

A run moves through validate, build, execute and normalize. The first
failure ends the run with an error envelope; nothing is retried and no
partial result is returned. These functions never raise for run failures.
"""

from __future__ import annotations

from loguru import logger

from query_runner.application.exceptions import ExecutionFailure, QueryRunnerError
from query_runner.config import Settings, get_settings
from query_runner.domain.models import BuiltStatement, OperationRequest, ResponseEnvelope
from query_runner.domain.protocols import Connector, DatabaseSession
from query_runner.presentation.payload import decode_payload
from query_runner.services.result_normalizer import JSONValue, normalize_outcome
from query_runner.services.statement_builder import build_statement


def execute_statement(statement: BuiltStatement, session: DatabaseSession) -> JSONValue:
    """Execute a built statement and normalize what it returned.

    The cursor is closed whether execution succeeds or not.

    Raises:
        ExecutionFailure: if the database rejects the statement.
        ColumnIntrospectionFailure, ScanFailure: if reading the result fails.
    """
    try:
        cursor = session.cursor()
    except Exception as e:
        raise ExecutionFailure(f"execution error: {e}") from e

    try:
        try:
            if statement.bound_arguments:
                cursor.execute(statement.text, list(statement.bound_arguments))
            else:
                cursor.execute(statement.text)
        except Exception as e:
            raise ExecutionFailure(f"execution error: {e}") from e
        return normalize_outcome(cursor, statement.expects_rows)
    finally:
        cursor.close()


def run_request(request: OperationRequest, session: DatabaseSession) -> ResponseEnvelope:
    """Run ``request`` on an already open session."""
    try:
        statement = build_statement(request)
        result = execute_statement(statement, session)
    except QueryRunnerError as e:
        logger.debug("Run failed | mode={} error={}", request.mode.value, e)
        return ResponseEnvelope.failure(e)
    return ResponseEnvelope.success(result)


def execute_payload(
    payload: str | bytes,
    connector: Connector,
    settings: Settings | None = None,
) -> ResponseEnvelope:
    """Decode ``payload``, connect through ``connector`` and run the request.

    The request is fully validated and its statement built before any
    connection is attempted.
    """
    settings = settings or get_settings()
    try:
        request_payload = decode_payload(payload)
        params = request_payload.connection_params(settings)
        params.validate_required()
        request = request_payload.operation_request(settings)
        statement = build_statement(request)

        logger.info("Running {} against {}/{}", request.mode.value, params.host, params.dbname)
        with connector.open(params) as session:
            result = execute_statement(statement, session)
    except QueryRunnerError as e:
        logger.debug("Run failed | error={}", e)
        return ResponseEnvelope.failure(e)

    logger.info("Run complete")
    return ResponseEnvelope.success(result)


def dry_run(payload: str | bytes, settings: Settings | None = None) -> ResponseEnvelope:
    """Build the statement for ``payload`` without connecting."""
    settings = settings or get_settings()
    try:
        request = decode_payload(payload).operation_request(settings)
        statement = build_statement(request)
    except QueryRunnerError as e:
        return ResponseEnvelope.failure(e)
    return ResponseEnvelope.success(statement.as_dict())
