"""Decode the request payload into connection parameters and an operation.

Two payload shapes are accepted:

* the parameter-list form::

    {"params": [{"inputname": "host", "compvalue": "db.local"}, ...]}

* a flat object::

    {"host": "db.local", "data_type": "table", "object_name": "orders"}

Keys are matched case-insensitively and string values are trimmed.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from query_runner.application.exceptions import DecodeFailure
from query_runner.config import Settings
from query_runner.domain.models import ConnectionParams, OperationMode, OperationRequest
from query_runner.services.statement_builder import parse_arguments

PAYLOAD_KEYS = frozenset(
    [
        "host",
        "port",
        "username",
        "password",
        "dbname",
        "sslmode",
        "data_type",
        "object_name",
        "query",
        "parameters",
    ]
)


class RequestPayload(BaseModel):
    """The recognized request fields, still as the caller sent them."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    host: str = ""
    port: str = ""
    username: str = ""
    password: str = ""
    dbname: str = ""
    sslmode: str = ""
    data_type: str = ""
    object_name: str = ""
    query: str = ""
    parameters: str | list[Any] = ""

    def connection_params(self, settings: Settings) -> ConnectionParams:
        """Build connection parameters, filling empty fields from settings."""
        return ConnectionParams(
            host=self.host,
            port=self._port(settings.default_port),
            username=self.username,
            password=self.password,
            dbname=self.dbname,
            sslmode=self.sslmode or settings.default_sslmode,
        )

    def operation_request(self, settings: Settings) -> OperationRequest:
        """Resolve the mode and decode the arguments.

        Raises:
            InvalidMode: if ``data_type`` is unknown and strict mode is on.
            InvalidParameters: if ``parameters`` is not a JSON array.
        """
        mode = OperationMode.parse(self.data_type, strict=settings.strict_mode)
        arguments: list[Any] = []
        # Arguments are never read for raw queries.
        if mode in (OperationMode.STORED_PROCEDURE, OperationMode.STORED_FUNCTION):
            arguments = parse_arguments(self.parameters)
        return OperationRequest(
            mode=mode,
            object_name=self.object_name or None,
            raw_text=self.query or None,
            arguments=arguments,
        )

    def _port(self, default: int) -> int:
        if not self.port:
            return default
        try:
            port = int(self.port)
        except ValueError as e:
            raise DecodeFailure(f"failed to decode input: invalid port '{self.port}'") from e
        return port or default


def _clean(key: str, value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if key == "parameters" and isinstance(value, list):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    raise DecodeFailure(f"failed to decode input: unsupported value for '{key}'")


def _fields_from_params(params: Any) -> dict[str, Any]:
    if not isinstance(params, list):
        raise DecodeFailure("failed to decode input: 'params' must be a list")
    fields: dict[str, Any] = {}
    for item in params:
        if not isinstance(item, dict):
            raise DecodeFailure("failed to decode input: every param must be an object")
        key = str(item.get("inputname", "")).strip().lower()
        if key in PAYLOAD_KEYS:
            fields[key] = _clean(key, item.get("compvalue"))
    return fields


def _fields_from_object(data: dict[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for raw_key, value in data.items():
        key = str(raw_key).strip().lower()
        if key in PAYLOAD_KEYS:
            fields[key] = _clean(key, value)
    return fields


def decode_payload(raw: str | bytes) -> RequestPayload:
    """Parse the raw JSON payload.

    Raises:
        DecodeFailure: if the payload is not JSON or not one of the accepted shapes.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise DecodeFailure(f"failed to decode input: {e}") from e
    if not isinstance(data, dict):
        raise DecodeFailure("failed to decode input: expected a JSON object")

    if "params" in data:
        fields = _fields_from_params(data["params"])
    else:
        fields = _fields_from_object(data)

    try:
        return RequestPayload.model_validate(fields)
    except ValidationError as e:
        raise DecodeFailure(f"failed to decode input: {e}") from e
