"""Tests for request payload decoding."""

import json

import pytest

from query_runner.application.exceptions import DecodeFailure, InvalidMode, InvalidParameters
from query_runner.domain.models import OperationMode
from query_runner.presentation.payload import decode_payload


def _params(**fields) -> str:
    return json.dumps({"params": [{"inputname": k, "compvalue": v} for k, v in fields.items()]})


class TestParamListForm:
    def test_keys_are_case_insensitive_and_values_trimmed(self):
        payload = decode_payload(
            json.dumps({"params": [{"inputname": "HOST", "compvalue": "  db.local "}]})
        )
        assert payload.host == "db.local"

    def test_unknown_keys_are_ignored(self):
        payload = decode_payload(_params(host="h", colour="blue"))
        assert payload.host == "h"

    def test_params_must_be_list(self):
        with pytest.raises(DecodeFailure):
            decode_payload(json.dumps({"params": "host=h"}))


class TestFlatForm:
    def test_flat_object(self, settings):
        payload = decode_payload(
            json.dumps(
                {
                    "host": "h",
                    "port": 6543,
                    "username": "u",
                    "dbname": "d",
                    "data_type": "stored_function",
                    "object_name": "f",
                    "parameters": [1, {"k": "v"}],
                }
            )
        )
        assert payload.connection_params(settings).port == 6543
        request = payload.operation_request(settings)
        assert request.mode is OperationMode.STORED_FUNCTION
        assert request.arguments == [1, {"k": "v"}]

    def test_nested_object_value_is_rejected(self):
        with pytest.raises(DecodeFailure):
            decode_payload(json.dumps({"host": {"name": "h"}}))


class TestDecodeErrors:
    @pytest.mark.parametrize("raw", ["", "{", "[1, 2]", '"text"'])
    def test_malformed(self, raw):
        with pytest.raises(DecodeFailure, match="failed to decode input"):
            decode_payload(raw)

    def test_too_deeply_nested(self):
        with pytest.raises(DecodeFailure, match="failed to decode input"):
            decode_payload("[" * 100000)


class TestConnectionParams:
    def test_defaults(self, settings):
        params = decode_payload(_params(host="h", username="u", dbname="d")).connection_params(
            settings
        )
        assert params.port == 5432
        assert params.sslmode == "disable"
        assert params.password == ""

    def test_zero_port_uses_default(self, settings):
        params = decode_payload(_params(port="0")).connection_params(settings)
        assert params.port == 5432

    def test_explicit_values(self, settings):
        params = decode_payload(
            _params(host="h", port="5433", sslmode="require", password="pw")
        ).connection_params(settings)
        assert params.port == 5433
        assert params.sslmode == "require"
        assert params.password == "pw"

    def test_non_numeric_port(self, settings):
        with pytest.raises(DecodeFailure, match="invalid port"):
            decode_payload(_params(port="fifty")).connection_params(settings)


class TestOperationRequest:
    @pytest.mark.parametrize(
        "data_type, mode",
        [
            ("", OperationMode.RAW_QUERY),
            ("query", OperationMode.RAW_QUERY),
            ("RAW_QUERY", OperationMode.RAW_QUERY),
            ("table", OperationMode.TABLE_DUMP),
            ("table_dump", OperationMode.TABLE_DUMP),
            ("Stored_Procedure", OperationMode.STORED_PROCEDURE),
            ("stored_function", OperationMode.STORED_FUNCTION),
        ],
    )
    def test_mode_spellings(self, data_type, mode, settings):
        request = decode_payload(_params(data_type=data_type)).operation_request(settings)
        assert request.mode is mode

    def test_unknown_mode(self, settings):
        with pytest.raises(InvalidMode):
            decode_payload(_params(data_type="view")).operation_request(settings)

    def test_parameters_string(self, settings):
        request = decode_payload(
            _params(data_type="stored_procedure", object_name="p", parameters='[1, "x"]')
        ).operation_request(settings)
        assert request.arguments == [1, "x"]

    def test_malformed_parameters(self, settings):
        with pytest.raises(InvalidParameters):
            decode_payload(
                _params(data_type="stored_procedure", object_name="p", parameters="nope")
            ).operation_request(settings)

    def test_raw_query_ignores_parameters(self, settings):
        request = decode_payload(_params(query="select 1", parameters="nope")).operation_request(
            settings
        )
        assert request.raw_text == "select 1"
        assert request.arguments == []
