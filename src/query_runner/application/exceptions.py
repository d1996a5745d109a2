"""Application-level exceptions.

Every failure in a run is one of these. The message of each exception is
exactly the ``error`` string written to the response envelope, so callers
only ever see ``str(exc)``.
"""


class QueryRunnerError(Exception):
    """Base class for all failures that end a run with an error envelope."""


class DecodeFailure(QueryRunnerError):
    """Raised when the input payload is not valid JSON or has the wrong shape."""


class MissingParameter(QueryRunnerError):
    """Raised when a required connection or operation field is absent."""


class InvalidParameters(QueryRunnerError):
    """Raised when the ``parameters`` field is not a JSON array."""


class InvalidMode(QueryRunnerError):
    """Raised when ``data_type`` names no known operation mode."""


class ConnectionFailure(QueryRunnerError):
    """Raised when connecting to the database or the liveness check fails."""


class ExecutionFailure(QueryRunnerError):
    """Raised when the database rejects the statement."""


class ColumnIntrospectionFailure(QueryRunnerError):
    """Raised when the column list of a result set cannot be read."""


class ScanFailure(QueryRunnerError):
    """Raised when reading a row from the result set fails."""
