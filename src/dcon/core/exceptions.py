"""Exception hierarchy for dcon.

All exceptions carry an exit_code for CLI return value mapping.
Driver exceptions are never raised past PgClient; they are chained
as ``__cause__`` of one of the errors below.
"""

from dcon.core.exit_codes import ExitCode


class DconError(Exception):
    """Base exception for all dcon errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NetworkError(DconError):
    """Transport-level failures on an established connection."""

    exit_code: int = ExitCode.NETWORK_ERROR


class ConnectionFailedError(NetworkError):
    """Could not open a connection, or the client is disconnected."""


class AuthenticationFailedError(ConnectionFailedError):
    """Server rejected the supplied credentials."""

    exit_code: int = ExitCode.AUTH_ERROR


class TimeoutError(NetworkError):
    """Statement timeout or connect timeout."""

    exit_code: int = ExitCode.TIMEOUT


class QueryFailedError(DconError):
    """Server rejected an ad-hoc or CRUD statement."""

    exit_code: int = ExitCode.QUERY_ERROR


class DatabaseOperationError(DconError):
    """CREATE/DROP DATABASE failed, or a database was not found."""

    exit_code: int = ExitCode.QUERY_ERROR


class TableOperationError(DconError):
    """Table-level DDL or introspection failed."""

    exit_code: int = ExitCode.QUERY_ERROR


class InvalidConfigurationError(DconError):
    """Missing or malformed connection settings or config file."""

    exit_code: int = ExitCode.CONFIG_ERROR


class UrlParseError(InvalidConfigurationError):
    """Connection URL could not be parsed."""


class SerializationError(DconError):
    """Invalid JSON input or an unserializable value."""

    exit_code: int = ExitCode.INPUT_ERROR


class InputError(DconError):
    """File not found, no query provided."""

    exit_code: int = ExitCode.INPUT_ERROR


class IoError(DconError):
    """Reading from the terminal or writing output failed."""

    exit_code: int = ExitCode.OUTPUT_ERROR


class DriverError(DconError):
    """psycopg error not covered by a more specific category."""


class UnknownError(DconError):
    """Anything else."""
