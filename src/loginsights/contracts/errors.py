"""Exception hierarchy for the log transport.

ConfigurationError is raised synchronously while composing a transport.
ParseError and TransportClosedError are raised while records flow.
TelemetryException is not raised by the package at all: it is the value a
serialized log error is rebuilt into before it is handed to a sink.
"""

from collections.abc import Mapping
from typing import Any


class LogInsightsError(Exception):
    """Base class for errors raised by loginsights."""


class ConfigurationError(LogInsightsError, TypeError):
    """Raised when transport or client options are missing or invalid.

    Attributes:
        field: Name of the offending option (e.g. "connectionString")
        message: Human-readable error description
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"Invalid option '{field}': {message}")


class ParseError(LogInsightsError, ValueError):
    """Raised when a log line cannot be parsed into a record."""


class TransportClosedError(LogInsightsError):
    """Raised when writing to a transport that has been terminated."""


class TelemetryException(Exception):
    """Exception rebuilt from a serialized log error.

    The serialized form is the one emitted by structured loggers such as
    pino's ``err`` serializer: ``message``, ``type``, ``code`` and ``stack``.
    All four are kept exactly as received; a missing key becomes None.

    Example:
        exc = TelemetryException({"type": "TypeError", "message": "bar", "stack": "..."})
        exc.name  # "TypeError"
    """

    def __init__(self, serialized_error: Mapping[str, Any]) -> None:
        self.message: str | None = serialized_error.get("message")
        self.type: str | None = serialized_error.get("type")
        self.code: Any = serialized_error.get("code")
        self.stack: str | None = serialized_error.get("stack")
        super().__init__(self.message)

    @property
    def name(self) -> str | None:
        return self.type

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TelemetryException):
            return NotImplemented
        return (self.message, self.type, self.code, self.stack) == (other.message, other.type, other.code, other.stack)

    def __hash__(self) -> int:
        return hash((self.message, self.type, self.stack))

    def __repr__(self) -> str:
        return f"TelemetryException(type={self.type!r}, message={self.message!r}, code={self.code!r})"
