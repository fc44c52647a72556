"""Shared contracts: enums, records and errors.

Usage:
    from loginsights.contracts import NormalizedTelemetry, SeverityLevel
"""

from loginsights.contracts.enums import SeverityLevel, TelemetryType
from loginsights.contracts.errors import (
    ConfigurationError,
    LogInsightsError,
    ParseError,
    TelemetryException,
    TransportClosedError,
)
from loginsights.contracts.records import (
    Envelope,
    EnvelopeData,
    LogRecord,
    NormalizedTelemetry,
    SerializedError,
)

__all__ = [
    "ConfigurationError",
    "Envelope",
    "EnvelopeData",
    "LogInsightsError",
    "LogRecord",
    "NormalizedTelemetry",
    "ParseError",
    "SerializedError",
    "SeverityLevel",
    "TelemetryException",
    "TelemetryType",
    "TransportClosedError",
]
