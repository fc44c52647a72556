"""
loginsights: ship structured log records to Application Insights.

Log lines flow through a single linear pipe: source -> transformation ->
sink. The sink either writes to a caller-supplied destination or hands each
record to a track callback bound to a telemetry client.
"""

__version__ = "0.1.0"

from loginsights.contracts.enums import SeverityLevel, TelemetryType
from loginsights.contracts.errors import (
    ConfigurationError,
    LogInsightsError,
    ParseError,
    TelemetryException,
    TransportClosedError,
)
from loginsights.transport.compose import compose
from loginsights.transport.handler import LogTransportHandler
from loginsights.transport.pipeline import LogTransport
from loginsights.transport.sinks import track_trace_and_exception
from loginsights.transport.transformation import TelemetryTransformation

__all__ = [
    "ConfigurationError",
    "LogInsightsError",
    "LogTransport",
    "LogTransportHandler",
    "ParseError",
    "SeverityLevel",
    "TelemetryException",
    "TelemetryTransformation",
    "TelemetryType",
    "TransportClosedError",
    "compose",
    "track_trace_and_exception",
]
