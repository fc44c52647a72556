# src/loginsights/transport/__init__.py
"""Log transport: pino-style log lines in, Application Insights telemetry out.

Components:
- transformation: TelemetryTransformation (log line -> NormalizedTelemetry)
- sinks: DestinationSink, TrackingSink and the track_trace_and_exception callback
- pipeline: LogTransport, the source -> transformation -> sink pipe
- compose: compose() builds a LogTransport from options
- handler: LogTransportHandler, a logging.Handler writing to a LogTransport
"""

from loginsights.transport.compose import build_sink, compose
from loginsights.transport.handler import LogTransportHandler, pino_level, serialize_error
from loginsights.transport.pipeline import LogTransport
from loginsights.transport.protocols import TelemetrySink, WritableDestination
from loginsights.transport.sinks import DestinationSink, TrackCallback, TrackingSink, track_trace_and_exception
from loginsights.transport.transformation import TelemetryTransformation, parse_line, parse_time

__all__ = [
    "DestinationSink",
    "LogTransport",
    "LogTransportHandler",
    "TelemetrySink",
    "TelemetryTransformation",
    "TrackCallback",
    "TrackingSink",
    "WritableDestination",
    "build_sink",
    "compose",
    "parse_line",
    "parse_time",
    "pino_level",
    "serialize_error",
    "track_trace_and_exception",
]
