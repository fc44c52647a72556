# src/loginsights/telemetry/__init__.py
"""Application Insights telemetry client.

Components:
- connection_string: parse_connection_string() for connection strings and bare keys
- context: TelemetryContext with the ai.* tags stamped on every envelope
- envelopes: Envelope and base data construction
- sender: TelemetrySender, gzip + newline-delimited JSON over HTTPS
- statsbeat: Request/item counters
- config: TelemetryClientConfig (batch size, interval, statsbeat, ...)
- client: TelemetryClient with the track_* API

Usage:
    from loginsights.telemetry import TelemetryClient

    with TelemetryClient(connection_string) as client:
        client.track_event("deployed", properties={"version": "1.2.0"})
"""

from loginsights.telemetry.client import CONNECTION_STRING_ENV, TelemetryClient
from loginsights.telemetry.config import TelemetryClientConfig
from loginsights.telemetry.connection_string import ConnectionString, parse_connection_string
from loginsights.telemetry.context import ContextTagKeys, TelemetryContext
from loginsights.telemetry.sender import TelemetrySender, decode_batch, encode_batch
from loginsights.telemetry.statsbeat import Statsbeat, StatsbeatSnapshot

__all__ = [
    "CONNECTION_STRING_ENV",
    "ConnectionString",
    "ContextTagKeys",
    "Statsbeat",
    "StatsbeatSnapshot",
    "TelemetryClient",
    "TelemetryClientConfig",
    "TelemetryContext",
    "TelemetrySender",
    "decode_batch",
    "encode_batch",
    "parse_connection_string",
]
