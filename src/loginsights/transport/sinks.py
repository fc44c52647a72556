# src/loginsights/transport/sinks.py
"""Sinks that terminate a LogTransport.

- DestinationSink: writes each record to a caller-owned destination
- TrackingSink: calls ``track(client, record)`` with a TelemetryClient it owns
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loginsights.contracts.records import NormalizedTelemetry
from loginsights.telemetry.client import TelemetryClient
from loginsights.transport.protocols import WritableDestination

# The client is passed explicitly so the callback can reach any track_* method,
# client.context.keys and client.config.
TrackCallback = Callable[[TelemetryClient, NormalizedTelemetry], Any]


def track_trace_and_exception(client: TelemetryClient, record: NormalizedTelemetry) -> None:
    """Track every record as a trace, plus an exception when it carries one.

    Usable as the ``track`` option of compose().
    """
    client.track_trace(
        record["msg"],
        severity=record["severity"],
        properties=record["properties"],
        time=record["time"],
    )
    exception = record.get("exception")
    if exception is not None:
        client.track_exception(
            exception,
            severity=record["severity"],
            properties=record["properties"],
            time=record["time"],
        )


class DestinationSink:
    """Write records verbatim to a destination the caller owns.

    close() flushes the destination when it has a flush() method but never
    closes it.
    """

    def __init__(self, destination: WritableDestination) -> None:
        self._destination = destination

    @property
    def destination(self) -> WritableDestination:
        return self._destination

    def write(self, record: NormalizedTelemetry) -> None:
        self._destination.write(record)

    def close(self) -> None:
        flush = getattr(self._destination, "flush", None)
        if callable(flush):
            flush()


class TrackingSink:
    """Deliver records to a track callback together with the client."""

    def __init__(self, client: TelemetryClient, track: TrackCallback) -> None:
        self._client = client
        self._track = track

    @property
    def client(self) -> TelemetryClient:
        return self._client

    def write(self, record: NormalizedTelemetry) -> None:
        self._track(self._client, record)

    def close(self) -> None:
        """Flush pending telemetry and release the client. Idempotent."""
        self._client.close()
