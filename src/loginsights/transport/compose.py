# src/loginsights/transport/compose.py
"""Compose a log transport from options.

This module is the glue between transport options and a running
LogTransport. It handles:
1. Validating options into DestinationSettings or TrackingSettings
2. Building the matching sink (and the telemetry client it owns)
3. Connecting the transformation to the sink

Usage:
    from loginsights import compose, track_trace_and_exception

    transport = compose(
        track=track_trace_and_exception,
        connectionString=os.environ["APPLICATIONINSIGHTS_CONNECTION_STRING"],
        config={"maxBatchSize": 50},
    )
    logging.getLogger().addHandler(LogTransportHandler(transport))
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loginsights.core.config import DestinationSettings, TrackingSettings, load_transport_settings
from loginsights.core.logging import get_logger
from loginsights.telemetry.client import TelemetryClient
from loginsights.transport.pipeline import LogTransport
from loginsights.transport.protocols import TelemetrySink
from loginsights.transport.sinks import DestinationSink, TrackingSink
from loginsights.transport.transformation import TelemetryTransformation

logger = get_logger(__name__)


def build_sink(settings: DestinationSettings | TrackingSettings) -> TelemetrySink:
    """Create the sink for one settings variant.

    In tracking mode a TelemetryClient is created for the connection string
    and the configuration overrides are applied to it once, here.

    Raises:
        ConfigurationError: If the connection string or client config is invalid
    """
    match settings:
        case DestinationSettings():
            return DestinationSink(settings.destination)
        case TrackingSettings():
            client = TelemetryClient(settings.connection_string)
            if settings.client_config:
                try:
                    client.apply_config(settings.client_config)
                except Exception:
                    client.close()
                    raise
            return TrackingSink(client, settings.track)
        case _:
            raise TypeError(f"Unknown transport settings {type(settings).__name__}")


def compose(
    options: Mapping[str, Any] | None = None,
    *,
    transformation: type[TelemetryTransformation] = TelemetryTransformation,
    **kwargs: Any,
) -> LogTransport:
    """Compose an Application Insights log transport.

    Args:
        options: Transport options (destination | track + connectionString
            [+ config], and ignoreKeys). Keyword arguments are merged over it.
        transformation: TelemetryTransformation class (or subclass) to use

    Returns:
        A LogTransport ready to accept log lines

    Raises:
        ConfigurationError: If the options are missing, conflicting or invalid
    """
    merged: dict[str, Any] = {**(options or {}), **kwargs}
    settings = load_transport_settings(merged)
    sink = build_sink(settings)
    logger.debug("Log transport composed", mode=settings.mode, transformation=transformation.__name__)
    return LogTransport(transformation(ignore_keys=settings.ignore_keys), sink)
