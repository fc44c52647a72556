# src/loginsights/telemetry/client.py
"""Application Insights telemetry client.

TelemetryClient turns track calls into envelopes, buffers them and ships
them in batches through TelemetrySender. A batch is sent when:

1. The buffer reaches ``config.max_batch_size`` (synchronously, in the
   track call that filled it)
2. ``config.max_batch_interval_ms`` elapsed since the first buffered item
   (from a timer thread)
3. flush() or close() is called

Batches are sent one at a time, in the order they were filled.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import httpx

from loginsights.contracts.enums import SeverityLevel, TelemetryType
from loginsights.contracts.errors import ConfigurationError
from loginsights.contracts.records import Envelope
from loginsights.core.logging import get_logger
from loginsights.telemetry import envelopes
from loginsights.telemetry.config import TelemetryClientConfig
from loginsights.telemetry.context import TelemetryContext
from loginsights.telemetry.sender import TelemetrySender
from loginsights.telemetry.statsbeat import Statsbeat

logger = get_logger(__name__)

CONNECTION_STRING_ENV = "APPLICATIONINSIGHTS_CONNECTION_STRING"


class TelemetryClient:
    """Client for one Application Insights resource.

    Example:
        client = TelemetryClient("InstrumentationKey=...;IngestionEndpoint=https://...")
        client.apply_config({"maxBatchSize": 1})
        client.track_trace("started", severity=SeverityLevel.INFORMATION)
        client.close()

    Attributes:
        config: Mutable TelemetryClientConfig
        context: Tags stamped on every envelope
        common_properties: Properties merged into every item's properties
        statsbeat: Request/item counters
    """

    def __init__(
        self,
        connection_string: str | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Create a client bound to a connection string.

        Args:
            connection_string: Connection string or bare instrumentation key.
                Falls back to APPLICATIONINSIGHTS_CONNECTION_STRING.
            http_client: Optional httpx.Client to send with (not closed by close())

        Raises:
            ConfigurationError: If no usable connection string is available
        """
        connection_string = connection_string or os.environ.get(CONNECTION_STRING_ENV)
        if not connection_string:
            raise ConfigurationError(
                "connectionString",
                f"connectionString is required when {CONNECTION_STRING_ENV} is not set",
            )
        self.config = TelemetryClientConfig.from_connection_string(connection_string)
        self.context = TelemetryContext()
        self.common_properties: dict[str, Any] = {}
        self.statsbeat = Statsbeat()
        self._sender = TelemetrySender(timeout=self.config.timeout, http_client=http_client, statsbeat=self.statsbeat)
        self._buffer: list[Envelope] = []
        # _lock guards the buffer and timer; _send_lock serializes batches
        self._lock = threading.Lock()
        self._send_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._closed = False

    def apply_config(self, overrides: Mapping[str, Any]) -> None:
        """Merge configuration overrides into ``config``.

        Raises:
            ConfigurationError: If an override is unknown or invalid
        """
        self.config = self.config.with_overrides(overrides)
        if self.config.disable_statsbeat:
            self.statsbeat.enable(False)
        logger.debug(
            "Telemetry client configured",
            endpoint=self.config.endpoint_url,
            max_batch_size=self.config.max_batch_size,
            max_batch_interval_ms=self.config.max_batch_interval_ms,
            statsbeat=self.statsbeat.is_enabled(),
        )

    @property
    def pending(self) -> int:
        """Number of buffered items not yet sent."""
        with self._lock:
            return len(self._buffer)

    # -------------------------------------------------------------------------
    # Track API
    # -------------------------------------------------------------------------

    def track_trace(
        self,
        message: Any,
        *,
        severity: SeverityLevel | int | None = None,
        properties: Mapping[str, Any] | None = None,
        time: datetime | None = None,
        tag_overrides: Mapping[str, str] | None = None,
    ) -> None:
        """Track a log message (MessageData)."""
        base_data = envelopes.message_data(message, severity, self._properties(properties))
        self._track(TelemetryType.MESSAGE, base_data, time, tag_overrides)

    def track_event(
        self,
        name: str,
        *,
        properties: Mapping[str, Any] | None = None,
        measurements: Mapping[str, Any] | None = None,
        time: datetime | None = None,
        tag_overrides: Mapping[str, str] | None = None,
    ) -> None:
        """Track a named custom event (EventData)."""
        base_data = envelopes.event_data(name, self._properties(properties), measurements)
        self._track(TelemetryType.EVENT, base_data, time, tag_overrides)

    def track_exception(
        self,
        exception: BaseException,
        *,
        severity: SeverityLevel | int | None = None,
        properties: Mapping[str, Any] | None = None,
        measurements: Mapping[str, Any] | None = None,
        time: datetime | None = None,
        tag_overrides: Mapping[str, str] | None = None,
    ) -> None:
        """Track an exception (ExceptionData)."""
        base_data = envelopes.exception_data(exception, severity, self._properties(properties), measurements)
        self._track(TelemetryType.EXCEPTION, base_data, time, tag_overrides)

    def track_metric(
        self,
        name: str,
        value: float,
        *,
        count: int | None = None,
        min_value: float | None = None,
        max_value: float | None = None,
        std_dev: float | None = None,
        properties: Mapping[str, Any] | None = None,
        time: datetime | None = None,
        tag_overrides: Mapping[str, str] | None = None,
    ) -> None:
        """Track a metric measurement or pre-aggregated metric (MetricData)."""
        base_data = envelopes.metric_data(
            name,
            value,
            count=count,
            min_value=min_value,
            max_value=max_value,
            std_dev=std_dev,
            properties=self._properties(properties),
        )
        self._track(TelemetryType.METRIC, base_data, time, tag_overrides)

    # -------------------------------------------------------------------------
    # Batching
    # -------------------------------------------------------------------------

    def _properties(self, properties: Mapping[str, Any] | None) -> dict[str, Any]:
        if not self.common_properties:
            return dict(properties or {})
        return {**self.common_properties, **(properties or {})}

    def _track(
        self,
        telemetry_type: TelemetryType,
        base_data: dict[str, Any],
        time: datetime | None,
        tag_overrides: Mapping[str, str] | None,
    ) -> None:
        if self.config.disable_app_insights:
            return

        envelope = envelopes.create_envelope(
            telemetry_type,
            base_data,
            instrumentation_key=self.config.instrumentation_key,
            tags=self.context.merged(dict(tag_overrides) if tag_overrides else None),
            time=time,
        )

        with self._lock:
            if self._closed:
                logger.warning("Telemetry client closed, dropping item", telemetry_type=telemetry_type.value)
                return
            self._buffer.append(envelope)
            batch_full = len(self._buffer) >= self.config.max_batch_size
            if not batch_full:
                self._schedule_flush()

        if batch_full:
            self.flush()

    def _schedule_flush(self) -> None:
        # Caller holds _lock
        interval_ms = self.config.max_batch_interval_ms
        if self._timer is not None or interval_ms == 0:
            return
        self._timer = threading.Timer(interval_ms / 1000, self._on_timer)
        self._timer.daemon = True
        self._timer.start()

    def _on_timer(self) -> None:
        with self._lock:
            self._timer = None
        self.flush()

    def _take_batch(self) -> list[Envelope]:
        # Caller holds _lock
        batch, self._buffer = self._buffer, []
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        return batch

    def flush(self) -> None:
        """Send every buffered item now."""
        with self._send_lock:
            with self._lock:
                batch = self._take_batch()
            if batch:
                self._sender.send(self.config.endpoint_url, batch, timeout=self.config.timeout)

    def close(self) -> None:
        """Flush buffered items and release the HTTP client.

        Idempotent. Items tracked after close() are dropped with a warning.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.flush()
        self._sender.close()
        logger.debug("Telemetry client closed", statsbeat=self.statsbeat.snapshot())

    def __enter__(self) -> TelemetryClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
