# src/loginsights/telemetry/config.py
"""Telemetry client configuration.

Option names follow the camelCase spelling users pass in transport options
(``maxBatchSize``, ``disableStatsbeat``, ...); the snake_case field names
are accepted as well.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from loginsights.contracts.errors import ConfigurationError
from loginsights.telemetry.connection_string import DEFAULT_INGESTION_ENDPOINT, TRACK_PATH, parse_connection_string


def validation_error_field(error: ValidationError) -> tuple[str, str]:
    """Return (field, message) for the first error of a ValidationError.

    The field is the innermost named location, so list indexes and union
    tags are skipped.
    """
    first = error.errors()[0]
    names = [str(part) for part in first["loc"] if isinstance(part, str)]
    field = names[-1] if names else "options"
    return field, first["msg"]


class TelemetryClientConfig(BaseModel):
    """Mutable configuration of a TelemetryClient.

    Assignment is validated, so ``client.config.max_batch_size = 0`` fails.

    Attributes:
        instrumentation_key: Resource identifier stamped on every envelope
        endpoint_url: URL envelopes are POSTed to
        max_batch_size: Items buffered before a send is triggered
        max_batch_interval_ms: Longest time an item waits in the buffer (0 disables the timer)
        disable_statsbeat: Turn off the client's request/item counters
        disable_app_insights: Turn every track call into a no-op
        timeout: HTTP timeout in seconds for one ingestion request
    """

    model_config = {"populate_by_name": True, "validate_assignment": True, "extra": "forbid"}

    instrumentation_key: str = Field(default="", alias="instrumentationKey")
    endpoint_url: str = Field(default=f"{DEFAULT_INGESTION_ENDPOINT}{TRACK_PATH}", alias="endpointUrl")
    max_batch_size: int = Field(default=250, ge=1, alias="maxBatchSize")
    max_batch_interval_ms: int = Field(default=15_000, ge=0, alias="maxBatchIntervalMs")
    disable_statsbeat: bool = Field(default=False, alias="disableStatsbeat")
    disable_app_insights: bool = Field(default=False, alias="disableAppInsights")
    timeout: float = Field(default=30.0, gt=0)

    @classmethod
    def from_connection_string(cls, connection_string: str) -> TelemetryClientConfig:
        """Build a config pointing at the resource named by a connection string.

        Raises:
            ConfigurationError: If the connection string is malformed
        """
        parsed = parse_connection_string(connection_string)
        return cls(instrumentation_key=parsed.instrumentation_key, endpoint_url=parsed.endpoint_url)

    def with_overrides(self, overrides: Mapping[str, Any]) -> TelemetryClientConfig:
        """Return a copy with the given options replaced.

        Only keys present in ``overrides`` change; everything else is kept.

        Raises:
            ConfigurationError: If an override is unknown or has an invalid value
        """
        try:
            parsed = TelemetryClientConfig.model_validate(dict(overrides))
        except ValidationError as e:
            field, message = validation_error_field(e)
            raise ConfigurationError("config", f"{field}: {message}") from e
        return self.model_copy(update=parsed.model_dump(exclude_unset=True))
