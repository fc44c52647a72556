# src/loginsights/core/config.py
"""Configuration models for the log transport.

Transport options arrive as a loose mapping (``destination``, ``track``,
``connectionString``, ``config``, ``ignoreKeys``). load_transport_settings()
validates them and produces exactly one variant of a tagged union:

- DestinationSettings: write records to a caller-supplied destination
- TrackingSettings: hand records to a track callback bound to a telemetry client

Both camelCase option names and their snake_case field names are accepted.
Telemetry client options (the ``config`` mapping) are validated against
loginsights.telemetry.config.TelemetryClientConfig.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from loginsights.contracts.errors import ConfigurationError
from loginsights.core.logging import get_logger
from loginsights.telemetry.config import TelemetryClientConfig, validation_error_field

logger = get_logger(__name__)

# Log line keys that never become telemetry properties unless overridden
DEFAULT_IGNORE_KEYS: tuple[str, ...] = ("hostname", "pid", "level", "time", "msg")

_KNOWN_OPTIONS = frozenset(
    {
        "destination",
        "track",
        "connectionString",
        "connection_string",
        "config",
        "client_config",
        "ignoreKeys",
        "ignore_keys",
    }
)


class _TransportSettingsBase(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True, "arbitrary_types_allowed": True}

    ignore_keys: tuple[str, ...] = Field(default=DEFAULT_IGNORE_KEYS, alias="ignoreKeys")

    @field_validator("ignore_keys", mode="before")
    @classmethod
    def _validate_ignore_keys(cls, v: Any) -> Any:
        if v is None:
            return DEFAULT_IGNORE_KEYS
        if isinstance(v, str | bytes):
            raise ValueError("ignoreKeys must be a sequence of key names, not a single string")
        return v


class DestinationSettings(_TransportSettingsBase):
    """Write every transformed record to a caller-owned destination."""

    mode: Literal["destination"] = "destination"
    destination: Any


class TrackingSettings(_TransportSettingsBase):
    """Deliver every transformed record to ``track(client, record)``.

    ``client_config`` (option name ``config``) holds TelemetryClientConfig
    overrides applied once when the client is created.
    """

    mode: Literal["tracking"] = "tracking"
    connection_string: str = Field(alias="connectionString", min_length=1)
    track: Callable[..., Any]
    client_config: dict[str, Any] = Field(default_factory=dict, alias="config")

    @field_validator("client_config", mode="before")
    @classmethod
    def _validate_client_config(cls, v: Any) -> Any:
        if v is None:
            return {}
        if not isinstance(v, Mapping):
            raise ValueError(f"config must be a mapping, got {type(v).__name__}")
        try:
            TelemetryClientConfig.model_validate(dict(v))
        except ValidationError as e:
            field, message = validation_error_field(e)
            raise ValueError(f"{field}: {message}") from e
        return dict(v)


TransportSettings = Annotated[DestinationSettings | TrackingSettings, Field(discriminator="mode")]

_SETTINGS_ADAPTER: TypeAdapter[DestinationSettings | TrackingSettings] = TypeAdapter(TransportSettings)


def _option(options: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if options.get(name) is not None:
            return options[name]
    return None


def load_transport_settings(options: Mapping[str, Any]) -> DestinationSettings | TrackingSettings:
    """Validate transport options and produce one settings variant.

    Args:
        options: Transport options. Recognized keys: destination, track,
            connectionString, config, ignoreKeys (snake_case also accepted).

    Returns:
        DestinationSettings or TrackingSettings, never both

    Raises:
        ConfigurationError: If neither variant can be built, both were
            requested, or an option has an invalid value. The message names
            the offending option.
    """
    destination = _option(options, "destination")
    track = _option(options, "track")
    connection_string = _option(options, "connectionString", "connection_string")

    unknown = sorted(str(key) for key in options if key not in _KNOWN_OPTIONS)
    if unknown:
        logger.debug("Ignoring unrecognized transport options", options=unknown)

    payload: dict[str, Any] = {}
    ignore_keys = _option(options, "ignoreKeys", "ignore_keys")
    if ignore_keys is not None:
        payload["ignore_keys"] = ignore_keys

    if destination is not None:
        if track is not None or connection_string is not None:
            raise ConfigurationError(
                "destination",
                "destination is mutually exclusive with track and connectionString",
            )
        if not callable(getattr(destination, "write", None)):
            raise ConfigurationError(
                "destination",
                f"destination must be a writable stream with a callable write(), got {type(destination).__name__}",
            )
        payload.update(mode="destination", destination=destination)
    else:
        problems: list[str] = []
        if not connection_string:
            problems.append("connectionString is missing")
        elif not isinstance(connection_string, str):
            problems.append(f"connectionString must be a string, got {type(connection_string).__name__}")
        if track is None:
            problems.append("track is missing")
        elif not callable(track):
            problems.append(f"track must be callable, got {type(track).__name__}")
        if problems:
            field = "connectionString" if problems[0].startswith("connectionString") else "track"
            raise ConfigurationError(
                field,
                f"track function and connectionString are required ({'; '.join(problems)})",
            )
        payload.update(
            mode="tracking",
            connection_string=connection_string,
            track=track,
            client_config=_option(options, "config", "client_config"),
        )

    try:
        settings = _SETTINGS_ADAPTER.validate_python(payload)
    except ValidationError as e:
        field, message = validation_error_field(e)
        raise ConfigurationError(field, message) from e

    logger.debug("Transport settings loaded", mode=settings.mode, ignore_keys=list(settings.ignore_keys))
    return settings
