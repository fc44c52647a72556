# src/loginsights/telemetry/connection_string.py
"""Application Insights connection string parsing.

A connection string is a ``;``-separated list of ``Key=Value`` pairs:

    InstrumentationKey=00000000-...;IngestionEndpoint=https://westeurope-5.in.applicationinsights.azure.com/

A value without any ``=`` is treated as a bare instrumentation key, the
format older resources were configured with.
"""

from dataclasses import dataclass

from loginsights.contracts.errors import ConfigurationError

DEFAULT_INGESTION_ENDPOINT = "https://dc.services.visualstudio.com"
DEFAULT_LIVE_ENDPOINT = "https://rt.services.visualstudio.com"
TRACK_PATH = "/v2.1/track"


@dataclass(frozen=True, slots=True)
class ConnectionString:
    """Parsed connection string.

    Attributes:
        instrumentation_key: Resource identifier stamped on every envelope
        ingestion_endpoint: Base URL of the ingestion service (no trailing slash)
        live_endpoint: Base URL of the live metrics service (no trailing slash)
    """

    instrumentation_key: str
    ingestion_endpoint: str = DEFAULT_INGESTION_ENDPOINT
    live_endpoint: str = DEFAULT_LIVE_ENDPOINT

    @property
    def endpoint_url(self) -> str:
        """URL envelopes are POSTed to."""
        return f"{self.ingestion_endpoint}{TRACK_PATH}"


def parse_connection_string(value: str) -> ConnectionString:
    """Parse a connection string or bare instrumentation key.

    Keys are matched case-insensitively. ``EndpointSuffix`` (with optional
    ``Location``) derives both endpoints; explicit ``IngestionEndpoint`` and
    ``LiveEndpoint`` take precedence over the derived ones.

    Args:
        value: Connection string or instrumentation key

    Returns:
        Parsed ConnectionString

    Raises:
        ConfigurationError: If no instrumentation key can be found
    """
    value = value.strip()
    if not value:
        raise ConfigurationError("connectionString", "connectionString must be a non-empty string")

    if "=" not in value:
        return ConnectionString(instrumentation_key=value)

    pairs: dict[str, str] = {}
    for segment in value.split(";"):
        if not segment.strip():
            continue
        key, sep, item = segment.partition("=")
        if not sep:
            raise ConfigurationError("connectionString", f"malformed segment {segment!r}, expected Key=Value")
        pairs[key.strip().lower()] = item.strip()

    instrumentation_key = pairs.get("instrumentationkey")
    if not instrumentation_key:
        raise ConfigurationError("connectionString", "connectionString has no InstrumentationKey")

    ingestion_endpoint = DEFAULT_INGESTION_ENDPOINT
    live_endpoint = DEFAULT_LIVE_ENDPOINT
    suffix = pairs.get("endpointsuffix")
    if suffix:
        location = pairs.get("location")
        prefix = f"{location}." if location else ""
        suffix = suffix.strip("./")
        ingestion_endpoint = f"https://{prefix}dc.{suffix}"
        live_endpoint = f"https://{prefix}live.{suffix}"

    return ConnectionString(
        instrumentation_key=instrumentation_key,
        ingestion_endpoint=pairs.get("ingestionendpoint", ingestion_endpoint).rstrip("/"),
        live_endpoint=pairs.get("liveendpoint", live_endpoint).rstrip("/"),
    )
