"""Record schema contracts.

TypedDict schemas for the shapes that cross the transport boundary: the
serialized error carried by a log line, the normalized telemetry record the
transformation emits, and the envelope the telemetry client ships.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, NotRequired, TypeAlias, TypedDict

from loginsights.contracts.enums import SeverityLevel
from loginsights.contracts.errors import TelemetryException

# A structured log line: reserved keys (time, level, msg, err, ...) plus
# arbitrary extra properties.
LogRecord: TypeAlias = Mapping[str, Any]


class SerializedError(TypedDict, total=False):
    """Schema for the ``err`` key of a log line."""

    type: str
    message: str
    stack: str
    code: Any


class NormalizedTelemetry(TypedDict):
    """Schema for a transformed log line.

    ``exception`` is only present when the log line carried an error.
    """

    time: datetime | None
    msg: Any
    severity: SeverityLevel
    properties: dict[str, Any]
    exception: NotRequired[TelemetryException]


class EnvelopeData(TypedDict):
    baseType: str
    baseData: dict[str, Any]


class Envelope(TypedDict):
    """Schema for one item of an ingestion request body."""

    ver: int
    name: str
    time: str
    sampleRate: float
    iKey: str
    tags: dict[str, str]
    data: EnvelopeData
