"""Severity levels and telemetry kinds shared across subsystem boundaries.

SeverityLevel values are the ordinals Application Insights stores in
``severityLevel``. TelemetryType values are the envelope ``data.baseType``
discriminators.
"""

from enum import IntEnum, StrEnum


class SeverityLevel(IntEnum):
    """Ordinal telemetry importance level.

    Verbose < Information < Warning < Error < Critical.
    """

    VERBOSE = 0
    INFORMATION = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4


class TelemetryType(StrEnum):
    """Base type of a telemetry envelope."""

    MESSAGE = "MessageData"
    EVENT = "EventData"
    EXCEPTION = "ExceptionData"
    METRIC = "MetricData"

    @property
    def envelope_kind(self) -> str:
        """Short kind used in envelope names (``Message``, ``Event``, ...)."""
        return self.value.removesuffix("Data")
