# src/loginsights/transport/transformation.py
"""Log line to telemetry record transformation.

    log source -> TelemetryTransformation -> sink

One structured log line (a mapping, or its JSON text) becomes one
NormalizedTelemetry record:

    {"level": 30, "time": 1706616000000, "msg": "foo", "bar": "baz"}
    ->
    {"time": datetime(2024, 1, 30, 12, 0, tzinfo=UTC), "msg": "foo",
     "severity": SeverityLevel.INFORMATION, "properties": {"bar": "baz"}}

The transformation is pure: no clock reads, no state across lines.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Iterator, Mapping
from datetime import UTC, datetime
from json import JSONDecodeError
from typing import Any

from loginsights.contracts.enums import SeverityLevel
from loginsights.contracts.errors import ParseError, TelemetryException
from loginsights.contracts.records import LogRecord, NormalizedTelemetry
from loginsights.core.config import DEFAULT_IGNORE_KEYS
from loginsights.core.logging import get_logger

logger = get_logger(__name__)

# Checked highest first; anything below the last threshold is VERBOSE
SEVERITY_THRESHOLDS: tuple[tuple[int, SeverityLevel], ...] = (
    (60, SeverityLevel.CRITICAL),
    (50, SeverityLevel.ERROR),
    (40, SeverityLevel.WARNING),
    (30, SeverityLevel.INFORMATION),
)

# pino and structlog level labels
LEVEL_LABELS: dict[str, int] = {
    "trace": 10,
    "debug": 20,
    "info": 30,
    "warn": 40,
    "warning": 40,
    "error": 50,
    "fatal": 60,
    "critical": 60,
}


def parse_line(chunk: str | bytes | bytearray | LogRecord) -> LogRecord:
    """Return the log line as a mapping, parsing JSON text if needed.

    Raises:
        ParseError: If the text is not valid JSON or not a JSON object
    """
    if isinstance(chunk, Mapping):
        return chunk
    if isinstance(chunk, str | bytes | bytearray):
        try:
            line = json.loads(chunk)
        except (JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Malformed log line: {e}") from e
        if not isinstance(line, dict):
            raise ParseError(f"Log line must be a JSON object, got {type(line).__name__}")
        return line
    raise ParseError(f"Unsupported log line type {type(chunk).__name__}")


def _epoch_ms(value: float) -> datetime | None:
    if not math.isfinite(value):
        return None
    try:
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _interpret_time(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return _epoch_ms(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return _epoch_ms(float(text))
        except ValueError:
            pass
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    return None


def parse_time(value: Any) -> datetime | None:
    """Normalize a log line time to an aware UTC datetime.

    Numbers and numeric strings are epoch milliseconds (pino's default),
    other strings are ISO 8601. Naive datetimes are assumed to be UTC.
    A time that cannot be interpreted yields None, like a missing one, so
    the telemetry client stamps the record with the current time.
    """
    if value is None:
        return None
    parsed = _interpret_time(value)
    if parsed is None:
        logger.debug("Ignoring uninterpretable log time", time=repr(value))
    return parsed


class TelemetryTransformation:
    """Transform structured log lines into telemetry records.

    Subclass and override convert_level() or extract_properties() to change
    the mapping; pass the subclass to compose(transformation=...).

    Attributes:
        ignore_keys: Log line keys excluded from ``properties``
    """

    def __init__(self, ignore_keys: Iterable[str] | None = None) -> None:
        self.ignore_keys: frozenset[str] = frozenset(DEFAULT_IGNORE_KEYS if ignore_keys is None else ignore_keys)

    def transform(self, source: Iterable[str | bytes | LogRecord]) -> Iterator[NormalizedTelemetry]:
        """Lazily convert each line of ``source``, in order.

        Nothing is read from ``source`` until the consumer asks for the next
        record, so a slow consumer throttles intake.
        """
        for chunk in source:
            yield self.convert_to_telemetry(chunk)

    def convert_to_telemetry(self, chunk: str | bytes | LogRecord) -> NormalizedTelemetry:
        """Convert one log line.

        Raises:
            ParseError: If the line cannot be parsed
        """
        line = parse_line(chunk)
        telemetry: NormalizedTelemetry = {
            "time": parse_time(line.get("time")),
            "msg": line.get("msg"),
            "severity": self.convert_level(line.get("level")),
            "properties": self.extract_properties(line, self.ignore_keys),
        }
        err = line.get("err")
        if err:
            telemetry["exception"] = TelemetryException(err if isinstance(err, Mapping) else {"message": str(err)})
        return telemetry

    def convert_level(self, level: Any) -> SeverityLevel:
        """Map a numeric log level (or level label) to a severity.

        >>> TelemetryTransformation().convert_level(40)
        <SeverityLevel.WARNING: 2>
        """
        if isinstance(level, str):
            level = LEVEL_LABELS.get(level.lower())
        if isinstance(level, bool) or not isinstance(level, int | float):
            return SeverityLevel.VERBOSE
        for threshold, severity in SEVERITY_THRESHOLDS:
            if level >= threshold:
                return severity
        return SeverityLevel.VERBOSE

    def extract_properties(self, line: LogRecord, ignore_keys: Iterable[str] | None = None) -> dict[str, Any]:
        """Copy every key of ``line`` except ``ignore_keys``."""
        if ignore_keys is None:
            return dict(line)
        ignored = ignore_keys if isinstance(ignore_keys, frozenset | set) else frozenset(ignore_keys)
        return {key: value for key, value in line.items() if key not in ignored}
