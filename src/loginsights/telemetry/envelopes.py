# src/loginsights/telemetry/envelopes.py
"""Envelope construction for the Application Insights track API.

Every tracked item becomes one envelope:

    {
        "ver": 1,
        "name": "Microsoft.ApplicationInsights.<ikey>.Message",
        "time": "2026-01-30T12:00:00.000Z",
        "sampleRate": 100.0,
        "iKey": "<ikey>",
        "tags": {"ai.cloud.roleInstance": "host", ...},
        "data": {"baseType": "MessageData", "baseData": {...}},
    }

Ingestion rejects non-string property values and over-long fields, so
properties are coerced to strings and long values truncated here.
"""

from __future__ import annotations

import json
import math
import re
import traceback
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from loginsights.contracts.enums import SeverityLevel, TelemetryType
from loginsights.contracts.errors import TelemetryException
from loginsights.contracts.records import Envelope

MAX_MESSAGE_LENGTH = 32_768
MAX_PROPERTY_KEY_LENGTH = 150
MAX_PROPERTY_VALUE_LENGTH = 8_192
MAX_NAME_LENGTH = 512

# File "/srv/app/main.py", line 12, in handler
_PYTHON_FRAME = re.compile(r'^\s*File "(?P<file>[^"]+)", line (?P<line>\d+), in (?P<method>\S.*?)\s*$')
# at handler (/srv/app/main.js:12:5)  or  at /srv/app/main.js:12:5
_JS_FRAME = re.compile(r"^\s*at\s+(?:(?P<method>.+?)\s+\()?(?P<file>[^()\s]+?):(?P<line>\d+)(?::\d+)?\)?\s*$")


def format_time(value: datetime | None) -> str:
    """Render a timestamp as ISO 8601 UTC with millisecond precision.

    Naive datetimes are assumed to be UTC; None means now.
    """
    if value is None:
        value = datetime.now(tz=UTC)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _truncate(value: str, limit: int) -> str:
    return value if len(value) <= limit else value[:limit]


def string_map(values: Mapping[str, Any] | None) -> dict[str, str]:
    """Coerce a property mapping to the string map ingestion accepts.

    Strings pass through; None becomes an empty string; anything else is
    JSON-encoded (falling back to str() for non-JSON values).
    """
    result: dict[str, str] = {}
    if not values:
        return result
    for key, value in values.items():
        if isinstance(value, str):
            text = value
        elif value is None:
            text = ""
        else:
            text = json.dumps(value, default=str)
        result[_truncate(str(key), MAX_PROPERTY_KEY_LENGTH)] = _truncate(text, MAX_PROPERTY_VALUE_LENGTH)
    return result


def numeric_map(values: Mapping[str, Any] | None) -> dict[str, float]:
    """Keep only finite numeric measurements."""
    result: dict[str, float] = {}
    if not values:
        return result
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int | float):
            continue
        if not math.isfinite(value):
            continue
        result[_truncate(str(key), MAX_PROPERTY_KEY_LENGTH)] = value
    return result


def parse_stack(stack: str | None) -> list[dict[str, Any]]:
    """Parse a stack trace into frames, innermost first.

    Understands Python tracebacks (outermost frame first, so the order is
    reversed) and JavaScript ``at fn (file:line:col)`` stacks (already
    innermost first). Lines that match neither format are skipped.
    """
    if not stack:
        return []

    python_frames: list[tuple[str, str, int, str]] = []
    js_frames: list[tuple[str, str, int, str]] = []
    for raw in stack.splitlines():
        match = _PYTHON_FRAME.match(raw)
        if match:
            python_frames.append((match["method"], match["file"], int(match["line"]), raw.strip()))
            continue
        match = _JS_FRAME.match(raw)
        if match:
            js_frames.append((match["method"] or "<anonymous>", match["file"], int(match["line"]), raw.strip()))

    frames = list(reversed(python_frames)) if python_frames else js_frames
    return [
        {"level": level, "method": method, "assembly": assembly, "fileName": file_name, "line": line}
        for level, (method, file_name, line, assembly) in enumerate(frames)
    ]


def exception_details(exception: BaseException) -> dict[str, Any]:
    """Describe an exception the way ExceptionData expects.

    TelemetryException keeps the type, message and stack it was rebuilt
    from; any other exception is described from its class and traceback.
    """
    if isinstance(exception, TelemetryException):
        # Serialized fields arrive as whatever the log line held
        type_name = str(exception.type) if exception.type else "Error"
        message = "" if exception.message is None else str(exception.message)
        stack = str(exception.stack) if exception.stack else None
    else:
        type_name = type(exception).__name__
        message = str(exception)
        stack = "".join(traceback.format_exception(exception)) if exception.__traceback__ else None

    parsed_stack = parse_stack(stack)
    details: dict[str, Any] = {
        "typeName": type_name,
        "message": _truncate(message, MAX_MESSAGE_LENGTH),
        "hasFullStack": bool(parsed_stack),
        "parsedStack": parsed_stack,
    }
    if stack:
        details["stack"] = _truncate(stack, MAX_MESSAGE_LENGTH)
    return details


def message_data(
    message: Any,
    severity: SeverityLevel | int | None = None,
    properties: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    text = "" if message is None else str(message)
    data: dict[str, Any] = {
        "ver": 2,
        "message": _truncate(text, MAX_MESSAGE_LENGTH),
        "properties": string_map(properties),
    }
    if severity is not None:
        data["severityLevel"] = int(severity)
    return data


def event_data(
    name: str,
    properties: Mapping[str, Any] | None = None,
    measurements: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "ver": 2,
        "name": _truncate(name, MAX_NAME_LENGTH),
        "properties": string_map(properties),
        "measurements": numeric_map(measurements),
    }


def exception_data(
    exception: BaseException,
    severity: SeverityLevel | int | None = None,
    properties: Mapping[str, Any] | None = None,
    measurements: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "ver": 2,
        "exceptions": [exception_details(exception)],
        "properties": string_map(properties),
        "measurements": numeric_map(measurements),
    }
    if severity is not None:
        data["severityLevel"] = int(severity)
    return data


def metric_data(
    name: str,
    value: float,
    *,
    count: int | None = None,
    min_value: float | None = None,
    max_value: float | None = None,
    std_dev: float | None = None,
    properties: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build MetricData for a single measurement or a pre-aggregated metric.

    The data point kind is Aggregation (1) when any of count/min/max/std_dev
    is given, Measurement (0) otherwise.
    """
    aggregated = any(v is not None for v in (count, min_value, max_value, std_dev))
    point: dict[str, Any] = {
        "name": _truncate(name, MAX_NAME_LENGTH),
        "value": value,
        "kind": 1 if aggregated else 0,
    }
    if count is not None:
        point["count"] = count
    if min_value is not None:
        point["min"] = min_value
    if max_value is not None:
        point["max"] = max_value
    if std_dev is not None:
        point["stdDev"] = std_dev
    return {"ver": 2, "metrics": [point], "properties": string_map(properties)}


def create_envelope(
    telemetry_type: TelemetryType,
    base_data: dict[str, Any],
    *,
    instrumentation_key: str,
    tags: dict[str, str],
    time: datetime | None = None,
    sample_rate: float = 100.0,
) -> Envelope:
    """Wrap base data into an envelope addressed to one resource."""
    return {
        "ver": 1,
        "name": f"Microsoft.ApplicationInsights.{instrumentation_key.replace('-', '')}.{telemetry_type.envelope_kind}",
        "time": format_time(time),
        "sampleRate": sample_rate,
        "iKey": instrumentation_key,
        "tags": tags,
        "data": {"baseType": telemetry_type.value, "baseData": base_data},
    }
