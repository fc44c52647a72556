# src/loginsights/telemetry/statsbeat.py
"""Request and item counters for a telemetry client.

Statsbeat is the client's own auxiliary telemetry: how many ingestion
requests succeeded or failed and how many items were accepted or dropped.
The counters are kept in memory and exposed through snapshot(); they are
not shipped anywhere. Setting ``disableStatsbeat`` turns them off.
"""

import threading
from dataclasses import asdict, dataclass


@dataclass(frozen=True, slots=True)
class StatsbeatSnapshot:
    request_success: int = 0
    request_failure: int = 0
    items_accepted: int = 0
    items_dropped: int = 0


class Statsbeat:
    """Thread-safe counters, updated by the sender after every request."""

    def __init__(self, *, enabled: bool = True) -> None:
        self._enabled = enabled
        self._lock = threading.Lock()
        self._counts = StatsbeatSnapshot()

    def enable(self, enabled: bool) -> None:
        self._enabled = enabled

    def is_enabled(self) -> bool:
        return self._enabled

    def count_success(self, accepted: int, dropped: int = 0) -> None:
        self._add(request_success=1, items_accepted=accepted, items_dropped=dropped)

    def count_failure(self, dropped: int) -> None:
        self._add(request_failure=1, items_dropped=dropped)

    def _add(self, **increments: int) -> None:
        if not self._enabled:
            return
        with self._lock:
            current = asdict(self._counts)
            for key, value in increments.items():
                current[key] += value
            self._counts = StatsbeatSnapshot(**current)

    def snapshot(self) -> StatsbeatSnapshot:
        with self._lock:
            return self._counts
