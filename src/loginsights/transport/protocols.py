# src/loginsights/transport/protocols.py
"""Protocol definitions for transport destinations and sinks."""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from loginsights.contracts.records import NormalizedTelemetry


@runtime_checkable
class WritableDestination(Protocol):
    """Anything a caller can hand to compose(destination=...).

    write() returning normally means the record was accepted; raising means
    it failed and terminates the transport. Records are passed as objects,
    never serialized to bytes.
    """

    def write(self, record: "NormalizedTelemetry") -> Any: ...


@runtime_checkable
class TelemetrySink(Protocol):
    """Final stage of a LogTransport.

    Lifecycle:
        1. write() is called once per record, in arrival order
        2. close() is called once when the transport terminates

    Error handling:
        - write() may raise; the transport terminates and re-raises
        - close() must be idempotent
    """

    def write(self, record: "NormalizedTelemetry") -> None: ...

    def close(self) -> None: ...
