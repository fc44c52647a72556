# src/loginsights/transport/pipeline.py
"""The log transport: one linear pipe from log source to sink.

    source -> TelemetryTransformation -> TelemetrySink

Records move one at a time, in arrival order. Intake is either pushed
(write(), one line per call, returning once the sink accepted it) or pulled
(run(), which draws from an iterable only as fast as the sink accepts).

Once terminated, the transport accepts no input and emits no output. A
failure anywhere in the pipe terminates it and propagates to the caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from types import TracebackType
from typing import Any

from loginsights.contracts.errors import TransportClosedError
from loginsights.contracts.records import LogRecord
from loginsights.core.logging import get_logger
from loginsights.transport.protocols import TelemetrySink
from loginsights.transport.transformation import TelemetryTransformation

logger = get_logger(__name__)


class LogTransport:
    """Single-pass pipe from raw log lines to a sink.

    Example:
        transport = compose(destination=destination)
        transport.write('{"level": 30, "msg": "foo"}')
        transport.terminate()

    Thread Safety:
        Not thread-safe. Callers that write from several threads (such as
        LogTransportHandler, which writes under the handler lock) must
        serialize access.
    """

    def __init__(self, transformation: TelemetryTransformation, sink: TelemetrySink) -> None:
        self._transformation = transformation
        self._sink = sink
        self._terminated = False
        self._records_written = 0

    @property
    def transformation(self) -> TelemetryTransformation:
        return self._transformation

    @property
    def sink(self) -> TelemetrySink:
        return self._sink

    @property
    def terminated(self) -> bool:
        return self._terminated

    @property
    def records_written(self) -> int:
        """Number of records the sink has accepted."""
        return self._records_written

    def write(self, line: str | bytes | LogRecord) -> None:
        """Push one log line through the pipe.

        Raises:
            TransportClosedError: If the transport was terminated
            ParseError: If the line is malformed (the transport terminates)
            Exception: Whatever the sink raised (the transport terminates)
        """
        self._ensure_open()
        try:
            record = self._transformation.convert_to_telemetry(line)
            self._sink.write(record)
        except Exception as e:
            self._fail(e)
            raise
        self._records_written += 1

    def run(self, source: Iterable[str | bytes | LogRecord]) -> int:
        """Pull every line of ``source`` through the pipe, then terminate.

        Lines that are empty or whitespace only are skipped. Stops early,
        discarding the rest of ``source``, when the transport is terminated
        while running (for instance from within the sink).

        Returns:
            Number of records written during this run

        Raises:
            TransportClosedError: If the transport was already terminated
            ParseError: If a line is malformed
            Exception: Whatever the sink raised
        """
        self._ensure_open()
        written = 0
        try:
            for record in self._transformation.transform(self._intake(source)):
                self._sink.write(record)
                written += 1
                self._records_written += 1
        except Exception as e:
            self._fail(e)
            raise
        self.terminate()
        return written

    def _intake(self, source: Iterable[Any]) -> Iterator[Any]:
        for line in source:
            if self._terminated:
                return
            if isinstance(line, str | bytes | bytearray) and not line.strip():
                continue
            yield line

    def _ensure_open(self) -> None:
        if self._terminated:
            raise TransportClosedError("Log transport has been terminated")

    def _fail(self, error: Exception) -> None:
        logger.warning(
            "Log transport terminated by error",
            error_type=type(error).__name__,
            error=str(error),
            records_written=self._records_written,
        )
        if self._terminated:
            return
        self._terminated = True
        try:
            self._sink.close()
        except Exception as close_error:
            # The original error is re-raised by the caller
            logger.warning("Failed to close sink after error", error=str(close_error))

    def terminate(self) -> None:
        """Stop accepting records and release the sink. Idempotent."""
        if self._terminated:
            return
        self._terminated = True
        self._sink.close()
        logger.debug("Log transport terminated", records_written=self._records_written)

    def __enter__(self) -> LogTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.terminate()
