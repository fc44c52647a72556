# src/loginsights/transport/handler.py
"""Bridge from the standard logging module to a LogTransport.

LogTransportHandler serializes each logging.LogRecord into a pino-style
line before writing it to the transport:

    {"level": 30, "time": 1706616000000, "pid": 4242, "hostname": "web-1",
     "msg": "user signed in", "user_id": "u-1"}

Extra attributes (``logger.info("...", extra={"user_id": "u-1"})``) become
top-level keys. An attached exception becomes ``err``.
"""

from __future__ import annotations

import errno
import logging
import socket
import traceback
from typing import Any

from loginsights.contracts.records import SerializedError
from loginsights.core.logging import PACKAGE_LOGGER
from loginsights.transport.pipeline import LogTransport

# Attributes every LogRecord carries; anything else came from extra=
_RESERVED_ATTRS: frozenset[str] = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}


def pino_level(levelno: int) -> int:
    """Translate a logging level number to pino's numeric scale."""
    if levelno >= logging.CRITICAL:
        return 60
    if levelno >= logging.ERROR:
        return 50
    if levelno >= logging.WARNING:
        return 40
    if levelno >= logging.INFO:
        return 30
    if levelno >= logging.DEBUG:
        return 20
    return 10


def serialize_error(exc: BaseException) -> SerializedError:
    """Serialize an exception the way pino's ``err`` serializer does.

    ``code`` is taken from a ``code`` attribute, or from ``errno`` for
    OSError (as its symbolic name, e.g. "ENOENT").
    """
    err: SerializedError = {
        "type": type(exc).__name__,
        "message": str(exc),
        "stack": "".join(traceback.format_exception(exc)),
    }
    code = getattr(exc, "code", None)
    if code is None and isinstance(exc, OSError) and exc.errno is not None:
        code = errno.errorcode.get(exc.errno, exc.errno)
    if code is not None:
        err["code"] = code
    return err


class LogTransportHandler(logging.Handler):
    """logging.Handler that ships records through a LogTransport.

    Records from the ``loginsights`` logger hierarchy are never shipped, and
    records emitted after the transport terminated are dropped.
    Failures go to Handler.handleError(), the logging module's error channel.
    close() terminates the transport, so logging.shutdown() at interpreter
    exit flushes pending telemetry.
    """

    def __init__(self, transport: LogTransport, level: int | str = logging.NOTSET) -> None:
        super().__init__(level)
        self._transport = transport
        self._hostname = socket.gethostname()

    @property
    def transport(self) -> LogTransport:
        return self._transport

    def to_log_line(self, record: logging.LogRecord) -> dict[str, Any]:
        line: dict[str, Any] = {
            "level": pino_level(record.levelno),
            "time": int(record.created * 1000),
            "pid": record.process,
            "hostname": self._hostname,
            "msg": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                line[key] = value
        if record.exc_info and record.exc_info[1] is not None:
            line["err"] = serialize_error(record.exc_info[1])
        return line

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == PACKAGE_LOGGER or record.name.startswith(f"{PACKAGE_LOGGER}."):
            return
        if self._transport.terminated:
            return
        try:
            self._transport.write(self.to_log_line(record))
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            self._transport.terminate()
        finally:
            super().close()
