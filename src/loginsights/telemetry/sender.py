# src/loginsights/telemetry/sender.py
"""HTTP transmission of envelope batches.

A batch is sent as one POST whose body is the gzip-compressed,
newline-delimited JSON serialization of its envelopes:

    Content-Type: application/x-json-stream
    Content-Encoding: gzip

The ingestion service answers 200 (all accepted), 206 (partially accepted,
with per-item errors) or an error status. Failed sends are logged and
counted; they are not retried and never raised to the tracking caller.
"""

from __future__ import annotations

import gzip
import json
from collections.abc import Sequence
from json import JSONDecodeError
from typing import Any

import httpx

from loginsights.contracts.records import Envelope
from loginsights.core.logging import get_logger
from loginsights.telemetry.statsbeat import Statsbeat

logger = get_logger(__name__)

CONTENT_TYPE = "application/x-json-stream"
CONTENT_ENCODING = "gzip"


def encode_batch(envelopes: Sequence[Envelope]) -> bytes:
    """Serialize envelopes to gzip-compressed newline-delimited JSON."""
    lines = [json.dumps(envelope, separators=(",", ":"), default=str) for envelope in envelopes]
    return gzip.compress("\n".join(lines).encode("utf-8"))


def decode_batch(body: bytes) -> list[dict[str, Any]]:
    """Inverse of encode_batch(); blank lines are skipped."""
    text = gzip.decompress(body).decode("utf-8")
    return [json.loads(line) for line in text.splitlines() if line.strip()]


class TelemetrySender:
    """Posts envelope batches to an ingestion endpoint.

    Wraps a shared httpx.Client for connection reuse. A client passed in by
    the caller is used as-is and not closed by close().
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
        statsbeat: Statsbeat | None = None,
    ) -> None:
        self._timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client if http_client is not None else httpx.Client(timeout=timeout)
        self._statsbeat = statsbeat if statsbeat is not None else Statsbeat()
        self._closed = False

    def send(self, endpoint_url: str, envelopes: Sequence[Envelope], *, timeout: float | None = None) -> bool:
        """Send one batch.

        Args:
            endpoint_url: Track URL of the ingestion service
            envelopes: Envelopes to send in a single request
            timeout: Per-request timeout override in seconds

        Returns:
            True if the service accepted the request (200 or 206), False otherwise
        """
        if not envelopes:
            return True
        if self._closed:
            logger.warning("Telemetry sender closed, dropping batch", item_count=len(envelopes))
            self._statsbeat.count_failure(len(envelopes))
            return False

        body = encode_batch(envelopes)
        try:
            response = self._client.post(
                endpoint_url,
                content=body,
                headers={"Content-Type": CONTENT_TYPE, "Content-Encoding": CONTENT_ENCODING},
                timeout=timeout if timeout is not None else self._timeout,
            )
        except httpx.HTTPError as e:
            logger.warning(
                "Failed to send telemetry batch",
                endpoint=endpoint_url,
                item_count=len(envelopes),
                error=str(e),
            )
            self._statsbeat.count_failure(len(envelopes))
            return False

        return self._handle_response(response, len(envelopes))

    def _handle_response(self, response: httpx.Response, item_count: int) -> bool:
        if response.status_code not in (200, 206):
            logger.warning(
                "Telemetry batch rejected",
                status_code=response.status_code,
                item_count=item_count,
                body=response.text[:500],
            )
            self._statsbeat.count_failure(item_count)
            return False

        accepted = item_count
        try:
            summary = response.json()
        except (JSONDecodeError, UnicodeDecodeError):
            summary = None
        if isinstance(summary, dict):
            accepted = int(summary.get("itemsAccepted", item_count))
            errors = summary.get("errors") or []
            if errors:
                logger.warning(
                    "Telemetry batch partially accepted",
                    items_received=summary.get("itemsReceived", item_count),
                    items_accepted=accepted,
                    errors=errors[:10],
                )

        self._statsbeat.count_success(accepted, item_count - accepted)
        logger.debug("Telemetry batch sent", item_count=item_count, items_accepted=accepted)
        return True

    def close(self) -> None:
        """Release the HTTP client. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            self._client.close()
