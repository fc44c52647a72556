# tests/unit/telemetry/test_connection_string.py
"""Tests for connection string parsing."""

import pytest

from loginsights.contracts.errors import ConfigurationError
from loginsights.telemetry.connection_string import (
    DEFAULT_INGESTION_ENDPOINT,
    DEFAULT_LIVE_ENDPOINT,
    ConnectionString,
    parse_connection_string,
)

IKEY = "11111111-2222-3333-4444-555555555555"


class TestParseConnectionString:
    def test_full_connection_string(self) -> None:
        parsed = parse_connection_string(
            f"InstrumentationKey={IKEY};IngestionEndpoint=https://ingestion.local;LiveEndpoint=https://livemonitor.local/"
        )

        assert parsed == ConnectionString(
            instrumentation_key=IKEY,
            ingestion_endpoint="https://ingestion.local",
            live_endpoint="https://livemonitor.local",
        )
        assert parsed.endpoint_url == "https://ingestion.local/v2.1/track"

    def test_defaults_without_endpoints(self) -> None:
        parsed = parse_connection_string(f"InstrumentationKey={IKEY}")

        assert parsed.ingestion_endpoint == DEFAULT_INGESTION_ENDPOINT
        assert parsed.live_endpoint == DEFAULT_LIVE_ENDPOINT
        assert parsed.endpoint_url == "https://dc.services.visualstudio.com/v2.1/track"

    def test_bare_instrumentation_key(self) -> None:
        parsed = parse_connection_string(IKEY)

        assert parsed.instrumentation_key == IKEY
        assert parsed.ingestion_endpoint == DEFAULT_INGESTION_ENDPOINT

    def test_keys_are_case_insensitive(self) -> None:
        parsed = parse_connection_string(f"instrumentationkey={IKEY};INGESTIONENDPOINT=https://in.local/")

        assert parsed.instrumentation_key == IKEY
        assert parsed.ingestion_endpoint == "https://in.local"

    def test_trailing_separator_and_whitespace(self) -> None:
        parsed = parse_connection_string(f"  InstrumentationKey = {IKEY} ; ")

        assert parsed.instrumentation_key == IKEY

    def test_endpoint_suffix_with_location(self) -> None:
        parsed = parse_connection_string(f"InstrumentationKey={IKEY};EndpointSuffix=applicationinsights.azure.cn;Location=chinaeast2")

        assert parsed.ingestion_endpoint == "https://chinaeast2.dc.applicationinsights.azure.cn"
        assert parsed.live_endpoint == "https://chinaeast2.live.applicationinsights.azure.cn"

    def test_endpoint_suffix_without_location(self) -> None:
        parsed = parse_connection_string(f"InstrumentationKey={IKEY};EndpointSuffix=ai.contoso.com")

        assert parsed.ingestion_endpoint == "https://dc.ai.contoso.com"

    def test_explicit_endpoint_beats_suffix(self) -> None:
        parsed = parse_connection_string(
            f"InstrumentationKey={IKEY};EndpointSuffix=ai.contoso.com;IngestionEndpoint=https://explicit.local"
        )

        assert parsed.ingestion_endpoint == "https://explicit.local"
        assert parsed.live_endpoint == "https://live.ai.contoso.com"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty_value_rejected(self, value: str) -> None:
        with pytest.raises(ConfigurationError, match="non-empty") as exc_info:
            parse_connection_string(value)

        assert exc_info.value.field == "connectionString"

    def test_missing_instrumentation_key_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="InstrumentationKey"):
            parse_connection_string("IngestionEndpoint=https://ingestion.local")

    def test_malformed_segment_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="malformed segment"):
            parse_connection_string(f"InstrumentationKey={IKEY};garbage")
