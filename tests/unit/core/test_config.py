# tests/unit/core/test_config.py
"""Tests for transport option validation."""

from typing import Any

import pytest
from pydantic import ValidationError

from loginsights.contracts.errors import ConfigurationError
from loginsights.core.config import (
    DEFAULT_IGNORE_KEYS,
    DestinationSettings,
    TrackingSettings,
    load_transport_settings,
)
from tests.conftest import CollectingDestination


def _track(client: Any, record: Any) -> None:
    pass


class TestDestinationSettings:
    """Options with a destination produce DestinationSettings."""

    def test_destination_variant(self, collecting_destination: CollectingDestination) -> None:
        settings = load_transport_settings({"destination": collecting_destination})

        assert isinstance(settings, DestinationSettings)
        assert settings.mode == "destination"
        assert settings.destination is collecting_destination
        assert settings.ignore_keys == DEFAULT_IGNORE_KEYS

    def test_default_ignore_keys(self) -> None:
        assert DEFAULT_IGNORE_KEYS == ("hostname", "pid", "level", "time", "msg")

    def test_destination_without_write_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="writable") as exc_info:
            load_transport_settings({"destination": object()})

        assert exc_info.value.field == "destination"

    def test_destination_with_non_callable_write_is_rejected(self) -> None:
        class NotWritable:
            write = "nope"

        with pytest.raises(ConfigurationError, match="writable"):
            load_transport_settings({"destination": NotWritable()})

    @pytest.mark.parametrize(
        "extra",
        [
            {"track": _track},
            {"connectionString": "InstrumentationKey=abc"},
            {"connection_string": "InstrumentationKey=abc"},
        ],
    )
    def test_destination_excludes_tracking_options(
        self, collecting_destination: CollectingDestination, extra: dict[str, Any]
    ) -> None:
        with pytest.raises(ConfigurationError, match="mutually exclusive") as exc_info:
            load_transport_settings({"destination": collecting_destination, **extra})

        assert exc_info.value.field == "destination"

    def test_settings_are_frozen(self, collecting_destination: CollectingDestination) -> None:
        settings = load_transport_settings({"destination": collecting_destination})

        with pytest.raises(ValidationError):
            settings.ignore_keys = ("msg",)  # type: ignore[misc]


class TestTrackingSettings:
    """Options with track + connectionString produce TrackingSettings."""

    def test_tracking_variant(self, connection_string: str) -> None:
        settings = load_transport_settings({"track": _track, "connectionString": connection_string})

        assert isinstance(settings, TrackingSettings)
        assert settings.mode == "tracking"
        assert settings.connection_string == connection_string
        assert settings.track is _track
        assert settings.client_config == {}

    def test_snake_case_names_accepted(self, connection_string: str) -> None:
        settings = load_transport_settings(
            {
                "track": _track,
                "connection_string": connection_string,
                "client_config": {"max_batch_size": 3},
                "ignore_keys": ["msg"],
            }
        )

        assert isinstance(settings, TrackingSettings)
        assert settings.client_config == {"max_batch_size": 3}
        assert settings.ignore_keys == ("msg",)

    def test_client_config_is_kept_as_given(self, connection_string: str) -> None:
        settings = load_transport_settings(
            {
                "track": _track,
                "connectionString": connection_string,
                "config": {"maxBatchSize": 3, "disableStatsbeat": True},
            }
        )

        assert isinstance(settings, TrackingSettings)
        assert settings.client_config == {"maxBatchSize": 3, "disableStatsbeat": True}

    def test_empty_options_mention_connection_string(self) -> None:
        with pytest.raises(ConfigurationError, match="connectionString") as exc_info:
            load_transport_settings({})

        assert exc_info.value.field == "connectionString"
        assert "track is missing" in str(exc_info.value)

    def test_missing_connection_string(self) -> None:
        with pytest.raises(ConfigurationError, match="connectionString is missing"):
            load_transport_settings({"track": _track})

    def test_empty_connection_string(self) -> None:
        with pytest.raises(ConfigurationError, match="connectionString is missing"):
            load_transport_settings({"track": _track, "connectionString": ""})

    def test_missing_track(self, connection_string: str) -> None:
        with pytest.raises(ConfigurationError, match="track is missing") as exc_info:
            load_transport_settings({"connectionString": connection_string})

        assert exc_info.value.field == "track"
        assert "connectionString" in str(exc_info.value)

    def test_non_callable_track(self, connection_string: str) -> None:
        with pytest.raises(ConfigurationError, match="track must be callable"):
            load_transport_settings({"track": "trackTrace", "connectionString": connection_string})

    def test_non_string_connection_string(self) -> None:
        with pytest.raises(ConfigurationError, match="connectionString must be a string"):
            load_transport_settings({"track": _track, "connectionString": 42})

    def test_invalid_client_option_value(self, connection_string: str) -> None:
        with pytest.raises(ConfigurationError, match="maxBatchSize") as exc_info:
            load_transport_settings(
                {"track": _track, "connectionString": connection_string, "config": {"maxBatchSize": 0}}
            )

        assert exc_info.value.field == "config"

    def test_unknown_client_option(self, connection_string: str) -> None:
        with pytest.raises(ConfigurationError, match="samplingPercentage"):
            load_transport_settings(
                {"track": _track, "connectionString": connection_string, "config": {"samplingPercentage": 50}}
            )

    def test_client_config_must_be_mapping(self, connection_string: str) -> None:
        with pytest.raises(ConfigurationError, match="config must be a mapping"):
            load_transport_settings({"track": _track, "connectionString": connection_string, "config": [1, 2]})


class TestIgnoreKeys:
    def test_custom_ignore_keys(self, collecting_destination: CollectingDestination) -> None:
        settings = load_transport_settings({"destination": collecting_destination, "ignoreKeys": ["pid", "hostname"]})

        assert settings.ignore_keys == ("pid", "hostname")

    def test_empty_ignore_keys_allowed(self, collecting_destination: CollectingDestination) -> None:
        settings = load_transport_settings({"destination": collecting_destination, "ignoreKeys": []})

        assert settings.ignore_keys == ()

    def test_single_string_rejected(self, collecting_destination: CollectingDestination) -> None:
        with pytest.raises(ConfigurationError, match="sequence of key names") as exc_info:
            load_transport_settings({"destination": collecting_destination, "ignoreKeys": "hostname"})

        assert exc_info.value.field == "ignoreKeys"

    def test_non_string_entries_rejected(self, collecting_destination: CollectingDestination) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_transport_settings({"destination": collecting_destination, "ignoreKeys": [1, 2]})

        assert exc_info.value.field == "ignoreKeys"

    def test_unknown_top_level_options_ignored(self, collecting_destination: CollectingDestination) -> None:
        settings = load_transport_settings({"destination": collecting_destination, "level": "info"})

        assert isinstance(settings, DestinationSettings)
