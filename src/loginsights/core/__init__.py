# src/loginsights/core/__init__.py
"""Core infrastructure: transport configuration and logging."""

from loginsights.core.config import (
    DEFAULT_IGNORE_KEYS,
    DestinationSettings,
    TrackingSettings,
    TransportSettings,
    load_transport_settings,
)
from loginsights.core.logging import PACKAGE_LOGGER, configure_logging, get_logger

__all__ = [
    "DEFAULT_IGNORE_KEYS",
    "PACKAGE_LOGGER",
    "DestinationSettings",
    "TrackingSettings",
    "TransportSettings",
    "configure_logging",
    "get_logger",
    "load_transport_settings",
]
