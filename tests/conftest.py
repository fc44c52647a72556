# tests/conftest.py
"""Shared test fixtures and helpers.

Fixtures:
- connection_string: Connection string pointing at a fake ingestion host
- fake_ai: FakeApplicationInsights intercepting that host, reset after each test
- collecting_destination: In-memory destination for destination-mode transports
- isolated_logger: stdlib logger that does not propagate to the root logger

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import logging
import os
import uuid
from collections.abc import Iterator
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from loginsights.contracts.records import NormalizedTelemetry
from loginsights.testing import FakeApplicationInsights

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Helpers
# =============================================================================


class CollectingDestination:
    """Destination that keeps every record written to it."""

    def __init__(self) -> None:
        self.records: list[NormalizedTelemetry] = []
        self.flush_count = 0
        self.closed = False

    def write(self, record: NormalizedTelemetry) -> None:
        self.records.append(record)

    def flush(self) -> None:
        self.flush_count += 1

    def close(self) -> None:
        self.closed = True


class FailingDestination:
    """Destination whose write() always raises."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or OSError("disk full")
        self.attempts = 0

    def write(self, record: Any) -> None:
        self.attempts += 1
        raise self.error


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def instrumentation_key() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def connection_string(instrumentation_key: str) -> str:
    """Connection string whose ingestion host only exists inside the fake."""
    return (
        f"InstrumentationKey={instrumentation_key};"
        "IngestionEndpoint=https://ingestion.local;"
        "LiveEndpoint=https://livemonitor.local/"
    )


@pytest.fixture
def fake_ai(connection_string: str) -> Iterator[FakeApplicationInsights]:
    with FakeApplicationInsights(connection_string) as fake:
        yield fake


@pytest.fixture
def collecting_destination() -> CollectingDestination:
    return CollectingDestination()


@pytest.fixture
def isolated_logger() -> Iterator[logging.Logger]:
    """Logger with no handlers that does not propagate to the root logger."""
    logger = logging.getLogger(f"app.test.{uuid.uuid4().hex}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture(autouse=True)
def _no_ambient_connection_string(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APPLICATIONINSIGHTS_CONNECTION_STRING", raising=False)
    monkeypatch.delenv("WEBSITE_SITE_NAME", raising=False)
