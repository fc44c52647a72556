# src/loginsights/testing/__init__.py
"""Test infrastructure for code that ships logs to Application Insights.

Requires the ``testing`` extra (respx).

Usage:
    from loginsights.testing import FakeApplicationInsights
"""

from loginsights.testing.fake_appinsights import (
    CollectData,
    CountExpectation,
    Expectation,
    FakeApplicationInsights,
    TelemetryTypeExpectation,
)

__all__ = [
    "CollectData",
    "CountExpectation",
    "Expectation",
    "FakeApplicationInsights",
    "TelemetryTypeExpectation",
]
