"""Pytest configuration for the journey analytics tests."""

import pytest

from journey_analytics.metrics import reset_metrics


@pytest.fixture(autouse=True)
def _reset_metrics():
    reset_metrics()
    yield
    reset_metrics()
