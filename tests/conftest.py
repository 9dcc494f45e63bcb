"""Shared fixtures for the projection engine tests."""

from dataclasses import replace

import pytest

from startup_proj.projections import calculate_projections
from startup_proj.scenarios import (
    DEFAULT_MARKET_SIZING,
    DEFAULT_SETTINGS,
    SCENARIOS,
)


@pytest.fixture
def base_scenario():
    """userGrowth 25%, ARPU 4.0, churn 5%, farmer growth 20%, CAC 18."""
    return SCENARIOS["base"]


@pytest.fixture
def settings():
    return DEFAULT_SETTINGS


@pytest.fixture
def market():
    return DEFAULT_MARKET_SIZING


@pytest.fixture
def base_projections(base_scenario, settings, market):
    return calculate_projections(base_scenario, settings, market)


@pytest.fixture
def rows_with_fcf(base_projections):
    """Build projection rows that differ only in free cash flow."""
    def _make(*cash_flows):
        template = base_projections[0]
        return [
            replace(template, year=2025 + i, free_cash_flow=float(fcf))
            for i, fcf in enumerate(cash_flows)
        ]
    return _make
