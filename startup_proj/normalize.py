# startup_proj/normalize.py
from __future__ import annotations

import math
from dataclasses import replace
from typing import List, Optional, Tuple

from .numerics import round_half_away
from .projections import ProjectionData, calculate_projections
from .scenarios import MarketSizing, ModelSettings, ScenarioParams

# Clamp ranges applied to form input before it reaches the engine.
GROWTH_RANGE = (-0.95, 3.0)
CHURN_RANGE = (0.001, 0.95)
TAX_RANGE = (0.0, 0.9)
DISCOUNT_RANGE = (0.01, 0.95)
TERMINAL_GROWTH_RANGE = (-0.2, 0.2)


def to_finite_number(value: Optional[float], fallback: float = 0) -> float:
    if value is None:
        return fallback
    value = float(value)
    return value if math.isfinite(value) else fallback


def clamp(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


def normalize_rate(value: Optional[float], bounds: Tuple[float, float]) -> float:
    """
    Accept either a fraction (0.25) or a percentage (25) and clamp it.
    Anything with magnitude above 1 is read as a percentage.
    """
    raw = to_finite_number(value, 0)
    as_fraction = raw / 100 if abs(raw) > 1 else raw
    return clamp(as_fraction, *bounds)


def _non_negative_int(value: Optional[float], floor: float = 0) -> float:
    return max(floor, round_half_away(to_finite_number(value, floor)))


def normalize_discount_pair(discount_rate: float, terminal_growth: float) -> Tuple[float, float]:
    """Clamp both rates and force terminal growth strictly below the discount rate."""
    discount = normalize_rate(discount_rate, DISCOUNT_RANGE)
    growth = normalize_rate(terminal_growth, TERMINAL_GROWTH_RANGE)
    if growth >= discount:
        growth = max(TERMINAL_GROWTH_RANGE[0], round_half_away(discount - 0.01, 4))
    return discount, growth


def normalize_scenario(scenario: ScenarioParams) -> ScenarioParams:
    return ScenarioParams(
        user_growth=normalize_rate(scenario.user_growth, GROWTH_RANGE),
        arpu=max(0, to_finite_number(scenario.arpu, 0)),
        churn_rate=normalize_rate(scenario.churn_rate, CHURN_RANGE),
        farmer_growth=normalize_rate(scenario.farmer_growth, GROWTH_RANGE),
        cac=max(0, to_finite_number(scenario.cac, 0)),
    )


def normalize_settings(settings: ModelSettings) -> ModelSettings:
    discount, growth = normalize_discount_pair(settings.discount_rate, settings.terminal_growth)
    return replace(
        settings,
        start_users=_non_negative_int(settings.start_users),
        start_farmers=_non_negative_int(settings.start_farmers),
        tax_rate=normalize_rate(settings.tax_rate, TAX_RANGE),
        discount_rate=discount,
        terminal_growth=growth,
        safety_buffer=_non_negative_int(settings.safety_buffer),
        personnel_by_year=tuple(_non_negative_int(v) for v in settings.personnel_by_year),
        employees_by_year=tuple(_non_negative_int(v) for v in settings.employees_by_year),
        capex_by_year=tuple(_non_negative_int(v) for v in settings.capex_by_year),
        depreciation_by_year=tuple(_non_negative_int(v) for v in settings.depreciation_by_year),
    )


def normalize_market_sizing(market_sizing: MarketSizing) -> MarketSizing:
    # sam floors at 1: it is the market-share denominator
    return MarketSizing(
        tam=_non_negative_int(market_sizing.tam),
        sam=_non_negative_int(market_sizing.sam, floor=1),
        som=tuple(_non_negative_int(v) for v in market_sizing.som),
    )


def prepare_inputs(
    scenario: ScenarioParams,
    settings: ModelSettings,
    market_sizing: MarketSizing,
) -> Tuple[ScenarioParams, ModelSettings, MarketSizing]:
    return (
        normalize_scenario(scenario),
        normalize_settings(settings),
        normalize_market_sizing(market_sizing),
    )


def project_normalized(
    scenario: ScenarioParams,
    settings: ModelSettings,
    market_sizing: MarketSizing,
) -> List[ProjectionData]:
    """Normalize raw form input, then run the engine on the cleaned values."""
    return calculate_projections(*prepare_inputs(scenario, settings, market_sizing))
