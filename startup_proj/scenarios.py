# startup_proj/scenarios.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class ScenarioParams:
    user_growth: float
    arpu: float
    churn_rate: float
    farmer_growth: float
    cac: float


@dataclass(frozen=True)
class ModelSettings:
    """
    Global, year-indexed model configuration.

    All *_by_year sequences are read positionally (index 0 = first projected
    year); a missing index counts as 0.
    """
    start_users: int = 1000
    start_farmers: int = 50
    tax_rate: float = 0.12
    discount_rate: float = 0.30
    terminal_growth: float = 0.03
    safety_buffer: float = 50000
    personnel_by_year: Tuple[float, ...] = (36000, 72000, 144000, 216000, 288000)
    employees_by_year: Tuple[float, ...] = (2, 4, 8, 12, 16)
    capex_by_year: Tuple[float, ...] = (15000, 10000, 20000, 15000, 10000)
    depreciation_by_year: Tuple[float, ...] = (3750, 6250, 11250, 15000, 13750)
    projection_years: Tuple[int, ...] = (2025, 2026, 2027, 2028, 2029)

    @property
    def horizon(self) -> int:
        return len(self.projection_years)


@dataclass(frozen=True)
class MarketSizing:
    tam: float = 850_000_000
    sam: float = 42_000_000
    som: Tuple[float, ...] = field(
        default=(210_000, 840_000, 2_520_000, 6_300_000, 12_600_000)
    )


def by_year(values, i: int) -> float:
    """Positional lookup that reads missing (or None) entries as 0."""
    if i < len(values) and values[i] is not None:
        return values[i]
    return 0


DEFAULT_SETTINGS = ModelSettings()
DEFAULT_MARKET_SIZING = MarketSizing()

SCENARIOS: Dict[str, ScenarioParams] = {
    "conservative": ScenarioParams(user_growth=0.15, arpu=2.5, churn_rate=0.08, farmer_growth=0.10, cac=12),
    "base":         ScenarioParams(user_growth=0.25, arpu=4.0, churn_rate=0.05, farmer_growth=0.20, cac=18),
    "optimistic":   ScenarioParams(user_growth=0.40, arpu=6.0, churn_rate=0.03, farmer_growth=0.35, cac=24),
}
