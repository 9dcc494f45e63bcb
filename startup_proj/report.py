# startup_proj/report.py
from __future__ import annotations

from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .projections import ProjectionData, calculate_projections
from .scenarios import MarketSizing, ModelSettings, ScenarioParams
from .valuation import calculate_dcf, calculate_funding_need, get_cumulative_cash


def projections_to_frame(projections: Sequence[ProjectionData]) -> pd.DataFrame:
    """One row per projection year, one column per ProjectionData field."""
    if not projections:
        return pd.DataFrame(columns=[f.name for f in fields(ProjectionData)])
    return pd.DataFrame([p.to_dict() for p in projections])


def revenue_cagr(projections: Sequence[ProjectionData]) -> float:
    """
    Compound annual revenue growth from the first to the last projected year.
    nan when it is undefined (fewer than two years, or a non-positive base).
    """
    n = len(projections)
    first = projections[0].total_revenue if n else 0
    last = projections[-1].total_revenue if n else 0
    if n < 2 or first <= 0 or last < 0:
        return float("nan")
    return float(np.power(last / first, 1 / (n - 1)) - 1)


def break_even_year(projections: Sequence[ProjectionData]) -> Optional[int]:
    """First year whose cumulative cash is non-negative, or None."""
    for p, cash in zip(projections, get_cumulative_cash(projections)):
        if cash >= 0:
            return p.year
    return None


def summarize(projections: Sequence[ProjectionData], settings: ModelSettings) -> Dict[str, Any]:
    """
    Key metrics of a projection run:
      - last-year revenue, EBITDA, gross margin, free cash flow
      - DCF enterprise value and the funding need
      - revenue CAGR and the cash break-even year
    """
    last = projections[-1]
    dcf = calculate_dcf(projections, settings.discount_rate, settings.terminal_growth)
    return {
        "last_year_revenue": last.total_revenue,
        "last_year_ebitda": last.ebitda,
        "gross_margin": last.gross_margin,
        "free_cash_flow": last.free_cash_flow,
        "enterprise_value": dcf.enterprise_value,
        "funding_need": calculate_funding_need(projections, settings.safety_buffer),
        "revenue_cagr": revenue_cagr(projections),
        "break_even_year": break_even_year(projections),
    }


def compare_scenarios(
    scenarios: Mapping[str, ScenarioParams],
    settings: ModelSettings,
    market_sizing: MarketSizing,
) -> pd.DataFrame:
    """Assumptions and summary metrics side by side, one row per scenario."""
    rows = []
    for name, params in scenarios.items():
        projections = calculate_projections(params, settings, market_sizing)
        rows.append({"scenario": name, **asdict(params), **summarize(projections, settings)})
    return pd.DataFrame(rows)


def cash_frame(projections: Sequence[ProjectionData]) -> pd.DataFrame:
    """Free cash flow and cumulative cash per year."""
    return pd.DataFrame({
        "year": [p.year for p in projections],
        "free_cash_flow": [p.free_cash_flow for p in projections],
        "cumulative_cash": get_cumulative_cash(projections),
    })


def save_outputs(frames: Mapping[str, pd.DataFrame], out_dir: Path) -> Dict[str, Path]:
    """Write each frame to <out_dir>/<name>.csv and return the written paths."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = {}
    for name, df in frames.items():
        path = out_dir / f"{name}.csv"
        df.to_csv(path, index=False)
        written[name] = path
    return written
