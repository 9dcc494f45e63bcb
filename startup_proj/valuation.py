# startup_proj/valuation.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .numerics import compound, ieee_div
from .projections import ProjectionData


@dataclass(frozen=True)
class DCFResult:
    discount_rate: float
    terminal_growth: float
    terminal_value: float
    pv_cash_flows: List[float]
    pv_terminal: float
    enterprise_value: float


def calculate_dcf(
    projections: Sequence[ProjectionData],
    discount_rate: float,
    terminal_growth: float,
) -> DCFResult:
    """
    Discounted cash flow valuation over the projected free cash flows.

      TV      = FCF_N * (1 + g) / (r - g)          (Gordon growth)
      PV_i    = FCF_i / (1 + r)^(i+1)
      PV_TV   = TV / (1 + r)^N
      EV      = sum(PV_i) + PV_TV

    r > g is a precondition; r == g gives a non-finite value, not an error.
    """
    if len(projections) == 0:
        raise ValueError("calculate_dcf needs at least one projection year")

    n = len(projections)
    last = projections[-1]
    terminal_value = ieee_div(
        last.free_cash_flow * (1 + terminal_growth),
        discount_rate - terminal_growth,
    )

    pv_cash_flows = [
        ieee_div(p.free_cash_flow, compound(1, discount_rate, i + 1))
        for i, p in enumerate(projections)
    ]
    pv_terminal = ieee_div(terminal_value, compound(1, discount_rate, n))

    # sequential sum, same order as the years
    pv_sum = 0.0
    for pv in pv_cash_flows:
        pv_sum += pv

    return DCFResult(
        discount_rate=discount_rate,
        terminal_growth=terminal_growth,
        terminal_value=terminal_value,
        pv_cash_flows=pv_cash_flows,
        pv_terminal=pv_terminal,
        enterprise_value=pv_sum + pv_terminal,
    )


def get_cumulative_cash(projections: Sequence[ProjectionData]) -> List[float]:
    """Running total of free cash flow, one entry per year."""
    out: List[float] = []
    running = 0
    for p in projections:
        running = running + p.free_cash_flow
        out.append(running)
    return out


def calculate_funding_need(
    projections: Sequence[ProjectionData],
    safety_buffer: float,
) -> float:
    """
    External capital needed to keep cumulative cash >= 0 over the horizon,
    plus a safety buffer:  |min(0, min(cumulative cash))| + buffer.
    """
    cumulative = np.asarray(get_cumulative_cash(projections), dtype=float)
    # np.min propagates nan, so a nan cash flow gives a nan funding need
    max_negative = float(np.min(np.append(cumulative, 0.0)))
    return abs(max_negative) + safety_buffer
