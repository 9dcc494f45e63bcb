# startup_proj/api.py
from __future__ import annotations

import logging
import math
from dataclasses import asdict
from typing import Any, Dict, List, Optional

import numpy as np
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from .normalize import prepare_inputs
from .projections import calculate_projections
from .report import compare_scenarios, summarize
from .scenarios import (
    DEFAULT_MARKET_SIZING,
    DEFAULT_SETTINGS,
    SCENARIOS,
    MarketSizing,
    ModelSettings,
    ScenarioParams,
)
from .valuation import calculate_dcf, calculate_funding_need, get_cumulative_cash

logger = logging.getLogger(__name__)

SERVICE_NAME = "Startup Projection API"
SERVICE_VERSION = "1.0"

app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION)


# -----------------------
# Schemas
# -----------------------
class ScenarioIn(BaseModel):
    user_growth: float
    arpu: float
    churn_rate: float
    farmer_growth: float
    cac: float

    def to_params(self) -> ScenarioParams:
        return ScenarioParams(**self.model_dump())


class SettingsIn(BaseModel):
    start_users: float = DEFAULT_SETTINGS.start_users
    start_farmers: float = DEFAULT_SETTINGS.start_farmers
    tax_rate: float = DEFAULT_SETTINGS.tax_rate
    discount_rate: float = DEFAULT_SETTINGS.discount_rate
    terminal_growth: float = DEFAULT_SETTINGS.terminal_growth
    safety_buffer: float = DEFAULT_SETTINGS.safety_buffer
    personnel_by_year: List[float] = list(DEFAULT_SETTINGS.personnel_by_year)
    employees_by_year: List[float] = list(DEFAULT_SETTINGS.employees_by_year)
    capex_by_year: List[float] = list(DEFAULT_SETTINGS.capex_by_year)
    depreciation_by_year: List[float] = list(DEFAULT_SETTINGS.depreciation_by_year)
    projection_years: List[int] = list(DEFAULT_SETTINGS.projection_years)

    def to_settings(self) -> ModelSettings:
        fields = {k: tuple(v) if isinstance(v, list) else v for k, v in self.model_dump().items()}
        return ModelSettings(**fields)


class MarketIn(BaseModel):
    tam: float = DEFAULT_MARKET_SIZING.tam
    sam: float = DEFAULT_MARKET_SIZING.sam
    som: List[float] = list(DEFAULT_MARKET_SIZING.som)

    def to_market(self) -> MarketSizing:
        return MarketSizing(tam=self.tam, sam=self.sam, som=tuple(self.som))


class ProjectionRequest(BaseModel):
    scenario: Optional[str] = None
    params: Optional[ScenarioIn] = None
    settings: Optional[SettingsIn] = None
    market: Optional[MarketIn] = None
    normalize: bool = True
    # either a built-in scenario name or explicit params; params win if both are sent


class ProjectionResponse(BaseModel):
    scenario: Optional[str]
    projections: List[Dict[str, Any]]
    dcf: Dict[str, Any]
    funding_need: Optional[float]
    cumulative_cash: List[Optional[float]]
    summary: Dict[str, Any]


class ScenariosResponse(BaseModel):
    scenarios: Dict[str, Dict[str, float]]


# -----------------------
# Utilities
# -----------------------
def _jsonable(value: Any) -> Any:
    """Replace inf/nan with None so responses stay valid JSON."""
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (float, np.floating)):
        value = float(value)
        return value if math.isfinite(value) else None
    return value


def _resolve_scenario(req: ProjectionRequest) -> ScenarioParams:
    if req.params is not None:
        return req.params.to_params()
    if req.scenario is None:
        raise HTTPException(status_code=400, detail="Send either 'scenario' or 'params'")
    if req.scenario not in SCENARIOS:
        raise HTTPException(status_code=404, detail=f"Scenario '{req.scenario}' not found")
    return SCENARIOS[req.scenario]


# -----------------------
# Endpoints
# -----------------------
@app.get("/")
def root():
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "openapi": "/openapi.json",
            "scenarios": "/scenarios",
            "defaults": "/defaults",
            "compare": "/compare",
            "projections": "POST /projections",
        },
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/scenarios", response_model=ScenariosResponse)
def list_scenarios():
    """
    Built-in scenarios and their assumptions.
    """
    return {"scenarios": {name: asdict(p) for name, p in SCENARIOS.items()}}


@app.get("/defaults")
def defaults():
    return {
        "settings": asdict(DEFAULT_SETTINGS),
        "market": asdict(DEFAULT_MARKET_SIZING),
    }


@app.get("/compare")
def compare():
    """
    Scenario comparison over the default settings and market sizing.
    """
    df = compare_scenarios(SCENARIOS, DEFAULT_SETTINGS, DEFAULT_MARKET_SIZING)
    return {"rows": _jsonable(df.to_dict(orient="records"))}


@app.post("/projections", response_model=ProjectionResponse)
def projections(req: ProjectionRequest):
    """
    Run the projection engine for one scenario and return the yearly rows,
    DCF valuation, funding need and cumulative cash.

    With normalize=true (default) the inputs are sanitised first: percentages
    are read as fractions and every rate is clamped to its allowed range.
    """
    scenario = _resolve_scenario(req)
    settings = (req.settings or SettingsIn()).to_settings()
    market = (req.market or MarketIn()).to_market()

    if not settings.projection_years:
        raise HTTPException(status_code=400, detail="projection_years must not be empty")

    if req.normalize:
        scenario, settings, market = prepare_inputs(scenario, settings, market)

    rows = calculate_projections(scenario, settings, market)
    dcf = calculate_dcf(rows, settings.discount_rate, settings.terminal_growth)
    logger.info("Projected %d years for scenario=%s", len(rows), req.scenario or "custom")

    return _jsonable({
        "scenario": req.scenario,
        "projections": [r.to_dict() for r in rows],
        "dcf": asdict(dcf),
        "funding_need": calculate_funding_need(rows, settings.safety_buffer),
        "cumulative_cash": get_cumulative_cash(rows),
        "summary": summarize(rows, settings),
    })
