# startup_proj/projections.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, asdict
from typing import Dict, List

from .numerics import compound, ieee_div, round_half_away as rnd
from .scenarios import MarketSizing, ModelSettings, ScenarioParams, by_year

logger = logging.getLogger(__name__)

# Policy constants (not user-configurable)
FARMER_MONTHLY_VALUE = 500
FARMER_TAKE_RATE = 0.15
B2B_SHARE = 0.1
HOSTING_PER_USER_MONTH = 0.5
SUPPORT_PER_USER_MONTH = 0.2
PAYMENT_FEE = 0.03
RD_BASE, RD_STEP = 25000, 15000
GNA_BASE, GNA_STEP = 12000, 6000
RECEIVABLE_DAYS = 30
PAYABLE_DAYS = 45


@dataclass(frozen=True)
class ProjectionData:
    year: int
    users: float
    farmers: float
    mau: float
    new_users: float
    platform_revenue: float
    farmer_rev_share: float
    b2b_revenue: float
    total_revenue: float
    hosting_costs: float
    payment_processing: float
    customer_support: float
    cogs: float
    gross_profit: float
    gross_margin: float
    personnel: float
    employees: float
    marketing: float
    rd: float
    gna: float
    opex: float
    ebitda: float
    ebitda_margin: float
    capex: float
    depreciation: float
    ebit: float
    taxes: float
    net_income: float
    accounts_receivable: float
    accounts_payable: float
    working_capital: float
    operating_cf: float
    investing_cf: float
    free_cash_flow: float
    ltv: float
    ltv_cac: float
    payback_months: float
    revenue_per_employee: float
    market_share: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _project_year(
    i: int,
    year: int,
    prev_working_capital: float,
    scenario: ScenarioParams,
    settings: ModelSettings,
    market_sizing: MarketSizing,
) -> ProjectionData:
    """
    Build one projection row. Every rounding step is part of the model:
    revenue components are rounded before they are summed, margins are
    rounded after.
    """
    # Population
    users = rnd(compound(settings.start_users, scenario.user_growth, i + 1))
    farmers = rnd(compound(settings.start_farmers, scenario.farmer_growth, i + 1))
    mau = rnd(users * (1 - scenario.churn_rate))
    if i == 0:
        new_users = users
    else:
        # closed form of the previous year, not the previous (rounded) row
        new_users = users - rnd(compound(settings.start_users, scenario.user_growth, i))

    # Revenue streams
    platform_revenue = rnd(mau * scenario.arpu * 12)
    farmer_rev_share = rnd(farmers * FARMER_MONTHLY_VALUE * 12 * FARMER_TAKE_RATE)
    b2b_revenue = rnd((platform_revenue + farmer_rev_share) * B2B_SHARE)
    total_revenue = platform_revenue + farmer_rev_share + b2b_revenue

    # COGS
    hosting_costs = rnd(users * HOSTING_PER_USER_MONTH * 12)
    payment_processing = rnd(total_revenue * PAYMENT_FEE)
    customer_support = rnd(users * SUPPORT_PER_USER_MONTH * 12)
    cogs = hosting_costs + payment_processing + customer_support
    gross_profit = total_revenue - cogs
    gross_margin = rnd(ieee_div(gross_profit, total_revenue) * 100, 1)

    # Operating expenses
    personnel = by_year(settings.personnel_by_year, i)
    employees = by_year(settings.employees_by_year, i)
    marketing = rnd(new_users * scenario.cac)
    rd = rnd(RD_BASE + i * RD_STEP)
    gna = rnd(GNA_BASE + i * GNA_STEP)
    opex = personnel + marketing + rd + gna

    ebitda = gross_profit - opex
    ebitda_margin = rnd(ieee_div(ebitda, total_revenue) * 100, 1)

    # Depreciation, EBIT & taxes
    capex = by_year(settings.capex_by_year, i)
    depreciation = by_year(settings.depreciation_by_year, i)
    ebit = ebitda - depreciation
    taxable_income = max(0, ebit)
    taxes = rnd(taxable_income * settings.tax_rate)
    net_income = ebit - taxes  # from full ebit: losses stay negative

    # Working capital
    accounts_receivable = rnd(ieee_div(total_revenue, 365) * RECEIVABLE_DAYS)
    accounts_payable = rnd(ieee_div(cogs, 365) * PAYABLE_DAYS)
    working_capital = accounts_receivable - accounts_payable

    # Cash flow
    operating_cf = net_income + depreciation - (working_capital - prev_working_capital)
    investing_cf = -capex
    free_cash_flow = operating_cf + investing_cf

    # KPIs
    ltv = rnd(scenario.arpu * 12 * ieee_div(1, scenario.churn_rate))
    ltv_cac = rnd(ieee_div(ltv, scenario.cac), 1)
    payback_months = rnd(ieee_div(scenario.cac, scenario.arpu))
    revenue_per_employee = rnd(ieee_div(total_revenue, employees))
    market_share = rnd(ieee_div(total_revenue, market_sizing.sam) * 100, 2)

    return ProjectionData(
        year=year,
        users=users,
        farmers=farmers,
        mau=mau,
        new_users=new_users,
        platform_revenue=platform_revenue,
        farmer_rev_share=farmer_rev_share,
        b2b_revenue=b2b_revenue,
        total_revenue=total_revenue,
        hosting_costs=hosting_costs,
        payment_processing=payment_processing,
        customer_support=customer_support,
        cogs=cogs,
        gross_profit=gross_profit,
        gross_margin=gross_margin,
        personnel=personnel,
        employees=employees,
        marketing=marketing,
        rd=rd,
        gna=gna,
        opex=opex,
        ebitda=ebitda,
        ebitda_margin=ebitda_margin,
        capex=capex,
        depreciation=depreciation,
        ebit=ebit,
        taxes=taxes,
        net_income=net_income,
        accounts_receivable=accounts_receivable,
        accounts_payable=accounts_payable,
        working_capital=working_capital,
        operating_cf=operating_cf,
        investing_cf=investing_cf,
        free_cash_flow=free_cash_flow,
        ltv=ltv,
        ltv_cac=ltv_cac,
        payback_months=payback_months,
        revenue_per_employee=revenue_per_employee,
        market_share=market_share,
    )


def calculate_projections(
    scenario: ScenarioParams,
    settings: ModelSettings,
    market_sizing: MarketSizing,
) -> List[ProjectionData]:
    """
    Project P&L, cash flow and KPIs for every year in settings.projection_years.

    Pure and deterministic. Degenerate inputs (zero churn, zero employees,
    zero SAM) yield inf/nan fields instead of raising.

    Rows are built in year order: each year's operating cash flow depends on
    the previous row's working capital.
    """
    years = list(settings.projection_years)
    n = len(years)
    logger.debug("Projecting %d years from %s", n, years[0] if years else None)

    for name in ("personnel_by_year", "employees_by_year", "capex_by_year", "depreciation_by_year"):
        if len(getattr(settings, name)) < n:
            logger.warning("%s has fewer than %d entries; missing years read as 0", name, n)

    projections: List[ProjectionData] = []
    prev_working_capital = 0
    for i, year in enumerate(years):
        row = _project_year(i, year, prev_working_capital, scenario, settings, market_sizing)
        projections.append(row)
        prev_working_capital = row.working_capital

    if any(not math.isfinite(v) for p in projections for v in asdict(p).values()):
        logger.warning("Projection contains non-finite values (check churn, employees, SAM)")

    return projections
