"""Tests for the input normalization layer."""

import math
from dataclasses import replace

import pytest

from startup_proj.normalize import (
    normalize_discount_pair,
    normalize_market_sizing,
    normalize_rate,
    normalize_scenario,
    normalize_settings,
    project_normalized,
    to_finite_number,
)
from startup_proj.projections import calculate_projections
from startup_proj.scenarios import MarketSizing, ScenarioParams


class TestNormalizeRate:
    def test_fraction_kept(self):
        assert normalize_rate(0.25, (-0.95, 3)) == 0.25

    def test_percentage_converted(self):
        assert normalize_rate(25, (-0.95, 3)) == 0.25

    def test_clamped(self):
        assert normalize_rate(-0.99, (-0.95, 3)) == -0.95
        assert normalize_rate(0.0, (0.001, 0.95)) == 0.001

    def test_non_finite_reads_as_zero(self):
        assert normalize_rate(float("nan"), (0.0, 0.9)) == 0.0
        assert to_finite_number(None, 7) == 7
        assert to_finite_number(float("inf")) == 0


class TestNormalizeScenario:
    def test_percent_form_input(self):
        raw = ScenarioParams(user_growth=25, arpu=4.0, churn_rate=5, farmer_growth=20, cac=18)
        clean = normalize_scenario(raw)
        assert clean == ScenarioParams(user_growth=0.25, arpu=4.0, churn_rate=0.05, farmer_growth=0.2, cac=18)

    def test_zero_churn_floored(self):
        raw = ScenarioParams(user_growth=0.25, arpu=-1, churn_rate=0, farmer_growth=0.2, cac=-5)
        clean = normalize_scenario(raw)
        assert clean.churn_rate == 0.001
        assert clean.arpu == 0
        assert clean.cac == 0


class TestNormalizeSettings:
    def test_terminal_growth_forced_below_discount(self):
        assert normalize_discount_pair(0.10, 0.15) == (0.10, 0.09)

    def test_discount_clamped(self):
        discount, growth = normalize_discount_pair(0.0, 0.03)
        assert discount == 0.01
        assert growth == 0.0

    def test_amounts_rounded_and_floored(self, settings):
        raw = replace(settings, start_users=999.6, capex_by_year=(-100, 2500.5), safety_buffer=-1)
        clean = normalize_settings(raw)
        assert clean.start_users == 1000
        assert clean.capex_by_year == (0, 2501)
        assert clean.safety_buffer == 0
        assert clean.projection_years == settings.projection_years

    def test_defaults_unchanged(self, settings):
        assert normalize_settings(settings) == settings

    def test_market_sam_floor(self):
        clean = normalize_market_sizing(MarketSizing(tam=-5, sam=0, som=(1.4, -2)))
        assert clean.tam == 0
        assert clean.sam == 1
        assert clean.som == (1, 0)


class TestProjectNormalized:
    def test_matches_engine_on_clean_input(self, base_scenario, settings, market):
        assert project_normalized(base_scenario, settings, market) == calculate_projections(
            base_scenario, settings, market
        )

    def test_zero_churn_stays_finite(self, settings, market):
        raw = ScenarioParams(user_growth=0.25, arpu=4.0, churn_rate=0, farmer_growth=0.2, cac=18)
        rows = project_normalized(raw, settings, market)
        assert math.isfinite(rows[0].ltv)
        assert rows[0].ltv == 48000
