"""Tests for DCF valuation, funding need and cumulative cash."""

import math

import pytest

from startup_proj.valuation import calculate_dcf, calculate_funding_need, get_cumulative_cash


class TestDCF:
    def test_formula_two_years(self, rows_with_fcf):
        rows = rows_with_fcf(100, 200)
        dcf = calculate_dcf(rows, discount_rate=0.10, terminal_growth=0.0)

        assert dcf.terminal_value == pytest.approx(2000)
        assert dcf.pv_cash_flows == pytest.approx([100 / 1.1, 200 / 1.21])
        assert dcf.pv_terminal == pytest.approx(2000 / 1.21)
        assert dcf.enterprise_value == pytest.approx(100 / 1.1 + 200 / 1.21 + 2000 / 1.21)
        assert dcf.discount_rate == 0.10
        assert dcf.terminal_growth == 0.0

    def test_terminal_growth_applied_to_last_year(self, rows_with_fcf):
        dcf = calculate_dcf(rows_with_fcf(-50, 1000), discount_rate=0.30, terminal_growth=0.03)
        assert dcf.terminal_value == pytest.approx(1000 * 1.03 / 0.27)

    def test_enterprise_value_decreases_with_discount_rate(self, rows_with_fcf):
        rows = rows_with_fcf(50_000, 120_000, 260_000, 400_000, 650_000)
        values = [
            calculate_dcf(rows, r, 0.03).enterprise_value
            for r in (0.10, 0.20, 0.30, 0.40)
        ]
        assert all(a > b for a, b in zip(values, values[1:]))

    def test_pv_one_per_year(self, base_projections):
        dcf = calculate_dcf(base_projections, 0.30, 0.03)
        assert len(dcf.pv_cash_flows) == len(base_projections)
        assert dcf.enterprise_value == pytest.approx(sum(dcf.pv_cash_flows) + dcf.pv_terminal)

    def test_equal_rates_give_non_finite_value(self, rows_with_fcf):
        dcf = calculate_dcf(rows_with_fcf(100, 100), discount_rate=0.05, terminal_growth=0.05)
        assert math.isinf(dcf.terminal_value)
        assert math.isinf(dcf.enterprise_value)

    def test_empty_projections_raise(self):
        with pytest.raises(ValueError, match="at least one"):
            calculate_dcf([], 0.3, 0.03)


class TestCumulativeCash:
    def test_prefix_sum(self, rows_with_fcf):
        assert get_cumulative_cash(rows_with_fcf(-100, -50, 200)) == [-100, -150, 50]

    def test_base_scenario_first_years(self, base_projections):
        cumulative = get_cumulative_cash(base_projections)
        assert cumulative[:2] == [-11875, -27280]
        assert len(cumulative) == len(base_projections)


class TestFundingNeed:
    def test_deepest_trough_plus_buffer(self, rows_with_fcf):
        rows = rows_with_fcf(-100, -50, 200)
        assert calculate_funding_need(rows, 1000) == 1150

    def test_never_negative_needs_only_buffer(self, rows_with_fcf):
        assert calculate_funding_need(rows_with_fcf(10, 20), 5000) == 5000

    def test_at_least_buffer(self, base_projections, settings):
        need = calculate_funding_need(base_projections, settings.safety_buffer)
        assert need >= settings.safety_buffer
        assert need >= 27280 + settings.safety_buffer

    def test_empty_projections(self):
        assert calculate_funding_need([], 50000) == 50000
