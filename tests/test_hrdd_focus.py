"""
Tests for HRDD Risk Engine - Focus Bias Model.

============================================================
PURPOSE
============================================================
Covers:
1. Exponent curve shape
2. Biased ratio clamping and dampers
3. Portfolio and country focus multipliers

============================================================
"""

import math

import pytest

from hrdd_engine.config import FocusBiasConfig
from hrdd_engine.focus import (
    calculate_country_focus_multiplier,
    calculate_portfolio_focus_multiplier,
    get_biased_risk_ratio,
    get_focus_exponent,
)


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def focus_grid():
    """Focus levels from 0 to 1 in 0.05 steps."""
    return [step / 20 for step in range(21)]


@pytest.fixture
def ratio_grid():
    """Raw ratios from 0.01 to 3.0."""
    return [step / 100 for step in range(1, 301)]


# ============================================================
# EXPONENT TESTS
# ============================================================

class TestFocusExponent:
    """Tests for get_focus_exponent."""

    @pytest.mark.parametrize(
        "focus,expected",
        [(0.0, 1.0), (0.25, 1.125), (0.5, 1.5), (0.75, 1.5 + 0.5 * 0.5 ** 1.5), (1.0, 2.0)],
    )
    def test_curve_points(self, focus, expected):
        assert get_focus_exponent(focus) == pytest.approx(expected)

    def test_non_decreasing(self, focus_grid):
        exponents = [get_focus_exponent(f) for f in focus_grid]

        assert all(b >= a for a, b in zip(exponents, exponents[1:]))

    def test_out_of_range_focus_clamped(self):
        assert get_focus_exponent(-3) == pytest.approx(1.0)
        assert get_focus_exponent(7) == pytest.approx(2.0)

    def test_non_numeric_focus_is_zero(self):
        assert get_focus_exponent("high") == pytest.approx(1.0)
        assert get_focus_exponent(math.nan) == pytest.approx(1.0)


# ============================================================
# BIASED RATIO TESTS
# ============================================================

class TestBiasedRiskRatio:
    """Tests for get_biased_risk_ratio."""

    def test_zero_baseline_gives_one(self):
        assert get_biased_risk_ratio(None, 1.0, 80, 0) == 1.0

    def test_unfocused_ratio_clamped(self):
        assert get_biased_risk_ratio(5.0, 0.0, 100, 20) == pytest.approx(2.5)
        assert get_biased_risk_ratio(0.01, 0.0, 1, 100) == pytest.approx(0.08)

    def test_unfocused_ratio_unchanged_inside_window(self):
        assert get_biased_risk_ratio(1.3, 0.0, 65, 50) == pytest.approx(1.3)

    def test_high_ratio_compressed_at_full_focus(self):
        """1.6^2 clamps to 2.5, then compresses to 1.5 + sqrt(2) - 1."""
        biased = get_biased_risk_ratio(1.6, 1.0, 80, 50)

        assert biased == pytest.approx(1.5 + math.sqrt(2.0) - 1.0)

    def test_low_ratio_compressed_at_full_focus(self):
        """0.4^2 = 0.16, damped by 1 - 0.5 * 0.5^2."""
        biased = get_biased_risk_ratio(0.4, 1.0, 20, 50)

        assert biased == pytest.approx(0.14)

    def test_no_high_damper_below_threshold(self):
        """At focus 0.5 only the ceiling applies."""
        assert get_biased_risk_ratio(2.0, 0.5, 100, 50) == pytest.approx(2.5)

    def test_missing_raw_ratio_recomputed(self):
        assert get_biased_risk_ratio(None, 0.0, 30, 60) == pytest.approx(0.5)
        assert get_biased_risk_ratio(math.inf, 0.0, 30, 60) == pytest.approx(0.5)

    def test_result_always_within_window(self, focus_grid, ratio_grid):
        for focus in focus_grid:
            for ratio in ratio_grid:
                biased = get_biased_risk_ratio(ratio, focus, ratio * 40, 40)
                assert 0.08 <= biased <= 2.5

    def test_non_decreasing_in_raw_ratio(self, focus_grid, ratio_grid):
        """Dampers never reorder countries."""
        for focus in focus_grid:
            values = [get_biased_risk_ratio(r, focus, r * 40, 40) for r in ratio_grid]
            for lower, higher in zip(values, values[1:]):
                assert higher >= lower - 1e-12

    def test_custom_config(self):
        config = FocusBiasConfig(ratio_floor=0.2, ratio_ceiling=2.0)

        assert get_biased_risk_ratio(0.01, 0.0, 1, 100, config) == pytest.approx(0.2)
        assert get_biased_risk_ratio(5.0, 0.0, 100, 20, config) == pytest.approx(2.0)


# ============================================================
# MULTIPLIER TESTS
# ============================================================

class TestFocusMultipliers:
    """Tests for the portfolio and country multipliers."""

    def test_portfolio_multiplier_unfocused(self):
        assert calculate_portfolio_focus_multiplier(0.0, 1.8) == pytest.approx(1.0)

    def test_portfolio_multiplier_uniform(self):
        assert calculate_portfolio_focus_multiplier(1.0, 1.0) == pytest.approx(1.0)

    def test_portfolio_multiplier_full_focus(self):
        """(1 - 2.75) + 2.75 * 1.36."""
        assert calculate_portfolio_focus_multiplier(1.0, 1.36) == pytest.approx(1.99)

    def test_portfolio_multiplier_grows_with_concentration(self):
        low = calculate_portfolio_focus_multiplier(0.6, 1.1)
        high = calculate_portfolio_focus_multiplier(0.6, 1.5)

        assert high > low > 1.0

    def test_concentration_below_one_treated_as_one(self):
        assert calculate_portfolio_focus_multiplier(0.8, 0.3) == pytest.approx(1.0)

    def test_country_multiplier_high_risk_bonus(self):
        """focus 0.8, risk >= 70: F0 * (1 + 0.2 * 0.5)."""
        multiplier = calculate_country_focus_multiplier(0.8, 2.0, 1.9, 70)

        assert multiplier == pytest.approx(2.2)

    def test_country_multiplier_no_bonus_at_threshold_focus(self):
        """The bonus needs focus strictly above 0.6."""
        multiplier = calculate_country_focus_multiplier(0.6, 2.0, 1.0, 90)

        assert multiplier == pytest.approx(1.0)

    def test_country_multiplier_from_biased_ratio(self):
        """(1 - 0.4 * 2.75) + 0.4 * 2.75 * 1.4."""
        multiplier = calculate_country_focus_multiplier(0.4, 2.0, 1.4, 90)

        assert multiplier == pytest.approx(1.44)

    def test_country_multiplier_may_be_negative(self):
        multiplier = calculate_country_focus_multiplier(1.0, 2.0, 0.14, 20)

        assert multiplier < 0
