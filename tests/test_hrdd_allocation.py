"""
Tests for HRDD Risk Engine - Allocation Engine.

============================================================
PURPOSE
============================================================
Covers:
1. High-risk coverage boost
2. Resource conservation across countries
3. Country-specific coverage vectors

============================================================
"""

import pytest

from hrdd_engine.allocation import (
    calculate_country_specific_coverage,
    calculate_high_risk_boost,
    calculate_resource_conservation_factors,
)
from hrdd_engine.config import AllocationConfig
from hrdd_engine.portfolio import calculate_baseline_risk


DEFAULT_STRATEGY = [5, 15, 25, 60, 80, 90]


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def two_country_portfolio():
    """Equal volumes, risks 80 and 20 (baseline 50)."""
    return ["A", "B"], {"A": 10, "B": 10}, {"A": 80, "B": 20}


@pytest.fixture
def mixed_portfolio():
    """Ten countries with uneven volumes and risks."""
    risks = {
        "C1": 85, "C2": 72, "C3": 71, "C4": 70.5, "C5": 55,
        "C6": 40, "C7": 39, "C8": 20, "C9": 12, "C10": 5,
    }
    volumes = {
        "C1": 5, "C2": 50, "C3": 1, "C4": 30, "C5": 10,
        "C6": 100, "C7": 2, "C8": 10, "C9": 40, "C10": 3,
    }
    return list(risks), volumes, risks


# ============================================================
# BOOST TESTS
# ============================================================

class TestHighRiskBoost:
    """Tests for calculate_high_risk_boost."""

    def test_full_boost(self):
        assert calculate_high_risk_boost(1.0, 80) == pytest.approx(1.3)
        assert calculate_high_risk_boost(1.0, 100) == pytest.approx(1.3)

    def test_partial_focus(self):
        """Focus 0.65 is halfway from 0.3 to 1."""
        assert calculate_high_risk_boost(0.65, 80) == pytest.approx(1.15)

    def test_partial_risk(self):
        """Risk 60 is halfway from 40 to 80."""
        assert calculate_high_risk_boost(1.0, 60) == pytest.approx(1.15)

    def test_no_boost_at_thresholds(self):
        assert calculate_high_risk_boost(0.3, 90) == 1.0
        assert calculate_high_risk_boost(1.0, 39.9) == 1.0
        assert calculate_high_risk_boost(1.0, 40) == pytest.approx(1.0)

    def test_custom_boost(self):
        config = AllocationConfig(boost_max=0.5)

        assert calculate_high_risk_boost(1.0, 80, config) == pytest.approx(1.5)


# ============================================================
# CONSERVATION TESTS
# ============================================================

class TestResourceConservation:
    """Tests for calculate_resource_conservation_factors."""

    def test_unfocused_needs_no_scaling(self, two_country_portfolio):
        selected, volumes, risks = two_country_portfolio

        factors = calculate_resource_conservation_factors(
            selected, volumes, risks, DEFAULT_STRATEGY, 0.0, 50.0
        )

        assert factors == [1.0] * 6

    def test_full_focus_scales_down(self, two_country_portfolio):
        """Boosted demand (1.314x) exceeds the 1.3x allowance."""
        selected, volumes, risks = two_country_portfolio

        factors = calculate_resource_conservation_factors(
            selected, volumes, risks, DEFAULT_STRATEGY, 1.0, 50.0
        )

        demand = ((1.5 + 2 ** 0.5 - 1.0) * 1.3 + 0.14) / 2
        for factor in factors:
            assert factor == pytest.approx(1.3 / demand)
            assert factor < 1.0

    def test_invalid_strategy_gives_zeros(self, two_country_portfolio):
        selected, volumes, risks = two_country_portfolio

        factors = calculate_resource_conservation_factors(
            selected, volumes, risks, [10, 20, 30], 0.5, 50.0
        )

        assert factors == [0.0] * 6

    def test_zero_coverage_tool_unscaled(self, two_country_portfolio):
        selected, volumes, risks = two_country_portfolio

        factors = calculate_resource_conservation_factors(
            selected, volumes, risks, [0, 0, 0, 0, 0, 50], 1.0, 50.0
        )

        assert factors[:5] == [1.0] * 5
        assert factors[5] < 1.0

    @pytest.mark.parametrize("focus", [0.0, 0.2, 0.45, 0.6, 0.75, 0.9, 1.0])
    def test_usage_never_exceeds_allowance(self, mixed_portfolio, focus):
        selected, volumes, risks = mixed_portfolio
        baseline = calculate_baseline_risk(selected, volumes, risks)

        coverage = calculate_country_specific_coverage(
            selected, volumes, risks, DEFAULT_STRATEGY, focus, baseline
        )

        for tool_index, base in enumerate(DEFAULT_STRATEGY):
            expected = sum(volumes[c] * base / 100 for c in selected)
            used = sum(volumes[c] * coverage[c][tool_index] / 100 for c in selected)
            assert used <= expected * (1 + 0.3 * focus) + 1e-9


# ============================================================
# COVERAGE TESTS
# ============================================================

class TestCountryCoverage:
    """Tests for calculate_country_specific_coverage."""

    def test_unfocused_coverage_equals_strategy(self, mixed_portfolio):
        selected, volumes, risks = mixed_portfolio
        baseline = calculate_baseline_risk(selected, volumes, risks)

        coverage = calculate_country_specific_coverage(
            selected, volumes, risks, DEFAULT_STRATEGY, 0.0, baseline
        )

        for iso_code in selected:
            assert coverage[iso_code] == pytest.approx(DEFAULT_STRATEGY)

    def test_focus_shifts_coverage_to_high_risk(self, two_country_portfolio):
        selected, volumes, risks = two_country_portfolio

        coverage = calculate_country_specific_coverage(
            selected, volumes, risks, DEFAULT_STRATEGY, 0.8, 50.0
        )

        for tool_index in range(6):
            assert coverage["A"][tool_index] > coverage["B"][tool_index]

    def test_coverage_clamped_to_100(self, two_country_portfolio):
        selected, volumes, risks = two_country_portfolio

        coverage = calculate_country_specific_coverage(
            selected, volumes, risks, DEFAULT_STRATEGY, 1.0, 50.0
        )

        assert coverage["A"][5] == pytest.approx(100.0)
        assert all(0.0 <= value <= 100.0 for value in coverage["B"])

    def test_invalid_strategy_gives_zero_vectors(self, two_country_portfolio):
        selected, volumes, risks = two_country_portfolio

        coverage = calculate_country_specific_coverage(
            selected, volumes, risks, "not a vector", 0.5, 50.0
        )

        assert coverage == {"A": [0.0] * 6, "B": [0.0] * 6}

    def test_precomputed_factors_used(self, two_country_portfolio):
        selected, volumes, risks = two_country_portfolio

        coverage = calculate_country_specific_coverage(
            selected, volumes, risks, DEFAULT_STRATEGY, 0.0, 50.0,
            conservation_factors=[0.5] * 6,
        )

        assert coverage["A"] == pytest.approx([value * 0.5 for value in DEFAULT_STRATEGY])

    def test_duplicates_collapsed(self, two_country_portfolio):
        _, volumes, risks = two_country_portfolio

        coverage = calculate_country_specific_coverage(
            ["A", "B", "A"], volumes, risks, DEFAULT_STRATEGY, 0.5, 50.0
        )

        assert list(coverage) == ["A", "B"]
