"""
Tests for HRDD Risk Engine - Portfolio Metrics.

============================================================
PURPOSE
============================================================
Covers:
1. Weighted risk from country indicators
2. Baseline risk and risk concentration
3. Degradation on empty and malformed input

============================================================
"""

import math

import pytest

from hrdd_engine.portfolio import (
    calculate_baseline_risk,
    calculate_portfolio_metrics,
    calculate_weighted_risk,
)
from hrdd_engine.types import CountryRiskRecord


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def default_weights():
    """Default factor weights."""
    return [20, 20, 5, 10, 10]


@pytest.fixture
def sample_record():
    """A country with one missing indicator."""
    return CountryRiskRecord(
        iso_code="AAA",
        name="Alphaland",
        ituc_rights_rating=80,
        corruption_index=60,
        migrant_worker_prevalence=0,
        wjp_index=40,
        walkfree_slavery_index=20,
        base_risk_score=55,
    )


@pytest.fixture
def two_country_portfolio():
    """Equal volumes, risks 80 and 20."""
    return ["A", "B"], {"A": 10, "B": 10}, {"A": 80, "B": 20}


# ============================================================
# WEIGHTED RISK TESTS
# ============================================================

class TestWeightedRisk:
    """Tests for calculate_weighted_risk."""

    def test_missing_factor_excluded(self, sample_record, default_weights):
        """Zero indicators drop out of numerator and denominator."""
        risk = calculate_weighted_risk(sample_record, default_weights)

        # (80*20 + 60*20 + 40*10 + 20*10) / (20 + 20 + 10 + 10)
        assert risk == pytest.approx(3400 / 60)

    def test_all_zero_factors_give_zero(self, default_weights):
        """No usable factor short-circuits to 0, never NaN."""
        record = CountryRiskRecord(iso_code="ZZZ")

        risk = calculate_weighted_risk(record, default_weights)

        assert risk == 0.0
        assert not math.isnan(risk)

    def test_wrong_length_weights_give_zero(self, sample_record):
        assert calculate_weighted_risk(sample_record, [20, 20, 5]) == 0.0

    def test_all_zero_weights_give_zero(self, sample_record):
        assert calculate_weighted_risk(sample_record, [0, 0, 0, 0, 0]) == 0.0

    def test_weights_clamped(self):
        """Weights above 50 count as 50, negatives as 0."""
        record = CountryRiskRecord(
            iso_code="AAA",
            ituc_rights_rating=90,
            corruption_index=10,
            migrant_worker_prevalence=10,
            wjp_index=10,
            walkfree_slavery_index=10,
        )

        risk = calculate_weighted_risk(record, [500, 50, -10, 0, 0])

        assert risk == pytest.approx((90 * 50 + 10 * 50) / 100)

    def test_accepts_camel_case_mapping(self, default_weights):
        """Raw mappings from the data files are accepted."""
        raw = {
            "isoCode": "AAA",
            "itucRightsRating": 80,
            "corruptionIndex": 60,
            "migrantWorkerPrevalence": 0,
            "wjpIndex": 40,
            "walkfreeSlaveryIndex": 20,
        }

        assert calculate_weighted_risk(raw, default_weights) == pytest.approx(3400 / 60)

    def test_non_numeric_indicator_ignored(self, default_weights):
        raw = {"isoCode": "AAA", "itucRightsRating": "n/a", "corruptionIndex": 50}

        assert calculate_weighted_risk(raw, default_weights) == pytest.approx(50.0)


# ============================================================
# PORTFOLIO METRICS TESTS
# ============================================================

class TestPortfolioMetrics:
    """Tests for calculate_portfolio_metrics."""

    def test_two_country_example(self, two_country_portfolio):
        """Baseline 50 and concentration 1.36."""
        selected, volumes, risks = two_country_portfolio

        metrics = calculate_portfolio_metrics(selected, volumes, risks)

        assert metrics.baseline_risk == pytest.approx(50.0)
        assert metrics.risk_concentration == pytest.approx(1.36)
        assert metrics.total_volume == pytest.approx(20.0)
        assert metrics.weighted_risk == pytest.approx(1000.0)

    def test_empty_selection(self):
        metrics = calculate_portfolio_metrics([], {}, {})

        assert metrics.baseline_risk == 0.0
        assert metrics.risk_concentration == 1.0

    def test_none_inputs(self):
        metrics = calculate_portfolio_metrics(None, None, None)

        assert metrics.baseline_risk == 0.0
        assert metrics.risk_concentration == 1.0

    def test_zero_total_volume(self):
        metrics = calculate_portfolio_metrics(["A", "B"], {"A": 0, "B": 0}, {"A": 80, "B": 20})

        assert metrics.baseline_risk == 0.0
        assert metrics.risk_concentration == 1.0

    def test_missing_volume_uses_default(self):
        """A missing volume counts as 10."""
        metrics = calculate_portfolio_metrics(["A", "B"], {"A": 30}, {"A": 80, "B": 40})

        assert metrics.baseline_risk == pytest.approx((30 * 80 + 10 * 40) / 40)

    def test_non_numeric_volume_uses_default(self):
        metrics = calculate_portfolio_metrics(["A", "B"], {"A": "lots", "B": 10}, {"A": 80, "B": 20})

        assert metrics.baseline_risk == pytest.approx(50.0)

    def test_negative_volume_clamped_to_zero(self):
        metrics = calculate_portfolio_metrics(["A", "B"], {"A": -5, "B": 10}, {"A": 80, "B": 20})

        assert metrics.baseline_risk == pytest.approx(20.0)

    def test_missing_risk_counts_as_zero(self):
        metrics = calculate_portfolio_metrics(["A", "B"], {}, {"A": 60})

        assert metrics.baseline_risk == pytest.approx(30.0)

    def test_duplicate_selection_collapsed(self, two_country_portfolio):
        _, volumes, risks = two_country_portfolio

        with_duplicates = calculate_portfolio_metrics(["A", "A", "B"], volumes, risks)
        without = calculate_portfolio_metrics(["A", "B"], volumes, risks)

        assert with_duplicates == without

    def test_uniform_portfolio_concentration_one(self):
        metrics = calculate_portfolio_metrics(
            ["A", "B", "C"], {"A": 5, "B": 50, "C": 1}, {"A": 42, "B": 42, "C": 42}
        )

        assert metrics.risk_concentration == pytest.approx(1.0)

    def test_concentration_never_below_one(self):
        metrics = calculate_portfolio_metrics(
            ["A", "B", "C"], {"A": 1, "B": 100, "C": 3}, {"A": 90, "B": 30, "C": 5}
        )

        assert metrics.risk_concentration >= 1.0

    def test_baseline_helper(self, two_country_portfolio):
        selected, volumes, risks = two_country_portfolio

        assert calculate_baseline_risk(selected, volumes, risks) == pytest.approx(50.0)
