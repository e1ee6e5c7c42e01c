"""
Tests for HRDD Risk Engine - Rank-Preservation Pass.
"""

import pytest

from hrdd_engine.rank_preservation import RankEntry, apply_rank_preservation


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def inverted_pair():
    """B has lower baseline but higher managed risk than A."""
    return [
        RankEntry(iso_code="A", baseline_risk=60.0, managed_risk=40.0),
        RankEntry(iso_code="B", baseline_risk=50.0, managed_risk=45.0),
    ]


# ============================================================
# RANK PRESERVATION TESTS
# ============================================================

class TestRankPreservation:
    """Tests for apply_rank_preservation."""

    def test_inversion_repaired(self, inverted_pair):
        result = apply_rank_preservation(inverted_pair)

        assert result.managed_risks["A"] == pytest.approx(40.0)
        assert result.managed_risks["B"] == pytest.approx(39.5)

    def test_corrections_recorded(self, inverted_pair):
        result = apply_rank_preservation(inverted_pair)

        assert result.corrections == {"B": 45.0}
        assert result.corrected_count == 1

    def test_repair_respects_floor(self):
        entries = [
            RankEntry(iso_code="A", baseline_risk=80.0, managed_risk=20.0),
            RankEntry(iso_code="B", baseline_risk=79.0, managed_risk=30.0),
        ]

        result = apply_rank_preservation(entries)

        assert result.managed_risks["B"] == pytest.approx(19.75)

    def test_ties_keep_selection_order(self):
        entries = [
            RankEntry(iso_code="A", baseline_risk=50.0, managed_risk=30.0),
            RankEntry(iso_code="B", baseline_risk=50.0, managed_risk=30.0),
        ]

        result = apply_rank_preservation(entries)

        assert result.managed_risks == {"A": 30.0, "B": pytest.approx(29.5)}
        assert list(result.corrections) == ["B"]

    def test_output_in_input_order(self):
        entries = [
            RankEntry(iso_code="LOW", baseline_risk=10.0, managed_risk=8.0),
            RankEntry(iso_code="HIGH", baseline_risk=90.0, managed_risk=60.0),
        ]

        result = apply_rank_preservation(entries)

        assert list(result.managed_risks) == ["LOW", "HIGH"]
        assert result.corrections == {}

    def test_cascading_repairs(self):
        entries = [
            RankEntry(iso_code="A", baseline_risk=70.0, managed_risk=30.0),
            RankEntry(iso_code="B", baseline_risk=60.0, managed_risk=35.0),
            RankEntry(iso_code="C", baseline_risk=50.0, managed_risk=31.0),
        ]

        result = apply_rank_preservation(entries)

        assert result.managed_risks["B"] == pytest.approx(29.5)
        assert result.managed_risks["C"] == pytest.approx(29.0)

    def test_custom_gap_and_floor(self, inverted_pair):
        result = apply_rank_preservation(inverted_pair, floor_ratio=0.9, gap=2.0)

        assert result.managed_risks["B"] == pytest.approx(45.0)

    def test_empty(self):
        result = apply_rank_preservation([])

        assert result.managed_risks == {}
        assert result.corrected_count == 0
