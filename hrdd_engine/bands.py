"""
HRDD Risk Engine - Risk Bands and Colours.

Fixed score-range tables for classifying a 0-100 score.
Bands are half-open [min, max) except Very High, which also
includes 100. Scores outside [0, 100] are clamped first;
non-numeric scores count as 0.
"""

from typing import Any, Dict, List

from .types import RiskBand
from .validation import clamp, to_number


GRADIENT_COLORS: List[str] = [
    "#22c55e",  # Low
    "#84cc16",  # Low-Medium
    "#eab308",  # Medium
    "#f59e0b",  # Medium-High
    "#f97316",  # Medium-High
    "#ef4444",  # High
    "#dc2626",  # High
    "#991b1b",  # Very High
]


def _clamped_score(score: Any) -> float:
    return clamp(to_number(score), 0.0, 100.0)


def get_risk_band(score: Any) -> RiskBand:
    """Classify a score into its band."""
    value = _clamped_score(score)
    for band in RiskBand.ordered():
        if value < band.max_score:
            return band
    return RiskBand.VERY_HIGH


def get_risk_color(score: Any) -> str:
    return get_risk_band(score).color


def get_risk_band_definitions() -> List[Dict[str, str]]:
    """Band legend entries: name, range label and colour."""
    return [
        {
            "name": band.value,
            "range": f"{band.min_score:g}-{band.max_score:g}",
            "color": band.color,
        }
        for band in RiskBand.ordered()
    ]


def get_gradient_colors() -> List[str]:
    return list(GRADIENT_COLORS)


def get_color_index(score: Any, max_index: int = 7) -> int:
    """Position of a score on the gradient scale, 0..max_index."""
    return int(_clamped_score(score) / 100.0 * max_index)
