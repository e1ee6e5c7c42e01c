"""
HRDD Risk Engine - Portfolio Metrics.

============================================================
PURPOSE
============================================================
Turns country indicators into a weighted risk score and
aggregates per-country risk and volume into portfolio
metrics.

============================================================
FORMULAS
============================================================
Weighted risk (factors with value > 0 only):
    risk = sum(value_i * weight_i) / sum(weight_i)

Baseline risk:
    baseline = sum(volume * risk) / sum(volume)

Risk concentration:
    share = volume / total_volume
    concentration = max(1, sum(share * risk^2) / baseline^2)

A portfolio of one extreme-risk country and many low-risk
countries has concentration well above 1.

============================================================
"""

from typing import Any, Mapping, Optional, Sequence, Union

from .types import CountryRiskRecord, PortfolioMetrics
from .validation import (
    FACTOR_COUNT,
    clamp,
    has_length,
    resolve_risk,
    resolve_volume,
    to_number,
    unique_selection,
)


def calculate_weighted_risk(
    record: Union[CountryRiskRecord, Mapping[str, Any]],
    weights: Sequence[float],
    max_weight: float = 50.0,
) -> float:
    """
    Weighted mean of a country's factor values.

    Zero or missing factor values are left out of both the
    numerator and the total weight. A country without any
    usable factor scores 0.

    Args:
        record: Country record or raw mapping of indicators
        weights: One weight per factor, clamped to [0, max_weight]
        max_weight: Per-factor weight ceiling

    Returns:
        Weighted risk score, 0 for wrong-length weights
    """
    if not has_length(weights, FACTOR_COUNT):
        return 0.0
    if not isinstance(record, CountryRiskRecord):
        if not isinstance(record, Mapping):
            return 0.0
        record = CountryRiskRecord.from_mapping(record)

    weighted_sum = 0.0
    total_weight = 0.0
    for value, weight in zip(record.factor_values(), weights):
        if value > 0:
            safe_weight = clamp(to_number(weight), 0.0, max_weight)
            weighted_sum += value * safe_weight
            total_weight += safe_weight

    return weighted_sum / total_weight if total_weight > 0 else 0.0


def calculate_portfolio_metrics(
    selected_countries: Any,
    country_volumes: Optional[Mapping[str, Any]],
    country_risks: Optional[Mapping[str, Any]],
    default_volume: float = 10.0,
) -> PortfolioMetrics:
    """
    Aggregate baseline risk and concentration for a selection.

    Empty selections and zero total volume yield baseline 0 and
    concentration 1.
    """
    codes = unique_selection(selected_countries)
    if not codes:
        return PortfolioMetrics()

    entries = []
    total_volume_risk = 0.0
    total_volume = 0.0
    for iso_code in codes:
        volume = resolve_volume(country_volumes, iso_code, default_volume)
        risk = resolve_risk(country_risks, iso_code)
        total_volume_risk += volume * risk
        total_volume += volume
        entries.append((volume, risk))

    if total_volume <= 0:
        return PortfolioMetrics(total_volume=total_volume)

    baseline_risk = total_volume_risk / total_volume

    weighted_risk_squares = 0.0
    for volume, risk in entries:
        share = volume / total_volume
        weighted_risk_squares += share * risk ** 2

    if baseline_risk > 0 and weighted_risk_squares > 0:
        risk_concentration = max(1.0, weighted_risk_squares / baseline_risk ** 2)
    else:
        risk_concentration = 1.0

    return PortfolioMetrics(
        baseline_risk=baseline_risk,
        total_volume=total_volume,
        weighted_risk=total_volume_risk,
        weighted_risk_squares=weighted_risk_squares,
        risk_concentration=risk_concentration,
    )


def calculate_baseline_risk(
    selected_countries: Any,
    country_volumes: Optional[Mapping[str, Any]],
    country_risks: Optional[Mapping[str, Any]],
    default_volume: float = 10.0,
) -> float:
    """Baseline risk only."""
    return calculate_portfolio_metrics(
        selected_countries, country_volumes, country_risks, default_volume
    ).baseline_risk
