"""
HRDD Risk Engine - Allocation Engine.

============================================================
PURPOSE
============================================================
Distributes each monitoring tool's nominal coverage across
the selected countries, skewed toward higher-risk countries
by the focus bias model.

============================================================
ALLOCATION LOGIC
============================================================
For each country c and tool t:

    focus_adj = (1 - focus) + focus * biased_ratio_c
    boost     = high-risk boost (1.0 .. 1.3)
    coverage  = base_t * focus_adj * boost * conservation_t
    coverage  = clamp(coverage, 0, 100)

============================================================
RESOURCE CONSERVATION
============================================================
Focus must not create free capacity. Per tool:

    expected    = sum(volume * base / 100)
    actual      = sum(volume * base * focus_adj * boost / 100)
    max_allowed = expected * (1 + focus * 0.3)

If actual > max_allowed every country's coverage for that
tool is scaled by max_allowed / actual.

============================================================
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config import AllocationConfig, FocusBiasConfig
from .focus import get_biased_risk_ratio
from .validation import (
    TOOL_COUNT,
    clamp,
    resolve_risk,
    resolve_volume,
    sanitize_focus,
    sanitize_vector,
    to_number,
    unique_selection,
)


logger = logging.getLogger(__name__)

_DEFAULT_ALLOCATION = AllocationConfig()
_DEFAULT_BIAS = FocusBiasConfig()


def calculate_high_risk_boost(
    focus: float,
    country_risk: float,
    config: AllocationConfig = _DEFAULT_ALLOCATION,
) -> float:
    """
    Coverage boost for high-risk countries.

    Active only above boost_min_focus and from boost_min_risk.
    Ramps linearly in both risk and focus, so there is no jump
    at the risk threshold.
    """
    f = sanitize_focus(focus)
    risk = to_number(country_risk)
    if f <= config.boost_min_focus or risk < config.boost_min_risk:
        return 1.0

    risk_progress = min(
        1.0, (risk - config.boost_min_risk) / (config.boost_full_risk - config.boost_min_risk)
    )
    focus_progress = min(1.0, (f - config.boost_min_focus) / (1.0 - config.boost_min_focus))
    return 1.0 + config.boost_max * risk_progress * focus_progress


def _country_focus_terms(
    codes: List[str],
    country_risks: Optional[Mapping[str, Any]],
    focus: float,
    baseline_risk: float,
    bias_config: FocusBiasConfig,
    allocation_config: AllocationConfig,
) -> Dict[str, Tuple[float, float, float]]:
    """Per country: (biased_ratio, focus_adjustment, boost)."""
    terms: Dict[str, Tuple[float, float, float]] = {}
    for iso_code in codes:
        risk = resolve_risk(country_risks, iso_code)
        raw_ratio = risk / baseline_risk if baseline_risk > 0 else None
        biased = get_biased_risk_ratio(raw_ratio, focus, risk, baseline_risk, bias_config)
        focus_adjustment = (1.0 - focus) + focus * biased
        boost = calculate_high_risk_boost(focus, risk, allocation_config)
        terms[iso_code] = (biased, focus_adjustment, boost)
    return terms


def calculate_resource_conservation_factors(
    selected_countries: Any,
    country_volumes: Optional[Mapping[str, Any]],
    country_risks: Optional[Mapping[str, Any]],
    hrdd_strategy: Any,
    focus: float,
    baseline_risk: float,
    default_volume: float = 10.0,
    bias_config: FocusBiasConfig = _DEFAULT_BIAS,
    allocation_config: AllocationConfig = _DEFAULT_ALLOCATION,
) -> List[float]:
    """
    Per-tool scale-down factors that cap focus-driven expansion.

    Returns:
        One factor in (0, 1] per tool. All 1.0 when nothing needs
        scaling; all 0.0 for a wrong-length strategy.
    """
    base_coverage = sanitize_vector(hrdd_strategy, TOOL_COUNT)
    if base_coverage is None:
        return [0.0] * TOOL_COUNT

    codes = unique_selection(selected_countries)
    f = sanitize_focus(focus)
    baseline = max(0.0, to_number(baseline_risk))
    terms = _country_focus_terms(codes, country_risks, f, baseline, bias_config, allocation_config)

    factors: List[float] = []
    for tool_index, base in enumerate(base_coverage):
        expected = 0.0
        actual = 0.0
        for iso_code in codes:
            volume = resolve_volume(country_volumes, iso_code, default_volume)
            _, focus_adjustment, boost = terms[iso_code]
            expected += volume * base / 100.0
            actual += volume * base * focus_adjustment * boost / 100.0

        max_allowed = expected * (1.0 + f * allocation_config.capacity_expansion)
        if actual > max_allowed and actual > 0:
            factor = max_allowed / actual
            logger.debug(
                f"Conservation scale-down tool={tool_index} "
                f"actual={actual:.3f} allowed={max_allowed:.3f} factor={factor:.4f}"
            )
        else:
            factor = 1.0
        factors.append(factor)

    return factors


def calculate_country_specific_coverage(
    selected_countries: Any,
    country_volumes: Optional[Mapping[str, Any]],
    country_risks: Optional[Mapping[str, Any]],
    hrdd_strategy: Any,
    focus: float,
    baseline_risk: float,
    default_volume: float = 10.0,
    bias_config: FocusBiasConfig = _DEFAULT_BIAS,
    allocation_config: AllocationConfig = _DEFAULT_ALLOCATION,
    conservation_factors: Optional[List[float]] = None,
) -> Dict[str, List[float]]:
    """
    Focus-adjusted coverage vector for every selected country.

    Args:
        conservation_factors: Precomputed per-tool factors; computed
                              here when not supplied

    Returns:
        iso_code -> coverage per tool (percent, 0-100). A
        wrong-length strategy gives every country zero coverage.
    """
    codes = unique_selection(selected_countries)
    base_coverage = sanitize_vector(hrdd_strategy, TOOL_COUNT)
    if base_coverage is None:
        return {iso_code: [0.0] * TOOL_COUNT for iso_code in codes}

    f = sanitize_focus(focus)
    baseline = max(0.0, to_number(baseline_risk))

    if conservation_factors is None or len(conservation_factors) != TOOL_COUNT:
        conservation_factors = calculate_resource_conservation_factors(
            codes,
            country_volumes,
            country_risks,
            base_coverage,
            f,
            baseline,
            default_volume,
            bias_config,
            allocation_config,
        )

    terms = _country_focus_terms(codes, country_risks, f, baseline, bias_config, allocation_config)

    coverage: Dict[str, List[float]] = {}
    for iso_code in codes:
        _, focus_adjustment, boost = terms[iso_code]
        coverage[iso_code] = [
            clamp(base * focus_adjustment * boost * factor, 0.0, allocation_config.max_coverage)
            for base, factor in zip(base_coverage, conservation_factors)
        ]
    return coverage
