"""
HRDD Risk Engine - Effectiveness & Managed-Risk Model.

============================================================
PURPOSE
============================================================
Turns coverage into detection probability (transparency),
levers into remediation quality (responsiveness), and both
into a managed risk per country.

============================================================
TRANSPARENCY
============================================================
    rate_t     = (base_t + user_t / 100) / 2
    category_k = 1 - prod(1 - coverage_t * rate_t)
    combined   = 1 - prod(1 - category_k * weight_k)
    result     = min(combined, 0.90)

Diminishing returns inside each category, overlap discounted
across categories. Residual risk always exists.

============================================================
MANAGED RISK (per country)
============================================================
    reduction = transparency * responsiveness * multiplier
    cap       = 0.50 + 0.20 * (1 - risk / 100)
    managed   = max(risk * (1 - min(reduction, cap)), risk * 0.25)

Higher-risk countries get the lower ceiling on removable risk.

============================================================
"""

from typing import Any, Dict, List, Mapping, Optional

from .config import FocusBiasConfig, ManagedRiskConfig
from .focus import calculate_portfolio_focus_multiplier
from .types import MonitoringTool, ToolCategory
from .validation import (
    LEVER_COUNT,
    TOOL_COUNT,
    clamp,
    resolve_volume,
    sanitize_focus,
    sanitize_vector,
    to_number,
    unique_selection,
)


_DEFAULT_MANAGED = ManagedRiskConfig()
_DEFAULT_BIAS = FocusBiasConfig()


def get_tool_rate(tool: MonitoringTool, user_effectiveness: float) -> float:
    """Average of the tool's base rate and the user's assumption (percent)."""
    user = clamp(to_number(user_effectiveness), 0.0, 100.0)
    return (tool.base_effectiveness + user / 100.0) / 2.0


def calculate_transparency_effectiveness(
    coverage: Any,
    transparency_effectiveness: Any,
    max_transparency: float = _DEFAULT_MANAGED.max_transparency,
) -> float:
    """
    Probability that the applied monitoring reveals a risk.

    Args:
        coverage: Coverage percentage per tool
        transparency_effectiveness: User effectiveness percentage per tool
        max_transparency: Hard ceiling on the result

    Returns:
        Transparency in [0, max_transparency]; 0 for wrong-length vectors
    """
    coverage_values = sanitize_vector(coverage, TOOL_COUNT)
    user_values = sanitize_vector(transparency_effectiveness, TOOL_COUNT)
    if coverage_values is None or user_values is None:
        return 0.0

    combined_miss = 1.0
    for category in ToolCategory:
        category_miss = 1.0
        for tool in MonitoringTool.in_category(category):
            share = coverage_values[tool.index] / 100.0
            rate = get_tool_rate(tool, user_values[tool.index])
            category_miss *= 1.0 - share * rate
        category_transparency = 1.0 - category_miss
        combined_miss *= 1.0 - category_transparency * category.weight

    return clamp(1.0 - combined_miss, 0.0, max_transparency)


def calculate_responsiveness_effectiveness(
    responsiveness_strategy: Any,
    responsiveness_effectiveness: Any,
) -> float:
    """
    Weighted mean remediation effectiveness (0-1).

    Linear, no diminishing returns. Wrong-length vectors or a
    zero total weight give 0.
    """
    weights = sanitize_vector(responsiveness_strategy, LEVER_COUNT)
    effectiveness = sanitize_vector(responsiveness_effectiveness, LEVER_COUNT)
    if weights is None or effectiveness is None:
        return 0.0

    total_weight = sum(weights)
    if total_weight <= 0:
        return 0.0

    weighted = sum(weight * value / 100.0 for weight, value in zip(weights, effectiveness))
    return weighted / total_weight


def calculate_country_managed_risk(
    country_risk: float,
    transparency: float,
    responsiveness: float,
    focus_multiplier: float,
    config: ManagedRiskConfig = _DEFAULT_MANAGED,
) -> float:
    """
    Managed risk for one country.

    A negative focus multiplier never increases risk: the
    reduction factor is floored at 0 before the cap applies.
    """
    risk = clamp(to_number(country_risk), 0.0, 100.0)
    reduction = max(
        0.0,
        to_number(transparency) * to_number(responsiveness) * to_number(focus_multiplier),
    )
    cap = config.base_effectiveness_cap + config.risk_sensitive_cap * (1.0 - risk / 100.0)
    capped = min(reduction, cap)
    return max(risk * (1.0 - capped), risk * config.residual_floor)


def calculate_portfolio_transparency(
    selected_countries: Any,
    country_volumes: Optional[Mapping[str, Any]],
    country_transparency: Mapping[str, float],
    default_volume: float = 10.0,
) -> float:
    """Volume-weighted mean of per-country transparency."""
    weighted = 0.0
    total_volume = 0.0
    for iso_code in unique_selection(selected_countries):
        volume = resolve_volume(country_volumes, iso_code, default_volume)
        weighted += volume * to_number(country_transparency.get(iso_code))
        total_volume += volume
    return weighted / total_volume if total_volume > 0 else 0.0


def calculate_managed_risk(
    baseline_risk: float,
    hrdd_strategy: Any,
    transparency_effectiveness: Any,
    responsiveness_strategy: Any,
    responsiveness_effectiveness: Any,
    focus: float = 0.0,
    risk_concentration: float = 1.0,
    managed_config: ManagedRiskConfig = _DEFAULT_MANAGED,
    bias_config: FocusBiasConfig = _DEFAULT_BIAS,
) -> float:
    """
    Single-figure managed risk for a whole portfolio.

    Uses the unfocused transparency and the portfolio focus
    multiplier; no per-country allocation, no rank pass:

        managed = max(0, baseline * (1 - T * R * F0))
    """
    baseline = to_number(baseline_risk)
    if baseline <= 0:
        return 0.0

    transparency = calculate_transparency_effectiveness(
        hrdd_strategy, transparency_effectiveness, managed_config.max_transparency
    )
    responsiveness = calculate_responsiveness_effectiveness(
        responsiveness_strategy, responsiveness_effectiveness
    )
    multiplier = calculate_portfolio_focus_multiplier(
        sanitize_focus(focus), risk_concentration, bias_config
    )
    return max(0.0, baseline * (1.0 - transparency * responsiveness * multiplier))


def calculate_country_transparency(
    country_coverage: Mapping[str, List[float]],
    transparency_effectiveness: Any,
    max_transparency: float = _DEFAULT_MANAGED.max_transparency,
) -> Dict[str, float]:
    """Transparency per country from its focus-adjusted coverage."""
    return {
        iso_code: calculate_transparency_effectiveness(
            coverage, transparency_effectiveness, max_transparency
        )
        for iso_code, coverage in country_coverage.items()
    }
