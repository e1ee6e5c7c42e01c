"""
HRDD Risk Engine - Diagnostics.

============================================================
PURPOSE
============================================================
Explains a strategy rather than scoring it:
- Risk reduction between baseline and managed risk
- The dominant response lever
- Per-tool coverage, effectiveness and contribution
- A complete baseline vs managed summary

Nothing here feeds back into managed risk.

============================================================
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .bands import get_risk_band, get_risk_color
from .config import FocusBiasConfig, ManagedRiskConfig
from .effectiveness import (
    calculate_responsiveness_effectiveness,
    calculate_transparency_effectiveness,
    get_tool_rate,
)
from .focus import calculate_portfolio_focus_multiplier
from .types import (
    BandedScore,
    MonitoringTool,
    PrimaryResponse,
    ResponseLever,
    RiskFactor,
    RiskSummary,
    StrategyBreakdown,
    ToolBreakdown,
)
from .validation import (
    LEVER_COUNT,
    TOOL_COUNT,
    sanitize_concentration,
    sanitize_focus,
    sanitize_vector,
    to_number,
    unique_selection,
)


_DEFAULT_MANAGED = ManagedRiskConfig()
_DEFAULT_BIAS = FocusBiasConfig()


def calculate_risk_reduction(baseline_risk: float, managed_risk: float) -> float:
    """Percentage reduction from baseline; 0 when baseline <= 0."""
    baseline = to_number(baseline_risk)
    if baseline <= 0:
        return 0.0
    return (baseline - to_number(managed_risk)) / baseline * 100.0


def get_primary_response_method(
    responsiveness_strategy: Any,
    responsiveness_effectiveness: Any,
) -> Optional[PrimaryResponse]:
    """
    The lever with the largest strategy weight.

    The first lever wins ties; with no positive weight the first
    lever is reported with weight 0. Wrong-length vectors give None.
    """
    weights = sanitize_vector(responsiveness_strategy, LEVER_COUNT)
    effectiveness = sanitize_vector(responsiveness_effectiveness, LEVER_COUNT)
    if weights is None or effectiveness is None:
        return None

    primary_index = 0
    max_weight = 0.0
    for index, weight in enumerate(weights):
        if weight > max_weight:
            max_weight = weight
            primary_index = index

    lever = ResponseLever.ordered()[primary_index]
    return PrimaryResponse(
        lever=lever,
        method=lever.label,
        weight=max_weight,
        effectiveness=effectiveness[primary_index],
    )


def get_strategy_breakdown(
    hrdd_strategy: Any,
    transparency_effectiveness: Any,
    responsiveness_strategy: Any,
    responsiveness_effectiveness: Any,
    focus: float = 0.0,
    risk_concentration: float = 1.0,
    managed_config: ManagedRiskConfig = _DEFAULT_MANAGED,
    bias_config: FocusBiasConfig = _DEFAULT_BIAS,
) -> StrategyBreakdown:
    """
    Per-tool coverage, effectiveness and contribution.

    contribution = coverage * average rate, a simple ranking
    metric rather than a share of the overall transparency.
    A wrong-length strategy yields no tool rows.
    """
    f = sanitize_focus(focus)
    concentration = sanitize_concentration(risk_concentration)

    coverage = sanitize_vector(hrdd_strategy, TOOL_COUNT)
    user_values = sanitize_vector(transparency_effectiveness, TOOL_COUNT) or [0.0] * TOOL_COUNT

    tools: List[ToolBreakdown] = []
    if coverage is not None:
        for tool in MonitoringTool.ordered():
            tool_coverage = coverage[tool.index]
            user = user_values[tool.index]
            rate = get_tool_rate(tool, user)
            tools.append(
                ToolBreakdown(
                    tool=tool,
                    name=tool.label,
                    category=tool.category.label,
                    coverage=tool_coverage,
                    base_effectiveness=round(tool.base_effectiveness * 100),
                    user_effectiveness=user,
                    average_effectiveness=round(rate * 100),
                    contribution=tool_coverage * rate,
                )
            )

    return StrategyBreakdown(
        tools=tools,
        overall_transparency=calculate_transparency_effectiveness(
            hrdd_strategy, transparency_effectiveness, managed_config.max_transparency
        ),
        overall_responsiveness=calculate_responsiveness_effectiveness(
            responsiveness_strategy, responsiveness_effectiveness
        ),
        primary_response=get_primary_response_method(
            responsiveness_strategy, responsiveness_effectiveness
        ),
        focus_level=f,
        risk_concentration=concentration,
        portfolio_focus_multiplier=calculate_portfolio_focus_multiplier(f, concentration, bias_config),
    )


def _banded(score: float) -> BandedScore:
    return BandedScore(score=score, band=get_risk_band(score), color=get_risk_color(score))


def generate_risk_summary(
    baseline_risk: float,
    managed_risk: float,
    selected_countries: Any,
    hrdd_strategy: Any,
    transparency_effectiveness: Any,
    responsiveness_strategy: Any,
    responsiveness_effectiveness: Any,
    focus: float = 0.0,
    risk_concentration: float = 1.0,
    managed_config: ManagedRiskConfig = _DEFAULT_MANAGED,
    bias_config: FocusBiasConfig = _DEFAULT_BIAS,
) -> RiskSummary:
    """Baseline vs managed comparison with the strategy breakdown."""
    baseline = to_number(baseline_risk)
    managed = to_number(managed_risk)
    breakdown = get_strategy_breakdown(
        hrdd_strategy,
        transparency_effectiveness,
        responsiveness_strategy,
        responsiveness_effectiveness,
        focus,
        risk_concentration,
        managed_config,
        bias_config,
    )
    return RiskSummary(
        baseline=_banded(baseline),
        managed=_banded(managed),
        risk_reduction_pct=calculate_risk_reduction(baseline, managed),
        absolute_reduction=baseline - managed,
        countries_selected=len(unique_selection(selected_countries)),
        risk_concentration=breakdown.risk_concentration,
        strategy=breakdown,
    )


def _export_vector(values: Any) -> List[Any]:
    """Sequence values as a list; scalars, strings and mappings as []."""
    if values is None or isinstance(values, (str, bytes, Mapping)):
        return []
    try:
        return list(values)
    except TypeError:
        return []


def _export_mapping(values: Any) -> Dict[str, Any]:
    return dict(values) if isinstance(values, Mapping) else {}


def export_configuration(
    state: Mapping[str, Any],
    engine_version: str,
    managed_config: ManagedRiskConfig = _DEFAULT_MANAGED,
    bias_config: FocusBiasConfig = _DEFAULT_BIAS,
) -> Dict[str, Any]:
    """
    Snapshot of a scoring session for reporting.

    Args:
        state: Mapping with selected_countries, country_volumes,
               weights, baseline_risk, managed_risk, hrdd_strategy,
               transparency_effectiveness, responsiveness_strategy,
               responsiveness_effectiveness, focus, risk_concentration
        engine_version: Version string recorded in the metadata

    Returns:
        JSON-serialisable dictionary grouped by assessment step
    """
    selected = unique_selection(state.get("selected_countries"))
    focus = sanitize_focus(state.get("focus"))
    concentration = sanitize_concentration(state.get("risk_concentration"))
    baseline = to_number(state.get("baseline_risk"))
    managed = to_number(state.get("managed_risk"))

    summary = generate_risk_summary(
        baseline,
        managed,
        selected,
        state.get("hrdd_strategy"),
        state.get("transparency_effectiveness"),
        state.get("responsiveness_strategy"),
        state.get("responsiveness_effectiveness"),
        focus,
        concentration,
        managed_config,
        bias_config,
    )

    return {
        "metadata": {
            "export_date": datetime.now(timezone.utc).isoformat(),
            "version": engine_version,
            "tool_name": "HRDD Risk Assessment Tool - Coverage-Based Transparency",
        },
        "portfolio": {
            "selected_countries": selected,
            "country_volumes": _export_mapping(state.get("country_volumes")),
            "total_countries": len(selected),
        },
        "step1": {
            "weights": _export_vector(state.get("weights")),
            "baseline_risk": baseline,
            "weight_labels": [factor.label for factor in RiskFactor.ordered()],
        },
        "step2": {
            "hrdd_strategy": _export_vector(state.get("hrdd_strategy")),
            "transparency_effectiveness": _export_vector(state.get("transparency_effectiveness")),
            "strategy_labels": [tool.label for tool in MonitoringTool.ordered()],
            "focus": focus,
            "risk_concentration": concentration,
            "focus_multiplier": summary.strategy.portfolio_focus_multiplier,
        },
        "step3": {
            "responsiveness_strategy": _export_vector(state.get("responsiveness_strategy")),
            "responsiveness_effectiveness": _export_vector(state.get("responsiveness_effectiveness")),
            "managed_risk": managed,
            "responsiveness_labels": [lever.label for lever in ResponseLever.ordered()],
        },
        "results": summary.to_dict(),
    }
