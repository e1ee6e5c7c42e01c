"""
HRDD Risk Engine - Package.

============================================================
PURPOSE
============================================================
Risk scoring and effort-allocation engine for human-rights
due diligence (HRDD). Turns country indicators and a chosen
monitoring/remediation strategy into:

1. A portfolio baseline risk
2. Per-country, per-tool coverage skewed toward higher-risk
   countries under a tunable focus level
3. A managed-risk figure with rank preservation

============================================================
WHAT IT IS
============================================================
- Pure, synchronous, deterministic calculation
- Degrades silently on malformed input, never raises for it
- A heuristic estimate, not an optimiser

============================================================
WHAT IT IS NOT
============================================================
- NOT a data store (see country_catalog)
- NOT a rendering or export layer
- NOT stateful between calls

============================================================
STAGES
============================================================
1. PORTFOLIO: baseline risk and risk concentration
2. FOCUS: exponent curve, biased ratios, focus multipliers
3. ALLOCATION: country coverage with resource conservation
4. EFFECTIVENESS: transparency, responsiveness, managed risk
5. RANK PRESERVATION: monotonic managed risk vs baseline

============================================================
USAGE
============================================================
    from hrdd_engine import HRDDRiskEngine, get_default_config

    engine = HRDDRiskEngine(get_default_config())

    risks = engine.calculate_country_risks(records)
    result = engine.calculate_managed_risk_details(
        selected_countries=["BGD", "VNM", "DEU"],
        country_volumes={"BGD": 40, "VNM": 25, "DEU": 10},
        country_risks=risks,
        focus=0.6,
    )

    print(f"Baseline: {result.baseline_risk:.1f}")
    print(f"Managed:  {result.managed_risk:.1f}")
    print(f"Band:     {engine.get_risk_band(result.managed_risk).value}")

============================================================
"""

# Types
from .types import (
    # Enums
    RiskFactor,
    ToolCategory,
    MonitoringTool,
    ResponseLever,
    RiskBand,

    # Reference data
    CountryRiskRecord,
    CountryRiskAssessment,

    # Output types
    PortfolioMetrics,
    FocusEffectivenessMetrics,
    ManagedRiskResult,
    ToolBreakdown,
    PrimaryResponse,
    StrategyBreakdown,
    BandedScore,
    RiskSummary,

    # Exceptions
    RiskEngineError,
    ConfigurationError,
)

# Configuration
from .config import (
    StrategyDefaults,
    FocusBiasConfig,
    AllocationConfig,
    ManagedRiskConfig,
    RiskEngineConfig,
    get_default_config,
    get_conservative_config,
    get_aggressive_config,
)

# Stages
from .portfolio import (
    calculate_weighted_risk,
    calculate_portfolio_metrics,
    calculate_baseline_risk,
)
from .focus import (
    get_focus_exponent,
    get_biased_risk_ratio,
    calculate_portfolio_focus_multiplier,
    calculate_country_focus_multiplier,
)
from .allocation import (
    calculate_high_risk_boost,
    calculate_resource_conservation_factors,
    calculate_country_specific_coverage,
)
from .effectiveness import (
    calculate_transparency_effectiveness,
    calculate_responsiveness_effectiveness,
    calculate_country_managed_risk,
    calculate_portfolio_transparency,
    calculate_managed_risk,
)
from .rank_preservation import (
    RankEntry,
    RankPreservationResult,
    apply_rank_preservation,
)

# Bands and diagnostics
from .bands import (
    get_risk_band,
    get_risk_color,
    get_risk_band_definitions,
    get_gradient_colors,
    get_color_index,
)
from .diagnostics import (
    calculate_risk_reduction,
    get_primary_response_method,
    get_strategy_breakdown,
    generate_risk_summary,
    export_configuration,
)
from .validation import (
    normalize_effectiveness_value,
    validate_weights,
    validate_hrdd_strategy,
    validate_transparency,
    validate_responsiveness,
    validate_responsiveness_effectiveness,
)

# Engine
from .engine import (
    HRDDRiskEngine,
    calculate_managed_risk_details,
    score_portfolio,
)


__all__ = [
    # Enums
    "RiskFactor",
    "ToolCategory",
    "MonitoringTool",
    "ResponseLever",
    "RiskBand",

    # Reference data
    "CountryRiskRecord",
    "CountryRiskAssessment",

    # Output types
    "PortfolioMetrics",
    "FocusEffectivenessMetrics",
    "ManagedRiskResult",
    "ToolBreakdown",
    "PrimaryResponse",
    "StrategyBreakdown",
    "BandedScore",
    "RiskSummary",

    # Exceptions
    "RiskEngineError",
    "ConfigurationError",

    # Configuration
    "StrategyDefaults",
    "FocusBiasConfig",
    "AllocationConfig",
    "ManagedRiskConfig",
    "RiskEngineConfig",
    "get_default_config",
    "get_conservative_config",
    "get_aggressive_config",

    # Stages
    "calculate_weighted_risk",
    "calculate_portfolio_metrics",
    "calculate_baseline_risk",
    "get_focus_exponent",
    "get_biased_risk_ratio",
    "calculate_portfolio_focus_multiplier",
    "calculate_country_focus_multiplier",
    "calculate_high_risk_boost",
    "calculate_resource_conservation_factors",
    "calculate_country_specific_coverage",
    "calculate_transparency_effectiveness",
    "calculate_responsiveness_effectiveness",
    "calculate_country_managed_risk",
    "calculate_portfolio_transparency",
    "calculate_managed_risk",
    "RankEntry",
    "RankPreservationResult",
    "apply_rank_preservation",

    # Bands and diagnostics
    "get_risk_band",
    "get_risk_color",
    "get_risk_band_definitions",
    "get_gradient_colors",
    "get_color_index",
    "calculate_risk_reduction",
    "get_primary_response_method",
    "get_strategy_breakdown",
    "generate_risk_summary",
    "export_configuration",
    "normalize_effectiveness_value",
    "validate_weights",
    "validate_hrdd_strategy",
    "validate_transparency",
    "validate_responsiveness",
    "validate_responsiveness_effectiveness",

    # Engine
    "HRDDRiskEngine",
    "calculate_managed_risk_details",
    "score_portfolio",
]


__version__ = "3.1.0"
