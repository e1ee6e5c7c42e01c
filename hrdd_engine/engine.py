"""
HRDD Risk Engine - Main Orchestrator.

============================================================
PURPOSE
============================================================
HRDDRiskEngine is the main entry point for scoring a
portfolio and estimating its managed risk.

It orchestrates:
1. Portfolio metrics
2. Focus bias and country-specific coverage
3. Per-country transparency and managed risk
4. Rank preservation
5. Result packaging

============================================================
DESIGN PRINCIPLES
============================================================
- Orchestration only; every formula lives in its stage module
- Stateless per call; configuration is the only shared state
- Reconfiguration swaps the whole config object
- Malformed input degrades, it never raises

============================================================
USAGE
============================================================
    from hrdd_engine import HRDDRiskEngine

    engine = HRDDRiskEngine()

    result = engine.calculate_managed_risk_details(
        selected_countries=["BGD", "DEU"],
        country_volumes={"BGD": 10, "DEU": 10},
        country_risks={"BGD": 80, "DEU": 20},
        focus=0.6,
    )

    print(f"Managed risk: {result.managed_risk:.1f}")

============================================================
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .allocation import (
    calculate_country_specific_coverage,
    calculate_high_risk_boost,
    calculate_resource_conservation_factors,
)
from .bands import (
    get_color_index,
    get_gradient_colors,
    get_risk_band,
    get_risk_band_definitions,
    get_risk_color,
)
from .config import RiskEngineConfig
from .diagnostics import (
    calculate_risk_reduction,
    export_configuration,
    generate_risk_summary,
    get_primary_response_method,
    get_strategy_breakdown,
)
from .effectiveness import (
    calculate_country_managed_risk,
    calculate_country_transparency,
    calculate_managed_risk,
    calculate_portfolio_transparency,
    calculate_responsiveness_effectiveness,
    calculate_transparency_effectiveness,
)
from .focus import (
    calculate_country_focus_multiplier,
    calculate_portfolio_focus_multiplier,
    get_biased_risk_ratio,
    get_focus_exponent,
)
from .portfolio import calculate_portfolio_metrics, calculate_weighted_risk
from .rank_preservation import RankEntry, apply_rank_preservation
from .types import (
    CountryRiskAssessment,
    CountryRiskRecord,
    FocusEffectivenessMetrics,
    ManagedRiskResult,
    PortfolioMetrics,
    PrimaryResponse,
    RiskBand,
    RiskSummary,
    StrategyBreakdown,
)
from .validation import (
    resolve_risk,
    resolve_volume,
    sanitize_focus,
    unique_selection,
    validate_hrdd_strategy,
    validate_responsiveness,
    validate_responsiveness_effectiveness,
    validate_transparency,
    validate_weights,
)


logger = logging.getLogger(__name__)

_UNSET: Any = object()


class HRDDRiskEngine:
    """
    Main orchestrator for the HRDD Risk Engine.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    1. Hold the active configuration
    2. Fill strategy vectors from configured defaults
    3. Run the calculation stages in order
    4. Package ManagedRiskResult and diagnostics

    ============================================================
    THREAD SAFETY
    ============================================================
    Calls share nothing but the frozen config. reconfigure()
    replaces the reference in one assignment, so a call in
    flight keeps the config it started with.

    ============================================================
    """

    def __init__(self, config: Optional[RiskEngineConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Engine configuration. Uses defaults if not provided.
        """
        self.config = config or RiskEngineConfig()

    def reconfigure(self, config: RiskEngineConfig) -> None:
        """Replace the active configuration wholesale."""
        self.config = config
        logger.debug(f"Risk engine reconfigured (version {config.engine_version})")

    # --------------------------------------------------
    # Defaults
    # --------------------------------------------------

    def _or_default(self, value: Any, default: Sequence[float]) -> Any:
        return list(default) if value is _UNSET or value is None else value

    def _focus_or_default(self, focus: Any) -> float:
        return self.config.defaults.focus if focus is _UNSET or focus is None else focus

    # --------------------------------------------------
    # Portfolio
    # --------------------------------------------------

    def calculate_weighted_risk(
        self,
        record: Union[CountryRiskRecord, Mapping[str, Any]],
        weights: Any = _UNSET,
    ) -> float:
        defaults = self.config.defaults
        return calculate_weighted_risk(
            record,
            self._or_default(weights, defaults.factor_weights),
            defaults.max_factor_weight,
        )

    def assess_country(
        self,
        record: Union[CountryRiskRecord, Mapping[str, Any]],
        weights: Any = _UNSET,
    ) -> CountryRiskAssessment:
        """
        Weighted risk and band for one country.

        A record that is neither a CountryRiskRecord nor a mapping
        is assessed as an empty record.
        """
        if not isinstance(record, CountryRiskRecord):
            record = CountryRiskRecord.from_mapping(record if isinstance(record, Mapping) else {})
        weighted = self.calculate_weighted_risk(record, weights)
        return CountryRiskAssessment(
            iso_code=record.iso_code,
            name=record.name,
            original_risk_score=record.base_risk_score,
            weighted_risk_score=round(weighted, 2),
            risk_band=get_risk_band(weighted),
        )

    def calculate_country_risks(
        self,
        records: Sequence[Union[CountryRiskRecord, Mapping[str, Any]]],
        weights: Any = _UNSET,
    ) -> Dict[str, float]:
        """Weighted risk for every record, keyed by iso code."""
        risks: Dict[str, float] = {}
        for record in records:
            if not isinstance(record, CountryRiskRecord):
                if not isinstance(record, Mapping):
                    continue
                record = CountryRiskRecord.from_mapping(record)
            if not record.iso_code:
                continue
            risks[record.iso_code] = self.calculate_weighted_risk(record, weights)
        return risks

    def calculate_portfolio_metrics(
        self,
        selected_countries: Any,
        country_volumes: Optional[Mapping[str, Any]],
        country_risks: Optional[Mapping[str, Any]],
    ) -> PortfolioMetrics:
        return calculate_portfolio_metrics(
            selected_countries,
            country_volumes,
            country_risks,
            self.config.defaults.default_volume,
        )

    def calculate_baseline_risk(
        self,
        selected_countries: Any,
        country_volumes: Optional[Mapping[str, Any]],
        country_risks: Optional[Mapping[str, Any]],
    ) -> float:
        return self.calculate_portfolio_metrics(
            selected_countries, country_volumes, country_risks
        ).baseline_risk

    # --------------------------------------------------
    # Focus and allocation
    # --------------------------------------------------

    def get_focus_exponent(self, focus: float) -> float:
        return get_focus_exponent(focus, self.config.focus_bias)

    def get_biased_risk_ratio(
        self,
        raw_ratio: Optional[float],
        focus: float,
        country_risk: float,
        baseline_risk: float,
    ) -> float:
        return get_biased_risk_ratio(
            raw_ratio, focus, country_risk, baseline_risk, self.config.focus_bias
        )

    def calculate_portfolio_focus_multiplier(self, focus: float, risk_concentration: float) -> float:
        return calculate_portfolio_focus_multiplier(focus, risk_concentration, self.config.focus_bias)

    def calculate_country_focus_multiplier(
        self,
        focus: float,
        portfolio_multiplier: float,
        biased_ratio: float,
        country_risk: float,
    ) -> float:
        return calculate_country_focus_multiplier(
            focus, portfolio_multiplier, biased_ratio, country_risk, self.config.focus_bias
        )

    def calculate_high_risk_boost(self, focus: float, country_risk: float) -> float:
        return calculate_high_risk_boost(focus, country_risk, self.config.allocation)

    def calculate_resource_conservation_factors(
        self,
        selected_countries: Any,
        country_volumes: Optional[Mapping[str, Any]],
        country_risks: Optional[Mapping[str, Any]],
        hrdd_strategy: Any = _UNSET,
        focus: Any = _UNSET,
        baseline_risk: Optional[float] = None,
    ) -> List[float]:
        if baseline_risk is None:
            baseline_risk = self.calculate_baseline_risk(
                selected_countries, country_volumes, country_risks
            )
        return calculate_resource_conservation_factors(
            selected_countries,
            country_volumes,
            country_risks,
            self._or_default(hrdd_strategy, self.config.defaults.hrdd_strategy),
            self._focus_or_default(focus),
            baseline_risk,
            self.config.defaults.default_volume,
            self.config.focus_bias,
            self.config.allocation,
        )

    def calculate_country_specific_coverage(
        self,
        selected_countries: Any,
        country_volumes: Optional[Mapping[str, Any]],
        country_risks: Optional[Mapping[str, Any]],
        hrdd_strategy: Any = _UNSET,
        focus: Any = _UNSET,
        baseline_risk: Optional[float] = None,
    ) -> Dict[str, List[float]]:
        if baseline_risk is None:
            baseline_risk = self.calculate_baseline_risk(
                selected_countries, country_volumes, country_risks
            )
        return calculate_country_specific_coverage(
            selected_countries,
            country_volumes,
            country_risks,
            self._or_default(hrdd_strategy, self.config.defaults.hrdd_strategy),
            self._focus_or_default(focus),
            baseline_risk,
            self.config.defaults.default_volume,
            self.config.focus_bias,
            self.config.allocation,
        )

    # --------------------------------------------------
    # Effectiveness
    # --------------------------------------------------

    def calculate_transparency_effectiveness(
        self,
        hrdd_strategy: Any = _UNSET,
        transparency_effectiveness: Any = _UNSET,
    ) -> float:
        defaults = self.config.defaults
        return calculate_transparency_effectiveness(
            self._or_default(hrdd_strategy, defaults.hrdd_strategy),
            self._or_default(transparency_effectiveness, defaults.transparency_effectiveness),
            self.config.managed_risk.max_transparency,
        )

    def calculate_responsiveness_effectiveness(
        self,
        responsiveness_strategy: Any = _UNSET,
        responsiveness_effectiveness: Any = _UNSET,
    ) -> float:
        defaults = self.config.defaults
        return calculate_responsiveness_effectiveness(
            self._or_default(responsiveness_strategy, defaults.responsiveness_strategy),
            self._or_default(responsiveness_effectiveness, defaults.responsiveness_effectiveness),
        )

    def calculate_country_managed_risk(
        self,
        country_risk: float,
        transparency: float,
        responsiveness: float,
        focus_multiplier: float,
    ) -> float:
        return calculate_country_managed_risk(
            country_risk, transparency, responsiveness, focus_multiplier, self.config.managed_risk
        )

    def calculate_managed_risk(
        self,
        baseline_risk: float,
        hrdd_strategy: Any = _UNSET,
        transparency_effectiveness: Any = _UNSET,
        responsiveness_strategy: Any = _UNSET,
        responsiveness_effectiveness: Any = _UNSET,
        focus: Any = _UNSET,
        risk_concentration: float = 1.0,
    ) -> float:
        defaults = self.config.defaults
        return calculate_managed_risk(
            baseline_risk,
            self._or_default(hrdd_strategy, defaults.hrdd_strategy),
            self._or_default(transparency_effectiveness, defaults.transparency_effectiveness),
            self._or_default(responsiveness_strategy, defaults.responsiveness_strategy),
            self._or_default(responsiveness_effectiveness, defaults.responsiveness_effectiveness),
            self._focus_or_default(focus),
            risk_concentration,
            self.config.managed_risk,
            self.config.focus_bias,
        )

    # --------------------------------------------------
    # Managed risk details
    # --------------------------------------------------

    def calculate_managed_risk_details(
        self,
        selected_countries: Any,
        country_volumes: Optional[Mapping[str, Any]],
        country_risks: Optional[Mapping[str, Any]],
        hrdd_strategy: Any = _UNSET,
        transparency_effectiveness: Any = _UNSET,
        responsiveness_strategy: Any = _UNSET,
        responsiveness_effectiveness: Any = _UNSET,
        focus: Any = _UNSET,
    ) -> ManagedRiskResult:
        """
        Full managed-risk calculation for a portfolio.

        Strategy vectors and focus fall back to the configured
        defaults when omitted. Identical inputs always produce
        identical results.

        Args:
            selected_countries: Iso codes in selection order
            country_volumes: iso_code -> sourcing volume
            country_risks: iso_code -> weighted risk (0-100)
            hrdd_strategy: Coverage percentage per monitoring tool
            transparency_effectiveness: Effectiveness percentage per tool
            responsiveness_strategy: Weight per response lever
            responsiveness_effectiveness: Effectiveness percentage per lever
            focus: Focus level (0-1)

        Returns:
            ManagedRiskResult
        """
        config = self.config
        defaults = config.defaults
        strategy = self._or_default(hrdd_strategy, defaults.hrdd_strategy)
        transparency = self._or_default(transparency_effectiveness, defaults.transparency_effectiveness)
        response_weights = self._or_default(responsiveness_strategy, defaults.responsiveness_strategy)
        response_values = self._or_default(
            responsiveness_effectiveness, defaults.responsiveness_effectiveness
        )
        f = sanitize_focus(self._focus_or_default(focus))

        codes = unique_selection(selected_countries)
        if not codes:
            return ManagedRiskResult(
                focus_effectiveness_metrics=FocusEffectivenessMetrics(
                    focus=f,
                    focus_exponent=get_focus_exponent(f, config.focus_bias),
                ),
            )

        # --------------------------------------------------
        # Step 1: Portfolio metrics
        # --------------------------------------------------
        metrics = calculate_portfolio_metrics(
            codes, country_volumes, country_risks, defaults.default_volume
        )
        baseline = metrics.baseline_risk
        portfolio_multiplier = calculate_portfolio_focus_multiplier(
            f, metrics.risk_concentration, config.focus_bias
        )

        # --------------------------------------------------
        # Step 2: Programme-wide effectiveness
        # --------------------------------------------------
        base_transparency = calculate_transparency_effectiveness(
            strategy, transparency, config.managed_risk.max_transparency
        )
        responsiveness = calculate_responsiveness_effectiveness(response_weights, response_values)

        # --------------------------------------------------
        # Step 3: Focus-adjusted coverage
        # --------------------------------------------------
        conservation = calculate_resource_conservation_factors(
            codes,
            country_volumes,
            country_risks,
            strategy,
            f,
            baseline,
            defaults.default_volume,
            config.focus_bias,
            config.allocation,
        )
        coverage = calculate_country_specific_coverage(
            codes,
            country_volumes,
            country_risks,
            strategy,
            f,
            baseline,
            defaults.default_volume,
            config.focus_bias,
            config.allocation,
            conservation_factors=conservation,
        )
        country_transparency = calculate_country_transparency(
            coverage, transparency, config.managed_risk.max_transparency
        )

        # --------------------------------------------------
        # Step 4: Per-country managed risk
        # --------------------------------------------------
        biased_ratios: Dict[str, float] = {}
        multipliers: Dict[str, float] = {}
        entries: List[RankEntry] = []
        for iso_code in codes:
            risk = resolve_risk(country_risks, iso_code)
            raw_ratio = risk / baseline if baseline > 0 else None
            biased = get_biased_risk_ratio(raw_ratio, f, risk, baseline, config.focus_bias)
            multiplier = calculate_country_focus_multiplier(
                f, portfolio_multiplier, biased, risk, config.focus_bias
            )
            managed = calculate_country_managed_risk(
                risk,
                country_transparency[iso_code],
                responsiveness,
                multiplier,
                config.managed_risk,
            )
            biased_ratios[iso_code] = biased
            multipliers[iso_code] = multiplier
            entries.append(RankEntry(iso_code=iso_code, baseline_risk=risk, managed_risk=managed))

        # --------------------------------------------------
        # Step 5: Rank preservation and aggregate
        # --------------------------------------------------
        ranked = apply_rank_preservation(
            entries,
            floor_ratio=config.managed_risk.residual_floor,
            gap=config.managed_risk.rank_gap,
        )
        managed_risk = self._volume_weighted(codes, country_volumes, ranked.managed_risks)

        focused_transparency = calculate_portfolio_transparency(
            codes, country_volumes, country_transparency, defaults.default_volume
        )

        logger.debug(
            f"Managed risk for {len(codes)} countries: baseline={baseline:.2f} "
            f"managed={managed_risk:.2f} focus={f:.2f} "
            f"concentration={metrics.risk_concentration:.3f} "
            f"rank_corrections={ranked.corrected_count}"
        )

        return ManagedRiskResult(
            managed_risk=managed_risk,
            baseline_risk=baseline,
            risk_concentration=metrics.risk_concentration,
            portfolio_focus_multiplier=portfolio_multiplier,
            combined_effectiveness=focused_transparency * responsiveness,
            country_managed_risks=ranked.managed_risks,
            country_coverage=coverage,
            focus_effectiveness_metrics=FocusEffectivenessMetrics(
                focus=f,
                focus_exponent=get_focus_exponent(f, config.focus_bias),
                base_transparency=base_transparency,
                focused_transparency=focused_transparency,
                transparency_gain=focused_transparency - base_transparency,
                responsiveness=responsiveness,
                conservation_factors=conservation,
                biased_ratios=biased_ratios,
                country_focus_multipliers=multipliers,
                country_transparency=country_transparency,
                rank_corrections=ranked.corrections,
            ),
        )

    def _volume_weighted(
        self,
        codes: List[str],
        country_volumes: Optional[Mapping[str, Any]],
        values: Mapping[str, float],
    ) -> float:
        weighted = 0.0
        total_volume = 0.0
        for iso_code in codes:
            volume = resolve_volume(country_volumes, iso_code, self.config.defaults.default_volume)
            weighted += volume * values[iso_code]
            total_volume += volume
        return weighted / total_volume if total_volume > 0 else 0.0

    # --------------------------------------------------
    # Bands and diagnostics
    # --------------------------------------------------

    def get_risk_band(self, score: Any) -> RiskBand:
        return get_risk_band(score)

    def get_risk_color(self, score: Any) -> str:
        return get_risk_color(score)

    def get_risk_band_definitions(self) -> List[Dict[str, str]]:
        return get_risk_band_definitions()

    def get_gradient_colors(self) -> List[str]:
        return get_gradient_colors()

    def get_color_index(self, score: Any, max_index: int = 7) -> int:
        return get_color_index(score, max_index)

    def calculate_risk_reduction(self, baseline_risk: float, managed_risk: float) -> float:
        return calculate_risk_reduction(baseline_risk, managed_risk)

    def get_primary_response_method(
        self,
        responsiveness_strategy: Any = _UNSET,
        responsiveness_effectiveness: Any = _UNSET,
    ) -> Optional[PrimaryResponse]:
        defaults = self.config.defaults
        return get_primary_response_method(
            self._or_default(responsiveness_strategy, defaults.responsiveness_strategy),
            self._or_default(responsiveness_effectiveness, defaults.responsiveness_effectiveness),
        )

    def get_strategy_breakdown(
        self,
        hrdd_strategy: Any = _UNSET,
        transparency_effectiveness: Any = _UNSET,
        responsiveness_strategy: Any = _UNSET,
        responsiveness_effectiveness: Any = _UNSET,
        focus: Any = _UNSET,
        risk_concentration: float = 1.0,
    ) -> StrategyBreakdown:
        defaults = self.config.defaults
        return get_strategy_breakdown(
            self._or_default(hrdd_strategy, defaults.hrdd_strategy),
            self._or_default(transparency_effectiveness, defaults.transparency_effectiveness),
            self._or_default(responsiveness_strategy, defaults.responsiveness_strategy),
            self._or_default(responsiveness_effectiveness, defaults.responsiveness_effectiveness),
            self._focus_or_default(focus),
            risk_concentration,
            self.config.managed_risk,
            self.config.focus_bias,
        )

    def generate_risk_summary(
        self,
        baseline_risk: float,
        managed_risk: float,
        selected_countries: Any,
        hrdd_strategy: Any = _UNSET,
        transparency_effectiveness: Any = _UNSET,
        responsiveness_strategy: Any = _UNSET,
        responsiveness_effectiveness: Any = _UNSET,
        focus: Any = _UNSET,
        risk_concentration: float = 1.0,
    ) -> RiskSummary:
        defaults = self.config.defaults
        return generate_risk_summary(
            baseline_risk,
            managed_risk,
            selected_countries,
            self._or_default(hrdd_strategy, defaults.hrdd_strategy),
            self._or_default(transparency_effectiveness, defaults.transparency_effectiveness),
            self._or_default(responsiveness_strategy, defaults.responsiveness_strategy),
            self._or_default(responsiveness_effectiveness, defaults.responsiveness_effectiveness),
            self._focus_or_default(focus),
            risk_concentration,
            self.config.managed_risk,
            self.config.focus_bias,
        )

    def export_configuration(self, state: Mapping[str, Any]) -> Dict[str, Any]:
        return export_configuration(
            state,
            self.config.engine_version,
            self.config.managed_risk,
            self.config.focus_bias,
        )

    # --------------------------------------------------
    # Validation
    # --------------------------------------------------

    def validate_weights(self, weights: Any) -> bool:
        return validate_weights(weights, self.config.defaults.max_factor_weight)

    def validate_hrdd_strategy(self, strategy: Any) -> bool:
        return validate_hrdd_strategy(strategy)

    def validate_transparency(self, transparency: Any) -> bool:
        return validate_transparency(transparency)

    def validate_responsiveness(self, responsiveness: Any) -> bool:
        return validate_responsiveness(responsiveness)

    def validate_responsiveness_effectiveness(self, effectiveness: Any) -> bool:
        return validate_responsiveness_effectiveness(effectiveness)

    # --------------------------------------------------
    # Scoring
    # --------------------------------------------------

    def score_portfolio(
        self,
        records: Sequence[Union[CountryRiskRecord, Mapping[str, Any]]],
        selected_countries: Any,
        country_volumes: Optional[Mapping[str, Any]] = None,
        weights: Any = _UNSET,
        hrdd_strategy: Any = _UNSET,
        transparency_effectiveness: Any = _UNSET,
        responsiveness_strategy: Any = _UNSET,
        responsiveness_effectiveness: Any = _UNSET,
        focus: Any = _UNSET,
    ) -> ManagedRiskResult:
        """
        Weighted risk from raw country records, then managed risk.

        Selected countries without a record score 0.
        """
        country_risks = self.calculate_country_risks(records, weights)
        return self.calculate_managed_risk_details(
            selected_countries,
            country_volumes,
            country_risks,
            hrdd_strategy,
            transparency_effectiveness,
            responsiveness_strategy,
            responsiveness_effectiveness,
            focus,
        )


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


def calculate_managed_risk_details(
    selected_countries: Any,
    country_volumes: Optional[Mapping[str, Any]],
    country_risks: Optional[Mapping[str, Any]],
    hrdd_strategy: Any = _UNSET,
    transparency_effectiveness: Any = _UNSET,
    responsiveness_strategy: Any = _UNSET,
    responsiveness_effectiveness: Any = _UNSET,
    focus: Any = _UNSET,
    config: Optional[RiskEngineConfig] = None,
) -> ManagedRiskResult:
    """Run one managed-risk calculation with a temporary engine."""
    engine = HRDDRiskEngine(config)
    return engine.calculate_managed_risk_details(
        selected_countries,
        country_volumes,
        country_risks,
        hrdd_strategy,
        transparency_effectiveness,
        responsiveness_strategy,
        responsiveness_effectiveness,
        focus,
    )


def score_portfolio(
    records: Sequence[Union[CountryRiskRecord, Mapping[str, Any]]],
    selected_countries: Any,
    country_volumes: Optional[Mapping[str, Any]] = None,
    weights: Any = _UNSET,
    focus: Any = _UNSET,
    config: Optional[RiskEngineConfig] = None,
) -> ManagedRiskResult:
    """Score raw records with the default strategy vectors."""
    engine = HRDDRiskEngine(config)
    return engine.score_portfolio(
        records,
        selected_countries,
        country_volumes,
        weights=weights,
        focus=focus,
    )
