"""
HRDD Risk Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for the HRDD Risk Engine.

This module defines the enums, dataclasses and exceptions
used by the risk scoring and effort-allocation engine. The
contracts are shared by the calculation stages, the engine
facade and the country catalog.

============================================================
DESIGN PRINCIPLES
============================================================
- All output types are immutable (frozen dataclasses)
- Tool, category and lever identity are enums, not indices
- Clear separation between reference data and derived data
- Nothing here performs I/O

============================================================
TOOL IDENTITY
============================================================
The six monitoring tools are ordered. Every coverage or
effectiveness vector handed to the engine is aligned to
MonitoringTool.ordered():

0. CONTINUOUS_WORKER_VOICE  (Worker Voice)
1. WORKER_SURVEYS           (Worker Voice)
2. UNANNOUNCED_AUDITS       (Audit)
3. ANNOUNCED_AUDITS         (Audit)
4. SUPPLIER_SELF_REPORTING  (Passive)
5. DESK_BASED_ASSESSMENT    (Passive)

============================================================
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


# ============================================================
# ENUMS
# ============================================================


class RiskFactor(str, Enum):
    """
    The five country indicators that feed the weighted risk score.

    Order matches the order of the factor weights vector.
    """

    ITUC_RIGHTS_RATING = "itucRightsRating"
    CORRUPTION_INDEX = "corruptionIndex"
    MIGRANT_WORKER_PREVALENCE = "migrantWorkerPrevalence"
    WJP_INDEX = "wjpIndex"
    WALKFREE_SLAVERY_INDEX = "walkfreeSlaveryIndex"

    @classmethod
    def ordered(cls) -> List["RiskFactor"]:
        """Return all factors in weight order."""
        return [
            cls.ITUC_RIGHTS_RATING,
            cls.CORRUPTION_INDEX,
            cls.MIGRANT_WORKER_PREVALENCE,
            cls.WJP_INDEX,
            cls.WALKFREE_SLAVERY_INDEX,
        ]

    @property
    def label(self) -> str:
        return _FACTOR_LABELS[self]

    @property
    def field_name(self) -> str:
        """Attribute name on CountryRiskRecord."""
        return _FACTOR_FIELDS[self]


_FACTOR_LABELS = {
    RiskFactor.ITUC_RIGHTS_RATING: "ITUC Rights Rating",
    RiskFactor.CORRUPTION_INDEX: "Corruption Index",
    RiskFactor.MIGRANT_WORKER_PREVALENCE: "Migrant Worker Prevalence",
    RiskFactor.WJP_INDEX: "WJP Index",
    RiskFactor.WALKFREE_SLAVERY_INDEX: "Walk Free Slavery Index",
}

_FACTOR_FIELDS = {
    RiskFactor.ITUC_RIGHTS_RATING: "ituc_rights_rating",
    RiskFactor.CORRUPTION_INDEX: "corruption_index",
    RiskFactor.MIGRANT_WORKER_PREVALENCE: "migrant_worker_prevalence",
    RiskFactor.WJP_INDEX: "wjp_index",
    RiskFactor.WALKFREE_SLAVERY_INDEX: "walkfree_slavery_index",
}


class ToolCategory(str, Enum):
    """
    Grouping of monitoring tools with shared detection behaviour.

    Tools inside a category overlap heavily, so their detection
    probabilities are combined first and the category result is
    then discounted by the category weight.
    """

    WORKER_VOICE = "worker_voice"
    AUDIT = "audit"
    PASSIVE = "passive"

    @property
    def label(self) -> str:
        return {
            ToolCategory.WORKER_VOICE: "Worker Voice",
            ToolCategory.AUDIT: "Audit",
            ToolCategory.PASSIVE: "Passive",
        }[self]

    @property
    def weight(self) -> float:
        """Category weight applied when combining categories."""
        return {
            ToolCategory.WORKER_VOICE: 1.0,
            ToolCategory.AUDIT: 0.85,
            ToolCategory.PASSIVE: 0.70,
        }[self]


class MonitoringTool(str, Enum):
    """
    Transparency (monitoring) tools, in vector order.

    Each tool knows its category and its research-backed base
    effectiveness. The user-supplied effectiveness assumption is
    averaged with the base value at calculation time.
    """

    CONTINUOUS_WORKER_VOICE = "continuous_worker_voice"
    WORKER_SURVEYS = "worker_surveys"
    UNANNOUNCED_AUDITS = "unannounced_audits"
    ANNOUNCED_AUDITS = "announced_audits"
    SUPPLIER_SELF_REPORTING = "supplier_self_reporting"
    DESK_BASED_ASSESSMENT = "desk_based_assessment"

    @classmethod
    def ordered(cls) -> List["MonitoringTool"]:
        """Return all tools in vector order."""
        return [
            cls.CONTINUOUS_WORKER_VOICE,
            cls.WORKER_SURVEYS,
            cls.UNANNOUNCED_AUDITS,
            cls.ANNOUNCED_AUDITS,
            cls.SUPPLIER_SELF_REPORTING,
            cls.DESK_BASED_ASSESSMENT,
        ]

    @classmethod
    def in_category(cls, category: ToolCategory) -> List["MonitoringTool"]:
        """Return the tools of one category, in vector order."""
        return [tool for tool in cls.ordered() if tool.category == category]

    @property
    def index(self) -> int:
        """Position of this tool in coverage/effectiveness vectors."""
        return MonitoringTool.ordered().index(self)

    @property
    def label(self) -> str:
        return _TOOL_PROFILES[self][0]

    @property
    def category(self) -> ToolCategory:
        return _TOOL_PROFILES[self][1]

    @property
    def base_effectiveness(self) -> float:
        """Base detection rate (0-1)."""
        return _TOOL_PROFILES[self][2]


_TOOL_PROFILES: Dict[MonitoringTool, Tuple[str, ToolCategory, float]] = {
    MonitoringTool.CONTINUOUS_WORKER_VOICE: ("Continuous Worker Voice", ToolCategory.WORKER_VOICE, 0.90),
    MonitoringTool.WORKER_SURVEYS: ("Worker Surveys (annual)", ToolCategory.WORKER_VOICE, 0.45),
    MonitoringTool.UNANNOUNCED_AUDITS: ("Unannounced Social Audits", ToolCategory.AUDIT, 0.25),
    MonitoringTool.ANNOUNCED_AUDITS: ("Announced Social Audits", ToolCategory.AUDIT, 0.15),
    MonitoringTool.SUPPLIER_SELF_REPORTING: ("Supplier Self-Reporting", ToolCategory.PASSIVE, 0.12),
    MonitoringTool.DESK_BASED_ASSESSMENT: ("Desk-Based Risk Assessment", ToolCategory.PASSIVE, 0.05),
}


class ResponseLever(str, Enum):
    """Responsiveness (remediation) levers, in vector order."""

    REALTIME_VISIBILITY = "realtime_visibility"
    BINDING_COMMERCIAL_LEVERS = "binding_commercial_levers"
    CORRECTIVE_ACTION_PLANS = "corrective_action_plans"
    SUPPLIER_DEVELOPMENT = "supplier_development"
    INDUSTRY_COLLABORATION = "industry_collaboration"
    CRISIS_ONLY_FOLLOW_UP = "crisis_only_follow_up"

    @classmethod
    def ordered(cls) -> List["ResponseLever"]:
        """Return all levers in vector order."""
        return [
            cls.REALTIME_VISIBILITY,
            cls.BINDING_COMMERCIAL_LEVERS,
            cls.CORRECTIVE_ACTION_PLANS,
            cls.SUPPLIER_DEVELOPMENT,
            cls.INDUSTRY_COLLABORATION,
            cls.CRISIS_ONLY_FOLLOW_UP,
        ]

    @property
    def label(self) -> str:
        return {
            ResponseLever.REALTIME_VISIBILITY: "Suppliers see risks and remedy-impact in realtime",
            ResponseLever.BINDING_COMMERCIAL_LEVERS: "Binding Commercial Levers",
            ResponseLever.CORRECTIVE_ACTION_PLANS: "Corrective Action Plans with quarterly follow-up",
            ResponseLever.SUPPLIER_DEVELOPMENT: "Supplier Development Programmes",
            ResponseLever.INDUSTRY_COLLABORATION: "Industry Collaboration & Agreements",
            ResponseLever.CRISIS_ONLY_FOLLOW_UP: "Follow up only on crisis situations",
        }[self]


class RiskBand(str, Enum):
    """
    Risk band classification of a 0-100 score.

    Score Range (half-open, last band closed):
    - LOW:         0  - <20
    - MEDIUM:      20 - <40
    - MEDIUM_HIGH: 40 - <60
    - HIGH:        60 - <80
    - VERY_HIGH:   80 - 100
    """

    LOW = "Low"
    MEDIUM = "Medium"
    MEDIUM_HIGH = "Medium High"
    HIGH = "High"
    VERY_HIGH = "Very High"

    @classmethod
    def ordered(cls) -> List["RiskBand"]:
        return [cls.LOW, cls.MEDIUM, cls.MEDIUM_HIGH, cls.HIGH, cls.VERY_HIGH]

    @property
    def min_score(self) -> float:
        return _BAND_TABLE[self][0]

    @property
    def max_score(self) -> float:
        """Exclusive upper bound, except VERY_HIGH which includes 100."""
        return _BAND_TABLE[self][1]

    @property
    def color(self) -> str:
        return _BAND_TABLE[self][2]

    @property
    def severity_order(self) -> int:
        return RiskBand.ordered().index(self)


_BAND_TABLE: Dict[RiskBand, Tuple[float, float, str]] = {
    RiskBand.LOW: (0.0, 20.0, "#22c55e"),
    RiskBand.MEDIUM: (20.0, 40.0, "#eab308"),
    RiskBand.MEDIUM_HIGH: (40.0, 60.0, "#f97316"),
    RiskBand.HIGH: (60.0, 80.0, "#ef4444"),
    RiskBand.VERY_HIGH: (80.0, 100.0, "#991b1b"),
}


# ============================================================
# REFERENCE DATA
# ============================================================


def _as_number(value: Any) -> float:
    """Coerce a raw indicator to float; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


@dataclass(frozen=True)
class CountryRiskRecord:
    """
    Reference indicators for one country.

    A factor value of 0 means "no data" and is excluded from the
    weighted score rather than counted as zero risk.
    """

    iso_code: str
    name: str = ""
    ituc_rights_rating: float = 0.0
    corruption_index: float = 0.0
    migrant_worker_prevalence: float = 0.0
    wjp_index: float = 0.0
    walkfree_slavery_index: float = 0.0
    base_risk_score: float = 0.0

    def factor_values(self) -> List[float]:
        """Factor values in RiskFactor order."""
        return [getattr(self, factor.field_name) for factor in RiskFactor.ordered()]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CountryRiskRecord":
        """
        Build a record from a raw mapping.

        Accepts the camelCase keys used by the country data files
        and the snake_case attribute names.
        """
        iso_code = data.get("isoCode", data.get("iso_code", ""))
        values: Dict[str, float] = {}
        for factor in RiskFactor.ordered():
            raw = data.get(factor.value, data.get(factor.field_name))
            values[factor.field_name] = max(0.0, _as_number(raw))
        return cls(
            iso_code=str(iso_code or "").strip(),
            name=str(data.get("name", "") or "").strip(),
            base_risk_score=_as_number(data.get("baseRiskScore", data.get("base_risk_score"))),
            **values,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name, "isoCode": self.iso_code}
        for factor in RiskFactor.ordered():
            result[factor.value] = getattr(self, factor.field_name)
        result["baseRiskScore"] = self.base_risk_score
        return result


# ============================================================
# DERIVED DATA CONTRACTS
# ============================================================


@dataclass(frozen=True)
class PortfolioMetrics:
    """
    Aggregate risk metrics of a selected portfolio.

    risk_concentration is always >= 1; a portfolio of identical
    risks has concentration exactly 1.
    """

    baseline_risk: float = 0.0
    total_volume: float = 0.0
    weighted_risk: float = 0.0
    weighted_risk_squares: float = 0.0
    risk_concentration: float = 1.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "baseline_risk": self.baseline_risk,
            "total_volume": self.total_volume,
            "weighted_risk": self.weighted_risk,
            "weighted_risk_squares": self.weighted_risk_squares,
            "risk_concentration": self.risk_concentration,
        }


@dataclass(frozen=True)
class FocusEffectivenessMetrics:
    """
    Diagnostics describing how focus changed the programme.

    rank_corrections maps each iso code overwritten by the
    rank-preservation pass to its managed risk before correction.
    """

    focus: float = 0.0
    focus_exponent: float = 1.0
    base_transparency: float = 0.0
    focused_transparency: float = 0.0
    transparency_gain: float = 0.0
    responsiveness: float = 0.0
    conservation_factors: List[float] = field(default_factory=list)
    biased_ratios: Dict[str, float] = field(default_factory=dict)
    country_focus_multipliers: Dict[str, float] = field(default_factory=dict)
    country_transparency: Dict[str, float] = field(default_factory=dict)
    rank_corrections: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "focus": self.focus,
            "focus_exponent": self.focus_exponent,
            "base_transparency": self.base_transparency,
            "focused_transparency": self.focused_transparency,
            "transparency_gain": self.transparency_gain,
            "responsiveness": self.responsiveness,
            "conservation_factors": list(self.conservation_factors),
            "biased_ratios": dict(self.biased_ratios),
            "country_focus_multipliers": dict(self.country_focus_multipliers),
            "country_transparency": dict(self.country_transparency),
            "rank_corrections": dict(self.rank_corrections),
        }


@dataclass(frozen=True)
class ManagedRiskResult:
    """
    Complete output of a managed-risk calculation.

    ============================================================
    OUTPUT GUARANTEES
    ============================================================
    - managed_risk is the volume-weighted mean of the corrected
      per-country values
    - Sorted by baseline risk descending, per-country managed
      risks are non-increasing
    - Every per-country managed risk is >= 25% of its baseline
    - Identical inputs give identical results

    ============================================================
    """

    managed_risk: float = 0.0
    baseline_risk: float = 0.0
    risk_concentration: float = 1.0
    portfolio_focus_multiplier: float = 1.0
    combined_effectiveness: float = 0.0
    country_managed_risks: Dict[str, float] = field(default_factory=dict)
    country_coverage: Dict[str, List[float]] = field(default_factory=dict)
    focus_effectiveness_metrics: FocusEffectivenessMetrics = field(
        default_factory=FocusEffectivenessMetrics
    )

    @property
    def risk_reduction_pct(self) -> float:
        if self.baseline_risk <= 0:
            return 0.0
        return (self.baseline_risk - self.managed_risk) / self.baseline_risk * 100.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "managed_risk": self.managed_risk,
            "baseline_risk": self.baseline_risk,
            "risk_concentration": self.risk_concentration,
            "portfolio_focus_multiplier": self.portfolio_focus_multiplier,
            "combined_effectiveness": self.combined_effectiveness,
            "country_managed_risks": dict(self.country_managed_risks),
            "country_coverage": {
                iso: list(coverage) for iso, coverage in self.country_coverage.items()
            },
            "focus_effectiveness_metrics": self.focus_effectiveness_metrics.to_dict(),
        }


# ============================================================
# DIAGNOSTIC CONTRACTS
# ============================================================


@dataclass(frozen=True)
class ToolBreakdown:
    """Per-tool coverage and effectiveness diagnostics."""

    tool: MonitoringTool
    name: str
    category: str
    coverage: float
    base_effectiveness: int        # percent, rounded
    user_effectiveness: float      # percent
    average_effectiveness: int     # percent, rounded
    contribution: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool": self.tool.value,
            "name": self.name,
            "category": self.category,
            "coverage": self.coverage,
            "base_effectiveness": self.base_effectiveness,
            "user_effectiveness": self.user_effectiveness,
            "average_effectiveness": self.average_effectiveness,
            "contribution": self.contribution,
        }


@dataclass(frozen=True)
class PrimaryResponse:
    """The response lever carrying the largest strategy weight."""

    lever: ResponseLever
    method: str
    weight: float
    effectiveness: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lever": self.lever.value,
            "method": self.method,
            "weight": self.weight,
            "effectiveness": self.effectiveness,
        }


@dataclass(frozen=True)
class StrategyBreakdown:
    tools: List[ToolBreakdown] = field(default_factory=list)
    overall_transparency: float = 0.0
    overall_responsiveness: float = 0.0
    primary_response: Optional[PrimaryResponse] = None
    focus_level: float = 0.0
    risk_concentration: float = 1.0
    portfolio_focus_multiplier: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hrdd_strategies": [tool.to_dict() for tool in self.tools],
            "overall_transparency": self.overall_transparency,
            "overall_responsiveness": self.overall_responsiveness,
            "primary_response": self.primary_response.to_dict() if self.primary_response else None,
            "focus": {
                "level": self.focus_level,
                "concentration": self.risk_concentration,
                "portfolio_multiplier": self.portfolio_focus_multiplier,
            },
        }


@dataclass(frozen=True)
class CountryRiskAssessment:
    """Weighted risk of a single country against its stored base score."""

    iso_code: str
    name: str
    original_risk_score: float
    weighted_risk_score: float      # rounded to 2 decimals
    risk_band: RiskBand

    def to_dict(self) -> Dict[str, Any]:
        return {
            "country": self.name,
            "iso_code": self.iso_code,
            "original_risk_score": self.original_risk_score,
            "weighted_risk_score": self.weighted_risk_score,
            "risk_band": self.risk_band.value,
        }


@dataclass(frozen=True)
class BandedScore:
    score: float
    band: RiskBand
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "band": self.band.value, "color": self.color}


@dataclass(frozen=True)
class RiskSummary:
    """Baseline vs managed comparison with strategy breakdown."""

    baseline: BandedScore
    managed: BandedScore
    risk_reduction_pct: float
    absolute_reduction: float
    countries_selected: int
    risk_concentration: float
    strategy: StrategyBreakdown

    @property
    def is_improvement(self) -> bool:
        return self.managed.score < self.baseline.score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseline": self.baseline.to_dict(),
            "managed": self.managed.to_dict(),
            "improvement": {
                "risk_reduction": self.risk_reduction_pct,
                "absolute_reduction": self.absolute_reduction,
                "is_improvement": self.is_improvement,
            },
            "portfolio": {
                "countries_selected": self.countries_selected,
                "average_risk": self.baseline.score,
                "risk_concentration": self.risk_concentration,
            },
            "strategy": self.strategy.to_dict(),
        }


# ============================================================
# ERROR TYPES
# ============================================================


class RiskEngineError(Exception):
    """Base exception for HRDD risk engine errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(RiskEngineError):
    """
    Raised when an engine configuration is internally inconsistent.

    NOTE: Only raised while building a configuration object. Input
    values passed to calculations are clamped, never rejected.
    """
    pass
