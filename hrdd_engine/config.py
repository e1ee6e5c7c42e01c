"""
HRDD Risk Engine - Configuration.

============================================================
PURPOSE
============================================================
Defines the immutable configuration objects for the engine:
default strategy, focus-bias curve constants, allocation
constants and managed-risk caps.

============================================================
DESIGN PRINCIPLES
============================================================
- All configurations are frozen dataclasses
- A running engine never mutates its configuration; a new
  configuration object replaces the old one wholesale
- Every constant is validated at construction time
- Configuration can be loaded from defaults, environment
  variables or a YAML file

============================================================
CONSTANT PHILOSOPHY
============================================================
The bias curve and caps are heuristic guards, not derived
quantities. They are kept here so that domain owners can
tune them without touching calculation code.

============================================================
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Tuple

from dotenv import load_dotenv

from .types import ConfigurationError, MonitoringTool, ResponseLever, RiskFactor


logger = logging.getLogger(__name__)


def _check_range(name: str, value: float, low: float, high: float) -> None:
    if not low <= value <= high:
        raise ConfigurationError(
            f"{name} must be within [{low}, {high}], got {value}",
            details={"field": name, "value": value},
        )


def _check_length(name: str, values: Tuple[float, ...], expected: int) -> None:
    if len(values) != expected:
        raise ConfigurationError(
            f"{name} must have {expected} entries, got {len(values)}",
            details={"field": name, "length": len(values)},
        )


# ============================================================
# STRATEGY DEFAULTS
# ============================================================


@dataclass(frozen=True)
class StrategyDefaults:
    """
    Default user-editable inputs.

    ============================================================
    DEFAULTS RATIONALE
    ============================================================
    Factor weights (ITUC, Corruption, Migrant, WJP, Walk Free):
    - Rights rating and corruption dominate (20 each)

    Monitoring coverage (% of supplier base):
    - Worker voice is rare, passive approaches are common

    Responsiveness:
    - Portfolio of levers from weakest to strongest
    ============================================================
    """

    factor_weights: Tuple[float, ...] = (20.0, 20.0, 5.0, 10.0, 10.0)
    hrdd_strategy: Tuple[float, ...] = (5.0, 15.0, 25.0, 60.0, 80.0, 90.0)
    transparency_effectiveness: Tuple[float, ...] = (90.0, 45.0, 25.0, 15.0, 12.0, 5.0)
    responsiveness_strategy: Tuple[float, ...] = (10.0, 5.0, 20.0, 20.0, 10.0, 5.0)
    responsiveness_effectiveness: Tuple[float, ...] = (70.0, 85.0, 35.0, 25.0, 15.0, 5.0)

    focus: float = 0.6
    default_volume: float = 10.0        # Volume assumed for countries without one
    max_factor_weight: float = 50.0     # Per-factor weight ceiling

    def __post_init__(self) -> None:
        _check_length("factor_weights", self.factor_weights, len(RiskFactor.ordered()))
        _check_length("hrdd_strategy", self.hrdd_strategy, len(MonitoringTool.ordered()))
        _check_length(
            "transparency_effectiveness",
            self.transparency_effectiveness,
            len(MonitoringTool.ordered()),
        )
        _check_length(
            "responsiveness_strategy",
            self.responsiveness_strategy,
            len(ResponseLever.ordered()),
        )
        _check_length(
            "responsiveness_effectiveness",
            self.responsiveness_effectiveness,
            len(ResponseLever.ordered()),
        )
        _check_range("focus", self.focus, 0.0, 1.0)
        if self.default_volume < 0:
            raise ConfigurationError("default_volume must be non-negative")
        if self.max_factor_weight <= 0:
            raise ConfigurationError("max_factor_weight must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factor_weights": list(self.factor_weights),
            "hrdd_strategy": list(self.hrdd_strategy),
            "transparency_effectiveness": list(self.transparency_effectiveness),
            "responsiveness_strategy": list(self.responsiveness_strategy),
            "responsiveness_effectiveness": list(self.responsiveness_effectiveness),
            "focus": self.focus,
            "default_volume": self.default_volume,
            "max_factor_weight": self.max_factor_weight,
        }


# ============================================================
# FOCUS BIAS CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class FocusBiasConfig:
    """
    Constants of the focus bias curve.

    ============================================================
    CURVE SHAPE
    ============================================================
    Exponent:
    - focus <= midpoint: quadratic ramp from min to mid exponent
    - focus > midpoint: power-curve blend from mid to max

    Ratio window:
    - Raw and biased ratios are kept within [floor, ceiling]

    Dampers:
    - Low-risk compression above low_compression_focus
    - Extreme-ratio compression above high_compression_focus
    ============================================================
    """

    min_exponent: float = 1.0
    mid_exponent: float = 1.5
    max_exponent: float = 2.0
    exponent_midpoint: float = 0.5
    upper_curve_power: float = 1.5

    ratio_floor: float = 0.08
    ratio_ceiling: float = 2.5

    # Below-baseline damper
    low_compression_focus: float = 0.6
    low_compression_ratio: float = 0.8
    low_compression_strength: float = 0.5

    # Extreme above-baseline damper
    high_compression_focus: float = 0.7
    high_compression_ratio: float = 1.5

    # Portfolio/country multiplier slope
    focus_gamma: float = 2.75

    # Direct bonus for high-risk countries under strong focus
    high_risk_bonus_focus: float = 0.6
    high_risk_bonus_risk: float = 70.0
    high_risk_bonus_slope: float = 0.5

    def __post_init__(self) -> None:
        if not self.min_exponent <= self.mid_exponent <= self.max_exponent:
            raise ConfigurationError("exponents must satisfy min <= mid <= max")
        _check_range("exponent_midpoint", self.exponent_midpoint, 0.01, 0.99)
        if not 0 < self.ratio_floor < 1 < self.ratio_ceiling:
            raise ConfigurationError("ratio window must satisfy 0 < floor < 1 < ceiling")
        _check_range("low_compression_strength", self.low_compression_strength, 0.0, 1.0)
        _check_range("low_compression_focus", self.low_compression_focus, 0.0, 0.99)
        _check_range("high_compression_focus", self.high_compression_focus, 0.0, 1.0)
        if self.focus_gamma < 0:
            raise ConfigurationError("focus_gamma must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_exponent": self.min_exponent,
            "mid_exponent": self.mid_exponent,
            "max_exponent": self.max_exponent,
            "exponent_midpoint": self.exponent_midpoint,
            "upper_curve_power": self.upper_curve_power,
            "ratio_floor": self.ratio_floor,
            "ratio_ceiling": self.ratio_ceiling,
            "low_compression_focus": self.low_compression_focus,
            "low_compression_ratio": self.low_compression_ratio,
            "low_compression_strength": self.low_compression_strength,
            "high_compression_focus": self.high_compression_focus,
            "high_compression_ratio": self.high_compression_ratio,
            "focus_gamma": self.focus_gamma,
            "high_risk_bonus_focus": self.high_risk_bonus_focus,
            "high_risk_bonus_risk": self.high_risk_bonus_risk,
            "high_risk_bonus_slope": self.high_risk_bonus_slope,
        }


# ============================================================
# ALLOCATION CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class AllocationConfig:
    """
    Constants of the coverage allocation.

    Capacity expansion:
    - At full focus total tool usage may grow by 30%, no more

    High-risk boost:
    - Ramps from 0 to +30% over risk [40, 80] and focus [0.3, 1.0]
    """

    capacity_expansion: float = 0.3

    boost_min_focus: float = 0.3
    boost_min_risk: float = 40.0
    boost_full_risk: float = 80.0
    boost_max: float = 0.3

    max_coverage: float = 100.0

    def __post_init__(self) -> None:
        if self.capacity_expansion < 0:
            raise ConfigurationError("capacity_expansion must be non-negative")
        _check_range("boost_min_focus", self.boost_min_focus, 0.0, 0.99)
        if self.boost_full_risk <= self.boost_min_risk:
            raise ConfigurationError("boost_full_risk must exceed boost_min_risk")
        if self.boost_max < 0:
            raise ConfigurationError("boost_max must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capacity_expansion": self.capacity_expansion,
            "boost_min_focus": self.boost_min_focus,
            "boost_min_risk": self.boost_min_risk,
            "boost_full_risk": self.boost_full_risk,
            "boost_max": self.boost_max,
            "max_coverage": self.max_coverage,
        }


# ============================================================
# MANAGED RISK CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class ManagedRiskConfig:
    """
    Caps and floors applied when converting effectiveness into
    managed risk.

    ============================================================
    CAP RATIONALE
    ============================================================
    - Transparency never exceeds 90%: residual risk always exists
    - Effectiveness cap 50% (risk 100) to 70% (risk 0)
    - At least 25% of baseline risk always remains
    - Rank repair keeps a 0.5 point gap between neighbours
    ============================================================
    """

    max_transparency: float = 0.90
    base_effectiveness_cap: float = 0.50
    risk_sensitive_cap: float = 0.20
    residual_floor: float = 0.25
    rank_gap: float = 0.5

    def __post_init__(self) -> None:
        _check_range("max_transparency", self.max_transparency, 0.0, 1.0)
        _check_range("base_effectiveness_cap", self.base_effectiveness_cap, 0.0, 1.0)
        _check_range(
            "base_effectiveness_cap + risk_sensitive_cap",
            self.base_effectiveness_cap + self.risk_sensitive_cap,
            0.0,
            1.0,
        )
        _check_range("residual_floor", self.residual_floor, 0.0, 1.0)
        if self.rank_gap < 0:
            raise ConfigurationError("rank_gap must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_transparency": self.max_transparency,
            "base_effectiveness_cap": self.base_effectiveness_cap,
            "risk_sensitive_cap": self.risk_sensitive_cap,
            "residual_floor": self.residual_floor,
            "rank_gap": self.rank_gap,
        }


# ============================================================
# MASTER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class RiskEngineConfig:
    """
    Master configuration for the HRDD Risk Engine.

    Aggregates the section configs and engine metadata.
    """

    defaults: StrategyDefaults = field(default_factory=StrategyDefaults)
    focus_bias: FocusBiasConfig = field(default_factory=FocusBiasConfig)
    allocation: AllocationConfig = field(default_factory=AllocationConfig)
    managed_risk: ManagedRiskConfig = field(default_factory=ManagedRiskConfig)

    engine_version: str = "3.1.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "defaults": self.defaults.to_dict(),
            "focus_bias": self.focus_bias.to_dict(),
            "allocation": self.allocation.to_dict(),
            "managed_risk": self.managed_risk.to_dict(),
            "engine_version": self.engine_version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiskEngineConfig":
        """
        Build a configuration from a nested dictionary.

        Missing sections and keys keep their default values.
        Sequence values are converted to tuples.
        """
        base = cls()
        sections = {
            "defaults": base.defaults,
            "focus_bias": base.focus_bias,
            "allocation": base.allocation,
            "managed_risk": base.managed_risk,
        }
        changes: Dict[str, Any] = {}
        for name, section in sections.items():
            overrides = data.get(name) or {}
            if not isinstance(overrides, dict):
                raise ConfigurationError(f"Section '{name}' must be a mapping")
            unknown = set(overrides) - set(section.to_dict())
            if unknown:
                raise ConfigurationError(
                    f"Unknown keys in section '{name}': {sorted(unknown)}"
                )
            normalised = {
                key: tuple(value) if isinstance(value, (list, tuple)) else value
                for key, value in overrides.items()
            }
            changes[name] = replace(section, **normalised)
        if "engine_version" in data:
            changes["engine_version"] = str(data["engine_version"])
        return replace(base, **changes)

    @classmethod
    def from_env(cls) -> "RiskEngineConfig":
        """
        Load configuration from environment variables.

        A .env file is read first if present.

        Environment variables:
        - HRDD_DEFAULT_FOCUS
        - HRDD_DEFAULT_VOLUME
        - HRDD_FOCUS_GAMMA
        - HRDD_MAX_TRANSPARENCY
        - HRDD_RESIDUAL_FLOOR
        - HRDD_RANK_GAP
        - HRDD_CAPACITY_EXPANSION
        """
        load_dotenv()
        config = cls()

        defaults = config.defaults
        if os.getenv("HRDD_DEFAULT_FOCUS"):
            defaults = replace(defaults, focus=float(os.getenv("HRDD_DEFAULT_FOCUS")))
        if os.getenv("HRDD_DEFAULT_VOLUME"):
            defaults = replace(defaults, default_volume=float(os.getenv("HRDD_DEFAULT_VOLUME")))

        focus_bias = config.focus_bias
        if os.getenv("HRDD_FOCUS_GAMMA"):
            focus_bias = replace(focus_bias, focus_gamma=float(os.getenv("HRDD_FOCUS_GAMMA")))

        managed_risk = config.managed_risk
        if os.getenv("HRDD_MAX_TRANSPARENCY"):
            managed_risk = replace(
                managed_risk, max_transparency=float(os.getenv("HRDD_MAX_TRANSPARENCY"))
            )
        if os.getenv("HRDD_RESIDUAL_FLOOR"):
            managed_risk = replace(
                managed_risk, residual_floor=float(os.getenv("HRDD_RESIDUAL_FLOOR"))
            )
        if os.getenv("HRDD_RANK_GAP"):
            managed_risk = replace(managed_risk, rank_gap=float(os.getenv("HRDD_RANK_GAP")))

        allocation = config.allocation
        if os.getenv("HRDD_CAPACITY_EXPANSION"):
            allocation = replace(
                allocation, capacity_expansion=float(os.getenv("HRDD_CAPACITY_EXPANSION"))
            )

        return replace(
            config,
            defaults=defaults,
            focus_bias=focus_bias,
            managed_risk=managed_risk,
            allocation=allocation,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "RiskEngineConfig":
        """Load configuration from a YAML file."""
        import yaml

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        logger.info(f"Loaded risk engine configuration from {path}")
        return cls.from_dict(data)


# ============================================================
# DEFAULT CONFIGURATION
# ============================================================


def get_default_config() -> RiskEngineConfig:
    """Return the default HRDD Risk Engine configuration."""
    return RiskEngineConfig()


def get_conservative_config() -> RiskEngineConfig:
    """
    Return a more conservative configuration.

    Lower transparency ceiling and higher residual floor:
    managed risk stays closer to baseline.
    """
    return RiskEngineConfig(
        managed_risk=ManagedRiskConfig(
            max_transparency=0.80,
            base_effectiveness_cap=0.40,
            residual_floor=0.35,
        ),
        allocation=AllocationConfig(capacity_expansion=0.15),
    )


def get_aggressive_config() -> RiskEngineConfig:
    """
    Return a more aggressive configuration.

    More capacity expansion under focus and a lower residual
    floor. Use only with well-evidenced strategy assumptions.
    """
    return RiskEngineConfig(
        managed_risk=ManagedRiskConfig(
            base_effectiveness_cap=0.55,
            residual_floor=0.20,
        ),
        allocation=AllocationConfig(capacity_expansion=0.45, boost_max=0.4),
    )
