"""
Tests for HRDD Risk Engine - Configuration.

============================================================
PURPOSE
============================================================
Covers:
1. Default and preset configurations
2. Construction-time validation
3. Loading from dict, environment and YAML

============================================================
"""

import pytest

from hrdd_engine.config import (
    AllocationConfig,
    FocusBiasConfig,
    ManagedRiskConfig,
    RiskEngineConfig,
    StrategyDefaults,
    get_aggressive_config,
    get_conservative_config,
    get_default_config,
)
from hrdd_engine.types import ConfigurationError


ENV_VARS = [
    "HRDD_DEFAULT_FOCUS",
    "HRDD_DEFAULT_VOLUME",
    "HRDD_FOCUS_GAMMA",
    "HRDD_MAX_TRANSPARENCY",
    "HRDD_RESIDUAL_FLOOR",
    "HRDD_RANK_GAP",
    "HRDD_CAPACITY_EXPANSION",
]


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No HRDD variables and no stray .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


# ============================================================
# DEFAULTS
# ============================================================

class TestDefaults:
    """Tests for default and preset configurations."""

    def test_default_strategy(self):
        defaults = get_default_config().defaults

        assert defaults.factor_weights == (20.0, 20.0, 5.0, 10.0, 10.0)
        assert defaults.hrdd_strategy == (5.0, 15.0, 25.0, 60.0, 80.0, 90.0)
        assert defaults.transparency_effectiveness == (90.0, 45.0, 25.0, 15.0, 12.0, 5.0)
        assert defaults.responsiveness_strategy == (10.0, 5.0, 20.0, 20.0, 10.0, 5.0)
        assert defaults.responsiveness_effectiveness == (70.0, 85.0, 35.0, 25.0, 15.0, 5.0)
        assert defaults.focus == 0.6
        assert defaults.default_volume == 10.0

    def test_default_constants(self):
        config = get_default_config()

        assert config.focus_bias.focus_gamma == 2.75
        assert config.focus_bias.ratio_floor == 0.08
        assert config.focus_bias.ratio_ceiling == 2.5
        assert config.allocation.capacity_expansion == 0.3
        assert config.managed_risk.max_transparency == 0.9
        assert config.managed_risk.residual_floor == 0.25
        assert config.managed_risk.rank_gap == 0.5

    def test_conservative_preset(self):
        config = get_conservative_config()

        assert config.managed_risk.max_transparency < get_default_config().managed_risk.max_transparency
        assert config.managed_risk.residual_floor > get_default_config().managed_risk.residual_floor

    def test_aggressive_preset(self):
        config = get_aggressive_config()

        assert config.allocation.capacity_expansion > get_default_config().allocation.capacity_expansion
        assert config.managed_risk.residual_floor < get_default_config().managed_risk.residual_floor

    def test_config_is_frozen(self):
        config = get_default_config()

        with pytest.raises(AttributeError):
            config.engine_version = "9.9"


# ============================================================
# VALIDATION
# ============================================================

class TestValidation:
    """Invalid constants are rejected at construction time."""

    @pytest.mark.parametrize(
        "factory",
        [
            lambda: StrategyDefaults(hrdd_strategy=(1.0, 2.0)),
            lambda: StrategyDefaults(factor_weights=(20.0,) * 6),
            lambda: StrategyDefaults(focus=1.5),
            lambda: StrategyDefaults(default_volume=-1.0),
            lambda: FocusBiasConfig(ratio_floor=3.0),
            lambda: FocusBiasConfig(ratio_ceiling=0.9),
            lambda: FocusBiasConfig(min_exponent=2.0),
            lambda: FocusBiasConfig(focus_gamma=-0.1),
            lambda: AllocationConfig(boost_full_risk=40.0),
            lambda: AllocationConfig(capacity_expansion=-0.1),
            lambda: ManagedRiskConfig(max_transparency=1.2),
            lambda: ManagedRiskConfig(base_effectiveness_cap=0.9),
            lambda: ManagedRiskConfig(residual_floor=-0.1),
            lambda: ManagedRiskConfig(rank_gap=-1.0),
        ],
    )
    def test_invalid_values_raise(self, factory):
        with pytest.raises(ConfigurationError):
            factory()

    def test_error_carries_details(self):
        with pytest.raises(ConfigurationError) as exc_info:
            StrategyDefaults(focus=2.0)

        assert exc_info.value.details["field"] == "focus"


# ============================================================
# LOADING
# ============================================================

class TestFromDict:
    """Tests for RiskEngineConfig.from_dict."""

    def test_round_trip(self):
        config = get_aggressive_config()

        assert RiskEngineConfig.from_dict(config.to_dict()) == config

    def test_partial_override(self):
        config = RiskEngineConfig.from_dict({"defaults": {"focus": 0.3}})

        assert config.defaults.focus == 0.3
        assert config.defaults.hrdd_strategy == get_default_config().defaults.hrdd_strategy

    def test_lists_become_tuples(self):
        config = RiskEngineConfig.from_dict(
            {"defaults": {"hrdd_strategy": [10, 10, 10, 10, 10, 10]}}
        )

        assert config.defaults.hrdd_strategy == (10, 10, 10, 10, 10, 10)

    def test_unknown_key_raises(self):
        with pytest.raises(ConfigurationError):
            RiskEngineConfig.from_dict({"focus_bias": {"gamma": 3.0}})

    def test_non_mapping_section_raises(self):
        with pytest.raises(ConfigurationError):
            RiskEngineConfig.from_dict({"allocation": [1, 2, 3]})

    def test_invalid_value_raises(self):
        with pytest.raises(ConfigurationError):
            RiskEngineConfig.from_dict({"managed_risk": {"residual_floor": 2.0}})


class TestFromEnv:
    """Tests for RiskEngineConfig.from_env."""

    def test_no_variables_gives_defaults(self, clean_env):
        assert RiskEngineConfig.from_env() == get_default_config()

    def test_variables_applied(self, clean_env):
        clean_env.setenv("HRDD_DEFAULT_FOCUS", "0.25")
        clean_env.setenv("HRDD_FOCUS_GAMMA", "2.0")
        clean_env.setenv("HRDD_RESIDUAL_FLOOR", "0.3")
        clean_env.setenv("HRDD_CAPACITY_EXPANSION", "0.1")

        config = RiskEngineConfig.from_env()

        assert config.defaults.focus == 0.25
        assert config.focus_bias.focus_gamma == 2.0
        assert config.managed_risk.residual_floor == 0.3
        assert config.allocation.capacity_expansion == 0.1

    def test_invalid_variable_raises(self, clean_env):
        clean_env.setenv("HRDD_MAX_TRANSPARENCY", "1.5")

        with pytest.raises(ConfigurationError):
            RiskEngineConfig.from_env()


class TestFromYaml:
    """Tests for RiskEngineConfig.from_yaml."""

    def test_load(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text(
            "defaults:\n"
            "  focus: 0.8\n"
            "  hrdd_strategy: [10, 20, 30, 40, 50, 60]\n"
            "managed_risk:\n"
            "  rank_gap: 1.0\n"
            "engine_version: '3.1.0-test'\n",
            encoding="utf-8",
        )

        config = RiskEngineConfig.from_yaml(path)

        assert config.defaults.focus == 0.8
        assert config.defaults.hrdd_strategy == (10, 20, 30, 40, 50, 60)
        assert config.managed_risk.rank_gap == 1.0
        assert config.engine_version == "3.1.0-test"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert RiskEngineConfig.from_yaml(path) == get_default_config()

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            RiskEngineConfig.from_yaml(path)
