"""
HRDD Risk Engine - Focus Bias Model.

============================================================
PURPOSE
============================================================
Converts the user's focus preference into:
1. A nonlinear exponent applied to each country's risk ratio
2. A clamped, compressed "biased risk ratio" per country
3. Portfolio and country focus multipliers

============================================================
EXPONENT CURVE
============================================================
    focus <= 0.5:  1 + 0.5 * (focus / 0.5)^2
    focus >  0.5:  1.5 + 0.5 * ((focus - 0.5) / 0.5)^1.5

Gentle ramp at low focus, accelerating above the midpoint,
never above 2.0.

============================================================
DAMPERS
============================================================
Unconstrained power-law biasing can push similar-risk
countries far apart. Two heuristic guards apply:

(a) focus > 0.6 and raw ratio < 0.8:
    quadratic compression of below-baseline countries
(b) focus > 0.7 and biased ratio > 1.5:
    square-root compression back toward 1.5

Both keep the biased ratio non-decreasing in the raw ratio.

============================================================
"""

import math
from typing import Optional

from .config import FocusBiasConfig
from .validation import clamp, sanitize_concentration, sanitize_focus, to_number


_DEFAULT_BIAS = FocusBiasConfig()


def get_focus_exponent(focus: float, config: FocusBiasConfig = _DEFAULT_BIAS) -> float:
    """
    Map focus in [0, 1] to the bias exponent in [min, max].

    Args:
        focus: Focus level (clamped)
        config: Bias curve constants

    Returns:
        Exponent, non-decreasing in focus
    """
    f = sanitize_focus(focus)
    midpoint = config.exponent_midpoint

    if f <= midpoint:
        progress = f / midpoint
        exponent = config.min_exponent + (config.mid_exponent - config.min_exponent) * progress ** 2
    else:
        progress = (f - midpoint) / (1.0 - midpoint)
        exponent = config.mid_exponent + (
            config.max_exponent - config.mid_exponent
        ) * progress ** config.upper_curve_power

    return clamp(exponent, config.min_exponent, config.max_exponent)


def get_biased_risk_ratio(
    raw_ratio: Optional[float],
    focus: float,
    country_risk: float,
    baseline_risk: float,
    config: FocusBiasConfig = _DEFAULT_BIAS,
) -> float:
    """
    Bias a country's risk ratio according to focus.

    Args:
        raw_ratio: country_risk / baseline_risk; recomputed when
                   missing or not finite
        focus: Focus level (clamped)
        country_risk: Country risk score
        baseline_risk: Portfolio baseline risk
        config: Bias curve constants

    Returns:
        Biased ratio within [ratio_floor, ratio_ceiling]; 1.0 when
        the portfolio has no baseline risk
    """
    f = sanitize_focus(focus)
    baseline = to_number(baseline_risk)
    if baseline <= 0:
        return 1.0

    ratio = to_number(raw_ratio, default=math.nan)
    if not math.isfinite(ratio):
        ratio = max(0.0, to_number(country_risk)) / baseline

    floor, ceiling = config.ratio_floor, config.ratio_ceiling
    clamped_ratio = clamp(ratio, floor, ceiling)

    exponent = get_focus_exponent(f, config)
    biased = clamp(clamped_ratio ** exponent, floor, ceiling)

    # (a) below-baseline compression
    if f > config.low_compression_focus and clamped_ratio < config.low_compression_ratio:
        focus_weight = (f - config.low_compression_focus) / (1.0 - config.low_compression_focus)
        depth = (config.low_compression_ratio - clamped_ratio) / config.low_compression_ratio
        biased *= 1.0 - config.low_compression_strength * focus_weight * depth ** 2

    # (b) extreme above-baseline compression
    if f > config.high_compression_focus and biased > config.high_compression_ratio:
        excess = biased - config.high_compression_ratio
        biased = config.high_compression_ratio + (math.sqrt(1.0 + excess) - 1.0)

    return clamp(biased, floor, ceiling)


def calculate_portfolio_focus_multiplier(
    focus: float,
    risk_concentration: float,
    config: FocusBiasConfig = _DEFAULT_BIAS,
) -> float:
    """
    F0 = (1 - focus*gamma) + focus*gamma*concentration

    Equals 1 for a uniform portfolio and grows with concentration
    when the programme is deliberately focused.
    """
    f = sanitize_focus(focus)
    concentration = sanitize_concentration(risk_concentration)
    gamma = config.focus_gamma
    return (1.0 - f * gamma) + f * gamma * concentration


def calculate_country_focus_multiplier(
    focus: float,
    portfolio_multiplier: float,
    biased_ratio: float,
    country_risk: float,
    config: FocusBiasConfig = _DEFAULT_BIAS,
) -> float:
    """
    Effectiveness multiplier for one country.

    High-risk countries under strong focus take a direct bonus on
    the portfolio multiplier; every other country scales with its
    biased ratio. The result may be negative for strongly
    suppressed countries; callers floor the reduction at 0.
    """
    f = sanitize_focus(focus)
    risk = to_number(country_risk)
    gamma = config.focus_gamma

    if f > config.high_risk_bonus_focus and risk >= config.high_risk_bonus_risk:
        bonus = 1.0 + (f - config.high_risk_bonus_focus) * config.high_risk_bonus_slope
        return to_number(portfolio_multiplier, 1.0) * bonus

    return (1.0 - f * gamma) + f * gamma * to_number(biased_ratio, 1.0)
