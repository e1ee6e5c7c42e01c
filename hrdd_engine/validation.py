"""
HRDD Risk Engine - Input Sanitisation and Validation.

============================================================
PURPOSE
============================================================
Normalises caller-supplied inputs before they reach the
calculation stages.

ERROR TAXONOMY:
1. Structural invalidity (wrong-length vector)
   -> the affected sub-result is 0, never partial output
2. Numeric out-of-range
   -> clamped silently
3. Non-numeric or missing values
   -> treated as zero contribution

CRITICAL PRINCIPLE:
    "Degrade, never throw." No function here raises for
    malformed but well-typed input.

============================================================
"""

import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .types import MonitoringTool, ResponseLever, RiskFactor


TOOL_COUNT = len(MonitoringTool.ordered())
LEVER_COUNT = len(ResponseLever.ordered())
FACTOR_COUNT = len(RiskFactor.ordered())


# ============================================================
# SCALAR HELPERS
# ============================================================


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite float, returning default otherwise."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return default
    if not isinstance(value, (int, float)):
        return default
    number = float(value)
    if not math.isfinite(number):
        return default
    return number


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def sanitize_focus(focus: Any) -> float:
    """Focus level clamped to [0, 1]; non-numeric becomes 0."""
    return clamp(to_number(focus), 0.0, 1.0)


def sanitize_concentration(concentration: Any) -> float:
    """Risk concentration floored at 1; non-positive becomes 1."""
    value = to_number(concentration, 1.0)
    if value <= 0:
        return 1.0
    return max(1.0, value)


def normalize_effectiveness_value(value: Any) -> float:
    """
    Normalise an effectiveness figure to 0-1.

    Values >= 1 are read as percentages, values in (0, 1) as
    fractions. Non-numeric and non-positive values become 0.
    """
    number = to_number(value)
    if number <= 0:
        return 0.0
    if number >= 1:
        return min(1.0, number / 100.0)
    return number


# ============================================================
# VECTOR HELPERS
# ============================================================


def has_length(values: Any, expected: int) -> bool:
    """True when values is a sequence of exactly expected entries."""
    if values is None or isinstance(values, (str, bytes, Mapping)):
        return False
    try:
        return len(values) == expected
    except TypeError:
        return False


def sanitize_vector(
    values: Any,
    expected: int,
    low: float = 0.0,
    high: float = 100.0,
) -> Optional[List[float]]:
    """
    Clamp every entry of a fixed-length vector.

    Returns None when the vector is structurally invalid so the
    caller can return 0 for the affected sub-result.
    """
    if not has_length(values, expected):
        return None
    return [clamp(to_number(value), low, high) for value in values]


# ============================================================
# STRICT VALIDATORS
# ============================================================
# These mirror what an editing UI enforces. The engine itself
# clamps instead of rejecting; callers use these to flag input
# before it is submitted.


def _all_within(values: Sequence[Any], low: float, high: float) -> bool:
    return all(
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and low <= value <= high
        for value in values
    )


def validate_weights(weights: Any, max_weight: float = 50.0) -> bool:
    return has_length(weights, FACTOR_COUNT) and _all_within(weights, 0.0, max_weight)


def validate_hrdd_strategy(strategy: Any) -> bool:
    return has_length(strategy, TOOL_COUNT) and _all_within(strategy, 0.0, 100.0)


def validate_transparency(transparency: Any) -> bool:
    return has_length(transparency, TOOL_COUNT) and _all_within(transparency, 0.0, 100.0)


def validate_responsiveness(responsiveness: Any) -> bool:
    return has_length(responsiveness, LEVER_COUNT) and _all_within(responsiveness, 0.0, 100.0)


def validate_responsiveness_effectiveness(effectiveness: Any) -> bool:
    return has_length(effectiveness, LEVER_COUNT) and _all_within(effectiveness, 0.0, 100.0)


# ============================================================
# PORTFOLIO HELPERS
# ============================================================


def unique_selection(selection: Any) -> List[str]:
    """Selected iso codes with duplicates and blanks removed, order kept."""
    if selection is None or isinstance(selection, (str, bytes, Mapping)):
        return []
    try:
        iterator: Iterable[Any] = iter(selection)
    except TypeError:
        return []
    seen = set()
    codes: List[str] = []
    for code in iterator:
        if not isinstance(code, str) or not code.strip():
            continue
        if code in seen:
            continue
        seen.add(code)
        codes.append(code)
    return codes


def resolve_volume(volumes: Any, iso_code: str, default_volume: float) -> float:
    """Volume for one country; missing uses default, negatives become 0."""
    if not isinstance(volumes, Mapping) or iso_code not in volumes:
        return default_volume
    raw = volumes[iso_code]
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not math.isfinite(raw):
        return default_volume
    return max(0.0, float(raw))


def resolve_risk(risks: Any, iso_code: str) -> float:
    """Risk for one country clamped to [0, 100]; missing or non-numeric becomes 0."""
    if not isinstance(risks, Mapping):
        return 0.0
    return clamp(to_number(risks.get(iso_code)), 0.0, 100.0)
