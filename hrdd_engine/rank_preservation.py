"""
HRDD Risk Engine - Rank-Preservation Pass.

============================================================
PURPOSE
============================================================
Repairs rank inversions left by the nonlinear bias, cap and
floor stages. After the pass, sorting countries by baseline
risk descending gives a non-increasing managed-risk sequence.

============================================================
ALGORITHM
============================================================
Single fold over the baseline-descending list (stable sort,
so ties keep selection order), carrying the previous
corrected value:

    if managed_i >= previous:
        managed_i = max(risk_i * 0.25, previous - 0.5)

The pass is inherently sequential: each correction depends
on the corrected value before it.

============================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankEntry:
    """One country going into the pass."""

    iso_code: str
    baseline_risk: float
    managed_risk: float


@dataclass(frozen=True)
class RankPreservationResult:
    """
    Output of the pass.

    corrections maps every overwritten iso code to its managed
    risk before correction.
    """

    managed_risks: Dict[str, float] = field(default_factory=dict)
    corrections: Dict[str, float] = field(default_factory=dict)

    @property
    def corrected_count(self) -> int:
        return len(self.corrections)


def apply_rank_preservation(
    entries: Iterable[RankEntry],
    floor_ratio: float = 0.25,
    gap: float = 0.5,
) -> RankPreservationResult:
    """
    Enforce monotonic managed risk against baseline risk.

    Args:
        entries: Countries with their baseline and managed risk
        floor_ratio: Share of baseline risk that always remains
        gap: Minimum distance below the previous country on repair

    Returns:
        RankPreservationResult with corrected values in the input
        order and the audit map of corrections
    """
    items: List[RankEntry] = list(entries)
    ordered = sorted(items, key=lambda entry: entry.baseline_risk, reverse=True)

    corrected: Dict[str, float] = {}
    corrections: Dict[str, float] = {}
    previous: Optional[float] = None

    for entry in ordered:
        value = entry.managed_risk
        if previous is not None and value >= previous:
            repaired = max(entry.baseline_risk * floor_ratio, previous - gap)
            corrections[entry.iso_code] = value
            logger.debug(
                f"Rank correction {entry.iso_code}: {value:.3f} -> {repaired:.3f} "
                f"(previous {previous:.3f})"
            )
            value = repaired
        corrected[entry.iso_code] = value
        previous = value

    return RankPreservationResult(
        managed_risks={entry.iso_code: corrected[entry.iso_code] for entry in items},
        corrections=corrections,
    )
