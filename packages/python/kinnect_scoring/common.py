from __future__ import annotations

from typing import List, Mapping, TypeVar

from kinnect_ranking.types import BreakdownBuilder, ScoredRecommendation
from kinnect_signals.confidence import confidence
from kinnect_signals.numeric import round2

T = TypeVar("T")


def finalize(
    item: T,
    builder: BreakdownBuilder,
    reasons: List[str],
    *,
    primary_signal: float,
    boost_factors: Mapping[str, float] | None = None,
) -> ScoredRecommendation[T]:
    """Apply boosts, round the total and attach confidence."""
    breakdown = builder.build().boosted(boost_factors or {})
    return ScoredRecommendation(
        item=item,
        score=round2(breakdown.total),
        reasons=reasons,
        confidence=confidence(len(reasons), primary_signal),
        breakdown=breakdown,
    )


def plural(n: int, noun: str) -> str:
    return f"{n} {noun}{'s' if n != 1 else ''}"
