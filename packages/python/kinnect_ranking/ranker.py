from __future__ import annotations

from typing import Iterable, List, TypeVar

from .types import ScoredRecommendation

T = TypeVar("T")


def rank_and_paginate(
    scored: Iterable[ScoredRecommendation[T]],
    *,
    min_score: float,
    offset: int = 0,
    limit: int | None = None,
) -> List[ScoredRecommendation[T]]:
    """
    Threshold, order and slice a fully scored candidate list.

    `sorted` is stable, so equal scores keep candidate-generation order.
    """
    kept = [r for r in scored if r.score >= min_score]
    kept.sort(key=lambda r: r.score, reverse=True)
    end = None if limit is None else offset + limit
    return kept[offset:end]
