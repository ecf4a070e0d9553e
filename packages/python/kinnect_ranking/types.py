from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Generic, List, Mapping, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FeatureContribution:
    feature: str  # "collaborative", "skills", "industry", "recency", ...
    value: float  # feature value (pre-weight), usually in [0, 1]
    weight: float  # weight used in this run
    contribution: float  # weight * value, after boost


@dataclass(frozen=True)
class ScoreBreakdown:
    features: Dict[str, FeatureContribution]  # keyed by feature name

    @property
    def total(self) -> float:
        return sum(fc.contribution for fc in self.features.values())

    def boosted(self, boost_factors: Mapping[str, float]) -> "ScoreBreakdown":
        if not boost_factors:
            return self
        return ScoreBreakdown(
            features={
                name: FeatureContribution(
                    feature=fc.feature,
                    value=fc.value,
                    weight=fc.weight,
                    contribution=fc.contribution * float(boost_factors.get(name, 1.0)),
                )
                for name, fc in self.features.items()
            }
        )


class BreakdownBuilder:
    """Accumulates weighted features for one candidate."""

    def __init__(self) -> None:
        self._features: Dict[str, FeatureContribution] = {}

    def add(self, feature: str, value: float, weight: float) -> float:
        contribution = float(weight) * float(value)
        self._features[feature] = FeatureContribution(
            feature=feature,
            value=float(value),
            weight=float(weight),
            contribution=contribution,
        )
        return contribution

    def flag(self, feature: str, on: bool, weight: float) -> bool:
        """Flat bonus: value 1.0 when `on`, recorded as 0.0 otherwise."""
        self.add(feature, 1.0 if on else 0.0, weight)
        return on

    def build(self) -> ScoreBreakdown:
        return ScoreBreakdown(features=dict(self._features))


@dataclass
class ScoredRecommendation(Generic[T]):
    item: T
    score: float  # rounded to 2 dp
    reasons: List[str] = field(default_factory=list)
    confidence: float = 0.0
    breakdown: ScoreBreakdown | None = None
