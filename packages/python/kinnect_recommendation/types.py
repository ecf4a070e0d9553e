from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List

from kinnect_core.errors import NotFound


class OutcomeStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    DEGRADED = "degraded"  # store failure or deadline; items are empty


@dataclass
class RecommendationOutcome:
    status: OutcomeStatus
    items: List[Any] = field(default_factory=list)
    detail: str | None = None

    @classmethod
    def ok(cls, items: List[Any]) -> "RecommendationOutcome":
        return cls(status=OutcomeStatus.OK, items=items)

    @classmethod
    def not_found(cls, detail: str) -> "RecommendationOutcome":
        return cls(status=OutcomeStatus.NOT_FOUND, detail=detail)

    @classmethod
    def degraded(cls, detail: str) -> "RecommendationOutcome":
        return cls(status=OutcomeStatus.DEGRADED, detail=detail)

    def raise_for_status(self) -> "RecommendationOutcome":
        if self.status is OutcomeStatus.NOT_FOUND:
            raise NotFound(self.detail or "subject not found")
        return self
