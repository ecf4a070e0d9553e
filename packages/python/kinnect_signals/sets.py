from __future__ import annotations

from typing import AbstractSet, Iterable


def jaccard(a: AbstractSet, b: AbstractSet) -> float:
    """|A ∩ B| / |A ∪ B|; two empty sets score 0, not 1."""
    if not a and not b:
        return 0.0
    return len(a & b) / len(a | b)


def lower_set(names: Iterable[str | None]) -> set[str]:
    return {n.strip().lower() for n in names if n and n.strip()}


def substring_matches(wanted: Iterable[str], offered: Iterable[str]) -> int:
    """
    Count entries of `wanted` that match any entry of `offered`, where a match is
    either string containing the other (case-insensitive).
    """
    offered_l = [o.lower() for o in offered if o]
    n = 0
    for w in wanted:
        if not w:
            continue
        wl = w.lower()
        if any(o in wl or wl in o for o in offered_l):
            n += 1
    return n


def contained_matches(wanted: Iterable[str], offered: Iterable[str]) -> int:
    """Count entries of `wanted` contained in any entry of `offered` (case-insensitive)."""
    offered_l = [o.lower() for o in offered if o]
    return sum(
        1 for w in wanted if w and any(w.lower() in o for o in offered_l)
    )
