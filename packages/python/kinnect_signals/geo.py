from __future__ import annotations

from kinnect_core.config import AU_STATES

METROS = (
    "sydney",
    "melbourne",
    "brisbane",
    "perth",
    "adelaide",
    "darwin",
    "hobart",
    "canberra",
)


def extract_state(location: str | None) -> str:
    """First Australian state/territory code found in a free-text location, else ''."""
    if not location:
        return ""
    tokens = location.lower().replace(",", " ").split()
    for state in AU_STATES:
        if state in tokens:
            return state
    return ""


def same_location(a: str | None, b: str | None) -> bool:
    return bool(a and b) and a.strip().lower() == b.strip().lower()


def same_state(a: str | None, b: str | None) -> bool:
    state = extract_state(a)
    return bool(state) and state == extract_state(b)


def is_metro(location: str) -> bool:
    lower = location.lower()
    return any(m in lower for m in METROS)


def states_in(location: str | None) -> set[str]:
    if not location:
        return set()
    tokens = set(location.lower().replace(",", " ").split())
    return {s for s in AU_STATES if s in tokens}


def mentions_state(location: str | None, state: str) -> bool:
    return bool(state) and state in states_in(location)
