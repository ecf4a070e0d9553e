from datetime import datetime

DEFAULT_HALF_LIFE_DAYS = 14.0
CONTENT_HALF_LIFE_DAYS = 3.0


# signed day difference, b - a
def age_days(ts: datetime, now: datetime) -> float:
    return (now - ts).total_seconds() / 86400.0


# exponential half-life decay; future timestamps count as age 0
def half_life_decay(age: float, half_life_days: float = DEFAULT_HALF_LIFE_DAYS) -> float:
    if half_life_days <= 0:
        raise ValueError("half_life_days must be positive")
    return 0.5 ** (max(0.0, age) / half_life_days)


def time_decay(
    ts: datetime, now: datetime, half_life_days: float = DEFAULT_HALF_LIFE_DAYS
) -> float:
    return half_life_decay(age_days(ts, now), half_life_days)
