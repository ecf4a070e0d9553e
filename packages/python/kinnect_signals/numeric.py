import math


def clamp01(x: float) -> float:
    return 0.0 if x <= 0.0 else 1.0 if x >= 1.0 else x


# half-up to 2 dp, so 0.125 -> 0.13 (round() would give banker's 0.12)
def round2(x: float) -> float:
    return math.floor(x * 100 + 0.5) / 100
