from .numeric import clamp01, round2


def confidence(reason_count: int, primary_signal: float) -> float:
    """More reasons and a stronger primary signal mean more evidence behind a score."""
    reason_factor = min(max(reason_count, 0) / 5, 1.0) * 0.5
    signal_factor = clamp01(float(primary_signal)) * 0.5
    return round2(reason_factor + signal_factor)
