import math
from typing import Iterable, Optional


def safe_div(n, d) -> float:
    """
    Guarded division for report math.

    Any zero, missing or non-finite input yields 0.0 so report payloads
    never carry NaN or infinity.
    """
    if n is None or d in (0, None):
        return 0.0
    try:
        value = float(n) / float(d)
    except (TypeError, ValueError, ZeroDivisionError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def safe_pct(n, d) -> float:
    """Percentage of n over d, clamped to [0, 100]."""
    return min(100.0, max(0.0, safe_div(n, d) * 100))


def round_half_up(value: float) -> int:
    """
    Integer rounding with .5 going up (2.5 -> 3, -2.5 -> -2).

    Built-in round() uses banker's rounding, which disagrees with the
    dashboards on exact halves.
    """
    return int(math.floor(value + 0.5))


def safe_mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return safe_div(sum(values), len(values))


def minutes_between(start, end) -> Optional[float]:
    if start is None or end is None:
        return None
    return (end - start).total_seconds() / 60
