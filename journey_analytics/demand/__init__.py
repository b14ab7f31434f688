from .predictor import (
    detect_demand_alerts,
    wow_growth_pct,
    build_reason,
    signal_score,
    NEW_DEMAND_GROWTH_PCT,
)

__all__ = [
    "detect_demand_alerts",
    "wow_growth_pct",
    "build_reason",
    "signal_score",
    "NEW_DEMAND_GROWTH_PCT",
]
