"""
Session Flow Analyzer

Pattern mining over reconstructed sessions: recurring search paths,
paths that end in checkout, and the behavior mix.
"""

from collections import Counter
from typing import Dict, Iterable, List

from journey_analytics.core.kpi_utils import safe_div, safe_pct
from journey_analytics.core.models import (
    ConversionPath,
    PatternStat,
    Session,
    SessionBehavior,
    SessionFlowAnalysis,
)
from journey_analytics.flow.behavior import classify_session_behavior

TOP_PATTERNS = 10
TOP_CONVERSION_PATHS = 10


def find_common_patterns(sessions: Iterable[Session], limit: int = TOP_PATTERNS) -> List[PatternStat]:
    counts: Dict[str, Dict[str, int]] = {}
    for session in sessions:
        data = counts.setdefault(session.pattern, {"count": 0, "conversions": 0})
        data["count"] += 1
        if session.converted:
            data["conversions"] += 1

    stats = [
        PatternStat(
            pattern=pattern,
            count=data["count"],
            conversion_rate=safe_pct(data["conversions"], data["count"]),
        )
        for pattern, data in counts.items()
    ]
    stats.sort(key=lambda s: s.count, reverse=True)
    return stats[:limit]


def find_top_conversion_paths(
    sessions: Iterable[Session],
    limit: int = TOP_CONVERSION_PATHS,
) -> List[ConversionPath]:
    paths = Counter(s.pattern for s in sessions if s.converted)
    ranked = sorted(paths.items(), key=lambda item: item[1], reverse=True)
    return [ConversionPath(path=path, conversions=count) for path, count in ranked[:limit]]


def behavior_breakdown(sessions: Iterable[Session]) -> Dict[str, int]:
    """Session count per behavior label; every label is present."""
    breakdown = {behavior.value: 0 for behavior in SessionBehavior}
    for session in sessions:
        breakdown[classify_session_behavior(session).value] += 1
    return breakdown


def analyze_session_flow(
    sessions: Iterable[Session],
    top_patterns: int = TOP_PATTERNS,
    top_paths: int = TOP_CONVERSION_PATHS,
) -> SessionFlowAnalysis:
    sessions = list(sessions or [])
    if not sessions:
        return SessionFlowAnalysis(behavior_breakdown=behavior_breakdown([]))

    total = len(sessions)
    total_searches = sum(s.total_searches for s in sessions)
    converted = sum(1 for s in sessions if s.converted)
    carted = sum(1 for s in sessions if s.added_to_cart)
    abandoned = sum(1 for s in sessions if not s.converted and not s.added_to_cart)
    total_duration_ms = sum(s.duration for s in sessions)

    return SessionFlowAnalysis(
        total_sessions=total,
        avg_searches_per_session=safe_div(total_searches, total),
        conversion_rate=safe_pct(converted, total),
        add_to_cart_rate=safe_pct(carted, total),
        abandonment_rate=safe_pct(abandoned, total),
        avg_session_duration=safe_div(total_duration_ms, total) / 60000,
        common_patterns=find_common_patterns(sessions, top_patterns),
        top_conversion_paths=find_top_conversion_paths(sessions, top_paths),
        behavior_breakdown=behavior_breakdown(sessions),
    )
