from .analyzer import (
    analyze_session_flow,
    find_common_patterns,
    find_top_conversion_paths,
    behavior_breakdown,
)
from .behavior import (
    classify_session_behavior,
    detect_narrowing_pattern,
    detect_broadening_pattern,
    BEHAVIOR_RULES,
)
from .graph import build_flow_graph, session_outcome

__all__ = [
    "analyze_session_flow",
    "find_common_patterns",
    "find_top_conversion_paths",
    "behavior_breakdown",
    "classify_session_behavior",
    "detect_narrowing_pattern",
    "detect_broadening_pattern",
    "BEHAVIOR_RULES",
    "build_flow_graph",
    "session_outcome",
]
