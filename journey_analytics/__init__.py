"""
Journey Analytics v1.2

Customer-journey analytics for storefront search and conversion
events: sessions, intents, funnel, quality, flow and demand alerts.
"""

from .__version__ import __version__

# Keep package init lightweight: the pipeline and CLI are imported explicitly

from .sessions import reconstruct_sessions
from .intent import classify_intent, get_intent_label, summarize_intents
from .funnel import (
    attribute_conversions,
    calculate_funnel_metrics,
    calculate_search_term_revenue,
)
from .quality import score_session, summarize_quality, tally_session_activity
from .flow import analyze_session_flow, build_flow_graph, classify_session_behavior
from .demand import detect_demand_alerts

__all__ = [
    "__version__",
    "reconstruct_sessions",
    "classify_intent",
    "get_intent_label",
    "summarize_intents",
    "attribute_conversions",
    "calculate_funnel_metrics",
    "calculate_search_term_revenue",
    "score_session",
    "summarize_quality",
    "tally_session_activity",
    "analyze_session_flow",
    "build_flow_graph",
    "classify_session_behavior",
    "detect_demand_alerts",
]
