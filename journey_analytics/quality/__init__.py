from .scorer import (
    score_session,
    score_session_activity,
    score_sessions,
    score_distribution,
    summarize_quality,
    DISTRIBUTION_BUCKETS,
)
from .activity import tally_session_activity

__all__ = [
    "score_session",
    "score_session_activity",
    "score_sessions",
    "score_distribution",
    "summarize_quality",
    "DISTRIBUTION_BUCKETS",
    "tally_session_activity",
]
