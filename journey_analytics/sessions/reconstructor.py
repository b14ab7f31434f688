"""
Session Reconstructor

Groups an unordered stream of search events into time-ordered sessions.

Guarantees:
- one Session per distinct non-empty session id
- events inside a session are ascending by timestamp (ties keep input order)
- sessions come out ordered by their first event
"""

from datetime import timedelta
from typing import Any, Iterable, List

import pandas as pd

from journey_analytics.core.contracts import normalize_search_events
from journey_analytics.core.models import SearchEvent, Session

PATTERN_SEPARATOR = " → "
DEFAULT_PATTERN_LENGTH = 5


def build_pattern(searches: List[SearchEvent], length: int = DEFAULT_PATTERN_LENGTH) -> str:
    return PATTERN_SEPARATOR.join(s.original_query or s.query for s in searches[:length])


def _build_session(
    session_id: str,
    searches: List[SearchEvent],
    pattern_length: int,
) -> Session:
    start_time = searches[0].timestamp
    end_time = searches[-1].timestamp
    duration = max(0, (end_time - start_time) // timedelta(milliseconds=1))

    return Session(
        session_id=session_id,
        searches=searches,
        start_time=start_time,
        end_time=end_time,
        duration=int(duration),
        total_searches=len(searches),
        unique_queries=len({s.query.lower() for s in searches}),
        converted=any(s.checkout_completed for s in searches),
        added_to_cart=any(s.added_to_cart for s in searches),
        pattern=build_pattern(searches, pattern_length),
        user_id=searches[0].user_id,
    )


def reconstruct_sessions(
    events: Iterable[Any],
    pattern_length: int = DEFAULT_PATTERN_LENGTH,
) -> List[Session]:
    """
    Rebuild sessions from raw search events.

    Accepts SearchEvent / RawEvent objects or plain mappings. Records
    without a session id or query are dropped during normalization.
    """
    searches = normalize_search_events(events)
    if not searches:
        return []

    frame = pd.DataFrame({
        "session_id": [s.session_id for s in searches],
        "timestamp": [s.timestamp for s in searches],
        "position": range(len(searches)),
    })

    # mergesort is stable: equal timestamps keep arrival order
    frame = frame.sort_values(["timestamp", "position"], kind="mergesort")

    sessions: List[Session] = []
    for session_id, group in frame.groupby("session_id", sort=False):
        ordered = [searches[i] for i in group["position"]]
        sessions.append(_build_session(str(session_id), ordered, pattern_length))

    return sessions
