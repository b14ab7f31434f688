from typing import Any, Iterable, List, Sequence

import pandas as pd

from journey_analytics.core.contracts import normalize_raw_events
from journey_analytics.core.kpi_utils import round_half_up
from journey_analytics.core.models import SessionActivity

FRUSTRATION_EVENT_TYPE = "frustration_signal"
CONVERSION_EVENT_TYPES = ("build_complete", "purchase_complete")


def tally_session_activity(
    events: Iterable[Any],
    frustration_type: str = FRUSTRATION_EVENT_TYPE,
    conversion_types: Sequence[str] = CONVERSION_EVENT_TYPES,
) -> List[SessionActivity]:
    """
    Per-session scoring inputs aggregated from raw events.

    - action_count: every event of the session
    - frustration_signal_count: events of the frustration type
    - converted: at least one conversion-type event
    - page_count: distinct non-empty pages
    - duration_seconds: first to last event, rounded, never negative
    """
    raw = normalize_raw_events(events)
    if not raw:
        return []

    frame = pd.DataFrame({
        "session_id": [e.session_id for e in raw],
        "timestamp": [e.timestamp for e in raw],
        "event_type": [e.event_type for e in raw],
        "page": [e.page for e in raw],
    })
    frame["frustration"] = frame["event_type"] == frustration_type
    frame["conversion"] = frame["event_type"].isin(list(conversion_types))

    grouped = frame.groupby("session_id", sort=False).agg(
        first_seen=("timestamp", "min"),
        last_seen=("timestamp", "max"),
        actions=("event_type", "size"),
        frustration=("frustration", "sum"),
        converted=("conversion", "any"),
        pages=("page", lambda pages: pages[pages != ""].nunique()),
    )

    activities = []
    for session_id, row in grouped.iterrows():
        seconds = (row.last_seen - row.first_seen).total_seconds()
        activities.append(SessionActivity(
            session_id=str(session_id),
            duration_seconds=max(0, round_half_up(seconds)),
            page_count=int(row.pages),
            action_count=int(row.actions),
            frustration_signal_count=int(row.frustration),
            converted=bool(row.converted),
        ))
    return activities
