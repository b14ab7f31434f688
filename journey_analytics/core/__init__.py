from .errors import AnalyticsError, DataFetchError, ValidationError
from .counters import QueryCounter, normalize_query
from .kpi_utils import safe_div, safe_pct, round_half_up
from .models import (
    RawEvent,
    SearchEvent,
    Session,
    ConversionEvent,
    ConversionType,
    Product,
    Intent,
    Confidence,
    IntentResult,
    FunnelMetrics,
    SessionBehavior,
    FlowOutcome,
    PredictiveAlert,
    to_payload,
)
from .contracts import (
    parse_timestamp,
    normalize_raw_event,
    normalize_raw_events,
    search_event_from_raw,
    normalize_search_events,
    normalize_conversion_event,
    normalize_conversion_events,
)

__all__ = [
    "AnalyticsError",
    "DataFetchError",
    "ValidationError",
    "QueryCounter",
    "normalize_query",
    "safe_div",
    "safe_pct",
    "round_half_up",
    "RawEvent",
    "SearchEvent",
    "Session",
    "ConversionEvent",
    "ConversionType",
    "Product",
    "Intent",
    "Confidence",
    "IntentResult",
    "FunnelMetrics",
    "SessionBehavior",
    "FlowOutcome",
    "PredictiveAlert",
    "to_payload",
    "parse_timestamp",
    "normalize_raw_event",
    "normalize_raw_events",
    "search_event_from_raw",
    "normalize_search_events",
    "normalize_conversion_event",
    "normalize_conversion_events",
]
