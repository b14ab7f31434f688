"""
Journey Analytics Data Model
----------------------------
Every entity here is computed per report request and discarded once the
payload has been serialized. Nothing is persisted.

Payload rules:
- Python attributes are snake_case
- to_payload() emits camelCase keys (the dashboard contract)
- datetimes serialize as ISO-8601 strings, enums as their values
"""

import enum
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional


# =====================================================
# SERIALIZATION
# =====================================================

def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_payload(value: Any) -> Any:
    """
    Convert report objects into plain JSON-ready structures.

    Only dataclass field names are camel-cased; keys of plain dicts
    (event data, histograms) are kept as they are.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {
            _camel(f.name): to_payload(getattr(value, f.name))
            for f in fields(value)
        }
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(v) for v in value]
    return value


class PayloadMixin:
    def to_payload(self) -> Dict[str, Any]:
        return to_payload(self)


# =====================================================
# CLOSED VOCABULARIES
# =====================================================

class Intent(str, enum.Enum):
    RESEARCH = "research"
    COMPARISON = "comparison"
    PRICE_CHECKING = "price_checking"
    SPECIFIC_PRODUCT = "specific_product"


class Confidence(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConversionType(str, enum.Enum):
    ADD_TO_CART = "add_to_cart"
    CHECKOUT = "checkout"


class SessionBehavior(str, enum.Enum):
    CONVERTED = "Converted"
    ADDED_TO_CART = "Added to Cart"
    NARROWING = "Narrowing Search"
    BROADENING = "Broadening Search"
    SINGLE_SEARCH = "Single Search"
    EXPLORING = "Exploring Options"
    REPEATED = "Repeated Searches"


class FlowOutcome(str, enum.Enum):
    CHECKOUT = "Checkout"
    CART = "Cart"
    EXIT = "Exit"


# =====================================================
# RAW INPUTS
# =====================================================

@dataclass(frozen=True)
class RawEvent(PayloadMixin):
    event_id: str
    session_id: str
    timestamp: datetime
    event_type: str
    page: str = ""
    event_data: Dict[str, Any] = field(default_factory=dict)
    user_id: Optional[str] = None


@dataclass
class SearchEvent(PayloadMixin):
    event_id: str
    session_id: str
    timestamp: datetime
    query: str
    original_query: str
    category: str = ""
    results_count: int = 0
    user_id: Optional[str] = None
    intent: Optional[str] = None
    added_to_cart: bool = False
    checkout_completed: bool = False

    # Filled in by conversion attribution
    converted_at: Optional[datetime] = None
    order_total: Optional[float] = None


@dataclass
class Product(PayloadMixin):
    id: str
    name: str
    price: float = 0.0


@dataclass
class ConversionEvent(PayloadMixin):
    session_id: str
    conversion_type: ConversionType
    timestamp: datetime
    order_total: Optional[float] = None
    products: List[Product] = field(default_factory=list)
    search_query: Optional[str] = None
    event_id: str = ""
    user_id: Optional[str] = None


# =====================================================
# SESSIONS
# =====================================================

@dataclass
class Session(PayloadMixin):
    session_id: str
    searches: List[SearchEvent]
    start_time: datetime
    end_time: datetime
    duration: int  # milliseconds
    total_searches: int
    unique_queries: int
    converted: bool
    added_to_cart: bool
    pattern: str
    user_id: Optional[str] = None

    # Earliest attributed conversion per type
    cart_at: Optional[datetime] = None
    checkout_at: Optional[datetime] = None


# =====================================================
# INTENT
# =====================================================

@dataclass
class IntentResult(PayloadMixin):
    intent: Intent
    confidence: Confidence
    keywords: List[str] = field(default_factory=list)


# =====================================================
# FUNNEL
# =====================================================

@dataclass
class FunnelMetrics(PayloadMixin):
    total_searches: int = 0
    searches_with_results: int = 0
    added_to_cart: int = 0
    completed_checkout: int = 0

    # Percentages, 0-100
    search_to_view: float = 0.0
    view_to_cart: float = 0.0
    cart_to_checkout: float = 0.0
    search_to_checkout: float = 0.0

    total_revenue: float = 0.0
    avg_revenue_per_search: float = 0.0
    avg_revenue_per_conversion: float = 0.0

    # Minutes
    avg_time_to_cart: float = 0.0
    avg_time_to_checkout: float = 0.0


@dataclass
class SearchTermRevenue(PayloadMixin):
    query: str
    search_count: int
    conversions: int
    conversion_rate: float
    total_revenue: float
    avg_revenue: float
    revenue_per_search: float


@dataclass
class FunnelStage(PayloadMixin):
    stage: str
    count: int
    percentage: float
    dropoff: int


@dataclass
class ConversionTrendPoint(PayloadMixin):
    date: str
    search_count: int
    conversion_rate: float


@dataclass
class ProductConversion(PayloadMixin):
    product_id: str
    product_name: str
    conversion_count: int
    total_revenue: float


# =====================================================
# QUALITY
# =====================================================

@dataclass
class SessionActivity(PayloadMixin):
    session_id: str
    duration_seconds: int = 0
    page_count: int = 0
    action_count: int = 0
    frustration_signal_count: int = 0
    converted: bool = False


@dataclass
class QualityReport(PayloadMixin):
    avg_score: int = 0
    median_score: int = 0
    distribution: Dict[str, int] = field(default_factory=dict)
    sample: int = 0
    period: Optional[int] = None


# =====================================================
# FLOW
# =====================================================

@dataclass
class PatternStat(PayloadMixin):
    pattern: str
    count: int
    conversion_rate: float


@dataclass
class ConversionPath(PayloadMixin):
    path: str
    conversions: int


@dataclass
class SessionFlowAnalysis(PayloadMixin):
    total_sessions: int = 0
    avg_searches_per_session: float = 0.0
    conversion_rate: float = 0.0
    add_to_cart_rate: float = 0.0
    abandonment_rate: float = 100.0
    avg_session_duration: float = 0.0  # minutes
    common_patterns: List[PatternStat] = field(default_factory=list)
    top_conversion_paths: List[ConversionPath] = field(default_factory=list)
    behavior_breakdown: Dict[str, int] = field(default_factory=dict)


@dataclass
class FlowNode(PayloadMixin):
    id: str
    name: str


@dataclass
class FlowEdge(PayloadMixin):
    source: str
    target: str
    value: int


@dataclass
class FlowGraph(PayloadMixin):
    nodes: List[FlowNode] = field(default_factory=list)
    links: List[FlowEdge] = field(default_factory=list)


# =====================================================
# DEMAND
# =====================================================

@dataclass
class PredictiveAlert(PayloadMixin):
    query: str
    period_searches: int
    wow_growth_pct: float
    zero_result_count: int
    inventory_level: Optional[int] = None
    reason: str = ""
