"""
Funnel Metrics

search -> view -> add to cart -> checkout, with revenue and
time-to-conversion figures.

Rules:
- stages are counted per search event, independently (not nested)
- every rate is a percentage in [0, 100]; a zero denominator gives 0
- revenue is the sum of checkout order totals
- time-to-conversion only averages sessions that carry a timestamp
"""

from typing import Any, Iterable, List, Optional

from journey_analytics.core.contracts import normalize_conversion_events
from journey_analytics.core.kpi_utils import minutes_between, safe_div, safe_mean, safe_pct
from journey_analytics.core.models import ConversionType, FunnelMetrics, Session


def _cart_time(session: Session):
    if session.cart_at is not None:
        return session.cart_at
    stamps = [s.converted_at for s in session.searches if s.added_to_cart and s.converted_at]
    return min(stamps) if stamps else None


def _checkout_time(session: Session):
    if session.checkout_at is not None:
        return session.checkout_at
    stamps = [s.converted_at for s in session.searches if s.checkout_completed and s.converted_at]
    return min(stamps) if stamps else None


def _avg_minutes_to(sessions: List[Session], flag: str, stamp) -> float:
    durations = []
    for session in sessions:
        if not getattr(session, flag):
            continue
        converted_at = stamp(session)
        minutes: Optional[float] = minutes_between(session.start_time, converted_at)
        if minutes is None:
            continue
        durations.append(max(0.0, minutes))
    return safe_mean(durations)


def calculate_funnel_metrics(
    sessions: Iterable[Session],
    conversions: Iterable[Any] = (),
) -> FunnelMetrics:
    sessions = list(sessions or [])
    searches = [s for session in sessions for s in session.searches]

    total_searches = len(searches)
    searches_with_results = sum(1 for s in searches if s.results_count > 0)
    added_to_cart = sum(1 for s in searches if s.added_to_cart)
    completed_checkout = sum(1 for s in searches if s.checkout_completed)

    checkout_conversions = [
        c for c in normalize_conversion_events(conversions)
        if c.conversion_type is ConversionType.CHECKOUT
    ]
    total_revenue = sum(c.order_total or 0.0 for c in checkout_conversions)

    return FunnelMetrics(
        total_searches=total_searches,
        searches_with_results=searches_with_results,
        added_to_cart=added_to_cart,
        completed_checkout=completed_checkout,
        search_to_view=safe_pct(searches_with_results, total_searches),
        view_to_cart=safe_pct(added_to_cart, searches_with_results),
        cart_to_checkout=safe_pct(completed_checkout, added_to_cart),
        search_to_checkout=safe_pct(completed_checkout, total_searches),
        total_revenue=total_revenue,
        avg_revenue_per_search=safe_div(total_revenue, total_searches),
        avg_revenue_per_conversion=safe_div(total_revenue, completed_checkout),
        avg_time_to_cart=_avg_minutes_to(sessions, "added_to_cart", _cart_time),
        avg_time_to_checkout=_avg_minutes_to(sessions, "converted", _checkout_time),
    )
