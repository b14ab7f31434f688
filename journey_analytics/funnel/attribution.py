"""
Revenue Attribution

Ties conversion events back to the searches that produced them and
aggregates revenue per search term and per product.
"""

from collections import defaultdict
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from journey_analytics.core.contracts import normalize_conversion_events
from journey_analytics.core.counters import normalize_query
from journey_analytics.core.kpi_utils import safe_div, safe_pct
from journey_analytics.core.models import (
    ConversionEvent,
    ConversionType,
    ProductConversion,
    SearchEvent,
    SearchTermRevenue,
    Session,
)

TOP_PRODUCTS_LIMIT = 10


# =====================================================
# SESSION ATTRIBUTION
# =====================================================

def _attribution_target(searches: List[SearchEvent], conversion: ConversionEvent) -> SearchEvent:
    """
    Latest search at or before the conversion, preferring one whose query
    matches the conversion's search query. Conversions stamped before the
    first search land on the first search.
    """
    prior = [s for s in searches if s.timestamp <= conversion.timestamp]
    pool = prior or searches[:1]

    if conversion.search_query:
        key = normalize_query(conversion.search_query)
        matching = [s for s in pool if normalize_query(s.query) == key]
        if matching:
            return matching[-1]

    return pool[-1]


def _earliest(current, candidate):
    if current is None:
        return candidate
    return min(current, candidate)


def _attribute_session(session: Session, conversions: List[ConversionEvent]) -> Session:
    searches = [replace(s) for s in session.searches]
    cart_at = session.cart_at
    checkout_at = session.checkout_at

    for conversion in sorted(conversions, key=lambda c: c.timestamp):
        target = _attribution_target(searches, conversion)
        target.converted_at = _earliest(target.converted_at, conversion.timestamp)

        if conversion.conversion_type is ConversionType.CHECKOUT:
            target.checkout_completed = True
            if conversion.order_total:
                target.order_total = (target.order_total or 0.0) + conversion.order_total
            checkout_at = _earliest(checkout_at, conversion.timestamp)
        else:
            target.added_to_cart = True
            cart_at = _earliest(cart_at, conversion.timestamp)

    return replace(
        session,
        searches=searches,
        converted=session.converted or any(s.checkout_completed for s in searches),
        added_to_cart=session.added_to_cart or any(s.added_to_cart for s in searches),
        cart_at=cart_at,
        checkout_at=checkout_at,
    )


def attribute_conversions(
    sessions: Iterable[Session],
    conversions: Iterable[Any],
) -> List[Session]:
    """
    Annotate sessions with their conversion events (joined on session id).

    Returns new Session objects; the inputs are left untouched.
    Conversions whose session is unknown are ignored here.
    """
    by_session: Dict[str, List[ConversionEvent]] = defaultdict(list)
    for conversion in normalize_conversion_events(conversions):
        by_session[conversion.session_id].append(conversion)

    attributed = []
    for session in sessions:
        matched = by_session.get(session.session_id)
        if matched and session.searches:
            attributed.append(_attribute_session(session, matched))
        else:
            attributed.append(session)
    return attributed


# =====================================================
# SEARCH TERM REVENUE
# =====================================================

def calculate_search_term_revenue(sessions: Iterable[Session]) -> List[SearchTermRevenue]:
    """
    Revenue per normalized search term.

    Only terms that produced revenue are returned, highest revenue first.
    """
    terms: Dict[str, Dict[str, float]] = {}

    for session in sessions:
        for search in session.searches:
            key = normalize_query(search.query)
            if not key:
                continue
            data = terms.setdefault(key, {"searches": 0, "conversions": 0, "revenue": 0.0})
            data["searches"] += 1

            if search.checkout_completed and search.order_total:
                data["conversions"] += 1
                data["revenue"] += search.order_total

    results = [
        SearchTermRevenue(
            query=query,
            search_count=int(data["searches"]),
            conversions=int(data["conversions"]),
            conversion_rate=safe_pct(data["conversions"], data["searches"]),
            total_revenue=data["revenue"],
            avg_revenue=safe_div(data["revenue"], data["conversions"]),
            revenue_per_search=safe_div(data["revenue"], data["searches"]),
        )
        for query, data in terms.items()
    ]

    results = [r for r in results if r.total_revenue > 0]
    results.sort(key=lambda r: r.total_revenue, reverse=True)
    return results


# =====================================================
# PRODUCTS
# =====================================================

def get_top_converting_products(
    conversions: Iterable[Any],
    limit: Optional[int] = TOP_PRODUCTS_LIMIT,
) -> List[ProductConversion]:
    products: Dict[str, Dict[str, Any]] = {}

    for conversion in normalize_conversion_events(conversions):
        if conversion.conversion_type is not ConversionType.CHECKOUT:
            continue
        for product in conversion.products:
            data = products.setdefault(product.id, {"name": product.name, "count": 0, "revenue": 0.0})
            data["count"] += 1
            data["revenue"] += product.price

    ranked = sorted(
        (
            ProductConversion(
                product_id=product_id,
                product_name=data["name"],
                conversion_count=data["count"],
                total_revenue=data["revenue"],
            )
            for product_id, data in products.items()
        ),
        key=lambda p: p.conversion_count,
        reverse=True,
    )
    return ranked[:limit] if limit else ranked
