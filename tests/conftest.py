from datetime import datetime, timedelta, timezone

import pytest

from journey_analytics.core.models import ConversionEvent, ConversionType, Product, SearchEvent

T0 = datetime(2025, 1, 30, 10, 0, tzinfo=timezone.utc)
NOW = datetime(2025, 1, 31, tzinfo=timezone.utc)


def at(minutes: float) -> datetime:
    return T0 + timedelta(minutes=minutes)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_search():
    """
    SearchEvent factory; `minutes` is the offset from a fixed base time.
    """
    counter = {"n": 0}

    def _make(session_id, query, minutes=0, results=10, **extra):
        counter["n"] += 1
        return SearchEvent(
            event_id=f"e{counter['n']}",
            session_id=session_id,
            timestamp=at(minutes),
            query=query,
            original_query=extra.pop("original_query", query),
            results_count=results,
            **extra,
        )

    return _make


@pytest.fixture
def make_conversion():
    def _make(session_id, kind, minutes=0, total=None, query=None, products=None):
        return ConversionEvent(
            session_id=session_id,
            conversion_type=ConversionType(kind),
            timestamp=at(minutes),
            order_total=total,
            products=[Product(**p) for p in products or []],
            search_query=query,
        )

    return _make


@pytest.fixture
def raw_events():
    """
    Store-shaped records for three sessions:

    s1  two searches, add to cart, purchase (799.99)
    s2  one zero-result search and a frustration signal
    s3  the same comparison query twice
    """
    def event(eid, sid, etype, minutes, page="/search", **data):
        return {
            "eventId": eid,
            "sessionId": sid,
            "userId": f"user-{sid}",
            "eventType": etype,
            "timestamp": at(minutes).isoformat(),
            "page": page,
            "eventData": data,
        }

    return [
        event("e1", "s1", "search", 0, query="RTX 4070", resultsCount=50),
        event("e2", "s1", "page_view", 0.5, page="/product/rtx-4070"),
        event("e3", "s1", "search", 1, query="RTX 4070 Ti", resultsCount=20),
        event(
            "e4", "s1", "add_to_cart", 3,
            page="/product/rtx-4070-ti",
            searchQuery="rtx 4070 ti",
        ),
        event(
            "e5", "s1", "purchase_complete", 5,
            page="/checkout",
            searchQuery="rtx 4070 ti",
            orderTotal=799.99,
            products=[{"id": "gpu-4070ti", "name": "RTX 4070 Ti", "price": 799.99}],
        ),
        event("e6", "s2", "search", 10, query="cheap gpu", resultsCount=0),
        event("e7", "s2", "frustration_signal", 11),
        event("e8", "s3", "search", 20, query="amd vs intel", resultsCount=30),
        event("e9", "s3", "search", 22, query="amd vs intel", resultsCount=30),
    ]
