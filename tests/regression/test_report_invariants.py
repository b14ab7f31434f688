import random
from datetime import datetime, timedelta, timezone

import pytest

from journey_analytics.core.models import ConversionEvent, ConversionType, SearchEvent
from journey_analytics.flow import analyze_session_flow, build_flow_graph
from journey_analytics.funnel import attribute_conversions, calculate_funnel_metrics
from journey_analytics.intent import classify_intent
from journey_analytics.quality import score_session, summarize_quality
from journey_analytics.sessions import reconstruct_sessions

BASE = datetime(2025, 1, 1, tzinfo=timezone.utc)
QUERIES = [
    "rtx 4070", "RTX 4070 Ti", "cheap gpu", "best cpu for gaming", "amd vs intel",
    "ryzen 7 7800x3d", "32gb ddr5", "gpu under 500", "monitor", "",
]


# -------------------------------------------------
# Fixtures
# -------------------------------------------------

@pytest.fixture(params=[1, 7, 42])
def random_stream(request):
    """
    Unordered search + conversion stream, seeded for repeatability.
    """
    rng = random.Random(request.param)
    searches, conversions = [], []

    for i in range(200):
        searches.append(SearchEvent(
            event_id=f"e{i}",
            session_id=rng.choice(["", "s1", "s2", "s3", "s4", "s5", "s6"]),
            timestamp=BASE + timedelta(seconds=rng.randint(0, 3600)),
            query=rng.choice(QUERIES),
            original_query="",
            results_count=rng.choice([0, 0, 3, 25, 100]),
        ))

    for i in range(30):
        conversions.append(ConversionEvent(
            session_id=rng.choice(["s1", "s2", "s3", "ghost"]),
            conversion_type=rng.choice(list(ConversionType)),
            timestamp=BASE + timedelta(seconds=rng.randint(0, 3600)),
            order_total=rng.choice([None, 0.0, 49.99, 1200.0]),
        ))

    rng.shuffle(searches)
    return searches, conversions


# -------------------------------------------------
# Invariants: MUST NEVER BREAK
# -------------------------------------------------

def test_sessions_partition_the_events(random_stream):
    searches, _ = random_stream
    valid = [s for s in searches if s.session_id and s.query]

    sessions = reconstruct_sessions(searches)

    assert len(sessions) == len({s.session_id for s in valid})
    assert sum(s.total_searches for s in sessions) == len(valid)
    ids = [e.event_id for s in sessions for e in s.searches]
    assert sorted(ids) == sorted(e.event_id for e in valid)


def test_sessions_are_time_ordered(random_stream):
    searches, _ = random_stream

    for session in reconstruct_sessions(searches):
        stamps = [e.timestamp for e in session.searches]
        assert stamps == sorted(stamps)
        assert session.duration >= 0
        assert session.unique_queries <= session.total_searches


def test_funnel_rates_in_range(random_stream):
    searches, conversions = random_stream
    sessions = attribute_conversions(reconstruct_sessions(searches), conversions)

    metrics = calculate_funnel_metrics(sessions, conversions)

    for rate in (
        metrics.search_to_view,
        metrics.view_to_cart,
        metrics.cart_to_checkout,
        metrics.search_to_checkout,
    ):
        assert 0 <= rate <= 100
    assert metrics.avg_time_to_cart >= 0
    assert metrics.avg_time_to_checkout >= 0


def test_flow_rates_in_range(random_stream):
    searches, conversions = random_stream
    sessions = attribute_conversions(reconstruct_sessions(searches), conversions)

    analysis = analyze_session_flow(sessions)
    graph = build_flow_graph(sessions)

    for rate in (analysis.conversion_rate, analysis.add_to_cart_rate, analysis.abandonment_rate):
        assert 0 <= rate <= 100
    assert sum(analysis.behavior_breakdown.values()) == analysis.total_sessions
    assert len(graph.links) <= 50


def test_quality_scores_and_distribution():
    rng = random.Random(3)
    scores = [
        score_session(
            rng.uniform(0, 2000),
            rng.randint(0, 12),
            rng.randint(0, 40),
            rng.randint(0, 8),
            rng.random() < 0.3,
        )
        for _ in range(500)
    ]

    assert all(isinstance(s, int) and 0 <= s <= 100 for s in scores)

    report = summarize_quality(scores)
    assert sum(report.distribution.values()) == report.sample == 500
    assert report.median_score == sorted(scores)[250]


@pytest.mark.parametrize("query", QUERIES)
def test_intent_classification_is_idempotent(query):
    assert classify_intent(query) == classify_intent(query)
