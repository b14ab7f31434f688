from datetime import datetime, timedelta, timezone

import pytest

from journey_analytics.core.models import SessionActivity
from journey_analytics.quality import (
    DISTRIBUTION_BUCKETS,
    score_session,
    score_session_activity,
    summarize_quality,
    tally_session_activity,
)

T0 = datetime(2025, 1, 30, 10, 0, tzinfo=timezone.utc)


# -------------------------------------------------
# Per-session score
# -------------------------------------------------

def test_saturated_session_reaches_the_ceiling():
    assert score_session(600, 5, 10, frustration_signal_count=0, converted=True) == 90


def test_components_saturate():
    assert score_session(6000, 50, 100, converted=True) == 90


def test_empty_session_scores_zero():
    assert score_session(0, 0, 0) == 0


def test_frustration_penalty_is_capped():
    assert score_session(600, 5, 10, frustration_signal_count=3) == 64
    assert score_session(600, 5, 10, frustration_signal_count=50) == 60


def test_score_never_negative():
    assert score_session(0, 0, 0, frustration_signal_count=5) == 0


def test_half_rounds_up():
    # 300s -> 12.5 points
    assert score_session(300, 0, 0) == 13
    # 60s + 1 page + 2 actions - 1 frustration -> 9.5
    assert score_session(60, 1, 2, frustration_signal_count=1) == 10


def test_score_from_activity():
    activity = SessionActivity(
        session_id="s1",
        duration_seconds=300,
        page_count=4,
        action_count=5,
        converted=True,
    )

    assert score_session_activity(activity) == 61


# -------------------------------------------------
# Aggregate report
# -------------------------------------------------

def test_upper_median_convention():
    report = summarize_quality([40, 10, 30, 20])

    assert report.median_score == 30
    assert report.avg_score == 25
    assert report.sample == 4


def test_average_rounds_half_up():
    assert summarize_quality([1, 2]).avg_score == 2


def test_distribution_buckets():
    report = summarize_quality([0, 19, 20, 59, 80, 100], period=30)

    assert report.distribution == {
        "0-20": 2,
        "20-40": 1,
        "40-60": 1,
        "60-80": 0,
        "80-100": 2,
    }
    assert sum(report.distribution.values()) == report.sample
    assert report.period == 30


def test_empty_report():
    report = summarize_quality([], period=7)

    assert report.avg_score == 0
    assert report.median_score == 0
    assert report.sample == 0
    assert report.distribution == {bucket: 0 for bucket in DISTRIBUTION_BUCKETS}


def test_report_payload():
    payload = summarize_quality([50]).to_payload()

    assert payload["avgScore"] == 50
    assert payload["medianScore"] == 50
    assert payload["distribution"]["40-60"] == 1


# -------------------------------------------------
# Activity tally from raw events
# -------------------------------------------------

def _event(sid, etype, minutes, page="/search"):
    return {
        "sessionId": sid,
        "eventType": etype,
        "timestamp": (T0 + timedelta(minutes=minutes)).isoformat(),
        "page": page,
    }


def test_tally_session_activity():
    events = [
        _event("q1", "page_view", 0, "/a"),
        _event("q1", "page_view", 1, "/b"),
        _event("q1", "page_view", 2, "/a"),
        _event("q1", "frustration_signal", 3, ""),
        _event("q1", "purchase_complete", 10, "/checkout"),
        _event("q2", "page_view", 5, "/a"),
    ]

    q1, q2 = tally_session_activity(events)

    assert q1.session_id == "q1"
    assert q1.duration_seconds == 600
    assert q1.page_count == 3
    assert q1.action_count == 5
    assert q1.frustration_signal_count == 1
    assert q1.converted is True
    assert score_session_activity(q1) == 68

    assert q2.duration_seconds == 0
    assert q2.converted is False
    assert score_session_activity(q2) == 7


def test_tally_uses_configured_event_types():
    events = [
        _event("q1", "rage_click", 0),
        _event("q1", "order_placed", 1),
    ]

    (activity,) = tally_session_activity(
        events, frustration_type="rage_click", conversion_types=["order_placed"]
    )

    assert activity.frustration_signal_count == 1
    assert activity.converted is True


def test_tally_empty():
    assert tally_session_activity([]) == []


@pytest.mark.parametrize("score", [0, 13, 37, 61, 90])
def test_scores_are_integers_in_range(score):
    report = summarize_quality([score])

    assert isinstance(report.median_score, int)
    assert 0 <= report.avg_score <= 100
