from datetime import datetime, timezone

import pytest

from journey_analytics.core.contracts import (
    normalize_raw_event,
    parse_timestamp,
    search_event_from_raw,
)
from journey_analytics.core.errors import ValidationError
from journey_analytics.core.models import RawEvent
from journey_analytics.sessions import reconstruct_sessions, PATTERN_SEPARATOR


def test_groups_by_session_and_orders_by_time(make_search):
    events = [
        make_search("b", "monitor", minutes=5),
        make_search("a", "gpu", minutes=2),
        make_search("a", "rtx 4070", minutes=1),
        make_search("b", "144hz monitor", minutes=3),
    ]

    sessions = reconstruct_sessions(events)

    assert [s.session_id for s in sessions] == ["a", "b"]
    a, b = sessions
    assert [e.query for e in a.searches] == ["rtx 4070", "gpu"]
    assert [e.query for e in b.searches] == ["144hz monitor", "monitor"]


def test_equal_timestamps_keep_input_order(make_search):
    events = [
        make_search("a", "first", minutes=1),
        make_search("a", "second", minutes=1),
        make_search("a", "third", minutes=1),
    ]

    session = reconstruct_sessions(events)[0]

    assert [e.query for e in session.searches] == ["first", "second", "third"]


def test_duration_in_milliseconds(make_search):
    events = [make_search("a", "gpu", minutes=0), make_search("a", "rtx", minutes=2.5)]

    session = reconstruct_sessions(events)[0]

    assert session.duration == 150_000
    assert session.start_time < session.end_time


def test_single_event_session_has_zero_duration(make_search):
    session = reconstruct_sessions([make_search("a", "gpu")])[0]

    assert session.duration == 0
    assert session.total_searches == 1
    assert session.pattern == "gpu"


def test_pattern_uses_first_five_original_queries(make_search):
    events = [
        make_search("a", f"q{i}", minutes=i, original_query=f"Q{i}")
        for i in range(7)
    ]

    session = reconstruct_sessions(events)[0]

    assert session.pattern == PATTERN_SEPARATOR.join(["Q0", "Q1", "Q2", "Q3", "Q4"])
    assert session.total_searches == 7


def test_unique_queries_ignore_case(make_search):
    events = [
        make_search("a", "GPU", minutes=0),
        make_search("a", "gpu", minutes=1),
        make_search("a", "cpu", minutes=2),
    ]

    session = reconstruct_sessions(events)[0]

    assert session.unique_queries == 2
    assert session.unique_queries <= session.total_searches


def test_conversion_flags_from_events(make_search):
    events = [
        make_search("a", "gpu", minutes=0),
        make_search("a", "rtx 4070", minutes=1, added_to_cart=True),
        make_search("b", "cpu", minutes=0, checkout_completed=True),
    ]

    a, b = reconstruct_sessions(events)

    assert a.added_to_cart and not a.converted
    assert b.converted and not b.added_to_cart


def test_records_without_session_id_are_dropped(make_search):
    events = [
        make_search("a", "gpu"),
        {"query": "orphan", "timestamp": "2025-01-30T10:00:00Z"},
        {"sessionId": "", "query": "blank", "timestamp": "2025-01-30T10:00:00Z"},
    ]

    sessions = reconstruct_sessions(events)

    assert [s.session_id for s in sessions] == ["a"]


def test_accepts_mappings_and_mixed_timestamp_formats():
    records = [
        {"sessionId": "a", "timestamp": 1738231200000, "eventData": {"query": "gpu"}},
        {"session_id": "a", "timestamp": {"_seconds": 1738231260}, "query": "rtx 4070"},
        {"sessionId": "a", "timestamp": "2025-01-30T10:02:00+00:00", "query": "rtx 4070 ti"},
    ]

    session = reconstruct_sessions(records)[0]

    assert [e.query for e in session.searches] == ["gpu", "rtx 4070", "rtx 4070 ti"]
    assert session.start_time == datetime(2025, 1, 30, 10, 0, tzinfo=timezone.utc)
    assert session.duration == 120_000


def test_user_id_from_first_event(make_search):
    events = [
        make_search("a", "rtx", minutes=1, user_id="late"),
        make_search("a", "gpu", minutes=0, user_id="early"),
    ]

    assert reconstruct_sessions(events)[0].user_id == "early"


def test_empty_input():
    assert reconstruct_sessions([]) == []
    assert reconstruct_sessions(None) == []


def test_search_event_from_raw_reads_event_data():
    raw = RawEvent(
        event_id="e1",
        session_id="s1",
        timestamp=datetime(2025, 1, 30, tzinfo=timezone.utc),
        event_type="search",
        event_data={
            "query": "rtx 4070",
            "originalQuery": "RTX 4070",
            "category": "gpu",
            "resultsCount": 12,
            "added_to_cart": "true",
        },
    )

    search = search_event_from_raw(raw)

    assert search.query == "rtx 4070"
    assert search.original_query == "RTX 4070"
    assert search.category == "gpu"
    assert search.results_count == 12
    assert search.added_to_cart is True
    assert search.checkout_completed is False


def test_original_query_falls_back_to_query():
    search = search_event_from_raw(
        {"sessionId": "s1", "timestamp": "2025-01-30T10:00:00Z", "query": "gpu"}
    )

    assert search.original_query == "gpu"


def test_strict_mode_rejects_incomplete_records():
    record = {"sessionId": "s1", "timestamp": "2025-01-30T10:00:00Z", "query": ""}

    assert search_event_from_raw(record) is None
    with pytest.raises(ValidationError) as exc:
        search_event_from_raw(record, strict=True)
    assert exc.value.field == "query"


def test_malformed_store_timestamp_is_skipped():
    records = [
        {"sessionId": "a", "query": "rtx", "timestamp": {"_seconds": "not-a-number"}},
        {"sessionId": "b", "query": "rtx", "timestamp": {"_seconds": 1738231200, "_nanoseconds": 0}},
    ]

    sessions = reconstruct_sessions(records)

    assert [s.session_id for s in sessions] == ["b"]
    assert parse_timestamp({"_seconds": "soon"}) is None
    assert parse_timestamp({"_seconds": 1, "_nanoseconds": "x"}) is None


def test_empty_cells_read_as_absent():
    nan = float("nan")
    records = [
        {
            "sessionId": "a", "timestamp": "2025-01-30T10:00:00Z", "query": "rtx 4070",
            "checkoutCompleted": True, "addedToCart": True, "eventData": nan,
        },
        {
            "sessionId": "b", "timestamp": "2025-01-30T10:05:00Z", "query": nan,
            "checkoutCompleted": nan, "addedToCart": nan, "eventData": {"query": "rtx 4080"},
        },
    ]

    a, b = reconstruct_sessions(records)

    assert a.converted is True and a.added_to_cart is True
    assert b.converted is False
    assert b.added_to_cart is False
    assert b.searches[0].query == "rtx 4080"


def test_event_data_as_json_text():
    record = {
        "sessionId": "s1",
        "timestamp": "2025-01-30T10:00:00Z",
        "eventType": "search",
        "eventData": '{"query": "rtx 4070", "resultsCount": 12}',
    }

    search = search_event_from_raw(record)
    raw = normalize_raw_event(record)

    assert search.query == "rtx 4070"
    assert search.results_count == 12
    assert raw.event_data == {"query": "rtx 4070", "resultsCount": 12}


def test_flat_records_keep_their_fields_in_event_data():
    raw = normalize_raw_event({
        "sessionId": "s1",
        "timestamp": "2025-01-30T10:00:00Z",
        "eventType": "search",
        "query": "gpu",
        "resultsCount": 3,
        "eventData": {"query": "ignored", "category": "gpu"},
    })

    assert raw.event_data == {"query": "gpu", "resultsCount": 3, "category": "gpu"}
    assert search_event_from_raw(raw).query == "gpu"
