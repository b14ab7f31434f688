"""
Input Contracts
---------------
Normalization of raw records handed over by event stores.

Rules:
- Records may be RawEvent objects or plain mappings (camelCase or snake_case)
- Timestamps are normalized once, here, to timezone-aware UTC datetimes
- A record without a session id, query (for searches) or usable timestamp
  is skipped; strict=True raises ValidationError instead
- Lenient normalizers never raise on malformed-but-well-typed data
"""

import json
import logging
import math
import numbers
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Tuple

from dateutil import parser as date_parser

from journey_analytics.core.errors import ValidationError
from journey_analytics.core.models import (
    ConversionEvent,
    ConversionType,
    Product,
    RawEvent,
    SearchEvent,
)

log = logging.getLogger(__name__)


# =====================================================
# HELPERS
# =====================================================

def _missing(value) -> bool:
    """None and float NaN (what tabular loaders put in empty cells)."""
    return value is None or (isinstance(value, float) and math.isnan(value))


def _pick(data: Mapping, *keys, default=None):
    for key in keys:
        if key in data and not _missing(data[key]):
            return data[key]
    return default


def _as_bool(value) -> bool:
    if _missing(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "y"}
    return bool(value)


def _as_int(value, default: int = 0) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return int(number)


def _as_float(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


ENVELOPE_KEYS = frozenset({
    "eventId", "event_id", "id",
    "sessionId", "session_id",
    "userId", "user_id",
    "eventType", "event_type", "type",
    "timestamp", "createdAt", "created_at",
    "page", "pageUrl", "page_url",
    "eventData", "event_data",
})


def _event_data(record: Mapping) -> dict:
    """
    Event payload of a mapping record.

    eventData may arrive as JSON text (CSV exports). Top-level fields that
    are not part of the event envelope are folded in and win over eventData.
    """
    data = _pick(record, "eventData", "event_data", default={})
    if isinstance(data, str):
        try:
            data = json.loads(data) if data.strip() else {}
        except ValueError:
            log.debug("Ignoring undecodable eventData: %r", data[:80])
            data = {}
    merged = dict(data) if isinstance(data, Mapping) else {}
    merged.update({
        k: v for k, v in record.items()
        if k not in ENVELOPE_KEYS and not _missing(v)
    })
    return merged


def _skip(field: str, reason: str, strict: bool):
    if strict:
        raise ValidationError(field, reason)
    log.debug("Skipping record (%s: %s)", field, reason)
    return None


# =====================================================
# TIMESTAMPS
# =====================================================

def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Normalize a timestamp to an aware UTC datetime.

    Accepts datetime / pandas Timestamp, epoch milliseconds, ISO-8601
    strings and exported document-store timestamps ({"_seconds": ...}).
    Returns None when the value cannot be interpreted.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if hasattr(value, "to_pydatetime"):
            if value != value:  # NaT
                return None
            value = value.to_pydatetime()
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, bool):
        return None

    if isinstance(value, numbers.Real):
        value = float(value)
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, Mapping):
        seconds = _pick(value, "_seconds", "seconds")
        if seconds is None:
            return None
        nanos = _pick(value, "_nanoseconds", "nanoseconds", default=0)
        try:
            millis = float(seconds) * 1000 + float(nanos) / 1_000_000
        except (TypeError, ValueError):
            return None
        return parse_timestamp(millis)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = date_parser.isoparse(text)
        except ValueError:
            try:
                parsed = date_parser.parse(text)
            except (ValueError, OverflowError):
                return None
        return parse_timestamp(parsed)

    return None


# =====================================================
# RAW EVENTS
# =====================================================

def normalize_raw_event(record: Any, strict: bool = False) -> Optional[RawEvent]:
    if isinstance(record, RawEvent):
        if not record.session_id:
            return _skip("sessionId", "missing", strict)
        return record

    if not isinstance(record, Mapping):
        return _skip("record", f"unsupported type {type(record).__name__}", strict)

    session_id = _as_text(_pick(record, "sessionId", "session_id"))
    if not session_id:
        return _skip("sessionId", "missing", strict)

    timestamp = parse_timestamp(_pick(record, "timestamp", "createdAt", "created_at"))
    if timestamp is None:
        return _skip("timestamp", "missing or unparseable", strict)

    user_id = _as_text(_pick(record, "userId", "user_id")) or None

    return RawEvent(
        event_id=_as_text(_pick(record, "eventId", "event_id", "id")),
        session_id=session_id,
        timestamp=timestamp,
        event_type=_as_text(_pick(record, "eventType", "event_type", "type")),
        page=_as_text(_pick(record, "page", "pageUrl", "page_url")),
        event_data=_event_data(record),
        user_id=user_id,
    )


def normalize_raw_events(records: Iterable[Any]) -> List[RawEvent]:
    events = []
    for record in records or []:
        event = normalize_raw_event(record)
        if event is not None:
            events.append(event)
    return events


# =====================================================
# SEARCH EVENTS
# =====================================================

def _merged_fields(record: Any) -> Optional[dict]:
    """Flatten a record and its event data into one lookup mapping."""
    if isinstance(record, RawEvent):
        merged = dict(record.event_data)
        merged.update({
            "eventId": record.event_id,
            "sessionId": record.session_id,
            "timestamp": record.timestamp,
            "userId": merged.get("userId", record.user_id),
        })
        return merged

    if isinstance(record, Mapping):
        merged = _event_data(record)
        merged.update({
            k: v for k, v in record.items()
            if k in ENVELOPE_KEYS and k not in ("eventData", "event_data") and not _missing(v)
        })
        return merged

    return None


def search_event_from_raw(record: Any, strict: bool = False) -> Optional[SearchEvent]:
    """
    Project a raw event (or search document) onto a SearchEvent.

    The search fields may live at the top level or inside eventData.
    """
    if isinstance(record, SearchEvent):
        if not record.session_id:
            return _skip("sessionId", "missing", strict)
        if not record.query:
            return _skip("query", "missing", strict)
        return record

    data = _merged_fields(record)
    if data is None:
        return _skip("record", f"unsupported type {type(record).__name__}", strict)

    session_id = _as_text(_pick(data, "sessionId", "session_id"))
    if not session_id:
        return _skip("sessionId", "missing", strict)

    query = _as_text(_pick(data, "query", "searchQuery", "search_query"))
    if not query:
        return _skip("query", "missing", strict)

    timestamp = parse_timestamp(_pick(data, "timestamp", "createdAt", "created_at"))
    if timestamp is None:
        return _skip("timestamp", "missing or unparseable", strict)

    original_query = _as_text(_pick(data, "originalQuery", "original_query")) or query

    return SearchEvent(
        event_id=_as_text(_pick(data, "eventId", "event_id", "id")),
        session_id=session_id,
        timestamp=timestamp,
        query=query,
        original_query=original_query,
        category=_as_text(_pick(data, "category")),
        results_count=_as_int(_pick(data, "resultsCount", "results_count")),
        user_id=_as_text(_pick(data, "userId", "user_id")) or None,
        intent=_as_text(_pick(data, "intent")) or None,
        added_to_cart=_as_bool(_pick(data, "addedToCart", "added_to_cart", default=False)),
        checkout_completed=_as_bool(
            _pick(data, "checkoutCompleted", "checkout_completed", default=False)
        ),
        converted_at=parse_timestamp(_pick(data, "convertedAt", "converted_at")),
        order_total=_as_float(_pick(data, "orderTotal", "order_total")),
    )


def query_observation(record: Any) -> Optional[Tuple[str, datetime, int]]:
    """
    (query, timestamp, results_count) of a search-like record.

    Unlike search_event_from_raw, no session id is required: demand
    counting works on bare search logs.
    """
    if isinstance(record, SearchEvent):
        return record.query, record.timestamp, record.results_count

    data = _merged_fields(record)
    if data is None:
        return None

    query = _as_text(_pick(data, "query", "searchQuery", "search_query"))
    timestamp = parse_timestamp(_pick(data, "timestamp", "createdAt", "created_at"))
    if not query or timestamp is None:
        return None
    return query, timestamp, _as_int(_pick(data, "resultsCount", "results_count"))


def normalize_search_events(records: Iterable[Any]) -> List[SearchEvent]:
    searches = []
    for record in records or []:
        search = search_event_from_raw(record)
        if search is not None:
            searches.append(search)
    return searches


# =====================================================
# CONVERSION EVENTS
# =====================================================

def _conversion_type(value) -> Optional[ConversionType]:
    text = _as_text(value).lower()
    if text in ("add_to_cart", "addtocart", "cart"):
        return ConversionType.ADD_TO_CART
    if text in ("checkout", "purchase", "purchase_complete"):
        return ConversionType.CHECKOUT
    return None


def _products(value) -> List[Product]:
    products = []
    if not isinstance(value, (list, tuple)):
        return products
    for item in value:
        if isinstance(item, Product):
            products.append(item)
        elif isinstance(item, Mapping):
            products.append(Product(
                id=_as_text(_pick(item, "id", "productId", "product_id")),
                name=_as_text(_pick(item, "name", "productName", "product_name")),
                price=_as_float(_pick(item, "price")) or 0.0,
            ))
    return products


def normalize_conversion_event(record: Any, strict: bool = False) -> Optional[ConversionEvent]:
    if isinstance(record, ConversionEvent):
        return record

    data = _merged_fields(record)
    if data is None:
        return _skip("record", f"unsupported type {type(record).__name__}", strict)

    session_id = _as_text(_pick(data, "sessionId", "session_id"))
    if not session_id:
        return _skip("sessionId", "missing", strict)

    conversion_type = _conversion_type(
        _pick(data, "conversionType", "conversion_type", "eventType", "event_type")
    )
    if conversion_type is None and isinstance(record, RawEvent):
        conversion_type = _conversion_type(record.event_type)
    if conversion_type is None:
        return _skip("conversionType", "not add_to_cart or checkout", strict)

    timestamp = parse_timestamp(_pick(data, "timestamp", "createdAt", "created_at"))
    if timestamp is None:
        return _skip("timestamp", "missing or unparseable", strict)

    search_query = _as_text(_pick(data, "searchQuery", "search_query", "query")) or None

    return ConversionEvent(
        session_id=session_id,
        conversion_type=conversion_type,
        timestamp=timestamp,
        order_total=_as_float(_pick(data, "orderTotal", "order_total")),
        products=_products(_pick(data, "products", default=[])),
        search_query=search_query,
        event_id=_as_text(_pick(data, "eventId", "event_id", "id")),
        user_id=_as_text(_pick(data, "userId", "user_id")) or None,
    )


def normalize_conversion_events(records: Iterable[Any]) -> List[ConversionEvent]:
    conversions = []
    for record in records or []:
        conversion = normalize_conversion_event(record)
        if conversion is not None:
            conversions.append(conversion)
    return conversions
