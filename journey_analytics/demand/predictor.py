"""
Predictive Demand Detector
--------------------------
Flags queries whose search volume is rising week over week.

Rules:
- Current window is [now - days, now], previous is [now - 2*days, now - days)
- Queries are compared after trim + lowercase
- A query with no previous-window searches gets the 100% "new demand" growth
- Inventory lookups are best-effort: a failure or timeout leaves the level empty

Guarantees:
- At most max_alerts alerts, ranked by signal strength (stable on ties)
- Never raises because of an inventory lookup
"""

import asyncio
import inspect
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Union

from journey_analytics.core.contracts import parse_timestamp, query_observation
from journey_analytics.core.counters import QueryCounter
from journey_analytics.core.kpi_utils import round_half_up
from journey_analytics.core.models import PredictiveAlert

log = logging.getLogger(__name__)

NEW_DEMAND_GROWTH_PCT = 100.0
ZERO_RESULT_WEIGHT = 5
MAX_ALERTS = 20

InventoryLookupFn = Callable[[str], Union[Awaitable[Optional[int]], Optional[int]]]


# =====================================================
# WINDOW COUNTS
# =====================================================

def _window_counts(searches, start: datetime, prev_start: datetime, now: datetime):
    current, previous, zero_results = QueryCounter(), QueryCounter(), QueryCounter()

    for record in searches or []:
        observed = query_observation(record)
        if observed is None:
            continue
        query, timestamp, results_count = observed
        if start <= timestamp <= now:
            current.add(query)
            if results_count == 0:
                zero_results.add(query)
        elif prev_start <= timestamp < start:
            previous.add(query)

    return current, previous, zero_results


def _zero_result_counts(events, start: datetime, now: datetime) -> QueryCounter:
    counts = QueryCounter()
    for record in events or []:
        observed = query_observation(record)
        if observed is None:
            continue
        query, timestamp, _ = observed
        if start <= timestamp <= now:
            counts.add(query)
    return counts


def wow_growth_pct(current: int, previous: int) -> float:
    if previous > 0:
        return (current - previous) / previous * 100
    return NEW_DEMAND_GROWTH_PCT


# =====================================================
# INVENTORY
# =====================================================

def _as_level(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


async def _lookup_inventory(
    inventory_lookup: Optional[InventoryLookupFn],
    query: str,
    timeout: float,
) -> Optional[int]:
    if inventory_lookup is None:
        return None

    try:
        result = inventory_lookup(query)
        if inspect.isawaitable(result):
            result = await asyncio.wait_for(result, timeout=timeout)
        return _as_level(result)
    except asyncio.TimeoutError:
        log.warning("Inventory lookup timed out after %.1fs for '%s'", timeout, query)
    except Exception as e:
        log.warning("Inventory lookup failed for '%s': %s", query, e)
    return None


def build_reason(alert: PredictiveAlert, days: int) -> str:
    parts = [
        f"{alert.period_searches} searches in {days}d",
        f"{round_half_up(alert.wow_growth_pct)}% WoW growth",
    ]
    if alert.zero_result_count > 0:
        parts.append(f"{alert.zero_result_count} zero-result events")
    if alert.inventory_level is not None:
        parts.append(f"inventory={alert.inventory_level}")
    return "; ".join(parts)


def signal_score(alert: PredictiveAlert) -> float:
    return alert.period_searches + alert.wow_growth_pct + alert.zero_result_count * ZERO_RESULT_WEIGHT


# =====================================================
# DETECTION
# =====================================================

async def detect_demand_alerts(
    searches: Iterable[Any],
    *,
    now=None,
    days: int = 7,
    min_searches: int = 10,
    min_wow_growth_pct: float = 50,
    inventory_lookup: Optional[InventoryLookupFn] = None,
    zero_result_events: Optional[Iterable[Any]] = None,
    lookup_timeout: float = 8.0,
    max_alerts: int = MAX_ALERTS,
) -> List[PredictiveAlert]:
    now = parse_timestamp(now) or datetime.now(timezone.utc)
    start = now - timedelta(days=days)
    prev_start = start - timedelta(days=days)

    current, previous, zero_results = _window_counts(searches, start, prev_start, now)
    if zero_result_events is not None:
        zero_results = _zero_result_counts(zero_result_events, start, now)

    candidates = []
    for query, count in current.items():
        if count < min_searches:
            continue
        growth = wow_growth_pct(count, previous.count(query))
        if growth < min_wow_growth_pct:
            continue
        candidates.append(PredictiveAlert(
            query=query,
            period_searches=count,
            wow_growth_pct=growth,
            zero_result_count=zero_results.count(query),
        ))

    if not candidates:
        return []

    levels = await asyncio.gather(*[
        _lookup_inventory(inventory_lookup, alert.query, lookup_timeout)
        for alert in candidates
    ])

    for alert, level in zip(candidates, levels):
        alert.inventory_level = level
        alert.reason = build_reason(alert, days)

    candidates.sort(key=signal_score, reverse=True)
    log.info("Demand detector: %d alert(s) from %d candidate queries", min(len(candidates), max_alerts), len(current))
    return candidates[:max_alerts]
