"""
Report Pipeline
---------------
Fetches raw events through the injected collaborators and runs the
analytics components over them.

Responsibilities:
- Fetch inputs concurrently (timeout + retry + empty fallback)
- Run sessions / funnel / quality / flow / demand / intent reports
- Cache finished payloads
- Attach a meta block (duration, memory) to each report

Explicitly does NOT:
- Hold state between reports (besides the cache)
- Format values for display
"""

import asyncio
import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from journey_analytics.config.engine_config import AnalyticsEngineConfig
from journey_analytics.config.loader import load_engine_config
from journey_analytics.core.contracts import normalize_conversion_events, parse_timestamp
from journey_analytics.core.counters import QueryCounter
from journey_analytics.core.models import ConversionEvent, RawEvent, Session, to_payload
from journey_analytics.demand.predictor import detect_demand_alerts
from journey_analytics.flow.analyzer import analyze_session_flow
from journey_analytics.flow.graph import build_flow_graph
from journey_analytics.funnel.attribution import (
    attribute_conversions,
    calculate_search_term_revenue,
    get_top_converting_products,
)
from journey_analytics.funnel.metrics import calculate_funnel_metrics
from journey_analytics.funnel.trends import get_conversion_trend, get_funnel_chart_data
from journey_analytics.intent.classifier import classify_intent, summarize_intents
from journey_analytics.monitoring.metrics import MetricsCollector
from journey_analytics.pipeline.collaborators import (
    Cache,
    EventStore,
    InventoryLookup,
    TTLCache,
    safe_fetch,
)
from journey_analytics.quality.activity import tally_session_activity
from journey_analytics.quality.scorer import score_sessions, summarize_quality
from journey_analytics.sessions.reconstructor import reconstruct_sessions

log = logging.getLogger("journey_analytics.pipeline")

REPORT_NAMES = ("sessions", "funnel", "quality", "flow", "demand", "intents")
TOP_CLASSIFIED_QUERIES = 20


@dataclass
class JourneyInputs:
    """Sessions with conversions attributed, plus the raw conversions."""
    sessions: List[Session] = field(default_factory=list)
    conversions: List[ConversionEvent] = field(default_factory=list)


def _resolve_config(config) -> AnalyticsEngineConfig:
    if config is None:
        return AnalyticsEngineConfig()
    if isinstance(config, AnalyticsEngineConfig):
        return config
    if isinstance(config, dict):
        engine = config.get("engine")
        if isinstance(engine, AnalyticsEngineConfig):
            return engine
        return load_engine_config(config)
    raise TypeError(f"Unsupported config type: {type(config).__name__}")


# =====================================================
# PIPELINE
# =====================================================

class AnalyticsPipeline:
    """
    Async report entry point over an EventStore.

    Every public report method returns a plain payload dict. Individual
    report methods let component errors propagate; full_report isolates
    sections so one failure never sinks the whole report.
    """

    def __init__(
        self,
        event_store: EventStore,
        inventory_lookup: Optional[InventoryLookup] = None,
        cache: Optional[Cache] = None,
        config=None,
    ):
        self.event_store = event_store
        self.inventory_lookup = inventory_lookup
        self.config = _resolve_config(config)

        if cache is None and self.config.cache.enabled:
            cache = TTLCache()
        self.cache = cache if self.config.cache.enabled else None

    # -------------------------------------------------
    # FETCHING
    # -------------------------------------------------
    async def _fetch(
        self,
        label: str,
        event_types: Optional[Sequence[str]],
        *,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        session_ids: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Any]:
        fetch_cfg = self.config.fetch

        def call():
            return self.event_store.query(
                event_types,
                session_ids=session_ids,
                since=since,
                until=until,
                limit=limit or fetch_cfg.limit,
            )

        return await safe_fetch(
            label,
            call,
            timeout=fetch_cfg.timeout_seconds,
            retries=fetch_cfg.retries,
            retry_delay=fetch_cfg.retry_delay_seconds,
        )

    def _conversion_records(self, events: List[Any]) -> List[ConversionEvent]:
        """Map configured event types onto add_to_cart / checkout."""
        cfg = self.config.events
        records = []
        for event in events:
            if not isinstance(event, RawEvent):
                records.append(event)
                continue
            if event.event_type in cfg.checkout_types:
                conversion_type = "checkout"
            elif event.event_type in cfg.add_to_cart_types:
                conversion_type = "add_to_cart"
            else:
                continue
            record = dict(event.event_data)
            record.update({
                "eventId": event.event_id,
                "sessionId": event.session_id,
                "timestamp": event.timestamp,
                "userId": record.get("userId", event.user_id),
                "conversionType": conversion_type,
            })
            records.append(record)
        return normalize_conversion_events(records)

    async def load_journey(self, days: Optional[int] = None, now=None) -> JourneyInputs:
        """Reconstruct sessions in the window and attribute their conversions."""
        now = _now(now)
        since = now - timedelta(days=days) if days else None

        searches, raw_conversions = await asyncio.gather(
            self._fetch("searches", self.config.events.search_types, since=since, until=now),
            self._fetch(
                "conversions",
                self.config.events.funnel_conversion_types,
                since=since,
                until=now,
            ),
        )
        sessions = reconstruct_sessions(searches, self.config.pattern_length)
        conversions = self._conversion_records(raw_conversions)
        return JourneyInputs(
            sessions=attribute_conversions(sessions, conversions),
            conversions=conversions,
        )

    # -------------------------------------------------
    # CACHING
    # -------------------------------------------------
    async def _cached(self, key: str, produce: Callable[[], Awaitable[Dict[str, Any]]]) -> Dict[str, Any]:
        if self.cache is not None:
            hit = self.cache.get(key)
            if hit is not None:
                log.debug("Cache hit: %s", key)
                return copy.deepcopy(hit)

        metrics = MetricsCollector()
        payload = await produce()
        payload["meta"] = metrics.collect()

        if self.cache is not None:
            self.cache.set(key, copy.deepcopy(payload), self.config.cache.ttl_ms)
        return payload

    # -------------------------------------------------
    # SECTION BUILDERS (pure, over loaded inputs)
    # -------------------------------------------------
    def _sessions_payload(self, journey: JourneyInputs) -> Dict[str, Any]:
        return {
            "totalSessions": len(journey.sessions),
            "sessions": to_payload(journey.sessions),
        }

    def _funnel_payload(self, journey: JourneyInputs, now: datetime) -> Dict[str, Any]:
        metrics = calculate_funnel_metrics(journey.sessions, journey.conversions)
        return {
            "metrics": metrics.to_payload(),
            "chart": to_payload(get_funnel_chart_data(metrics)),
            "searchTermRevenue": to_payload(calculate_search_term_revenue(journey.sessions)),
            "conversionTrend": to_payload(
                get_conversion_trend(journey.sessions, self.config.trend_days, now)
            ),
            "topProducts": to_payload(get_top_converting_products(journey.conversions)),
        }

    def _flow_payload(self, journey: JourneyInputs) -> Dict[str, Any]:
        flow_cfg = self.config.flow
        analysis = analyze_session_flow(journey.sessions, flow_cfg.top_patterns, flow_cfg.top_paths)
        graph = build_flow_graph(journey.sessions, flow_cfg.max_edges)
        return {
            "analysis": analysis.to_payload(),
            "graph": graph.to_payload(),
        }

    def _intents_payload(self, journey: JourneyInputs) -> Dict[str, Any]:
        queries = [search.query for s in journey.sessions for search in s.searches]
        counter = QueryCounter(queries)
        return {
            "summary": summarize_intents(queries),
            "topQueries": [
                {"query": query, "count": count, **classify_intent(query).to_payload()}
                for query, count in counter.most_common(TOP_CLASSIFIED_QUERIES)
            ],
        }

    # -------------------------------------------------
    # REPORTS
    # -------------------------------------------------
    async def session_report(self, days: Optional[int] = None, now=None) -> Dict[str, Any]:
        key = _key("sessions", days, now)
        now = _now(now)

        async def produce():
            return self._sessions_payload(await self.load_journey(days, now))

        return await self._cached(key, produce)

    async def funnel_report(self, days: Optional[int] = None, now=None) -> Dict[str, Any]:
        key = _key("funnel", days, now)
        now = _now(now)

        async def produce():
            return self._funnel_payload(await self.load_journey(days, now), now)

        return await self._cached(key, produce)

    async def flow_report(self, days: Optional[int] = None, now=None) -> Dict[str, Any]:
        key = _key("sessionFlow", days, now)
        now = _now(now)

        async def produce():
            return self._flow_payload(await self.load_journey(days, now))

        return await self._cached(key, produce)

    async def intent_report(self, days: Optional[int] = None, now=None) -> Dict[str, Any]:
        key = _key("searchIntents", days, now)
        now = _now(now)

        async def produce():
            return self._intents_payload(await self.load_journey(days, now))

        return await self._cached(key, produce)

    async def quality_report(self, days: Optional[int] = None, now=None) -> Dict[str, Any]:
        """Session quality over every event type in the last `days` days."""
        days = days or self.config.quality.days
        key = _key("sessionQuality", days, now)
        now = _now(now)

        async def produce():
            events = await self._fetch(
                "activity",
                None,
                since=now - timedelta(days=days),
                until=now,
                limit=self.config.quality.event_limit,
            )
            activities = tally_session_activity(
                events,
                frustration_type=self.config.events.frustration_type,
                conversion_types=self.config.events.conversion_types,
            )
            report = summarize_quality(score_sessions(activities), period=days)
            return report.to_payload()

        return await self._cached(key, produce)

    async def demand_report(self, days: Optional[int] = None, now=None) -> Dict[str, Any]:
        """
        Week-over-week demand alerts.

        Zero-result counts come from dedicated zero-result events when the
        store has any in the window, otherwise from searches that returned
        nothing.
        """
        demand_cfg = self.config.demand
        days = days or demand_cfg.days
        key = _key("predictiveAlerts", days, now)
        now = _now(now)

        async def produce():
            searches, zero_results = await asyncio.gather(
                self._fetch(
                    "demandSearches",
                    self.config.events.search_types,
                    since=now - timedelta(days=2 * days),
                    until=now,
                ),
                self._fetch(
                    "zeroResults",
                    [self.config.events.zero_result_type],
                    since=now - timedelta(days=days),
                    until=now,
                ),
            )
            alerts = await detect_demand_alerts(
                searches,
                now=now,
                days=days,
                min_searches=demand_cfg.min_searches,
                min_wow_growth_pct=demand_cfg.min_wow_growth_pct,
                inventory_lookup=self.inventory_lookup,
                zero_result_events=zero_results or None,
                lookup_timeout=demand_cfg.lookup_timeout_seconds,
                max_alerts=demand_cfg.max_alerts,
            )
            return {"period": days, "alerts": to_payload(alerts)}

        return await self._cached(key, produce)

    async def run(self, name: str, days: Optional[int] = None, now=None) -> Dict[str, Any]:
        runners = {
            "sessions": self.session_report,
            "funnel": self.funnel_report,
            "quality": self.quality_report,
            "flow": self.flow_report,
            "demand": self.demand_report,
            "intents": self.intent_report,
        }
        if name not in runners:
            raise ValueError(f"Unknown report '{name}'. Expected one of {', '.join(REPORT_NAMES)}")
        return await runners[name](days=days, now=now)

    async def full_report(self, days: Optional[int] = None, now=None) -> Dict[str, Any]:
        """
        Every section in one payload.

        The journey inputs are loaded once and shared by the sessions,
        funnel, flow and intent sections. A failing section contributes an
        empty payload and an entry in `errors`.
        """
        now = _now(now)
        metrics = MetricsCollector()
        errors: List[Dict[str, str]] = []

        journey, quality, demand = await asyncio.gather(
            _isolated("journey", self.load_journey(days, now), errors, JourneyInputs()),
            _isolated("quality", self.quality_report(days, now), errors, {}),
            _isolated("demand", self.demand_report(days, now), errors, {}),
        )

        report: Dict[str, Any] = {
            "generatedAt": now.isoformat(),
            "sessions": _isolated_sync("sessions", lambda: self._sessions_payload(journey), errors, {}),
            "funnel": _isolated_sync("funnel", lambda: self._funnel_payload(journey, now), errors, {}),
            "quality": quality,
            "flow": _isolated_sync("flow", lambda: self._flow_payload(journey), errors, {}),
            "demand": demand,
            "intents": _isolated_sync("intents", lambda: self._intents_payload(journey), errors, {}),
        }
        report["errors"] = errors
        report["meta"] = metrics.collect()
        return report


# =====================================================
# HELPERS
# =====================================================

def _now(now) -> datetime:
    return parse_timestamp(now) or datetime.now(timezone.utc)


def _key(name: str, days: Optional[int], now) -> str:
    """Cache key; reports pinned to an explicit `now` get their own entry."""
    key = f"{name}:{days if days else 'all'}"
    pinned = parse_timestamp(now)
    if pinned is not None:
        key += f":{pinned.isoformat()}"
    return key


async def _isolated(section: str, awaitable: Awaitable, errors: List[Dict[str, str]], empty):
    try:
        return await awaitable
    except Exception as e:
        log.exception("Report section '%s' failed", section)
        errors.append({"section": section, "error": str(e)})
        return empty


def _isolated_sync(section: str, build: Callable[[], Any], errors: List[Dict[str, str]], empty):
    try:
        return build()
    except Exception as e:
        log.exception("Report section '%s' failed", section)
        errors.append({"section": section, "error": str(e)})
        return empty
