from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

import pandas as pd

from journey_analytics.core.contracts import parse_timestamp
from journey_analytics.core.kpi_utils import safe_pct
from journey_analytics.core.models import ConversionTrendPoint, FunnelMetrics, FunnelStage, Session


def get_funnel_chart_data(metrics: FunnelMetrics) -> List[FunnelStage]:
    """Four funnel stages with share of all searches and drop-off counts."""
    return [
        FunnelStage(
            stage="Searches",
            count=metrics.total_searches,
            percentage=100.0 if metrics.total_searches else 0.0,
            dropoff=0,
        ),
        FunnelStage(
            stage="Views",
            count=metrics.searches_with_results,
            percentage=metrics.search_to_view,
            dropoff=max(0, metrics.total_searches - metrics.searches_with_results),
        ),
        FunnelStage(
            stage="Add to Cart",
            count=metrics.added_to_cart,
            percentage=safe_pct(metrics.added_to_cart, metrics.total_searches),
            dropoff=max(0, metrics.searches_with_results - metrics.added_to_cart),
        ),
        FunnelStage(
            stage="Checkout",
            count=metrics.completed_checkout,
            percentage=metrics.search_to_checkout,
            dropoff=max(0, metrics.added_to_cart - metrics.completed_checkout),
        ),
    ]


def get_conversion_trend(
    sessions: Iterable[Session],
    period_days: int = 7,
    now: Optional[datetime] = None,
) -> List[ConversionTrendPoint]:
    """
    Daily search volume and checkout rate over the last period_days.

    Days are UTC calendar dates; days without searches are absent.
    """
    now = parse_timestamp(now) or datetime.now(timezone.utc)
    start = now - timedelta(days=period_days)

    rows = [
        {"date": s.timestamp.date().isoformat(), "checkout": bool(s.checkout_completed)}
        for session in sessions
        for s in session.searches
        if s.timestamp >= start
    ]
    if not rows:
        return []

    daily = (
        pd.DataFrame(rows)
        .groupby("date")
        .agg(search_count=("checkout", "size"), conversions=("checkout", "sum"))
        .sort_index()
    )

    return [
        ConversionTrendPoint(
            date=str(date),
            search_count=int(row.search_count),
            conversion_rate=safe_pct(int(row.conversions), int(row.search_count)),
        )
        for date, row in daily.iterrows()
    ]
