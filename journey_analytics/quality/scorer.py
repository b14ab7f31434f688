"""
Session Quality Score

0-100 composite per session:

    duration    up to 25  (saturates at 10 minutes)
    pages       up to 20  (saturates at 5 pages)
    actions     up to 25  (saturates at 10 actions)
    conversion  20 when the session converted
    frustration minus 2 per signal, at most minus 10

The aggregate median is the element at floor(N/2) of the sorted scores
(the upper median for even N). Dashboards were built on that value.
"""

from typing import Dict, Iterable, List, Optional

import numpy as np

from journey_analytics.core.kpi_utils import round_half_up
from journey_analytics.core.models import QualityReport, SessionActivity

DURATION_CAP_SECONDS = 600
DURATION_WEIGHT = 25
PAGE_CAP = 5
PAGE_WEIGHT = 20
ACTION_CAP = 10
ACTION_WEIGHT = 25
CONVERSION_BONUS = 20
FRUSTRATION_PENALTY_PER_SIGNAL = 2
FRUSTRATION_PENALTY_CAP = 10

DISTRIBUTION_BUCKETS = ["0-20", "20-40", "40-60", "60-80", "80-100"]
_BUCKET_WIDTH = 20


def score_session(
    duration_seconds: float,
    page_count: int,
    action_count: int,
    frustration_signal_count: int = 0,
    converted: bool = False,
) -> int:
    duration_score = min(DURATION_WEIGHT, (duration_seconds / DURATION_CAP_SECONDS) * DURATION_WEIGHT)
    page_score = min(PAGE_WEIGHT, (page_count / PAGE_CAP) * PAGE_WEIGHT)
    actions_score = min(ACTION_WEIGHT, (action_count / ACTION_CAP) * ACTION_WEIGHT)
    conversion_bonus = CONVERSION_BONUS if converted else 0
    penalty = min(FRUSTRATION_PENALTY_CAP, frustration_signal_count * FRUSTRATION_PENALTY_PER_SIGNAL)

    raw = duration_score + page_score + actions_score + conversion_bonus - penalty
    return max(0, round_half_up(raw))


def score_session_activity(activity: SessionActivity) -> int:
    return score_session(
        duration_seconds=activity.duration_seconds,
        page_count=activity.page_count,
        action_count=activity.action_count,
        frustration_signal_count=activity.frustration_signal_count,
        converted=activity.converted,
    )


def bucket_for(score: int) -> str:
    index = min(len(DISTRIBUTION_BUCKETS) - 1, max(0, int(score) // _BUCKET_WIDTH))
    return DISTRIBUTION_BUCKETS[index]


def score_distribution(scores: Iterable[int]) -> Dict[str, int]:
    distribution = {bucket: 0 for bucket in DISTRIBUTION_BUCKETS}
    for score in scores:
        distribution[bucket_for(score)] += 1
    return distribution


def summarize_quality(scores: Iterable[int], period: Optional[int] = None) -> QualityReport:
    values = np.asarray(list(scores), dtype=float)
    sample = int(values.size)

    if sample == 0:
        return QualityReport(
            avg_score=0,
            median_score=0,
            distribution=score_distribution([]),
            sample=0,
            period=period,
        )

    ordered = np.sort(values)

    return QualityReport(
        avg_score=round_half_up(float(values.mean())),
        median_score=int(ordered[sample // 2]),
        distribution=score_distribution(int(v) for v in values),
        sample=sample,
        period=period,
    )


def score_sessions(activities: Iterable[SessionActivity]) -> List[int]:
    return [score_session_activity(a) for a in activities]
