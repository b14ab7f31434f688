"""
Session behavior classification.

BEHAVIOR_RULES is evaluated top to bottom; the first predicate that
holds names the behavior.
"""

from dataclasses import dataclass
from typing import Callable, List, Sequence

from journey_analytics.core.models import SearchEvent, Session, SessionBehavior

BROADENING_GROWTH_FACTOR = 1.5


def narrowing_signals(searches: Sequence[SearchEvent]) -> int:
    """
    Refinement signals over consecutive searches: the later query contains
    the earlier one or is longer, and separately, the result count dropped.
    """
    signals = 0
    for prev, curr in zip(searches, searches[1:]):
        prev_q = prev.query.lower()
        curr_q = curr.query.lower()
        if prev_q in curr_q or len(curr_q) > len(prev_q):
            signals += 1
        if curr.results_count < prev.results_count:
            signals += 1
    return signals


def broadening_signals(searches: Sequence[SearchEvent]) -> int:
    signals = 0
    for prev, curr in zip(searches, searches[1:]):
        if len(curr.query.lower()) < len(prev.query.lower()):
            signals += 1
        if curr.results_count > prev.results_count * BROADENING_GROWTH_FACTOR:
            signals += 1
    return signals


def detect_narrowing_pattern(searches: Sequence[SearchEvent]) -> bool:
    if len(searches) < 2:
        return False
    return narrowing_signals(searches) >= len(searches)


def detect_broadening_pattern(searches: Sequence[SearchEvent]) -> bool:
    if len(searches) < 2:
        return False
    return broadening_signals(searches) >= len(searches)


@dataclass(frozen=True)
class BehaviorRule:
    applies: Callable[[Session], bool]
    behavior: SessionBehavior


BEHAVIOR_RULES: List[BehaviorRule] = [
    BehaviorRule(lambda s: s.converted, SessionBehavior.CONVERTED),
    BehaviorRule(lambda s: s.added_to_cart, SessionBehavior.ADDED_TO_CART),
    BehaviorRule(lambda s: detect_narrowing_pattern(s.searches), SessionBehavior.NARROWING),
    BehaviorRule(lambda s: detect_broadening_pattern(s.searches), SessionBehavior.BROADENING),
    BehaviorRule(lambda s: s.total_searches == 1, SessionBehavior.SINGLE_SEARCH),
    BehaviorRule(lambda s: s.unique_queries == s.total_searches, SessionBehavior.EXPLORING),
    BehaviorRule(lambda s: True, SessionBehavior.REPEATED),
]


def classify_session_behavior(session: Session) -> SessionBehavior:
    for rule in BEHAVIOR_RULES:
        if rule.applies(session):
            return rule.behavior
    return SessionBehavior.REPEATED
