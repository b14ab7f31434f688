"""
Search Intent Classifier

Pattern-based classification of a single search query into one of four
intents. Deterministic: the same text always yields the same result.

Priority lives in INTENT_RULES. The first rule whose predicate holds
decides intent and confidence, so the order of that list is the
behavior.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from journey_analytics.core.kpi_utils import safe_pct
from journey_analytics.core.models import Confidence, Intent, IntentResult
from journey_analytics.intent.patterns import (
    COMPARISON_PATTERNS,
    FALLBACK_KEYWORD_LIMIT,
    PRICE_PATTERNS,
    PRODUCT_TOKEN_PATTERN,
    RESEARCH_PATTERNS,
    SPECIFIC_PATTERNS,
)


# =====================================================
# SIGNALS
# =====================================================

@dataclass
class IntentSignals:
    query: str
    comparison: Optional[str] = None
    price_hits: int = 0
    research_hits: int = 0
    specific_hits: int = 0
    keywords: List[str] = field(default_factory=list)


def collect_signals(normalized_query: str) -> IntentSignals:
    """
    Match every pattern group against an already normalized query.

    A comparison hit short-circuits: nothing else is counted.
    Price keywords are recorded as matched; research and specific
    keywords are only added when not already present.
    """
    signals = IntentSignals(query=normalized_query)

    for pattern in COMPARISON_PATTERNS:
        match = pattern.search(normalized_query)
        if match:
            signals.comparison = match.group(0)
            signals.keywords.append(match.group(0))
            return signals

    for pattern in PRICE_PATTERNS:
        match = pattern.search(normalized_query)
        if match:
            signals.price_hits += 1
            signals.keywords.append(match.group(0))

    for pattern in RESEARCH_PATTERNS:
        match = pattern.search(normalized_query)
        if match:
            signals.research_hits += 1
            if match.group(0) not in signals.keywords:
                signals.keywords.append(match.group(0))

    for pattern in SPECIFIC_PATTERNS:
        match = pattern.search(normalized_query)
        if match:
            signals.specific_hits += 1
            if match.group(0) not in signals.keywords:
                signals.keywords.append(match.group(0))

    return signals


# =====================================================
# RULES (ORDER IS PRIORITY)
# =====================================================

def _strength(hits: int) -> Confidence:
    return Confidence.HIGH if hits >= 2 else Confidence.MEDIUM


def _research_leads(s: IntentSignals) -> bool:
    return s.research_hits > 0 and s.research_hits > s.price_hits


def _price_leads(s: IntentSignals) -> bool:
    # research needs a strict majority, so price keeps a nonzero tie
    return s.price_hits > 0 and not _research_leads(s)


@dataclass(frozen=True)
class IntentRule:
    name: str
    applies: Callable[[IntentSignals], bool]
    intent: Intent
    confidence: Callable[[IntentSignals], Confidence]


INTENT_RULES: List[IntentRule] = [
    IntentRule(
        "comparison",
        lambda s: s.comparison is not None,
        Intent.COMPARISON,
        lambda s: Confidence.HIGH,
    ),
    IntentRule(
        "specific_only",
        lambda s: s.specific_hits > 0 and s.research_hits == 0 and s.price_hits == 0,
        Intent.SPECIFIC_PRODUCT,
        lambda s: _strength(s.specific_hits),
    ),
    IntentRule(
        "strong_research",
        lambda s: _research_leads(s) and s.research_hits >= 2,
        Intent.RESEARCH,
        lambda s: Confidence.HIGH,
    ),
    IntentRule(
        "strong_price",
        lambda s: _price_leads(s) and s.price_hits >= 2,
        Intent.PRICE_CHECKING,
        lambda s: Confidence.HIGH,
    ),
    IntentRule(
        "specific_over_weak_signal",
        lambda s: s.specific_hits >= 2,
        Intent.SPECIFIC_PRODUCT,
        lambda s: Confidence.MEDIUM,
    ),
    IntentRule(
        "research",
        _research_leads,
        Intent.RESEARCH,
        lambda s: Confidence.MEDIUM,
    ),
    IntentRule(
        "price",
        _price_leads,
        Intent.PRICE_CHECKING,
        lambda s: Confidence.MEDIUM,
    ),
    IntentRule(
        "fallback",
        lambda s: True,
        Intent.SPECIFIC_PRODUCT,
        lambda s: Confidence.LOW,
    ),
]


def match_rule(signals: IntentSignals) -> IntentRule:
    for rule in INTENT_RULES:
        if rule.applies(signals):
            return rule
    return INTENT_RULES[-1]


# =====================================================
# PUBLIC API
# =====================================================

def classify_intent(query: Optional[str]) -> IntentResult:
    if query is None:
        query = ""
    if not isinstance(query, str):
        raise TypeError(f"query must be str, got {type(query).__name__}")

    normalized = query.strip().lower()
    signals = collect_signals(normalized)
    rule = match_rule(signals)

    keywords = list(signals.keywords)
    if not keywords:
        # Nothing matched: keep the tokens most likely to be model numbers
        keywords = PRODUCT_TOKEN_PATTERN.findall(normalized)[:FALLBACK_KEYWORD_LIMIT]

    return IntentResult(
        intent=rule.intent,
        confidence=rule.confidence(signals),
        keywords=keywords,
    )


INTENT_LABELS: Dict[Intent, str] = {
    Intent.RESEARCH: "Research",
    Intent.COMPARISON: "Comparison",
    Intent.PRICE_CHECKING: "Price Checking",
    Intent.SPECIFIC_PRODUCT: "Specific Product",
}


def get_intent_label(intent) -> str:
    return INTENT_LABELS[Intent(intent)]


def summarize_intents(queries: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """
    Intent mix of a batch of queries.

    Every intent is present in the result, empty queries are ignored.
    """
    counts = {intent: 0 for intent in Intent}
    for query in queries or []:
        if not query or not str(query).strip():
            continue
        counts[classify_intent(str(query)).intent] += 1

    total = sum(counts.values())
    return {
        intent.value: {
            "label": INTENT_LABELS[intent],
            "count": count,
            "percentage": safe_pct(count, total),
        }
        for intent, count in counts.items()
    }
