from .classifier import (
    classify_intent,
    collect_signals,
    get_intent_label,
    summarize_intents,
    INTENT_RULES,
    IntentRule,
    IntentSignals,
)

__all__ = [
    "classify_intent",
    "collect_signals",
    "get_intent_label",
    "summarize_intents",
    "INTENT_RULES",
    "IntentRule",
    "IntentSignals",
]
