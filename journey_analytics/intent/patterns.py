# journey_analytics/intent/patterns.py

import re

# Queries are lower-cased before matching. re.ASCII keeps \w and \b to
# [A-Za-z0-9_], the same word definition the storefront search box uses.
_FLAGS = re.ASCII | re.IGNORECASE


def _compile(*patterns):
    return tuple(re.compile(p, _FLAGS) for p in patterns)


# =====================================================
# COMPARISON (always checked first)
# =====================================================
COMPARISON_PATTERNS = _compile(
    r"\b(\w+)\s+(vs|versus|or)\s+(\w+)",       # "3070 vs 3080", "amd or intel"
    r"\b(compare|comparison|difference between)\b",
    r"\b(better|worse)\s+(than)\b",
)

# =====================================================
# PRICE CHECKING
# =====================================================
PRICE_PATTERNS = _compile(
    r"\b(cheap|budget|affordable|inexpensive|economical|value)\b",
    r"\b(price|cost|how much|under|less than|\$|£|€)\b",
    r"\b(deal|discount|sale|clearance|bargain)\b",
    r"\b(low cost|low price|price range)\b",
)

# =====================================================
# RESEARCH
# =====================================================
RESEARCH_PATTERNS = _compile(
    r"\b(best|top|recommend|review|guide|how to|what is|should i|worth it|good|comparison guide)\b",
    r"\b(vs\s+)?which\b",
    r"\b(better|fastest|most powerful|quietest|coolest)\b",
    r"\b(benchmark|performance|specs|specifications|features)\b",
    r"\b(explained|tutorial|beginner|for gaming|for streaming)\b",
)

# =====================================================
# SPECIFIC PRODUCT
# =====================================================
SPECIFIC_PATTERNS = _compile(
    r"\b(rtx|gtx|rx)\s*\d{4}",                               # GPU models
    r"\b(ryzen|core|threadripper|xeon)\s+\d",                # CPU models
    r"\b(ti|super|xt|oc|gaming x|strix|tuf|ftw|aorus)\b",    # variants
    r"\b(\d+gb|\d+tb)\b",                                    # capacities
    r"\b(ddr\d|gen\d|pcie\s*\d)\b",                          # tech specs
)

# Fallback keyword extraction: tokens carrying at least one digit
PRODUCT_TOKEN_PATTERN = re.compile(r"\b\w*\d+\w*\b", re.ASCII)
FALLBACK_KEYWORD_LIMIT = 2
