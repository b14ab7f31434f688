from collections import Counter
from typing import Iterable, Iterator, List, Optional, Tuple


def normalize_query(value) -> str:
    """Trim + lowercase; None and non-strings become ''."""
    if value is None:
        return ""
    return str(value).strip().lower()


class QueryCounter:
    """
    Histogram of normalized query text.

    Keys are normalized once, on the way in. Empty keys are dropped, so
    lookups never need to re-normalize and '' never shows up as a term.
    Iteration follows first-seen order.
    """

    def __init__(self, values: Optional[Iterable] = None):
        self._counts: Counter = Counter()
        if values is not None:
            self.update(values)

    def add(self, value, amount: int = 1) -> str:
        key = normalize_query(value)
        if key:
            self._counts[key] += amount
        return key

    def update(self, values: Iterable) -> None:
        for value in values:
            self.add(value)

    def count(self, value) -> int:
        return self._counts.get(normalize_query(value), 0)

    def items(self) -> List[Tuple[str, int]]:
        return list(self._counts.items())

    def most_common(self, n: Optional[int] = None) -> List[Tuple[str, int]]:
        return self._counts.most_common(n)

    def total(self) -> int:
        return sum(self._counts.values())

    def __contains__(self, value) -> bool:
        return normalize_query(value) in self._counts

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"QueryCounter({dict(self._counts)!r})"
