"""
Pipeline Collaborators
----------------------
The outside world the report pipeline talks to: the event store, the
inventory lookup and the report cache.

Rules:
- Collaborators are injected; the pipeline never constructs a store itself
- Every store call goes through safe_fetch (timeout + retry + fallback)
- A failed fetch degrades to an empty list and a logged warning
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from journey_analytics.automation.retry import retry
from journey_analytics.core.contracts import normalize_raw_events, parse_timestamp
from journey_analytics.core.models import RawEvent

log = logging.getLogger(__name__)

DEFAULT_FETCH_LIMIT = 5000


# =====================================================
# PROTOCOLS
# =====================================================

class EventStore(Protocol):
    async def query(
        self,
        event_types: Optional[Sequence[str]],
        session_ids: Optional[Sequence[str]] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: int = DEFAULT_FETCH_LIMIT,
    ) -> List[Any]:
        ...


class InventoryLookup(Protocol):
    async def __call__(self, normalized_query: str) -> Optional[int]:
        ...


class Cache(Protocol):
    def get(self, key: str) -> Any:
        ...

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        ...


# =====================================================
# IN-MEMORY EVENT STORE
# =====================================================

class InMemoryEventStore:
    """
    EventStore over an already loaded list of records.

    Records are normalized once on construction. Queries return events in
    ascending time order; when more than `limit` match, the most recent
    ones are kept.
    """

    def __init__(self, records: Iterable[Any]):
        events = normalize_raw_events(records)
        self._events: List[RawEvent] = sorted(events, key=lambda e: e.timestamp)

    def __len__(self) -> int:
        return len(self._events)

    @property
    def latest_timestamp(self) -> Optional[datetime]:
        return self._events[-1].timestamp if self._events else None

    async def query(
        self,
        event_types: Optional[Sequence[str]],
        session_ids: Optional[Sequence[str]] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: int = DEFAULT_FETCH_LIMIT,
    ) -> List[RawEvent]:
        types = set(event_types) if event_types else None
        sessions = set(session_ids) if session_ids is not None else None
        since = parse_timestamp(since)
        until = parse_timestamp(until)

        matched = [
            e for e in self._events
            if (types is None or e.event_type in types)
            and (sessions is None or e.session_id in sessions)
            and (since is None or e.timestamp >= since)
            and (until is None or e.timestamp <= until)
        ]
        if limit and len(matched) > limit:
            matched = matched[-limit:]
        return matched


# =====================================================
# TTL CACHE
# =====================================================

class TTLCache:
    """In-process cache with per-entry expiry (milliseconds)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        if ttl_ms <= 0:
            self._entries.pop(key, None)
            return
        self._entries[key] = (self._clock() + ttl_ms / 1000, value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# =====================================================
# SAFE FETCH
# =====================================================

async def safe_fetch(
    label: str,
    call: Callable[[], Awaitable[Optional[Iterable[Any]]]],
    *,
    timeout: float = 8.0,
    retries: int = 1,
    retry_delay: float = 0,
) -> List[Any]:
    """
    Run a collaborator call with a timeout and retries.

    `retries` counts extra attempts after the first one. When every
    attempt fails the caller gets [] and a warning is logged.
    """

    @retry(times=retries + 1, delay=retry_delay)
    async def _attempt():
        return await asyncio.wait_for(call(), timeout=timeout)

    try:
        result = await _attempt()
    except asyncio.TimeoutError:
        log.warning("Fetch '%s' timed out after %.1fs; using empty input", label, timeout)
        return []
    except Exception as e:
        log.warning("Fetch '%s' failed (%s: %s); using empty input", label, type(e).__name__, e)
        return []

    return list(result or [])
