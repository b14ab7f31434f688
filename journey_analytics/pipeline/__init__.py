from .collaborators import (
    Cache,
    EventStore,
    InMemoryEventStore,
    InventoryLookup,
    TTLCache,
    safe_fetch,
)
from .orchestrator import AnalyticsPipeline, JourneyInputs, REPORT_NAMES

__all__ = [
    "AnalyticsPipeline",
    "JourneyInputs",
    "REPORT_NAMES",
    "Cache",
    "EventStore",
    "InMemoryEventStore",
    "InventoryLookup",
    "TTLCache",
    "safe_fetch",
]
