from dataclasses import dataclass, field
from typing import List


# -------------------------------------------------
# EVENT VOCABULARY
# -------------------------------------------------
@dataclass
class EventTypesConfig:
    """
    Event type names the store uses for each report input.
    """
    search_types: List[str] = field(default_factory=lambda: ["search"])
    add_to_cart_types: List[str] = field(default_factory=lambda: ["add_to_cart"])
    checkout_types: List[str] = field(
        default_factory=lambda: ["checkout", "purchase_complete"]
    )
    frustration_type: str = "frustration_signal"
    conversion_types: List[str] = field(
        default_factory=lambda: ["build_complete", "purchase_complete"]
    )
    zero_result_type: str = "zero_result_search"

    @property
    def funnel_conversion_types(self) -> List[str]:
        return list(dict.fromkeys(self.add_to_cart_types + self.checkout_types))


# -------------------------------------------------
# PER-REPORT SETTINGS
# -------------------------------------------------
@dataclass
class FlowConfig:
    top_patterns: int = 10
    top_paths: int = 10
    max_edges: int = 50


@dataclass
class QualityConfig:
    days: int = 30
    event_limit: int = 5000


@dataclass
class DemandConfig:
    days: int = 7
    min_searches: int = 10
    min_wow_growth_pct: float = 50
    max_alerts: int = 20
    lookup_timeout_seconds: float = 8


@dataclass
class FetchConfig:
    timeout_seconds: float = 8
    retries: int = 1
    retry_delay_seconds: float = 0
    limit: int = 5000


@dataclass
class CacheConfig:
    enabled: bool = True
    ttl_seconds: float = 60

    @property
    def ttl_ms(self) -> int:
        return int(self.ttl_seconds * 1000)


# -------------------------------------------------
# ENGINE CONFIG
# -------------------------------------------------
@dataclass
class AnalyticsEngineConfig:
    """
    Typed view of the merged config dict, consumed by the pipeline.

    Rules:
    - every section MUST always be present
    - no shared mutable defaults
    """
    events: EventTypesConfig = field(default_factory=EventTypesConfig)
    pattern_length: int = 5
    trend_days: int = 7
    flow: FlowConfig = field(default_factory=FlowConfig)
    quality: QualityConfig = field(default_factory=QualityConfig)
    demand: DemandConfig = field(default_factory=DemandConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    output_dir: str = "runs"
