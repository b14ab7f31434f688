from .loader import load_config, load_engine_config
from .defaults import DEFAULT_CONFIG
from .engine_config import (
    AnalyticsEngineConfig,
    CacheConfig,
    DemandConfig,
    EventTypesConfig,
    FetchConfig,
    FlowConfig,
    QualityConfig,
)

__all__ = [
    "load_config",
    "load_engine_config",
    "DEFAULT_CONFIG",
    "AnalyticsEngineConfig",
    "CacheConfig",
    "DemandConfig",
    "EventTypesConfig",
    "FetchConfig",
    "FlowConfig",
    "QualityConfig",
]
