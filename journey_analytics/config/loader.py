import yaml
import copy
from pathlib import Path

from .defaults import DEFAULT_CONFIG
from journey_analytics.config.engine_config import (
    AnalyticsEngineConfig,
    CacheConfig,
    DemandConfig,
    EventTypesConfig,
    FetchConfig,
    FlowConfig,
    QualityConfig,
)


def _section(cfg: dict, name: str) -> dict:
    value = cfg.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return value


def _known(section_cls, values: dict) -> dict:
    """Drop keys the dataclass does not declare."""
    fields = section_cls.__dataclass_fields__
    return {k: v for k, v in values.items() if k in fields}


# -------------------------------------------------
# ENGINE CONFIG LOADER
# -------------------------------------------------
def load_engine_config(cfg: dict | None) -> AnalyticsEngineConfig:
    cfg = cfg or {}

    return AnalyticsEngineConfig(
        events=EventTypesConfig(**_known(EventTypesConfig, _section(cfg, "events"))),
        pattern_length=int(_section(cfg, "sessions").get("pattern_length", 5)),
        trend_days=int(_section(cfg, "funnel").get("trend_days", 7)),
        flow=FlowConfig(**_known(FlowConfig, _section(cfg, "flow"))),
        quality=QualityConfig(**_known(QualityConfig, _section(cfg, "quality"))),
        demand=DemandConfig(**_known(DemandConfig, _section(cfg, "demand"))),
        fetch=FetchConfig(**_known(FetchConfig, _section(cfg, "fetch"))),
        cache=CacheConfig(**_known(CacheConfig, _section(cfg, "cache"))),
        output_dir=str(cfg.get("output_dir") or "runs"),
    )


# -------------------------------------------------
# MAIN CONFIG LOADER
# -------------------------------------------------
def load_config(path: str | None) -> dict:
    """
    Load and merge user config with the engine defaults.

    Rules:
    - Defaults must ALWAYS win if user omits fields
    - Every section is OPTIONAL
    - output_dir MUST always exist
    """

    # -------------------------------------------------
    # 1️⃣ Load user config (if provided)
    # -------------------------------------------------
    user_config = {}

    if path:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}

        if not isinstance(user_config, dict):
            raise ValueError("Config file must contain a YAML dictionary")

    # -------------------------------------------------
    # 2️⃣ Merge with defaults (SAFE)
    # -------------------------------------------------
    config = copy.deepcopy(DEFAULT_CONFIG)

    for key, value in user_config.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key].update(value)
        else:
            config[key] = value

    # -------------------------------------------------
    # 3️⃣ Enforce REQUIRED invariants
    # -------------------------------------------------
    config.setdefault("output_dir", "runs")

    # -------------------------------------------------
    # 4️⃣ Attach typed engine config
    # -------------------------------------------------
    config["engine"] = load_engine_config(config)

    return config
