import pytest

from journey_analytics.config import (
    AnalyticsEngineConfig,
    DEFAULT_CONFIG,
    load_config,
    load_engine_config,
)


def test_defaults_without_file():
    config = load_config(None)

    assert config["output_dir"] == "runs"
    assert config["demand"]["min_searches"] == 10
    assert isinstance(config["engine"], AnalyticsEngineConfig)


def test_user_values_merge_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "demand:\n"
        "  min_searches: 5\n"
        "cache:\n"
        "  enabled: false\n"
        "output_dir: out\n"
    )

    config = load_config(str(path))

    assert config["demand"]["min_searches"] == 5
    assert config["demand"]["days"] == 7
    assert config["cache"]["enabled"] is False
    assert config["output_dir"] == "out"

    engine = config["engine"]
    assert engine.demand.min_searches == 5
    assert engine.demand.max_alerts == 20
    assert engine.cache.enabled is False


def test_defaults_are_not_mutated(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("flow:\n  max_edges: 5\n")

    load_config(str(path))

    assert DEFAULT_CONFIG["flow"]["max_edges"] == 50


def test_missing_file_raises():
    with pytest.raises(FileNotFoundError):
        load_config("does-not-exist.yaml")


def test_non_mapping_document_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError):
        load_config(str(path))


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert load_config(str(path))["fetch"]["timeout_seconds"] == 8


def test_engine_config_from_partial_dict():
    engine = load_engine_config({
        "events": {"checkout_types": ["order_placed"], "unknown_key": 1},
        "sessions": {"pattern_length": 3},
    })

    assert engine.events.checkout_types == ["order_placed"]
    assert engine.events.search_types == ["search"]
    assert engine.pattern_length == 3
    assert engine.flow.max_edges == 50
    assert engine.cache.ttl_ms == 60_000


def test_funnel_conversion_types_are_deduplicated():
    engine = load_engine_config({
        "events": {"add_to_cart_types": ["cart", "checkout"], "checkout_types": ["checkout"]},
    })

    assert engine.events.funnel_conversion_types == ["cart", "checkout"]


def test_bad_section_type_raises():
    with pytest.raises(ValueError):
        load_engine_config({"demand": [1, 2]})
