DEFAULT_CONFIG = {
    # -----------------------------
    # EVENT TYPE VOCABULARY
    # -----------------------------
    "events": {
        "search_types": ["search"],
        "add_to_cart_types": ["add_to_cart"],
        "checkout_types": ["checkout", "purchase_complete"],
        "frustration_type": "frustration_signal",
        "conversion_types": ["build_complete", "purchase_complete"],
        "zero_result_type": "zero_result_search",
    },

    # -----------------------------
    # SESSION RECONSTRUCTION
    # -----------------------------
    "sessions": {
        "pattern_length": 5,
    },

    # -----------------------------
    # FLOW ANALYSIS
    # -----------------------------
    "flow": {
        "top_patterns": 10,
        "top_paths": 10,
        "max_edges": 50,
    },

    # -----------------------------
    # SESSION QUALITY
    # -----------------------------
    "quality": {
        "days": 30,
        "event_limit": 5000,
    },

    # -----------------------------
    # FUNNEL
    # -----------------------------
    "funnel": {
        "trend_days": 7,
    },

    # -----------------------------
    # DEMAND DETECTION
    # -----------------------------
    "demand": {
        "days": 7,
        "min_searches": 10,
        "min_wow_growth_pct": 50,
        "max_alerts": 20,
        "lookup_timeout_seconds": 8,
    },

    # -----------------------------
    # EVENT STORE FETCHES
    # -----------------------------
    "fetch": {
        "timeout_seconds": 8,
        "retries": 1,
        "retry_delay_seconds": 0,
        "limit": 5000,
    },

    # -----------------------------
    # REPORT CACHE
    # -----------------------------
    "cache": {
        "enabled": True,
        "ttl_seconds": 60,
    },

    # -----------------------------
    # OUTPUT CONTROL
    # -----------------------------
    "output_dir": "runs",
}
