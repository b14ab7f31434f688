# Funnel reporting module
from .attribution import (
    attribute_conversions,
    calculate_search_term_revenue,
    get_top_converting_products,
)
from .metrics import calculate_funnel_metrics
from .trends import get_funnel_chart_data, get_conversion_trend

__all__ = [
    "attribute_conversions",
    "calculate_search_term_revenue",
    "get_top_converting_products",
    "calculate_funnel_metrics",
    "get_funnel_chart_data",
    "get_conversion_trend",
]
