"""Analytics helpers behind the Cadence engine."""

from analytics.forecasting import (
    build_monthly_forecast_frame,
    compute_monthly_forecast,
    compute_subscription_total,
    resolve_target_period,
    select_series_in_period,
)
from analytics.grouping import (
    build_candidate_groups,
    filter_consistent_groups,
    is_amount_consistent,
    normalize_description,
)
from analytics.recurring import (
    build_recurring_series,
    classify_frequency,
    detect_recurring_series,
    predict_next_occurrence,
    reliability_label,
)
from analytics.trends import (
    build_forecast_table,
    build_monthly_buckets,
    compute_category_trends,
    compute_overall_trend,
    compute_trend_fraction,
    forecast_category_spend,
    project_spend,
)

__all__ = [
    "normalize_description",
    "build_candidate_groups",
    "is_amount_consistent",
    "filter_consistent_groups",
    "classify_frequency",
    "predict_next_occurrence",
    "reliability_label",
    "build_recurring_series",
    "detect_recurring_series",
    "resolve_target_period",
    "select_series_in_period",
    "compute_subscription_total",
    "compute_monthly_forecast",
    "build_monthly_forecast_frame",
    "compute_trend_fraction",
    "build_monthly_buckets",
    "compute_category_trends",
    "compute_overall_trend",
    "project_spend",
    "build_forecast_table",
    "forecast_category_spend",
]
