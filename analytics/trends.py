"""Per-category monthly averages, linear trends and spend forecasts."""

from __future__ import annotations

from datetime import date
from typing import Sequence

import numpy as np
import pandas as pd

from config.settings import DEFAULT_CATEGORY, Settings, get_settings
from core.logging_setup import get_logger
from core.models import CategoryForecast, CategoryForecastResult

__all__ = [
    "compute_trend_fraction",
    "build_monthly_buckets",
    "compute_category_trends",
    "compute_overall_trend",
    "project_spend",
    "build_forecast_table",
    "forecast_category_spend",
]

logger = get_logger("cadence.analytics.trends")

_BUCKET_COLUMNS = ["category", "month", "total"]


def compute_trend_fraction(bucket_totals: Sequence[float] | np.ndarray, *, bucket_count: int = 3) -> float:
    """Return the fractional change between the first and last of the recent buckets.

    Only the last ``bucket_count`` totals are considered. Fewer than two
    buckets, a zero first bucket or any non-finite result yield ``0.0``.
    """

    recent = np.asarray(bucket_totals, dtype=float)[-bucket_count:]
    if recent.size < 2:
        return 0.0

    first, last = float(recent[0]), float(recent[-1])
    if first == 0 or not np.isfinite(first) or not np.isfinite(last):
        return 0.0
    return float((last - first) / first)


def build_monthly_buckets(
    transactions: pd.DataFrame,
    now: pd.Timestamp | date | str,
    *,
    window_months: int = 6,
    default_category: str = DEFAULT_CATEGORY,
) -> pd.DataFrame:
    """Sum expense amounts per category and calendar month inside the trailing window.

    The window runs from ``window_months`` before ``now`` up to and including
    ``now``. Months without spend produce no row.
    """

    if transactions.empty:
        return pd.DataFrame(columns=_BUCKET_COLUMNS)

    today = pd.Timestamp(now).normalize()
    window_start = today - pd.DateOffset(months=window_months)
    dates = transactions["date"].dt.normalize()
    mask = (transactions["type"] == "expense") & (dates >= window_start) & (dates <= today)

    expenses = transactions.loc[mask].copy()
    if expenses.empty:
        return pd.DataFrame(columns=_BUCKET_COLUMNS)

    categories = expenses["category"].fillna("").astype(str).str.strip()
    expenses["category"] = categories.where(categories != "", default_category)
    expenses["month"] = expenses["date"].dt.to_period("M")

    buckets = expenses.groupby(["category", "month"], sort=True)["amount"].sum().reset_index(name="total")
    buckets["total"] = buckets["total"].astype(float)
    return buckets[_BUCKET_COLUMNS]


def compute_category_trends(buckets: pd.DataFrame, *, bucket_count: int = 3) -> list[CategoryForecast]:
    """Return average and trend per category, highest monthly average first."""

    if buckets.empty:
        return []

    trends: list[CategoryForecast] = []
    for category, category_df in buckets.groupby("category", sort=True):
        totals = category_df.sort_values("month")["total"].to_numpy(dtype=float)
        monthly_average = float(totals.sum() / max(len(totals), 1))
        trend_fraction = compute_trend_fraction(totals, bucket_count=bucket_count)
        trends.append(
            {
                "category": str(category),
                "monthly_average": monthly_average,
                "trend_fraction": trend_fraction,
                "months_observed": int(len(totals)),
            }
        )

    trends.sort(key=lambda row: -row["monthly_average"])
    return trends


def compute_overall_trend(categories: Sequence[CategoryForecast]) -> float:
    """Return the spend-weighted mean of the category trends, ``0.0`` without spend."""

    total = float(sum(row["monthly_average"] for row in categories))
    if total <= 0:
        return 0.0
    weighted = sum(row["trend_fraction"] * row["monthly_average"] for row in categories)
    return float(weighted / total)


def project_spend(monthly_average: float, trend_fraction: float, offset: int) -> float:
    """Linear projection ``monthly_average * (1 + trend_fraction * offset)``.

    The result is not clamped; a steep negative trend can go below zero.
    """

    return float(monthly_average * (1 + trend_fraction * offset))


def build_forecast_table(
    categories: Sequence[CategoryForecast],
    now: pd.Timestamp | date | str,
    horizon: int,
) -> tuple[list[str], pd.DataFrame, pd.Series]:
    """Return month labels, per-category projections and the aggregate row.

    Offset ``0`` is the calendar month containing ``now``.
    """

    if horizon < 1:
        raise ValueError(f"Forecast horizon must be at least 1 month, got {horizon}")

    start = pd.Timestamp(now).to_period("M")
    offsets = pd.RangeIndex(horizon, name="Offset")
    months = [(start + offset).strftime("%b %Y") for offset in offsets]

    forecast_df = pd.DataFrame(
        {
            row["category"]: [project_spend(row["monthly_average"], row["trend_fraction"], i) for i in offsets]
            for row in categories
        },
        index=offsets,
        dtype=float,
    )

    total_average = float(sum(row["monthly_average"] for row in categories))
    overall_trend = compute_overall_trend(categories)
    total_forecast = pd.Series(
        [project_spend(total_average, overall_trend, i) for i in offsets],
        index=offsets,
        name="Total",
        dtype=float,
    )
    return months, forecast_df, total_forecast


def forecast_category_spend(
    transactions: pd.DataFrame,
    now: pd.Timestamp | date | str,
    *,
    horizon: int | None = None,
    settings: Settings | None = None,
) -> CategoryForecastResult:
    """Forecast expense spend per category for the next ``horizon`` months.

    Parameters
    ----------
    transactions:
        Raw transactions frame; revenue rows are ignored.
    now:
        Reference date for the trailing window and the first forecast month.
    horizon:
        Number of months to project, defaulting to
        ``settings.forecast_horizon_months``.
    settings:
        Window length and trend bucket count.

    Returns
    -------
    CategoryForecastResult
        Category rows plus a table indexed by month offset and the total row.
    """

    settings = settings or get_settings()
    horizon = settings.forecast_horizon_months if horizon is None else horizon

    buckets = build_monthly_buckets(
        transactions,
        now,
        window_months=settings.trend_window_months,
        default_category=settings.default_category,
    )
    categories = compute_category_trends(buckets, bucket_count=settings.trend_bucket_count)
    months, forecast_df, total_forecast = build_forecast_table(categories, now, horizon)
    logger.debug("Forecast %d categories over %d months", len(categories), horizon)

    return CategoryForecastResult(
        categories=categories,
        overall_trend=compute_overall_trend(categories),
        total_monthly_average=float(sum(row["monthly_average"] for row in categories)),
        months=months,
        forecast_df=forecast_df,
        total_forecast=total_forecast,
    )
