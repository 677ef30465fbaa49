"""Series-based monthly income and expense projections."""

from __future__ import annotations

from datetime import date
from typing import Iterable

import pandas as pd

from config.settings import Settings, get_settings
from core.logging_setup import get_logger
from core.models import MonthlyForecastSummary, RecurringSeries

__all__ = [
    "resolve_target_period",
    "select_series_in_period",
    "compute_subscription_total",
    "compute_monthly_forecast",
    "build_monthly_forecast_frame",
]

logger = get_logger("cadence.analytics.forecasting")

MonthLike = pd.Period | pd.Timestamp | date | str


def resolve_target_period(now: pd.Timestamp | date | str, target_month: MonthLike | None = None) -> pd.Period:
    """Return the forecast month: ``target_month`` if given, else the month after ``now``."""

    if target_month is not None:
        if isinstance(target_month, pd.Period):
            return target_month.asfreq("M")
        return pd.Period(pd.Timestamp(target_month), freq="M")
    return pd.Timestamp(now).to_period("M") + 1


def select_series_in_period(series: Iterable[RecurringSeries], period: pd.Period) -> list[RecurringSeries]:
    """Return series expected within ``period``, each key at most once."""

    seen: set[tuple[str, str, str]] = set()
    selected: list[RecurringSeries] = []
    for entry in series:
        if pd.Timestamp(entry["next_expected_date"]).to_period("M") != period:
            continue
        key = tuple(entry["key"])
        if key in seen:
            logger.debug("Ignoring repeated series %s in %s", entry["key"], period)
            continue
        seen.add(key)
        selected.append(entry)
    return selected


def _subscription_series(series: Iterable[RecurringSeries], keyword: str) -> list[RecurringSeries]:
    keyword = keyword.lower()
    seen: set[tuple[str, str, str]] = set()
    matched: list[RecurringSeries] = []
    for entry in series:
        if entry["type"] != "expense" or keyword not in entry["category"].lower():
            continue
        key = tuple(entry["key"])
        if key in seen:
            continue
        seen.add(key)
        matched.append(entry)
    return matched


def compute_subscription_total(series: Iterable[RecurringSeries], keyword: str | None = None) -> float:
    """Sum the average amount of expense series whose category mentions ``keyword``.

    ``keyword`` defaults to ``Settings.subscription_keyword``.
    """

    keyword = get_settings().subscription_keyword if keyword is None else keyword
    return float(sum(entry["average_amount"] for entry in _subscription_series(series, keyword)))


def compute_monthly_forecast(
    series: list[RecurringSeries],
    now: pd.Timestamp | date | str,
    *,
    target_month: MonthLike | None = None,
    settings: Settings | None = None,
) -> MonthlyForecastSummary:
    """Project expected revenue, expenses and balance for one month.

    Parameters
    ----------
    series:
        Output of :func:`analytics.recurring.detect_recurring_series`.
    now:
        Reference date. The default window is the calendar month after it.
    target_month:
        Explicit month to evaluate instead of the month after ``now``.
    settings:
        Supplies the subscription keyword.

    Returns
    -------
    MonthlyForecastSummary
        Totals for series whose next expected date lies in the window. The
        subscription figures cover every expense subscription series, since
        they describe the ongoing monthly commitment rather than one window.
    """

    settings = settings or get_settings()
    period = resolve_target_period(now, target_month)
    in_window = select_series_in_period(series, period)

    expected_expenses = float(sum(entry["average_amount"] for entry in in_window if entry["type"] == "expense"))
    expected_revenue = float(sum(entry["average_amount"] for entry in in_window if entry["type"] == "revenue"))
    subscriptions = _subscription_series(series, settings.subscription_keyword)

    return {
        "month_label": period.strftime("%B %Y"),
        "expected_expenses": expected_expenses,
        "expected_revenue": expected_revenue,
        "balance": expected_revenue - expected_expenses,
        "subscription_total": float(sum(entry["average_amount"] for entry in subscriptions)),
        "subscription_count": len(subscriptions),
        "series_count": len(in_window),
    }


def build_monthly_forecast_frame(
    series: list[RecurringSeries],
    now: pd.Timestamp | date | str,
    *,
    months: int = 3,
) -> pd.DataFrame:
    """Return one row of expected totals per month following ``now``.

    Each series lands in the single month holding its next expected date, so
    no series contributes to two rows.
    """

    if months < 1:
        raise ValueError(f"months must be at least 1, got {months}")

    first_period = resolve_target_period(now)
    records: list[dict[str, object]] = []
    for offset in range(months):
        period = first_period + offset
        in_window = select_series_in_period(series, period)
        expenses = float(sum(entry["average_amount"] for entry in in_window if entry["type"] == "expense"))
        revenue = float(sum(entry["average_amount"] for entry in in_window if entry["type"] == "revenue"))
        records.append(
            {
                "Month": period.strftime("%b %Y"),
                "Expenses": expenses,
                "Revenue": revenue,
                "Balance": revenue - expenses,
                "Series": len(in_window),
            }
        )

    frame = pd.DataFrame(records, columns=["Month", "Expenses", "Revenue", "Balance", "Series"])
    frame.index.name = "Offset"
    return frame
