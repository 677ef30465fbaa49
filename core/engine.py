"""Entry point assembling recurring series and forecasts from raw transactions."""

from __future__ import annotations

from datetime import date
from typing import Iterable

import pandas as pd

from analytics.forecasting import MonthLike, compute_monthly_forecast
from analytics.recurring import detect_recurring_series
from analytics.trends import forecast_category_spend
from config.settings import Settings, get_settings
from core.data_loader import TransactionRecord, load_transactions
from core.logging_setup import get_logger
from core.models import EngineResult

__all__ = ["resolve_now", "run_forecast_engine"]

logger = get_logger("cadence.core.engine")


def resolve_now(now: pd.Timestamp | date | str) -> pd.Timestamp:
    """Return ``now`` as a midnight timestamp, raising ``ValueError`` if unusable."""

    try:
        timestamp = pd.Timestamp(now)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Unusable reference date: {now!r}") from exc
    if pd.isna(timestamp):
        raise ValueError(f"Unusable reference date: {now!r}")
    if timestamp.tzinfo is not None:
        # transaction dates are naive calendar dates; keep the local wall-clock day
        timestamp = timestamp.tz_localize(None)
    return timestamp.normalize()


def run_forecast_engine(
    transactions: Iterable[TransactionRecord],
    now: pd.Timestamp | date | str,
    *,
    target_month: MonthLike | None = None,
    horizon: int | None = None,
    settings: Settings | None = None,
) -> EngineResult:
    """Run the full pipeline over ``transactions`` as of ``now``.

    The computation is a pure function of its arguments: nothing reads the
    system clock and no state survives between calls. Records that cannot
    be parsed are skipped and reported in ``EngineResult.warnings``.
    """

    settings = settings or get_settings()
    today = resolve_now(now)

    frame, warnings = load_transactions(transactions, default_category=settings.default_category)
    recurring_series = detect_recurring_series(frame, settings=settings)
    monthly_summary = compute_monthly_forecast(
        recurring_series,
        today,
        target_month=target_month,
        settings=settings,
    )
    category_forecast = forecast_category_spend(frame, today, horizon=horizon, settings=settings)

    logger.info(
        "Detected %d recurring series and %d expense categories from %d transactions",
        len(recurring_series),
        len(category_forecast.categories),
        len(frame),
    )

    return EngineResult(
        now=today,
        recurring_series=recurring_series,
        monthly_summary=monthly_summary,
        category_forecast=category_forecast,
        warnings=warnings,
    )
