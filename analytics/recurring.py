"""Recurring series detection: frequency classification and next-date prediction."""

from __future__ import annotations

from typing import Callable, Iterable

import numpy as np
import pandas as pd

from analytics.grouping import build_candidate_groups, filter_consistent_groups
from config.settings import Settings, get_settings
from core.logging_setup import get_logger
from core.models import CandidateGroup, Frequency, RecurringSeries

__all__ = [
    "classify_frequency",
    "predict_next_occurrence",
    "reliability_label",
    "build_recurring_series",
    "detect_recurring_series",
]

logger = get_logger("cadence.analytics.recurring")

FrequencyCheck = Callable[[pd.DatetimeIndex, Settings], bool]

_MONTH_STEPS: dict[str, int] = {"monthly": 1, "quarterly": 3, "annual": 12}
_WEEK = pd.Timedelta(days=7)


def _is_monthly(dates: pd.DatetimeIndex, settings: Settings) -> bool:
    days = dates.day.to_numpy()
    return bool(np.all(np.abs(days[1:] - days[0]) <= settings.monthly_day_slack))


def _is_weekly(dates: pd.DatetimeIndex, settings: Settings) -> bool:
    weekdays = dates.dayofweek.to_numpy()
    return bool(np.all(weekdays[1:] == weekdays[0]))


def _is_quarterly(dates: pd.DatetimeIndex, settings: Settings) -> bool:
    # Two-date groups never qualify; see Settings.quarterly_min_occurrences.
    if len(dates) < settings.quarterly_min_occurrences:
        return False
    months = dates.month.to_numpy()
    offsets = (months[1:] - months[0]) % 12
    return bool(np.all(offsets % 3 == 0))


def _is_annual(dates: pd.DatetimeIndex, settings: Settings) -> bool:
    months = dates.month.to_numpy()
    days = dates.day.to_numpy()
    same_month = months[1:] == months[0]
    close_day = np.abs(days[1:] - days[0]) <= settings.annual_day_slack
    return bool(np.all(same_month & close_day))


_FREQUENCY_CHECKS: dict[str, FrequencyCheck] = {
    "monthly": _is_monthly,
    "weekly": _is_weekly,
    "quarterly": _is_quarterly,
    "annual": _is_annual,
}


def _as_sorted_index(dates: Iterable[object]) -> pd.DatetimeIndex:
    index = pd.DatetimeIndex(pd.to_datetime(list(dates))).normalize().sort_values()
    if index.empty:
        raise ValueError("At least one date is required")
    return index


def classify_frequency(
    dates: Iterable[object],
    settings: Settings | None = None,
) -> tuple[Frequency, float]:
    """Return the periodicity label and reliability score for ``dates``.

    Checks run in ``settings.frequency_priority`` order and the first match
    wins. Groups matching none of them are ``"irregular"``.
    """

    settings = settings or get_settings()
    index = _as_sorted_index(dates)

    for name in settings.frequency_priority:
        if _FREQUENCY_CHECKS[name](index, settings):
            return name, float(settings.reliability[name])  # type: ignore[return-value]
    return "irregular", float(settings.reliability["irregular"])


def predict_next_occurrence(dates: Iterable[object], frequency: Frequency) -> pd.Timestamp:
    """Return the expected date of the occurrence following the last of ``dates``.

    Calendar steps clamp to month end, so 31 January plus one month is the
    last day of February. Irregular series step by the mean gap between
    consecutive dates, rounded half up to whole days.
    """

    index = _as_sorted_index(dates)
    last_date = index[-1]

    if frequency in _MONTH_STEPS:
        return pd.Timestamp(last_date + pd.DateOffset(months=_MONTH_STEPS[frequency]))
    if frequency == "weekly":
        return pd.Timestamp(last_date + _WEEK)

    gaps = np.diff(index.to_numpy()).astype("timedelta64[D]").astype(float)
    mean_gap = float(gaps.mean()) if gaps.size else 0.0
    return pd.Timestamp(last_date + pd.Timedelta(days=int(np.floor(mean_gap + 0.5))))


def reliability_label(reliability: float) -> str:
    if reliability >= 0.9:
        return "High"
    if reliability >= 0.7:
        return "Medium"
    return "Low"


def build_recurring_series(group: CandidateGroup, settings: Settings | None = None) -> RecurringSeries:
    """Classify one consistent candidate group and describe it as a series."""

    settings = settings or get_settings()
    members = group.transactions
    dates = pd.DatetimeIndex(members["date"])

    frequency, reliability = classify_frequency(dates, settings)
    next_date = predict_next_occurrence(dates, frequency)
    latest = members.iloc[-1]

    return {
        "key": group.key,
        "description": str(latest["description"]).strip(),
        "category": group.key.category,
        "type": group.key.type,  # type: ignore[typeddict-item]
        "average_amount": float(members["amount"].astype(float).mean()),
        "frequency": frequency,
        "reliability": reliability,
        "reliability_label": reliability_label(reliability),
        "last_date": pd.Timestamp(latest["date"]).normalize(),
        "next_expected_date": next_date,
        "occurrence_count": int(len(members)),
        "transaction_ids": [str(txn_id) for txn_id in members["id"]],
    }


def detect_recurring_series(
    transactions: pd.DataFrame,
    settings: Settings | None = None,
) -> list[RecurringSeries]:
    """Detect recurring series within ``transactions``.

    Parameters
    ----------
    transactions:
        Frame produced by :func:`core.data_loader.transactions_to_frame`.
    settings:
        Thresholds to apply, defaulting to :func:`config.get_settings`.

    Returns
    -------
    list[RecurringSeries]
        Series sorted by reliability, highest first. Equal reliabilities keep
        their key order so repeated runs return identical lists.
    """

    settings = settings or get_settings()
    if transactions.empty:
        return []

    candidates = build_candidate_groups(
        transactions,
        min_occurrences=settings.min_occurrences,
        default_category=settings.default_category,
    )
    consistent = filter_consistent_groups(candidates, tolerance=settings.amount_tolerance)
    logger.debug("%d of %d candidate groups passed the consistency filter", len(consistent), len(candidates))

    series = [build_recurring_series(group, settings) for group in consistent]
    series.sort(key=lambda row: -row["reliability"])
    return series
