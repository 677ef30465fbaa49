"""Shared data model definitions for the Cadence engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Literal, NamedTuple, TypedDict

import pandas as pd

TransactionType = Literal["expense", "revenue"]
Frequency = Literal["weekly", "monthly", "quarterly", "annual", "irregular"]

TRANSACTION_TYPES: tuple[str, ...] = ("expense", "revenue")
FREQUENCIES: tuple[str, ...] = ("weekly", "monthly", "quarterly", "annual", "irregular")

TRANSACTION_COLUMNS: tuple[str, ...] = ("id", "amount", "date", "type", "category", "description")


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float
    date: date
    type: TransactionType
    category: str = "Other"
    description: str = ""


class SeriesKey(NamedTuple):
    """Composite identity of a recurring series candidate."""

    description: str
    type: str
    category: str


@dataclass(frozen=True, eq=False)
class CandidateGroup:
    """Transactions sharing a :class:`SeriesKey`, ordered by date."""

    key: SeriesKey
    transactions: pd.DataFrame


class RecurringSeries(TypedDict):
    """Metadata describing a detected recurring series."""

    key: SeriesKey
    description: str
    category: str
    type: TransactionType
    average_amount: float
    frequency: Frequency
    reliability: float
    reliability_label: str
    last_date: pd.Timestamp
    next_expected_date: pd.Timestamp
    occurrence_count: int
    transaction_ids: list[str]


class MonthlyForecastSummary(TypedDict):
    month_label: str
    expected_expenses: float
    expected_revenue: float
    balance: float
    subscription_total: float
    subscription_count: int
    series_count: int


class CategoryForecast(TypedDict):
    category: str
    monthly_average: float
    trend_fraction: float
    months_observed: int


@dataclass(frozen=True, eq=False)
class CategoryForecastResult:
    categories: list[CategoryForecast]
    overall_trend: float
    total_monthly_average: float
    months: list[str]
    forecast_df: pd.DataFrame
    total_forecast: pd.Series


@dataclass(frozen=True)
class DataQualityWarning:
    """A transaction record skipped because one of its fields was unusable."""

    record_index: int
    transaction_id: str | None
    field: str
    message: str


@dataclass(frozen=True, eq=False)
class EngineResult:
    now: pd.Timestamp
    recurring_series: list[RecurringSeries]
    monthly_summary: MonthlyForecastSummary
    category_forecast: CategoryForecastResult
    warnings: list[DataQualityWarning]


__all__ = [
    "TransactionType",
    "Frequency",
    "TRANSACTION_TYPES",
    "FREQUENCIES",
    "TRANSACTION_COLUMNS",
    "Transaction",
    "SeriesKey",
    "CandidateGroup",
    "RecurringSeries",
    "MonthlyForecastSummary",
    "CategoryForecast",
    "CategoryForecastResult",
    "DataQualityWarning",
    "EngineResult",
]
