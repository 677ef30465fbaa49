"""Core domain package for the Cadence engine.

The pipeline entry point lives in :mod:`core.engine`; it is not re-exported
here because it depends on :mod:`analytics`, which itself imports from
``core``.
"""

from .data_loader import load_transactions, parse_transactions, transactions_to_frame
from .logging_setup import configure_logging, get_logger
from .models import (
    CategoryForecast,
    CategoryForecastResult,
    DataQualityWarning,
    EngineResult,
    MonthlyForecastSummary,
    RecurringSeries,
    SeriesKey,
    Transaction,
)

__all__ = [
    "CategoryForecast",
    "CategoryForecastResult",
    "DataQualityWarning",
    "EngineResult",
    "MonthlyForecastSummary",
    "RecurringSeries",
    "SeriesKey",
    "Transaction",
    "configure_logging",
    "get_logger",
    "load_transactions",
    "parse_transactions",
    "transactions_to_frame",
]
