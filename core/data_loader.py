"""Transaction record parsing for the Cadence engine."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

from config.settings import DEFAULT_CATEGORY
from core.logging_setup import get_logger
from core.models import TRANSACTION_COLUMNS, TRANSACTION_TYPES, DataQualityWarning, Transaction

__all__ = ["load_transactions", "parse_transactions", "transactions_to_frame"]

logger = get_logger("cadence.core.data_loader")

TransactionRecord = Mapping[str, Any] | Transaction


class _FieldError(ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


def parse_transactions(
    records: Iterable[TransactionRecord],
    *,
    default_category: str = DEFAULT_CATEGORY,
) -> tuple[list[Transaction], list[DataQualityWarning]]:
    """Convert raw records into :class:`Transaction` objects.

    Records with an unusable date, amount or type are skipped rather than
    aborting the run. Each skip is logged and returned as a
    :class:`DataQualityWarning` so callers can surface it.

    Parameters
    ----------
    records:
        Mappings shaped like ``{id, amount, date, type, category, description}``
        or already constructed :class:`Transaction` instances.
    default_category:
        Category applied when a record has none or an empty one.

    Returns
    -------
    tuple[list[Transaction], list[DataQualityWarning]]
        Accepted transactions in input order and the warnings for skipped ones.
    """

    transactions: list[Transaction] = []
    warnings: list[DataQualityWarning] = []

    for index, record in enumerate(records):
        if isinstance(record, Transaction):
            record = asdict(record)

        raw_id = record.get("id")
        txn_id = str(raw_id) if raw_id is not None else str(index)

        try:
            transactions.append(
                Transaction(
                    id=txn_id,
                    amount=_parse_amount(record.get("amount")),
                    date=_parse_date(record.get("date")),
                    type=_parse_type(record.get("type")),
                    category=_clean_text(record.get("category")) or default_category,
                    description=_clean_text(record.get("description")),
                )
            )
        except _FieldError as exc:
            logger.warning("Skipping transaction %s (record %d): %s", txn_id, index, exc)
            warnings.append(
                DataQualityWarning(
                    record_index=index,
                    transaction_id=txn_id,
                    field=exc.field,
                    message=str(exc),
                )
            )

    return transactions, warnings


def transactions_to_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Return a dataframe with one row per transaction and a datetime ``date`` column."""

    frame = pd.DataFrame([asdict(txn) for txn in transactions], columns=list(TRANSACTION_COLUMNS))
    frame["date"] = pd.to_datetime(frame["date"])
    frame["amount"] = frame["amount"].astype(float)
    for column in ("id", "type", "category", "description"):
        frame[column] = frame[column].astype(object)
    return frame


def load_transactions(
    records: Iterable[TransactionRecord],
    *,
    default_category: str = DEFAULT_CATEGORY,
) -> tuple[pd.DataFrame, list[DataQualityWarning]]:
    """Parse ``records`` and return the transactions frame plus data-quality warnings."""

    transactions, warnings = parse_transactions(records, default_category=default_category)
    if warnings:
        logger.info("Skipped %d of %d transaction records", len(warnings), len(transactions) + len(warnings))
    return transactions_to_frame(transactions), warnings


def _parse_date(raw: Any) -> date:
    if isinstance(raw, (datetime, date)):
        timestamp = pd.Timestamp(raw)
    elif isinstance(raw, str) and raw.strip():
        try:
            timestamp = pd.to_datetime(raw.strip(), format="ISO8601")
        except (ValueError, OverflowError) as exc:
            raise _FieldError("date", f"Unparsable date {raw!r}") from exc
    else:
        raise _FieldError("date", f"Missing or non-text date {raw!r}")

    if pd.isna(timestamp):
        raise _FieldError("date", f"Unparsable date {raw!r}")
    return timestamp.date()


def _parse_amount(raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, Decimal, str)):
        raise _FieldError("amount", f"Amount must be numeric, got {raw!r}")
    try:
        amount = float(raw)
    except (ValueError, OverflowError) as exc:
        raise _FieldError("amount", f"Amount must be numeric, got {raw!r}") from exc

    if not np.isfinite(amount) or amount <= 0:
        raise _FieldError("amount", f"Amount must be a positive finite number, got {raw!r}")
    return amount


def _parse_type(raw: Any) -> str:
    value = _clean_text(raw).lower()
    if value not in TRANSACTION_TYPES:
        raise _FieldError("type", f"Transaction type must be one of {', '.join(TRANSACTION_TYPES)}, got {raw!r}")
    return value


def _clean_text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip()
