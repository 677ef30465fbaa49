"""Candidate series grouping and amount consistency filtering."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from config.settings import DEFAULT_CATEGORY
from core.logging_setup import get_logger
from core.models import CandidateGroup, SeriesKey

__all__ = [
    "normalize_description",
    "build_candidate_groups",
    "is_amount_consistent",
    "filter_consistent_groups",
]

logger = get_logger("cadence.analytics.grouping")


@lru_cache(maxsize=512)
def normalize_description(raw_description: str) -> str:
    """Return the lowercase, trimmed description used for series identity."""

    return raw_description.strip().lower()


def build_candidate_groups(
    transactions: pd.DataFrame,
    *,
    min_occurrences: int = 2,
    default_category: str = DEFAULT_CATEGORY,
) -> list[CandidateGroup]:
    """Group transactions sharing description, type and category.

    Parameters
    ----------
    transactions:
        Frame with ``id``, ``amount``, ``date``, ``type``, ``category`` and
        ``description`` columns.
    min_occurrences:
        Smallest group size that qualifies as a candidate series.
    default_category:
        Category used for rows with a missing or blank category.

    Returns
    -------
    list[CandidateGroup]
        Groups in key order, each with its rows sorted by date then id.
    """

    if transactions.empty:
        return []

    descriptions = transactions["description"].fillna("").astype(str)
    described = transactions[descriptions.str.strip() != ""].copy()
    if described.empty:
        return []

    categories = described["category"].fillna("").astype(str).str.strip()
    described["category"] = categories.where(categories != "", default_category)
    described["description_key"] = described["description"].astype(str).map(normalize_description)

    groups: list[CandidateGroup] = []
    for (description_key, txn_type, category), group_df in described.groupby(
        ["description_key", "type", "category"], sort=True
    ):
        if len(group_df) < min_occurrences:
            continue

        ordered = group_df.sort_values(by=["date", "id"], kind="mergesort").reset_index(drop=True)
        key = SeriesKey(description=str(description_key), type=str(txn_type), category=str(category))
        groups.append(CandidateGroup(key=key, transactions=ordered.drop(columns=["description_key"])))

    return groups


def is_amount_consistent(amounts: Sequence[float] | np.ndarray, tolerance: float = 0.10) -> bool:
    """Return ``True`` when every amount lies within ``tolerance`` of the mean."""

    values = np.asarray(amounts, dtype=float)
    if values.size == 0:
        return False

    mean = float(values.mean())
    if mean <= 0:
        return False

    deviation = np.abs(values - mean) / mean
    return bool(np.all(deviation <= tolerance))


def filter_consistent_groups(
    groups: Iterable[CandidateGroup],
    *,
    tolerance: float = 0.10,
) -> list[CandidateGroup]:
    """Drop every group holding an amount outside the tolerance.

    A single outlier discards the whole group; there is no attempt to split
    the group or retry without the offending transaction.
    """

    kept: list[CandidateGroup] = []
    for group in groups:
        if is_amount_consistent(group.transactions["amount"].to_numpy(dtype=float), tolerance):
            kept.append(group)
        else:
            logger.debug("Discarding inconsistent candidate %s (%d transactions)", group.key, len(group.transactions))
    return kept
