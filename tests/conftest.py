"""Shared fixtures for the Cadence test-suite."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import get_settings
from core.data_loader import load_transactions


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Drop cached settings and CADENCE_* variables so tests see defaults."""

    for name in list(os.environ):
        if name.startswith("CADENCE_"):
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def txn(
    txn_id: str,
    when: str,
    amount: float,
    *,
    description: str = "Netflix",
    category: str | None = "Subscription",
    kind: str = "expense",
) -> dict[str, Any]:
    return {
        "id": txn_id,
        "date": when,
        "amount": amount,
        "type": kind,
        "category": category,
        "description": description,
    }


@pytest.fixture()
def make_txn() -> Callable[..., dict[str, Any]]:
    return txn


@pytest.fixture()
def make_frame() -> Callable[[list[dict[str, Any]]], pd.DataFrame]:
    def _build(records: list[dict[str, Any]]) -> pd.DataFrame:
        frame, warnings = load_transactions(records)
        assert not warnings
        return frame

    return _build


@pytest.fixture()
def sample_records() -> list[dict[str, Any]]:
    return [
        txn("nf-1", "2025-01-05", 15.0),
        txn("nf-2", "2025-02-04", 15.0),
        txn("nf-3", "2025-03-06", 15.0),
        txn("pay-1", "2025-01-28", 2500.0, description="Employer Ltd", category="Salary", kind="revenue"),
        txn("pay-2", "2025-02-27", 2500.0, description="Employer Ltd", category="Salary", kind="revenue"),
        txn("pay-3", "2025-03-28", 2500.0, description="Employer Ltd", category="Salary", kind="revenue"),
        txn("gym-1", "2025-01-06", 40.0, description="City Gym", category="Fitness"),
        txn("gym-2", "2025-01-13", 40.0, description="City Gym", category="Fitness"),
        txn("gym-3", "2025-01-20", 40.0, description="City Gym", category="Fitness"),
        txn("food-1", "2025-01-10", 100.0, description="Corner Shop", category="Food"),
        txn("food-2", "2025-02-11", 150.0, description="Market", category="Food"),
        txn("food-3", "2025-03-12", 200.0, description="Supermarket", category="Food"),
    ]
