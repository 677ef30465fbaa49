"""Tests for frequency classification, next-date prediction and series detection."""

from __future__ import annotations

import pandas as pd
import pytest

from analytics.recurring import (
    classify_frequency,
    detect_recurring_series,
    predict_next_occurrence,
    reliability_label,
)
from config.settings import Settings
from core.models import SeriesKey


def test_scenario_a_monthly_subscription(make_txn, make_frame):
    frame = make_frame(
        [
            make_txn("nf-1", "2025-01-05", 15.0),
            make_txn("nf-2", "2025-02-04", 15.0),
            make_txn("nf-3", "2025-03-06", 15.0),
        ]
    )

    series = detect_recurring_series(frame)

    assert len(series) == 1
    entry = series[0]
    assert entry["key"] == SeriesKey("netflix", "expense", "Subscription")
    assert entry["description"] == "Netflix"
    assert entry["frequency"] == "monthly"
    assert entry["reliability"] == pytest.approx(0.9)
    assert entry["reliability_label"] == "High"
    assert entry["average_amount"] == pytest.approx(15.0)
    assert entry["occurrence_count"] == 3
    assert entry["last_date"] == pd.Timestamp("2025-03-06")
    assert entry["next_expected_date"] == pd.Timestamp("2025-04-06")
    assert entry["transaction_ids"] == ["nf-1", "nf-2", "nf-3"]


def test_scenario_b_inconsistent_amounts_emit_nothing(make_txn, make_frame):
    frame = make_frame(
        [
            make_txn("a", "2025-01-01", 100.0, description="Utility", category="Bills"),
            make_txn("b", "2025-01-21", 125.0, description="Utility", category="Bills"),
        ]
    )

    assert detect_recurring_series(frame) == []


def test_weekly_classification():
    dates = ["2025-01-06", "2025-01-13", "2025-01-20"]

    assert classify_frequency(dates) == ("weekly", pytest.approx(0.85))
    assert predict_next_occurrence(dates, "weekly") == pd.Timestamp("2025-01-27")


def test_quarterly_classification_needs_three_dates():
    dates = ["2025-01-15", "2025-04-20", "2025-07-10"]

    assert classify_frequency(dates) == ("quarterly", pytest.approx(0.8))
    assert predict_next_occurrence(dates, "quarterly") == pd.Timestamp("2025-10-10")


def test_two_date_quarterly_pattern_falls_through_to_irregular():
    dates = ["2025-01-15", "2025-04-25"]

    frequency, reliability = classify_frequency(dates)

    assert frequency == "irregular"
    assert reliability == pytest.approx(0.6)
    assert predict_next_occurrence(dates, frequency) == pd.Timestamp("2025-08-03")


def test_quarterly_minimum_is_configurable():
    settings = Settings(quarterly_min_occurrences=2)

    assert classify_frequency(["2025-01-15", "2025-04-25"], settings)[0] == "quarterly"


def test_two_date_annual_classification():
    dates = ["2024-06-10", "2025-06-14"]

    assert classify_frequency(dates) == ("annual", pytest.approx(0.9))
    assert predict_next_occurrence(dates, "annual") == pd.Timestamp("2026-06-14")


def test_same_month_history_is_caught_by_quarterly_first():
    dates = ["2023-06-10", "2024-06-14", "2025-06-06"]

    assert classify_frequency(dates)[0] == "quarterly"


def test_irregular_uses_rounded_mean_gap():
    dates = ["2025-01-01", "2025-01-11", "2025-02-15"]

    assert classify_frequency(dates) == ("irregular", pytest.approx(0.6))
    # gaps of 10 and 35 days average 22.5, rounded half up to 23
    assert predict_next_occurrence(dates, "irregular") == pd.Timestamp("2025-03-10")


def test_monthly_step_clamps_to_month_end():
    assert predict_next_occurrence(["2024-12-31", "2025-01-31"], "monthly") == pd.Timestamp("2025-02-28")


def test_priority_order_is_configurable():
    dates = ["2025-01-06", "2025-02-03"]

    assert classify_frequency(dates)[0] == "monthly"
    reordered = Settings(frequency_priority=("weekly", "monthly", "quarterly", "annual"))
    assert classify_frequency(dates, reordered) == ("weekly", pytest.approx(0.85))


def test_classification_ignores_input_order():
    assert classify_frequency(["2025-03-06", "2025-01-05", "2025-02-04"])[0] == "monthly"


def test_classify_requires_dates():
    with pytest.raises(ValueError):
        classify_frequency([])


@pytest.mark.parametrize(
    ("reliability", "label"),
    [(0.9, "High"), (0.85, "Medium"), (0.7, "Medium"), (0.6, "Low")],
)
def test_reliability_label(reliability, label):
    assert reliability_label(reliability) == label


def test_series_sorted_by_reliability(sample_records, make_frame):
    series = detect_recurring_series(make_frame(sample_records))

    assert [entry["description"] for entry in series] == ["Employer Ltd", "Netflix", "City Gym"]
    assert [entry["frequency"] for entry in series] == ["monthly", "monthly", "weekly"]
    assert series[0]["next_expected_date"] == pd.Timestamp("2025-04-28")


def test_detection_is_idempotent(sample_records, make_frame):
    frame = make_frame(sample_records)

    first = detect_recurring_series(frame)
    second = detect_recurring_series(frame)

    assert first == second
    assert [(s["occurrence_count"], s["frequency"], s["next_expected_date"]) for s in first] == [
        (s["occurrence_count"], s["frequency"], s["next_expected_date"]) for s in second
    ]


def test_every_consistent_member_is_covered(make_txn, make_frame):
    records = [make_txn(f"t{i}", f"2025-0{i}-12", 50.0 + i, description="Phone", category="Bills") for i in range(1, 6)]

    series = detect_recurring_series(make_frame(records))

    assert len(series) == 1
    assert series[0]["occurrence_count"] == 5
    assert sorted(series[0]["transaction_ids"]) == [f"t{i}" for i in range(1, 6)]


def test_empty_frame_has_no_series(make_frame):
    assert detect_recurring_series(make_frame([])) == []
