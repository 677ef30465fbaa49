"""Centralised configuration handling for Cadence."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CATEGORY = "Other"
DEFAULT_FREQUENCY_PRIORITY: tuple[str, ...] = ("monthly", "weekly", "quarterly", "annual")
DEFAULT_RELIABILITY: dict[str, float] = {
    "monthly": 0.9,
    "weekly": 0.85,
    "quarterly": 0.8,
    "annual": 0.9,
    "irregular": 0.6,
}


class Settings(BaseSettings):
    """Heuristic thresholds for recurring detection and forecasting.

    Values are sourced from ``CADENCE_*`` environment variables. Complex
    fields (``frequency_priority``, ``reliability``) are read as JSON.
    """

    amount_tolerance: float = Field(default=0.10, ge=0.0)
    min_occurrences: int = Field(default=2, ge=2)
    monthly_day_slack: int = Field(default=3, ge=0)
    annual_day_slack: int = Field(default=5, ge=0)
    quarterly_min_occurrences: int = Field(default=3, ge=2)
    frequency_priority: tuple[str, ...] = DEFAULT_FREQUENCY_PRIORITY
    reliability: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_RELIABILITY))
    trend_window_months: int = Field(default=6, ge=1)
    trend_bucket_count: int = Field(default=3, ge=2)
    forecast_horizon_months: int = Field(default=3, ge=1)
    subscription_keyword: str = "subscription"
    default_category: str = DEFAULT_CATEGORY
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="CADENCE_", extra="ignore")

    @field_validator("frequency_priority")
    @classmethod
    def _check_priority(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        unknown = [name for name in value if name not in DEFAULT_FREQUENCY_PRIORITY]
        if unknown:
            raise ValueError(f"Unknown frequency in priority order: {', '.join(unknown)}")
        if len(set(value)) != len(value):
            raise ValueError("Frequency priority order must not repeat a frequency")
        return value

    @field_validator("reliability")
    @classmethod
    def _merge_reliability(cls, value: dict[str, float]) -> dict[str, float]:
        unknown = [name for name in value if name not in DEFAULT_RELIABILITY]
        if unknown:
            raise ValueError(f"Unknown frequency in reliability table: {', '.join(unknown)}")
        merged = {**DEFAULT_RELIABILITY, **value}
        for name, score in merged.items():
            if not 0.0 <= score <= 1.0:
                raise ValueError(f"Reliability for {name!r} must be within [0, 1], got {score}")
        return merged


@lru_cache
def get_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()
