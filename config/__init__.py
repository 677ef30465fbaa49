"""Engine configuration utilities."""

from .settings import DEFAULT_CATEGORY, DEFAULT_FREQUENCY_PRIORITY, DEFAULT_RELIABILITY, Settings, get_settings

__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_FREQUENCY_PRIORITY",
    "DEFAULT_RELIABILITY",
    "Settings",
    "get_settings",
]
