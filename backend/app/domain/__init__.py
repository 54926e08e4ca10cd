"""Domain models representing normalized forecast data."""

from .models import ForecastItem, ForecastSource, Snapshot

__all__ = [
    "ForecastItem",
    "ForecastSource",
    "Snapshot",
]
