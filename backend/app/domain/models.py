"""Typed domain representations shared by ingestion, caching, and the API."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class ForecastSource(str, Enum):
    POLYMARKET = "Polymarket"
    KALSHI = "Kalshi"
    DETERMINISTIC = "Deterministic"


@dataclass(slots=True, frozen=True)
class ForecastItem:
    """One classified, normalized forecast record."""

    source: ForecastSource
    title: str
    probability: int

    def __post_init__(self) -> None:
        if not isinstance(self.source, ForecastSource):
            object.__setattr__(self, "source", ForecastSource(self.source))
        if not self.title:
            raise ValueError("ForecastItem title must not be empty")
        if isinstance(self.probability, bool) or not isinstance(self.probability, int):
            raise ValueError("ForecastItem probability must be an integer")
        if not 0 <= self.probability <= 100:
            raise ValueError(
                f"ForecastItem probability must be within [0, 100], got {self.probability}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "title": self.title,
            "probability": self.probability,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ForecastItem":
        return cls(
            source=ForecastSource(payload["source"]),
            title=str(payload["title"]),
            probability=payload["probability"],
        )


@dataclass(slots=True)
class Snapshot:
    """Date-keyed collection of forecast items served for one UTC day."""

    date: str
    items: list[ForecastItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "items": [item.to_dict() for item in self.items]}
