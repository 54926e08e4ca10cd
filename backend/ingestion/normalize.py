from __future__ import annotations

import math
from typing import Iterable

from app.domain import ForecastItem, ForecastSource

DEFAULT_TITLE_MAX_LENGTH = 160


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with ties going up, unlike ``round``."""
    return int(math.floor(value + 0.5))


def normalize_title(title: str, *, max_length: int = DEFAULT_TITLE_MAX_LENGTH) -> str:
    return title.strip()[:max_length]


def normalize_probability(value: float) -> int:
    return int(clamp(round_half_up(value), 0, 100))


def normalize_item(
    source: ForecastSource,
    title: str,
    probability: float,
    *,
    max_title_length: int = DEFAULT_TITLE_MAX_LENGTH,
) -> ForecastItem | None:
    """Build a ForecastItem, or return None when the title is blank."""

    normalized_title = normalize_title(title, max_length=max_title_length)
    if not normalized_title:
        return None
    return ForecastItem(
        source=source,
        title=normalized_title,
        probability=normalize_probability(probability),
    )


def dedupe_key(item: ForecastItem) -> str:
    return f"{item.source.value}:{item.title}".lower()


def dedupe_items(items: Iterable[ForecastItem]) -> list[ForecastItem]:
    seen: set[str] = set()
    unique: list[ForecastItem] = []
    for item in items:
        key = dedupe_key(item)
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


def dedupe_and_cap(items: Iterable[ForecastItem], limit: int) -> list[ForecastItem]:
    return dedupe_items(items)[: max(limit, 0)]
