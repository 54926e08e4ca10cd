"""Deterministic, date-seeded substitute snapshot used when scraping yields nothing."""

from __future__ import annotations

from collections.abc import Iterator

from app.domain import ForecastItem, ForecastSource

from .normalize import round_half_up

FALLBACK_TEMPLATES: tuple[str, ...] = (
    "US CPI YoY ≥ 3.5% on next print",
    "Fed changes rates at next meeting",
    "WTI crude settles above $90 this month",
    "S&P 500 drawdown > 3% this week",
    "EURUSD ends month > 1.11",
    "BTC closes week above prior high",
    "10Y UST yield > 5% this quarter",
    "Core PCE YoY ≥ 3.0% on next print",
)

DEFAULT_FALLBACK_COUNT = 6

_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223
_LCG_MODULUS = 2**32

_MIN_PROBABILITY = 30
_PROBABILITY_SPAN = 50


def date_seed(day: str) -> int:
    return sum(ord(char) for char in day) % _LCG_MODULUS


def lcg_stream(seed: int) -> Iterator[float]:
    """Yield an endless LCG sequence normalized to [0, 1)."""
    state = seed % _LCG_MODULUS
    while True:
        state = (state * _LCG_MULTIPLIER + _LCG_INCREMENT) % _LCG_MODULUS
        yield state / _LCG_MODULUS


def fallback_items(day: str, count: int = DEFAULT_FALLBACK_COUNT) -> list[ForecastItem]:
    stream = lcg_stream(date_seed(day))
    items: list[ForecastItem] = []
    for index in range(count):
        title = FALLBACK_TEMPLATES[index % len(FALLBACK_TEMPLATES)]
        probability = round_half_up(_MIN_PROBABILITY + next(stream) * _PROBABILITY_SPAN)
        items.append(
            ForecastItem(
                source=ForecastSource.DETERMINISTIC,
                title=title,
                probability=probability,
            )
        )
    return items
