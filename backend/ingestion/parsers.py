"""Forgiving line-oriented parsers for scraped market listing text.

Upstream pages arrive as plain-text renderings with no stable structure, so
both parsers walk the text line by line: a line that looks like a financial
market title is paired with a probability found on the same line or on the
line right after it. Anything that does not match is skipped.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from app.core.config import Settings
from app.domain import ForecastItem, ForecastSource

from .classify import is_financial_title
from .normalize import clamp, normalize_item, round_half_up

# Digits match ASCII 0-9 only.
PERCENT_PATTERN = re.compile(r"([0-9]{1,3})\s?%")
DOLLAR_PATTERN = re.compile(r"\$([0-1]?[0-9]?\.[0-9]{2})")
BARE_PERCENT_PATTERN = re.compile(r"^[0-9]+%$")
BARE_AMOUNT_PATTERN = re.compile(r"^\$?[0-9]+(\.[0-9]+)?$")
LINE_BREAK_PATTERN = re.compile(r"\r?\n")

MAX_CONTRACT_PRICE = 0.99


@dataclass(slots=True, frozen=True)
class ParserRules:
    min_title_length: int = 12
    max_title_length: int = 160
    max_candidates: int = 64

    @classmethod
    def from_settings(cls, settings: Settings) -> "ParserRules":
        return cls(
            min_title_length=settings.parser_min_title_length,
            max_title_length=settings.title_max_length,
            max_candidates=settings.parser_max_candidates,
        )


@dataclass(slots=True, frozen=True)
class CandidateMatch:
    """A financial title line with the probability found next to it, if any."""

    line_number: int
    title: str
    probability: int | None

    @property
    def matched(self) -> bool:
        return self.probability is not None


ProbabilityExtractor = Callable[[str, str], int | None]
SourceParser = Callable[[str, ParserRules | None], list[ForecastItem]]


def split_lines(text: str) -> list[str]:
    return [line.strip() for line in LINE_BREAK_PATTERN.split(text or "") if line.strip()]


def looks_like_title(line: str, rules: ParserRules | None = None) -> bool:
    rules = rules or ParserRules()
    if not line or len(line) <= rules.min_title_length:
        return False
    if BARE_PERCENT_PATTERN.match(line) or BARE_AMOUNT_PATTERN.match(line):
        return False
    return True


def grab_percent(line: str) -> int | None:
    match = PERCENT_PATTERN.search(line or "")
    if not match:
        return None
    return int(clamp(int(match.group(1)), 0, 100))


def grab_dollar(line: str) -> float | None:
    match = DOLLAR_PATTERN.search(line or "")
    if not match:
        return None
    return clamp(float(match.group(1)), 0.0, MAX_CONTRACT_PRICE)


def percent_probability(line: str, following: str) -> int | None:
    value = grab_percent(line)
    if value is None:
        value = grab_percent(following)
    return value


def price_probability(line: str, following: str) -> int | None:
    price = grab_dollar(line)
    if price is None:
        price = grab_dollar(following)
    if price is None:
        return None
    return int(clamp(round_half_up(price * 100), 0, 100))


def scan_candidates(
    text: str,
    extract: ProbabilityExtractor,
    rules: ParserRules | None = None,
) -> Iterator[CandidateMatch]:
    """Yield every financial title line with its optional probability."""

    rules = rules or ParserRules()
    lines = split_lines(text)
    for index, line in enumerate(lines):
        if not looks_like_title(line, rules) or not is_financial_title(line):
            continue
        following = lines[index + 1] if index + 1 < len(lines) else ""
        yield CandidateMatch(
            line_number=index,
            title=line,
            probability=extract(line, following),
        )


def _collect(
    text: str,
    source: ForecastSource,
    extract: ProbabilityExtractor,
    rules: ParserRules | None,
) -> list[ForecastItem]:
    rules = rules or ParserRules()
    items: list[ForecastItem] = []
    for candidate in scan_candidates(text, extract, rules):
        if len(items) >= rules.max_candidates:
            break
        if not candidate.matched:
            continue
        item = normalize_item(
            source,
            candidate.title,
            candidate.probability,
            max_title_length=rules.max_title_length,
        )
        if item is not None:
            items.append(item)
    return items


def parse_polymarket(text: str, rules: ParserRules | None = None) -> list[ForecastItem]:
    return _collect(text, ForecastSource.POLYMARKET, percent_probability, rules)


def parse_kalshi(text: str, rules: ParserRules | None = None) -> list[ForecastItem]:
    return _collect(text, ForecastSource.KALSHI, price_probability, rules)


SOURCE_PARSERS: dict[ForecastSource, SourceParser] = {
    ForecastSource.POLYMARKET: parse_polymarket,
    ForecastSource.KALSHI: parse_kalshi,
}

SOURCE_EXTRACTORS: dict[ForecastSource, ProbabilityExtractor] = {
    ForecastSource.POLYMARKET: percent_probability,
    ForecastSource.KALSHI: price_probability,
}
