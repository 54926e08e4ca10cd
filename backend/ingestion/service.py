from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from loguru import logger

from app.core.config import Settings, get_settings
from app.domain import ForecastItem, ForecastSource
from app.repositories import SnapshotStore

from .client import FetchError, ListingTextClient
from .fallback import fallback_items
from .normalize import dedupe_and_cap
from .parsers import SOURCE_PARSERS, ParserRules, SourceParser, split_lines


def utc_date(moment: datetime | None = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).date().isoformat()


@dataclass(slots=True, frozen=True)
class SourceSpec:
    source: ForecastSource
    url: str
    parser: SourceParser


def default_sources(settings: Settings) -> tuple[SourceSpec, ...]:
    """Scraped sources in merge priority order."""
    return (
        SourceSpec(
            ForecastSource.POLYMARKET,
            str(settings.polymarket_source_url),
            SOURCE_PARSERS[ForecastSource.POLYMARKET],
        ),
        SourceSpec(
            ForecastSource.KALSHI,
            str(settings.kalshi_source_url),
            SOURCE_PARSERS[ForecastSource.KALSHI],
        ),
    )


@dataclass(slots=True)
class SourceOutcome:
    """Settled result of one fetch+parse branch."""

    source: ForecastSource
    url: str
    items: list[ForecastItem] = field(default_factory=list)
    error: str | None = None
    line_count: int = 0

    @property
    def fulfilled(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, object]:
        return {
            "source": self.source.value,
            "url": self.url,
            "status": "fulfilled" if self.fulfilled else "rejected",
            "item_count": len(self.items),
            "line_count": self.line_count,
            "error": self.error,
        }


@dataclass(slots=True)
class SnapshotRun:
    date: str
    items: list[ForecastItem]
    outcomes: list[SourceOutcome]
    used_fallback: bool
    persisted: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "date": self.date,
            "item_count": len(self.items),
            "used_fallback": self.used_fallback,
            "persisted": self.persisted,
            "sources": [outcome.to_dict() for outcome in self.outcomes],
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(slots=True)
class _ParsedSource:
    items: list[ForecastItem]
    line_count: int


class SnapshotGenerator:
    """Fetch both sources concurrently, merge, and cache the day's snapshot."""

    def __init__(
        self,
        store: SnapshotStore,
        *,
        settings: Settings | None = None,
        client_factory: Callable[[], ListingTextClient] | None = None,
        sources: Sequence[SourceSpec] | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings()
        self.client_factory = client_factory or (
            lambda: ListingTextClient.from_settings(self.settings)
        )
        self.sources = tuple(sources) if sources is not None else default_sources(self.settings)
        self.rules = ParserRules.from_settings(self.settings)

    async def _fetch_and_parse(self, client: ListingTextClient, listing: SourceSpec) -> _ParsedSource:
        text = await client.fetch_text(listing.url)
        return _ParsedSource(items=listing.parser(text, self.rules), line_count=len(split_lines(text)))

    async def collect(self) -> list[SourceOutcome]:
        async with self.client_factory() as client:
            results = await asyncio.gather(
                *(self._fetch_and_parse(client, listing) for listing in self.sources),
                return_exceptions=True,
            )

        outcomes: list[SourceOutcome] = []
        for listing, result in zip(self.sources, results):
            if isinstance(result, FetchError):
                outcome = SourceOutcome(listing.source, listing.url, error=result.reason)
                logger.warning("Source {} rejected: {}", listing.source.value, result)
            elif isinstance(result, Exception):
                outcome = SourceOutcome(
                    listing.source, listing.url, error=f"{result.__class__.__name__}: {result}"
                )
                logger.opt(exception=result).warning(
                    "Source {} failed while parsing", listing.source.value
                )
            elif isinstance(result, BaseException):
                raise result
            else:
                outcome = SourceOutcome(
                    listing.source, listing.url, items=result.items, line_count=result.line_count
                )
                if not result.items:
                    logger.warning(
                        "Source {} returned {} lines but no financial items; upstream format may have changed",
                        listing.source.value,
                        result.line_count,
                    )
            outcomes.append(outcome)
        return outcomes

    async def run(self, day: str) -> SnapshotRun:
        outcomes = await self.collect()

        merged: list[ForecastItem] = []
        for outcome in outcomes:
            merged.extend(outcome.items)
        items = dedupe_and_cap(merged, self.settings.snapshot_max_items)

        used_fallback = not items
        if used_fallback:
            logger.info("No scraped items for {}; using deterministic fallback", day)
            items = fallback_items(day, self.settings.fallback_item_count)

        persisted = True
        try:
            await self.store.put(
                day,
                [item.to_dict() for item in items],
                expiration_ttl=self.settings.snapshot_ttl_seconds,
            )
        except Exception:
            persisted = False
            logger.exception("Failed to persist snapshot for {}", day)

        logger.info(
            "Snapshot {} generated items={} fallback={} persisted={}",
            day,
            len(items),
            used_fallback,
            persisted,
        )
        return SnapshotRun(
            date=day,
            items=items,
            outcomes=outcomes,
            used_fallback=used_fallback,
            persisted=persisted,
        )

    async def generate(self, day: str) -> list[ForecastItem]:
        run = await self.run(day)
        return run.items
