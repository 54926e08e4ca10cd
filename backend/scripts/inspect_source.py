import argparse
import asyncio
import json
from pathlib import Path

from loguru import logger

from app.core.config import get_settings
from app.domain import ForecastSource
from ingestion.classify import matched_keywords
from ingestion.client import FetchError, ListingTextClient
from ingestion.parsers import SOURCE_EXTRACTORS, SOURCE_PARSERS, ParserRules, scan_candidates, split_lines

SOURCE_CHOICES = {
    "polymarket": ForecastSource.POLYMARKET,
    "kalshi": ForecastSource.KALSHI,
}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show how one upstream listing is parsed")
    parser.add_argument("source", choices=sorted(SOURCE_CHOICES), help="Upstream to inspect")
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Parse a saved text rendering instead of fetching the live page",
    )
    parser.add_argument(
        "--show-unmatched",
        action="store_true",
        help="Also list financial title lines where no probability was found",
    )
    return parser.parse_args()


async def _fetch(url: str) -> str:
    async with ListingTextClient.from_settings(get_settings()) as client:
        return await client.fetch_text(url)


def main() -> None:
    args = parse_args()
    settings = get_settings()
    source = SOURCE_CHOICES[args.source]
    url = str(
        settings.polymarket_source_url
        if source is ForecastSource.POLYMARKET
        else settings.kalshi_source_url
    )

    if args.file:
        text = args.file.read_text(encoding="utf-8")
    else:
        try:
            text = asyncio.run(_fetch(url))
        except FetchError as exc:
            logger.error("Could not fetch {}: {}", url, exc.reason)
            raise SystemExit(1) from exc

    rules = ParserRules.from_settings(settings)
    candidates = list(scan_candidates(text, SOURCE_EXTRACTORS[source], rules))
    items = SOURCE_PARSERS[source](text, rules)

    report: dict[str, object] = {
        "source": source.value,
        "origin": str(args.file) if args.file else url,
        "line_count": len(split_lines(text)),
        "financial_title_lines": len(candidates),
        "matched_lines": sum(1 for candidate in candidates if candidate.matched),
        "items": [item.to_dict() for item in items],
    }
    if args.show_unmatched:
        unmatched = []
        for candidate in candidates:
            if candidate.matched:
                continue
            included, _ = matched_keywords(candidate.title)
            unmatched.append(
                {"line": candidate.line_number, "title": candidate.title, "keywords": included}
            )
        report["unmatched"] = unmatched

    print(json.dumps(report, indent=2, ensure_ascii=False))
    logger.info("Parsed {} items from {}", len(items), report["origin"])


if __name__ == "__main__":
    main()
