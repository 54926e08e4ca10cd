from __future__ import annotations

import argparse
import asyncio
import json
from datetime import date
from pathlib import Path

from loguru import logger

from app.core.config import Settings, get_settings
from app.repositories import InMemorySnapshotStore, SnapshotStore
from app.services.snapshot_service import build_snapshot_store
from ingestion.service import SnapshotGenerator, SnapshotRun, utc_date


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate and cache the daily financial forecast snapshot")
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Snapshot day in YYYY-MM-DD (defaults to the current UTC date)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Generate into a throwaway in-memory cache instead of the configured store",
    )
    parser.add_argument(
        "--summary-path",
        type=Path,
        default=None,
        help="Write JSON summary to the specified path",
    )
    args = parser.parse_args(argv)
    if args.date is not None:
        try:
            args.date = date.fromisoformat(args.date).isoformat()
        except ValueError:
            parser.error(f"--date must be formatted as YYYY-MM-DD, got {args.date!r}")
    return args


async def run_daily(
    args: argparse.Namespace,
    settings: Settings,
    *,
    store: SnapshotStore | None = None,
    generator: SnapshotGenerator | None = None,
) -> SnapshotRun:
    day = args.date or utc_date()
    if store is None:
        store = InMemorySnapshotStore() if args.dry_run else build_snapshot_store(settings)
    generator = generator or SnapshotGenerator(store, settings=settings)

    run = await generator.run(day)

    purge = getattr(store, "purge_expired", None)
    if purge is not None and not args.dry_run:
        removed = await purge()
        if removed:
            logger.info("Purged {} expired snapshots", removed)

    if args.summary_path:
        _write_summary(args.summary_path, run)
        logger.info("Wrote snapshot summary to {}", args.summary_path)
    return run


def _write_summary(path: Path, run: SnapshotRun) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(run.to_dict(), indent=2, sort_keys=True, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )


def main(argv: list[str] | None = None) -> SnapshotRun | None:
    args = _parse_args(argv)
    settings = get_settings()
    try:
        return asyncio.run(run_daily(args, settings))
    except Exception:
        logger.exception("Scheduled snapshot generation failed for {}", args.date or utc_date())
        return None


if __name__ == "__main__":
    main()
