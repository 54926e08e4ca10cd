"""Query-by-date access to cached forecast snapshots."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from loguru import logger

from app import schemas
from app.core.config import Settings, get_settings
from app.db import SessionLocal, init_db
from app.domain import ForecastItem, Snapshot
from app.repositories import InMemorySnapshotStore, SnapshotStore, SqlSnapshotStore
from ingestion.service import SnapshotGenerator


def build_snapshot_store(settings: Settings) -> SnapshotStore:
    if settings.snapshot_backend == "memory":
        return InMemorySnapshotStore()
    init_db()
    return SqlSnapshotStore(SessionLocal)


@lru_cache
def get_snapshot_store() -> SnapshotStore:
    return build_snapshot_store(get_settings())


def _decode_items(payload: Any) -> list[ForecastItem]:
    if not isinstance(payload, list):
        raise ValueError(f"Cached snapshot must be a list, got {type(payload).__name__}")
    return [ForecastItem.from_dict(entry) for entry in payload]


class SnapshotService:
    """Serve the snapshot for a day, regenerating on a cache miss or when forced."""

    def __init__(self, store: SnapshotStore, generator: SnapshotGenerator | None = None) -> None:
        self.store = store
        self.generator = generator or SnapshotGenerator(store)

    async def cached_items(self, day: str) -> list[ForecastItem] | None:
        try:
            payload = await self.store.get(day)
        except Exception:
            logger.exception("Snapshot cache read failed for {}; regenerating", day)
            return None
        if payload is None:
            return None
        try:
            return _decode_items(payload)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable cached snapshot for {}: {}", day, exc)
            return None

    async def get_snapshot(self, day: str, *, force: bool = False) -> schemas.ForecastSnapshot:
        items = None if force else await self.cached_items(day)
        if items is None:
            items = await self.generator.generate(day)
        return schemas.ForecastSnapshot.from_domain(Snapshot(date=day, items=items))
