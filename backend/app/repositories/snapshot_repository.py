"""SQL-backed snapshot cache."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete
from sqlalchemy.orm import Session, sessionmaker

from app.db import session_scope
from app.models import ForecastSnapshotRecord

from .snapshot_store import utcnow


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SnapshotRepository:
    """Synchronous persistence helpers for the ``forecast_snapshots`` table."""

    def __init__(self, session: Session, *, clock: Callable[[], datetime] = utcnow) -> None:
        self._session = session
        self._clock = clock

    def get_payload(self, key: str) -> Any | None:
        record = self._session.get(ForecastSnapshotRecord, key)
        if record is None:
            return None
        if _as_utc(record.expires_at) <= self._clock():
            self._session.delete(record)
            return None
        return record.payload

    def upsert_payload(self, key: str, payload: Any, *, expiration_ttl: int) -> ForecastSnapshotRecord:
        now = self._clock()
        record = self._session.get(ForecastSnapshotRecord, key)
        if record is None:
            record = ForecastSnapshotRecord(snapshot_key=key)
            self._session.add(record)
        record.payload = payload
        record.stored_at = now
        record.expires_at = now + timedelta(seconds=expiration_ttl)
        return record

    def purge_expired(self) -> int:
        result = self._session.execute(
            delete(ForecastSnapshotRecord).where(ForecastSnapshotRecord.expires_at <= self._clock())
        )
        return result.rowcount or 0


class SqlSnapshotStore:
    """SnapshotStore adapter running repository calls off the event loop."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def _get(self, key: str) -> Any | None:
        with session_scope(self._session_factory) as session:
            return SnapshotRepository(session, clock=self._clock).get_payload(key)

    def _put(self, key: str, value: Any, expiration_ttl: int) -> None:
        with session_scope(self._session_factory) as session:
            SnapshotRepository(session, clock=self._clock).upsert_payload(
                key, value, expiration_ttl=expiration_ttl
            )

    async def get(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._get, key)

    async def put(self, key: str, value: Any, *, expiration_ttl: int) -> None:
        await asyncio.to_thread(self._put, key, value, expiration_ttl)

    def _purge_expired(self) -> int:
        with session_scope(self._session_factory) as session:
            return SnapshotRepository(session, clock=self._clock).purge_expired()

    async def purge_expired(self) -> int:
        return await asyncio.to_thread(self._purge_expired)
