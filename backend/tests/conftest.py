from __future__ import annotations

import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SNAPSHOT_BACKEND", "memory")

import httpx
import pytest

from app.core.config import Settings
from app.repositories import InMemorySnapshotStore
from ingestion.client import ListingTextClient

DATA_DIR = Path(__file__).parent / "data"

POLYMARKET_URL = "https://r.jina.ai/http://polymarket.com/markets"
KALSHI_URL = "https://r.jina.ai/http://kalshi.com/markets"


async def no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def polymarket_text() -> str:
    return (DATA_DIR / "polymarket_markets.txt").read_text(encoding="utf-8")


@pytest.fixture
def kalshi_text() -> str:
    return (DATA_DIR / "kalshi_markets.txt").read_text(encoding="utf-8")


@pytest.fixture
def test_settings(monkeypatch) -> Settings:
    settings = Settings(
        database_url="sqlite:///:memory:",
        snapshot_backend="memory",
        polymarket_source_url=POLYMARKET_URL,
        kalshi_source_url=KALSHI_URL,
    )
    monkeypatch.setattr("app.core.config.get_settings", lambda: settings)
    monkeypatch.setattr("app.core.config.settings", settings)
    return settings


@pytest.fixture
def memory_store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def make_client_factory(test_settings):
    """Build client factories whose requests are answered by ``handler``."""

    def factory(handler, *, sleep=no_sleep):
        transport = httpx.MockTransport(handler)
        return lambda: ListingTextClient.from_settings(test_settings, transport=transport, sleep=sleep)

    return factory


@pytest.fixture
def routed_handler(polymarket_text, kalshi_text):
    """Serve the sample listings, optionally failing one or both sources."""

    def build(*, fail: set[str] | frozenset[str] = frozenset(), calls: list[str] | None = None):
        def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            if calls is not None:
                calls.append(url)
            if "polymarket" in url:
                if "polymarket" in fail:
                    return httpx.Response(503, text="unavailable")
                return httpx.Response(200, text=polymarket_text)
            if "kalshi" in url:
                if "kalshi" in fail:
                    raise httpx.ConnectError("connection refused", request=request)
                return httpx.Response(200, text=kalshi_text)
            return httpx.Response(404)

        return handler

    return build
