from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import Depends, FastAPI, Query

from . import schemas
from .core.config import settings
from .services.snapshot_service import SnapshotService, get_snapshot_store
from ingestion.service import utc_date

app = FastAPI(title="Willow Forecasts API", version="0.1.0", debug=settings.debug)


@app.get("/healthz", tags=["system"])
def healthcheck() -> dict[str, str]:
    """Basic readiness probe consumed by infrastructure monitors."""

    return {"status": "ok"}


def _snapshot_service() -> SnapshotService:
    """Provide the snapshot service wired to the configured cache."""

    return SnapshotService(get_snapshot_store())


@app.get("/api/forecasts", response_model=schemas.ForecastSnapshot, tags=["forecasts"])
async def get_forecasts(
    *,
    day: Annotated[
        date | None,
        Query(alias="date", description="UTC calendar day (YYYY-MM-DD); defaults to today"),
    ] = None,
    force: Annotated[bool, Query(description="Bypass the cache and regenerate")] = False,
    service: SnapshotService = Depends(_snapshot_service),
):
    """Return the day's financial forecast snapshot, generating it when missing."""

    target = day.isoformat() if day else utc_date()
    return await service.get_snapshot(target, force=force)
