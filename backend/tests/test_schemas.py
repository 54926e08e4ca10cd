from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.domain import ForecastItem, ForecastSource, Snapshot
from app.schemas import ForecastSnapshot


def test_snapshot_from_domain_uses_wire_values():
    """Verify that enum sources are serialized as their plain string values."""
    snapshot = Snapshot(
        date="2024-03-01",
        items=[ForecastItem(source=ForecastSource.KALSHI, title="CPI print above 3% $0.67", probability=67)],
    )
    payload = ForecastSnapshot.from_domain(snapshot).model_dump()
    assert payload == {
        "date": "2024-03-01",
        "items": [{"source": "Kalshi", "title": "CPI print above 3% $0.67", "probability": 67}],
    }


@pytest.mark.parametrize(
    "item",
    [
        {"source": "Manifold", "title": "Gold above $3k", "probability": 10},
        {"source": "Kalshi", "title": "", "probability": 10},
        {"source": "Kalshi", "title": "Gold above $3k", "probability": 101},
    ],
)
def test_invalid_items_are_rejected(item):
    with pytest.raises(ValidationError):
        ForecastSnapshot.model_validate({"date": "2024-03-01", "items": [item]})


def test_date_must_be_iso_day():
    with pytest.raises(ValidationError):
        ForecastSnapshot(date="03/01/2024", items=[])
