from typing import Literal

from pydantic import BaseModel, Field

from .domain import Snapshot


class ForecastItem(BaseModel):
    source: Literal["Polymarket", "Kalshi", "Deterministic"]
    title: str = Field(min_length=1)
    probability: int = Field(ge=0, le=100)


class ForecastSnapshot(BaseModel):
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    items: list[ForecastItem] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, snapshot: Snapshot) -> "ForecastSnapshot":
        return cls.model_validate(snapshot.to_dict())
