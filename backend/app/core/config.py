from functools import lru_cache
from typing import Any

from pydantic import AnyUrl, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SNAPSHOT_BACKENDS = {"database", "memory"}


def _ensure_sqlalchemy_postgres_scheme(value: str) -> str:
    scheme, sep, rest = value.partition("://")
    if sep and scheme.lower() in {"postgres", "postgresql"}:
        return f"postgresql+psycopg://{rest}"
    return value


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = Field(False, description="Enable FastAPI debug mode")
    database_url: AnyUrl | str = Field(
        default="sqlite:///./data/forecasts.db",
        description="SQLAlchemy compatible database URL backing the snapshot cache",
    )
    snapshot_backend: str = Field(
        default="database",
        description="Snapshot cache implementation (database|memory)",
    )
    polymarket_source_url: AnyUrl = Field(
        default="https://r.jina.ai/http://polymarket.com/markets",
        description="Plain-text rendering of the Polymarket market listing",
    )
    kalshi_source_url: AnyUrl = Field(
        default="https://r.jina.ai/http://kalshi.com/markets",
        description="Plain-text rendering of the Kalshi market listing",
    )
    fetch_max_attempts: int = Field(
        default=3,
        description="Number of attempts per source before giving up",
        ge=1,
    )
    fetch_retry_delay_min_seconds: float = Field(
        default=0.25,
        description="Lower bound of the randomized delay between fetch attempts",
        ge=0,
    )
    fetch_retry_delay_max_seconds: float = Field(
        default=0.65,
        description="Upper bound of the randomized delay between fetch attempts",
        ge=0,
    )
    fetch_timeout_seconds: float = Field(
        default=20.0,
        description="Per-request timeout for source fetches",
        gt=0,
    )
    fetch_user_agent: str = Field(
        default="Mozilla/5.0 WillowForecastBot/1.0",
        description="User agent sent to upstream sources",
    )
    snapshot_max_items: int = Field(
        default=20,
        description="Maximum number of items kept in a daily snapshot",
        ge=1,
    )
    snapshot_ttl_seconds: int = Field(
        default=60 * 60 * 24 * 14,
        description="Time-to-live applied to cached snapshots",
        ge=1,
    )
    parser_max_candidates: int = Field(
        default=64,
        description="Maximum number of items a single source parser emits",
        ge=1,
    )
    parser_min_title_length: int = Field(
        default=12,
        description="Lines must be strictly longer than this to count as titles",
        ge=0,
    )
    title_max_length: int = Field(
        default=160,
        description="Titles are truncated to this many characters",
        ge=1,
    )
    fallback_item_count: int = Field(
        default=6,
        description="Number of synthetic items produced by the deterministic fallback",
        ge=1,
    )

    @field_validator("snapshot_backend")
    @classmethod
    def _validate_snapshot_backend(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in SNAPSHOT_BACKENDS:
            raise ValueError(
                "snapshot_backend must be one of: " + ", ".join(sorted(SNAPSHOT_BACKENDS))
            )
        return normalized

    @field_validator("database_url", mode="before")
    @classmethod
    def _normalize_postgres_urls(cls, value: Any) -> Any:
        if value is None or not isinstance(value, str):
            return value
        if value.startswith("postgres://"):
            return "postgresql://" + value[len("postgres://") :]
        return value

    @model_validator(mode="after")
    def _validate_retry_window(self) -> "Settings":
        if self.fetch_retry_delay_max_seconds < self.fetch_retry_delay_min_seconds:
            raise ValueError(
                "fetch_retry_delay_max_seconds must be >= fetch_retry_delay_min_seconds"
            )
        return self

    @property
    def resolved_database_url(self) -> str:
        return _ensure_sqlalchemy_postgres_scheme(str(self.database_url))

    @property
    def fetch_retry_delay_window(self) -> tuple[float, float]:
        return (self.fetch_retry_delay_min_seconds, self.fetch_retry_delay_max_seconds)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
