from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable

import httpx
from loguru import logger

from app.core.config import Settings, settings

NO_CACHE_HEADERS = {
    "cache-control": "no-cache",
    "pragma": "no-cache",
}


class FetchError(Exception):
    """Raised once every attempt to fetch a source has failed."""

    def __init__(self, url: str, attempts: int, reason: str) -> None:
        super().__init__(f"Fetching {url} failed after {attempts} attempt(s): {reason}")
        self.url = url
        self.attempts = attempts
        self.reason = reason


def _retry_delay_seconds(window: tuple[float, float]) -> float:
    low, high = window
    return random.uniform(low, high)


def _failure_reason(exc: Exception) -> str:
    message = str(exc)
    if message:
        return f"{exc.__class__.__name__}: {message}"
    return exc.__class__.__name__


class ListingTextClient:
    """Fetch plain-text renderings of market listing pages with bounded retries."""

    def __init__(
        self,
        *,
        max_attempts: int | None = None,
        retry_delay_window: tuple[float, float] | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts is None:
            max_attempts = settings.fetch_max_attempts
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.retry_delay_window = (
            settings.fetch_retry_delay_window if retry_delay_window is None else retry_delay_window
        )
        self.timeout = settings.fetch_timeout_seconds if timeout is None else timeout
        if user_agent is None:
            user_agent = settings.fetch_user_agent
        headers = {"user-agent": user_agent, **NO_CACHE_HEADERS}
        self._sleep = sleep
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            headers=headers,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, config: Settings, **kwargs) -> "ListingTextClient":
        return cls(
            max_attempts=config.fetch_max_attempts,
            retry_delay_window=config.fetch_retry_delay_window,
            timeout=config.fetch_timeout_seconds,
            user_agent=config.fetch_user_agent,
            **kwargs,
        )

    async def fetch_text(self, url: str) -> str:
        last_reason = "no attempts made"
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await self.client.get(url)
            except httpx.HTTPError as exc:
                last_reason = _failure_reason(exc)
            else:
                if response.is_success:
                    return response.text
                last_reason = f"HTTP {response.status_code}"

            logger.warning(
                "Source fetch failed url={} attempt={}/{} reason={}",
                url,
                attempt,
                self.max_attempts,
                last_reason,
            )
            if attempt < self.max_attempts:
                await self._sleep(_retry_delay_seconds(self.retry_delay_window))

        raise FetchError(url, self.max_attempts, last_reason)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "ListingTextClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
