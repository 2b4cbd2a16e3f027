"""
Base provider client and common data structures.

Provides the foundation for all provider clients (API-Sports, rugbydatabase,
RapidAPI, Wikidata). Each client fetches one provider's payloads and decodes
them into the plain record dataclasses below; the reconcile package only
ever sees these records.

Key features:
- Async context manager around one httpx.AsyncClient
- Fixed request cadence per provider (RateLimiter)
- Bounded retry with capped linear backoff on transient failures
- Failures that survive the retries surface as ProviderUnavailable
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx

from rugbylive.config import settings
from rugbylive.errors import ProviderUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Records
# =============================================================================

@dataclass
class CountryRecord:
    provider_id: str
    name: str
    code: str = ""
    flag_url: str = ""


@dataclass
class SeasonRecord:
    """
    A season as a provider reports it.

    Exactly one of `label` ("Season 2017/2018") or `year` is expected to be
    set. `year` is the start year; `end_year` is set when the provider only
    knows a year range ("2024-2025") and not which end the season is
    named after.
    """
    competition_id: str
    competition_name: str
    label: Optional[str] = None
    year: Optional[int] = None
    end_year: Optional[int] = None
    current: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass
class LeagueRecord:
    provider_id: str
    name: str
    country_name: str = ""
    country_code: str = ""
    logo_url: str = ""
    type: str = ""
    seasons: list[SeasonRecord] = field(default_factory=list)


@dataclass
class TeamRecord:
    provider_id: str
    name: str
    country_name: str = ""
    country_code: str = ""
    logo_url: str = ""


@dataclass
class MatchRecord:
    provider_id: str
    league_provider_id: str
    season: int
    home_team_provider_id: str
    away_team_provider_id: str
    kick_off: datetime
    status: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None


# =============================================================================
# Pacing and retries
# =============================================================================

class RateLimiter:
    """Enforces a minimum interval between consecutive requests."""

    def __init__(self, min_interval: float):
        self.min_interval = min_interval
        self._last_request: Optional[float] = None
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        async with self._lock:
            if self._last_request is not None:
                remaining = self.min_interval - (time.monotonic() - self._last_request)
                if remaining > 0:
                    await asyncio.sleep(remaining)
            self._last_request = time.monotonic()


def is_transient(error: Exception) -> bool:
    """Network errors, timeouts, 429 and 5xx are worth retrying; anything else is not."""
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return status == 429 or status >= 500
    return isinstance(error, httpx.TransportError)


async def with_retry(
    coro_func: Callable[[], Awaitable[T]],
    max_attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    max_delay: Optional[float] = None,
    description: str = "Request",
    retry_if: Callable[[Exception], bool] = is_transient,
) -> T:
    """
    Execute an async operation with capped linear backoff retry.

    Pass a callable that creates a coroutine, not a coroutine: each attempt
    needs a fresh one.

    Args:
        coro_func: Callable that returns a coroutine (e.g. lambda: client.get(url))
        max_attempts: Maximum attempts (default from settings)
        base_delay: Delay after the first failure; attempt n waits n * base_delay
        max_delay: Upper bound for a single delay
        description: Description for logging
        retry_if: Predicate deciding whether an error is worth retrying

    Returns:
        Result of the coroutine

    Raises:
        Exception: The first non-retryable error, or the last error once
                   all attempts are used
    """
    if max_attempts is None:
        max_attempts = settings.provider_max_attempts
    if base_delay is None:
        base_delay = settings.provider_retry_delay_seconds
    if max_delay is None:
        max_delay = settings.provider_retry_max_delay_seconds

    last_error: Optional[Exception] = None

    for attempt in range(max_attempts):
        try:
            return await coro_func()
        except Exception as e:
            if not retry_if(e):
                raise
            last_error = e

            if attempt < max_attempts - 1:
                delay = min(base_delay * (attempt + 1), max_delay)
                logger.warning(
                    "[Retry %d/%d] %s failed: %s. Retrying in %.1fs...",
                    attempt + 1, max_attempts, description, e, delay,
                )
                await asyncio.sleep(delay)

    raise last_error


# =============================================================================
# Client base
# =============================================================================

class ProviderClient:
    """
    Base class for provider clients.

    Subclasses set `name` and implement whichever fetch_* methods the
    provider supports. `required_options` lists, per fetch method, the
    keyword arguments it cannot run without. Use as an async context
    manager:

        async with ApiSportsClient() as client:
            countries = await client.fetch_countries()
    """

    name = "provider"
    required_options: dict[str, tuple[str, ...]] = {}

    def __init__(
        self,
        base_url: str,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        min_interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.base_url = base_url
        self.headers = headers or {}
        self._transport = transport
        self.timeout = settings.provider_timeout_seconds if timeout is None else timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.rate_limiter = RateLimiter(
            settings.provider_min_interval_seconds if min_interval is None else min_interval
        )
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ProviderClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, path: str, params: Optional[dict[str, Any]] = None) -> httpx.Response:
        if self._client is None:
            raise RuntimeError(f"{self.name} client used outside 'async with'")
        await self.rate_limiter.wait()
        response = await self._client.get(path, params=params)
        response.raise_for_status()
        return response

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> httpx.Response:
        """
        Rate-limited GET with retries.

        Raises:
            ProviderUnavailable: the request kept failing or failed permanently
        """
        try:
            return await with_retry(
                lambda: self._request(path, params),
                max_attempts=self.max_attempts,
                base_delay=self.retry_delay,
                description=f"{self.name} GET {path}",
            )
        except httpx.HTTPError as e:
            raise ProviderUnavailable(self.name, str(e)) from e

    async def get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        response = await self.get(path, params)
        try:
            return response.json()
        except ValueError as e:
            raise ProviderUnavailable(self.name, f"invalid JSON from {path}: {e}") from e

    async def get_text(self, path: str, params: Optional[dict[str, Any]] = None) -> str:
        response = await self.get(path, params)
        return response.text

    # =========================================================================
    # Fetch methods - override the ones the provider supports
    # =========================================================================

    async def fetch_countries(self) -> list[CountryRecord]:
        raise NotImplementedError(f"{self.name} does not provide countries")

    async def fetch_leagues(self, **kwargs: Any) -> list[LeagueRecord]:
        raise NotImplementedError(f"{self.name} does not provide leagues")

    async def fetch_seasons(self, **kwargs: Any) -> list[SeasonRecord]:
        raise NotImplementedError(f"{self.name} does not provide seasons")

    async def fetch_teams(self, **kwargs: Any) -> list[TeamRecord]:
        raise NotImplementedError(f"{self.name} does not provide teams")

    async def fetch_matches(self, **kwargs: Any) -> list[MatchRecord]:
        raise NotImplementedError(f"{self.name} does not provide matches")
