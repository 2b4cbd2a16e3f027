"""
API-Sports rugby API client.

JSON API at https://v1.rugby.api-sports.io, authenticated with the
x-apisports-key header. Every endpoint wraps its payload in
{"response": [...], "errors": [...]}.

API-Sports is the authoritative source for countries and the only provider
of fixtures. Season years are start years (2023 = the 2023-24 Top 14).

The parse_* functions are pure and take the decoded JSON body, so they can
be tested against fixtures without a network.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

import httpx

from rugbylive.config import settings
from rugbylive.errors import ProviderUnavailable
from rugbylive.providers.base import (
    CountryRecord,
    LeagueRecord,
    MatchRecord,
    ProviderClient,
    SeasonRecord,
    TeamRecord,
)

logger = logging.getLogger(__name__)

PROVIDER = "api_sports"

FINISHED_STATUSES = {"FT", "AET", "AW", "Finished", "After Over Time", "Awarded"}
LIVE_STATUSES = {"1H", "2H", "HT", "ET", "BT", "PT", "In Play", "First Half", "Second Half", "Half Time"}


def map_status(long_status: str, short_status: str = "") -> str:
    """Map a provider game status onto 'finished', 'live' or 'upcoming'."""
    if long_status in FINISHED_STATUSES or short_status in FINISHED_STATUSES:
        return "finished"
    if long_status in LIVE_STATUSES or short_status in LIVE_STATUSES:
        return "live"
    return "upcoming"


def _response_items(payload: dict[str, Any]) -> list[dict[str, Any]]:
    errors = payload.get("errors")
    if errors:
        # The API reports auth and quota problems with HTTP 200 + errors
        raise ProviderUnavailable(PROVIDER, f"API errors: {errors}")
    return payload.get("response") or []


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        logger.warning("Unparseable date from %s: %r", PROVIDER, value)
        return None


def _parse_kick_off(value: str) -> datetime:
    kick_off = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if kick_off.tzinfo is not None:
        kick_off = kick_off.astimezone(timezone.utc).replace(tzinfo=None)
    return kick_off


def parse_countries(payload: dict[str, Any]) -> list[CountryRecord]:
    records = []
    for item in _response_items(payload):
        if item.get("id") is None or not item.get("name"):
            continue
        records.append(
            CountryRecord(
                provider_id=str(item["id"]),
                name=item["name"].strip(),
                code=(item.get("code") or "").strip(),
                flag_url=item.get("flag") or "",
            )
        )
    return records


def parse_leagues(payload: dict[str, Any]) -> list[LeagueRecord]:
    records = []
    for item in _response_items(payload):
        if item.get("id") is None or not item.get("name"):
            continue
        league_id = str(item["id"])
        country = item.get("country") or {}
        seasons = [
            SeasonRecord(
                competition_id=league_id,
                competition_name=item["name"],
                year=int(season["season"]),
                current=bool(season.get("current")),
                start_date=_parse_date(season.get("start")),
                end_date=_parse_date(season.get("end")),
            )
            for season in item.get("seasons") or []
            if season.get("season") is not None
        ]
        records.append(
            LeagueRecord(
                provider_id=league_id,
                name=item["name"].strip(),
                country_name=(country.get("name") or "").strip(),
                country_code=(country.get("code") or "").strip(),
                logo_url=item.get("logo") or "",
                type=item.get("type") or "",
                seasons=seasons,
            )
        )
    return records


def parse_teams(payload: dict[str, Any]) -> list[TeamRecord]:
    records = []
    for item in _response_items(payload):
        # Older responses nest the team under "team"
        team = item.get("team") or item
        country = item.get("country") or {}
        if team.get("id") is None or not team.get("name"):
            continue
        records.append(
            TeamRecord(
                provider_id=str(team["id"]),
                name=team["name"].strip(),
                country_name=(country.get("name") or "").strip(),
                country_code=(country.get("code") or "").strip(),
                logo_url=team.get("logo") or "",
            )
        )
    return records


def parse_games(payload: dict[str, Any]) -> list[MatchRecord]:
    records = []
    for item in _response_items(payload):
        teams = item.get("teams") or {}
        home = teams.get("home") or {}
        away = teams.get("away") or {}
        league = item.get("league") or {}
        if item.get("id") is None or not item.get("date") or home.get("id") is None or away.get("id") is None:
            logger.warning("Skipping incomplete game from %s: %s", PROVIDER, item.get("id"))
            continue
        status = item.get("status") or {}
        scores = item.get("scores") or {}
        records.append(
            MatchRecord(
                provider_id=str(item["id"]),
                league_provider_id=str(league.get("id", "")),
                season=int(league.get("season") or 0),
                home_team_provider_id=str(home["id"]),
                away_team_provider_id=str(away["id"]),
                kick_off=_parse_kick_off(item["date"]),
                status=map_status(status.get("long") or "", status.get("short") or ""),
                home_score=scores.get("home"),
                away_score=scores.get("away"),
            )
        )
    return records


class ApiSportsClient(ProviderClient):
    """
    API-Sports rugby client.

    Usage:
        async with ApiSportsClient() as client:
            leagues = await client.fetch_leagues()
    """

    name = PROVIDER

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ):
        key = api_key if api_key is not None else settings.api_sports_key
        super().__init__(
            base_url=base_url or settings.api_sports_base_url,
            headers={"x-apisports-key": key or ""},
            transport=transport,
            **kwargs,
        )

    async def fetch_countries(self) -> list[CountryRecord]:
        return parse_countries(await self.get_json("/countries"))

    async def fetch_leagues(
        self,
        league: Optional[str] = None,
        season: Optional[int] = None,
        **kwargs: Any,
    ) -> list[LeagueRecord]:
        params = {"id": league, "season": season}
        params = {k: v for k, v in params.items() if v is not None}
        return parse_leagues(await self.get_json("/leagues", params or None))

    async def fetch_teams(
        self,
        league: Optional[str] = None,
        season: Optional[int] = None,
        country_id: Optional[str] = None,
        **kwargs: Any,
    ) -> list[TeamRecord]:
        params = {"league": league, "season": season, "country_id": country_id}
        params = {k: v for k, v in params.items() if v is not None}
        return parse_teams(await self.get_json("/teams", params or None))

    async def fetch_matches(
        self,
        league: Optional[str] = None,
        season: Optional[int] = None,
        day: Optional[str] = None,
        **kwargs: Any,
    ) -> list[MatchRecord]:
        params = {"league": league, "season": season, "date": day}
        params = {k: v for k, v in params.items() if v is not None}
        return parse_games(await self.get_json("/games", params or None))
