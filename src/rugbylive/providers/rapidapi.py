"""
RapidAPI "Rugby Live Data" client.

One endpoint matters here: /competitions, which lists every competition
season as a separate row:

    {"results": [{"id": 1236, "name": "Guinness Pro14", "season_name": "Season 2017/2018"}]}

Names are sponsor-heavy and abbreviated ("T14"), so they go through the
league standardization table downstream. Season labels are left as the
provider wrote them; SeasonNormalizer turns them into internal years.
"""

import logging
from typing import Any, Optional

import httpx

from rugbylive.config import settings
from rugbylive.errors import ProviderUnavailable
from rugbylive.providers.base import LeagueRecord, ProviderClient, SeasonRecord

logger = logging.getLogger(__name__)

PROVIDER = "rapidapi"


def parse_competitions(payload: dict[str, Any]) -> list[LeagueRecord]:
    """
    Group competition rows by provider id into LeagueRecords.

    Each row contributes one SeasonRecord carrying its label.
    """
    if not isinstance(payload, dict) or "results" not in payload:
        raise ProviderUnavailable(PROVIDER, "response has no 'results'")

    by_id: dict[str, LeagueRecord] = {}
    for item in payload.get("results") or []:
        if item.get("id") is None or not item.get("name"):
            continue
        competition_id = str(item["id"])
        name = item["name"].strip()
        record = by_id.get(competition_id)
        if record is None:
            record = LeagueRecord(provider_id=competition_id, name=name)
            by_id[competition_id] = record
        if item.get("season_name"):
            record.seasons.append(
                SeasonRecord(
                    competition_id=competition_id,
                    competition_name=name,
                    label=item["season_name"],
                )
            )
    return list(by_id.values())


class RapidApiClient(ProviderClient):
    """
    RapidAPI rugby client.

    Usage:
        async with RapidApiClient() as client:
            leagues = await client.fetch_leagues()
    """

    name = PROVIDER

    def __init__(
        self,
        api_key: Optional[str] = None,
        host: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ):
        host = host or settings.rapidapi_host
        key = api_key if api_key is not None else settings.rapidapi_key
        super().__init__(
            base_url=f"https://{host}",
            headers={"X-RapidAPI-Key": key or "", "X-RapidAPI-Host": host},
            transport=transport,
            **kwargs,
        )

    async def fetch_leagues(self, **kwargs: Any) -> list[LeagueRecord]:
        records = parse_competitions(await self.get_json("/competitions"))
        logger.info("Fetched %d competitions from %s", len(records), PROVIDER)
        return records

    async def fetch_seasons(self, **kwargs: Any) -> list[SeasonRecord]:
        leagues = await self.fetch_leagues()
        return [season for league in leagues for season in league.seasons]
