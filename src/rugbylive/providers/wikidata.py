"""
Wikidata SPARQL client for rugby union clubs.

Queries instances of "rugby union club" (Q476028) with their country and,
where present, their logo image (P154). Wikidata is a supplementary team
source: it never creates teams on its own unless the import asks for it,
but its spellings are recorded as alternate names when they match.
"""

import logging
from typing import Any, Optional

import httpx

from rugbylive.config import settings
from rugbylive.errors import ProviderUnavailable
from rugbylive.providers.base import ProviderClient, TeamRecord

logger = logging.getLogger(__name__)

PROVIDER = "wikidata"

ENTITY_PREFIX = "http://www.wikidata.org/entity/"

TEAMS_QUERY = """
SELECT ?team ?teamLabel ?country ?countryLabel ?logo WHERE {
  ?team wdt:P31 wd:Q476028;
        wdt:P17 ?country.
  OPTIONAL { ?team wdt:P154 ?logo. }
  SERVICE wikibase:label { bd:serviceParam wikibase:language "[AUTO_LANGUAGE],en". }
}
LIMIT %d
"""


def entity_id(uri: str) -> str:
    """'http://www.wikidata.org/entity/Q123' -> 'Q123'"""
    return uri.rsplit("/", 1)[-1] if uri.startswith(ENTITY_PREFIX) else uri


def _value(binding: dict[str, Any], key: str) -> str:
    return (binding.get(key) or {}).get("value", "")


def parse_team_bindings(payload: dict[str, Any]) -> list[TeamRecord]:
    try:
        bindings = payload["results"]["bindings"]
    except (KeyError, TypeError) as e:
        raise ProviderUnavailable(PROVIDER, f"unexpected SPARQL response: {e}") from e

    records = []
    seen: set[str] = set()
    for binding in bindings:
        team_id = entity_id(_value(binding, "team"))
        name = _value(binding, "teamLabel").strip()
        # Unlabelled items come back with their Q-id as the label
        if not team_id or not name or name == team_id:
            continue
        # One row per country/logo combination; keep the first
        if team_id in seen:
            continue
        seen.add(team_id)
        records.append(
            TeamRecord(
                provider_id=team_id,
                name=name,
                country_name=_value(binding, "countryLabel").strip(),
                logo_url=_value(binding, "logo"),
            )
        )
    return records


class WikidataClient(ProviderClient):
    """
    Wikidata SPARQL endpoint client.

    Usage:
        async with WikidataClient() as client:
            teams = await client.fetch_teams(limit=500)
    """

    name = PROVIDER

    def __init__(
        self,
        endpoint: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ):
        url = httpx.URL(endpoint or settings.wikidata_sparql_endpoint)
        self.path = url.path or "/sparql"
        super().__init__(
            base_url=f"{url.scheme}://{url.netloc.decode()}",
            headers={
                "Accept": "application/sparql-results+json",
                "User-Agent": settings.provider_user_agent,
            },
            transport=transport,
            **kwargs,
        )

    async def fetch_teams(self, limit: int = 1000, **kwargs: Any) -> list[TeamRecord]:
        payload = await self.get_json(self.path, {"query": TEAMS_QUERY % limit, "format": "json"})
        records = parse_team_bindings(payload)
        logger.info("Fetched %d clubs from %s", len(records), PROVIDER)
        return records
