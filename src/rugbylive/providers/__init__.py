"""
Provider clients for external rugby data sources.

Each client fetches one provider's payloads and returns the plain record
dataclasses from providers.base; matching against the catalog happens in
rugbylive.reconcile and rugbylive.services.

Usage:
    from rugbylive.providers import ApiSportsClient

    async with ApiSportsClient() as client:
        countries = await client.fetch_countries()
"""

from rugbylive.providers.apisports import ApiSportsClient
from rugbylive.providers.base import (
    CountryRecord,
    LeagueRecord,
    MatchRecord,
    ProviderClient,
    SeasonRecord,
    TeamRecord,
    with_retry,
)
from rugbylive.providers.rapidapi import RapidApiClient
from rugbylive.providers.rugbydb import RugbyDatabaseClient
from rugbylive.providers.wikidata import WikidataClient

# Provider name -> client class
CLIENTS: dict[str, type[ProviderClient]] = {
    ApiSportsClient.name: ApiSportsClient,
    RapidApiClient.name: RapidApiClient,
    RugbyDatabaseClient.name: RugbyDatabaseClient,
    WikidataClient.name: WikidataClient,
}

__all__ = [
    "ApiSportsClient",
    "CLIENTS",
    "CountryRecord",
    "LeagueRecord",
    "MatchRecord",
    "ProviderClient",
    "RapidApiClient",
    "RugbyDatabaseClient",
    "SeasonRecord",
    "TeamRecord",
    "WikidataClient",
    "with_retry",
]
