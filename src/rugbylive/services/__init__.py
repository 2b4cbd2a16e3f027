"""
Rugby Live services - ingestion of provider records into the catalog.

Each service takes decoded provider records, runs them through the
reconcile package and writes the results through the catalog store:

Pipeline stages:
1. Countries: provider countries plus the static regions
2. Leagues: competitions matched, created or updated
3. Seasons: season labels/years normalized per league
4. Teams: teams matched, created or queued for review
5. Matches: fixtures resolved through cross-references

Usage:
    from rugbylive.services import ingest_teams

    with get_session() as session:
        stats = ingest_teams(SqlCatalogStore(session), records, "api_sports")
"""

from rugbylive.services.base import IngestionStats, persist, resolve_country
from rugbylive.services.countries import ingest_countries, seed_regions
from rugbylive.services.leagues import ingest_league, ingest_leagues
from rugbylive.services.matches import ingest_match, ingest_matches
from rugbylive.services.seasons import ingest_season, ingest_seasons
from rugbylive.services.teams import ingest_team, ingest_teams, review_suggestions

__all__ = [
    # Shared
    "IngestionStats",
    "persist",
    "resolve_country",
    # Countries
    "ingest_countries",
    "seed_regions",
    # Leagues
    "ingest_league",
    "ingest_leagues",
    # Seasons
    "ingest_season",
    "ingest_seasons",
    # Teams
    "ingest_team",
    "ingest_teams",
    "review_suggestions",
    # Matches
    "ingest_match",
    "ingest_matches",
]
