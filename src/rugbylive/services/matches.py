"""
Match (fixture) ingestion.

Fixtures are only ever resolved through cross-references: the league and
both teams must have been ingested from the same provider first, so a
fixture never creates catalog entities of its own. A fixture whose league,
season or teams are unknown is reported as a ValidationGap.

A fixture that was already imported keeps its id even if the provider
moves the kick-off to another day.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from rugbylive.db.store import SqlCatalogStore
from rugbylive.entities import LEAGUE, MATCH, SEASON, TEAM, Match
from rugbylive.errors import ReconciliationError, ValidationGap
from rugbylive.providers.base import MatchRecord
from rugbylive.reconcile.names import match_id, season_id
from rugbylive.services.base import IngestionStats, persist

logger = logging.getLogger(__name__)


def _mapped(store: SqlCatalogStore, provider: str, provider_id: str, entity_type: str) -> str:
    internal_id = store.get_cross_reference(provider, provider_id, entity_type)
    if internal_id is None:
        raise ValidationGap(f"unknown {provider} {entity_type} {provider_id}")
    return internal_id


def ingest_match(
    store: SqlCatalogStore,
    record: MatchRecord,
    provider: str,
    stats: IngestionStats,
) -> Match:
    """
    Store one provider fixture.

    Raises:
        ValidationGap: league, season or a team is not in the catalog
    """
    league_id = _mapped(store, provider, record.league_provider_id, LEAGUE)
    season_key = season_id(league_id, record.season)
    if store.get_by_canonical_id(SEASON, season_key) is None:
        raise ValidationGap(f"season {season_key} is not in the catalog")
    home_id = _mapped(store, provider, record.home_team_provider_id, TEAM)
    away_id = _mapped(store, provider, record.away_team_provider_id, TEAM)

    existing: Optional[Match] = None
    mapped = store.get_cross_reference(provider, record.provider_id, MATCH)
    if mapped:
        existing = store.get_by_canonical_id(MATCH, mapped)
    internal_id = existing.id if existing else match_id(season_key, home_id, away_id, record.kick_off)
    if existing is None:
        existing = store.get_by_canonical_id(MATCH, internal_id)

    incoming = Match(
        id=internal_id,
        season_id=season_key,
        home_team_id=home_id,
        away_team_id=away_id,
        kick_off=record.kick_off,
        status=record.status,
        home_score=record.home_score,
        away_score=record.away_score,
    )
    result = persist(store, MATCH, existing, incoming, provider, stats)

    previous = store.upsert_cross_reference(provider, record.provider_id, MATCH, internal_id)
    stats.record_conflict(record.provider_id, previous, internal_id)
    return result.entity


def ingest_matches(
    store: SqlCatalogStore,
    records: list[MatchRecord],
    provider: str,
) -> IngestionStats:
    """
    Store provider fixtures against already-reconciled leagues and teams.

    Args:
        store: Catalog store (caller owns the transaction)
        records: Fixtures as decoded by the provider client
        provider: Provider name

    Returns:
        IngestionStats with counts and per-record failures
    """
    stats = IngestionStats(entity_type=MATCH, provider=provider)

    for record in records:
        stats.total += 1
        try:
            with store.atomic():
                ingest_match(store, record, provider, stats)
        except (ReconciliationError, SQLAlchemyError) as e:
            stats.record_failure(e, f"match {record.provider_id}", record.provider_id)

    logger.info(stats.summary())
    return stats
