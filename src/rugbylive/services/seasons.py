"""
Season ingestion.

Seasons arrive attached to provider competitions (LeagueRecord.seasons), in
one of three conventions:
- a label, "Season 2017/2018" (RapidAPI), normalized per league by
  SeasonNormalizer.normalize
- a start year, 2017 (API-Sports), taken as-is by
  SeasonNormalizer.from_start_year with provider dates overriding the
  default window
- a year range, 2024-2025 (rugbydatabase), resolved per league by
  SeasonNormalizer.from_year_range

The owning league must already be in the catalog (run league ingestion
first); it is found through the provider's league cross-reference.

A season reported as current becomes the league's only current season.
When the provider says nothing about currency, a new season is current if
today falls inside its window, and an existing season keeps its flag.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from rugbylive.db.store import SqlCatalogStore
from rugbylive.entities import LEAGUE, SEASON, League, Season
from rugbylive.errors import ReconciliationError, ValidationGap
from rugbylive.providers.base import LeagueRecord, SeasonRecord
from rugbylive.reconcile.leagues import LeagueMatcher
from rugbylive.reconcile.seasons import SeasonNormalizer
from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables
from rugbylive.services.base import IngestionStats, persist

logger = logging.getLogger(__name__)


def season_provider_id(record: SeasonRecord, normalizer: SeasonNormalizer) -> str:
    """Provider-side season key: competition id plus the provider's own year."""
    provider_year = record.year if record.year is not None else normalizer.parse_label(record.label)
    return f"{record.competition_id}-{provider_year}"


def _find_league(
    store: SqlCatalogStore,
    record: LeagueRecord,
    provider: str,
    matcher: LeagueMatcher,
) -> League:
    league_id = store.get_cross_reference(provider, record.provider_id, LEAGUE)
    if league_id is None:
        result = matcher.match(record.name, provider, record.provider_id)
        league_id = result.internal_id
    league = store.get_by_canonical_id(LEAGUE, league_id) if league_id else None
    if league is None:
        raise ValidationGap(f"league {record.name!r} is not in the catalog")
    return league


def ingest_season(
    store: SqlCatalogStore,
    league: League,
    record: SeasonRecord,
    provider: str,
    normalizer: SeasonNormalizer,
    stats: IngestionStats,
    today: Optional[date] = None,
) -> Season:
    """
    Normalize and store one provider season of a known league.

    Raises:
        ValidationGap: the record has neither a usable label nor a year
    """
    if record.label:
        normalized = normalizer.normalize(league.name, record.label)
    elif record.year is not None and record.end_year is not None:
        normalized = normalizer.from_year_range(
            league.name, record.year, record.end_year, record.start_date, record.end_date
        )
    elif record.year is not None:
        normalized = normalizer.from_start_year(
            league.name, record.year, record.start_date, record.end_date
        )
    else:
        raise ValidationGap(f"season of {league.name!r} has neither label nor year")

    existing = store.get_by_canonical_id(SEASON, normalized.to_season(league.id).id)
    if record.current is not None:
        current = record.current
    elif existing is not None:
        current = existing.current
    else:
        current = normalizer.is_current(normalized, today)

    incoming = normalized.to_season(league.id, current=current)
    result = persist(store, SEASON, existing, incoming, provider, stats)
    if current:
        store.set_current_season(result.entity)

    provider_id = season_provider_id(record, normalizer)
    previous = store.upsert_cross_reference(provider, provider_id, SEASON, incoming.id)
    stats.record_conflict(provider_id, previous, incoming.id)
    return result.entity


def ingest_seasons(
    store: SqlCatalogStore,
    records: list[LeagueRecord],
    provider: str,
    tables: ReferenceTables = DEFAULT_TABLES,
    today: Optional[date] = None,
) -> IngestionStats:
    """
    Ingest the seasons attached to provider competitions.

    Args:
        store: Catalog store (caller owns the transaction)
        records: Competitions carrying their seasons
        provider: Provider name
        tables: Static reference tables (split-year leagues)
        today: Reference date for currency checks (defaults to today)

    Returns:
        IngestionStats with one entry per season record
    """
    normalizer = SeasonNormalizer(tables)
    matcher = LeagueMatcher(store, tables)
    stats = IngestionStats(entity_type=SEASON, provider=provider)

    for record in records:
        if not record.seasons:
            continue
        try:
            with store.atomic():
                league = _find_league(store, record, provider, matcher)
        except (ReconciliationError, SQLAlchemyError) as e:
            stats.total += len(record.seasons)
            for season in record.seasons:
                stats.record_failure(e, f"{record.name} {season.label or season.year}", record.provider_id)
            continue

        for season in record.seasons:
            stats.total += 1
            try:
                with store.atomic():
                    ingest_season(store, league, season, provider, normalizer, stats, today)
            except (ReconciliationError, SQLAlchemyError) as e:
                stats.record_failure(e, f"{record.name} {season.label or season.year}", record.provider_id)

    logger.info(stats.summary())
    return stats
