"""
League ingestion.

For each provider competition:
1. LeagueMatcher resolves it (cross-reference, direct, alt-name)
2. A match updates the stored league: the provider's spelling becomes an
   alternate name, and its logo is applied subject to the source guard
3. A league known to the static tables but not stored yet is created from
   its profile (e.g. "Super W (W)" the first time RapidAPI lists it)
4. An unknown league is created from provider metadata when its country
   can be determined, otherwise reported as a ValidationGap

Every successful record ends with a cross-reference for the provider id.
Seasons are ingested separately (services.seasons) once leagues exist.
"""

import dataclasses
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from rugbylive.db.store import SqlCatalogStore
from rugbylive.entities import LEAGUE, League
from rugbylive.errors import ReconciliationError, ValidationGap
from rugbylive.providers.base import LeagueRecord
from rugbylive.reconcile.leagues import LeagueMatcher
from rugbylive.reconcile.names import YEAR_TOKEN_RE
from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables
from rugbylive.services.base import IngestionStats, persist, resolve_country

logger = logging.getLogger(__name__)


def _provider_spelling(name: str) -> str:
    return YEAR_TOKEN_RE.sub("", name).strip()


def _with_provider_details(league: League, record: LeagueRecord, provider: str) -> League:
    """Copy of league carrying the provider's spelling and logo."""
    alt_names = list(league.alt_names)
    spelling = _provider_spelling(record.name)
    if spelling and spelling != league.name and spelling not in alt_names:
        alt_names.append(spelling)
    return dataclasses.replace(
        league,
        alt_names=alt_names,
        logo_url=record.logo_url or league.logo_url,
        logo_source=provider if record.logo_url else league.logo_source,
    )


def ingest_league(
    store: SqlCatalogStore,
    record: LeagueRecord,
    provider: str,
    matcher: LeagueMatcher,
    stats: IngestionStats,
    tables: ReferenceTables = DEFAULT_TABLES,
) -> League:
    """
    Reconcile one provider competition and return the stored league.

    Raises:
        ValidationGap: the league is new and no country could be found
    """
    result = matcher.match(record.name, provider, record.provider_id)
    stats.record_conflict(record.provider_id, result.replaced_id, result.internal_id or "")

    existing: Optional[League] = None
    if result.matched:
        existing = store.get_by_canonical_id(LEAGUE, result.internal_id)

    if existing is None:
        country_code = None
        if result.matched:
            # Known to the static tables only; the profile supplies the country
            built = matcher.build_league(result.canonical_name, provider=provider)
        else:
            country = resolve_country(store, record.country_code, record.country_name, tables)
            if country is not None:
                country_code = country.code
            built = matcher.build_league(
                result.canonical_name,
                country_code=country_code,
                logo_url=record.logo_url,
                provider=provider,
            )
        if result.matched and built.id != result.internal_id:
            raise ValidationGap(
                f"league {result.canonical_name!r} resolved to {result.internal_id} "
                f"but builds as {built.id}"
            )
        # Another provider may already have created it under the same id
        existing = store.get_by_canonical_id(LEAGUE, built.id)
        if existing is None:
            built = _with_provider_details(built, record, provider)
            persist(store, LEAGUE, None, built, provider, stats)
            logger.info("Created league %s (%s)", built.name, built.id)
            previous = store.upsert_cross_reference(provider, record.provider_id, LEAGUE, built.id)
            stats.record_conflict(record.provider_id, previous, built.id)
            return built

    incoming = _with_provider_details(existing, record, provider)
    merged = persist(store, LEAGUE, existing, incoming, provider, stats)
    if not result.matched:
        previous = store.upsert_cross_reference(provider, record.provider_id, LEAGUE, existing.id)
        stats.record_conflict(record.provider_id, previous, existing.id)
    return merged.entity


def ingest_leagues(
    store: SqlCatalogStore,
    records: list[LeagueRecord],
    provider: str,
    tables: ReferenceTables = DEFAULT_TABLES,
    matcher: Optional[LeagueMatcher] = None,
) -> IngestionStats:
    """
    Reconcile provider competitions into the league catalog.

    Args:
        store: Catalog store (caller owns the transaction)
        records: Competitions as decoded by the provider client
        provider: Provider name
        tables: Static reference tables
        matcher: LeagueMatcher to use (built from store and tables if omitted)

    Returns:
        IngestionStats with counts, conflicts and per-record failures
    """
    matcher = matcher or LeagueMatcher(store, tables)
    stats = IngestionStats(entity_type=LEAGUE, provider=provider)

    for record in records:
        stats.total += 1
        try:
            with store.atomic():
                ingest_league(store, record, provider, matcher, stats, tables)
        except (ReconciliationError, SQLAlchemyError) as e:
            stats.record_failure(e, record.name, record.provider_id)

    logger.info(stats.summary())
    return stats
