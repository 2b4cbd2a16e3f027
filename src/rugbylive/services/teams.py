"""
Team ingestion.

For each provider team:
1. A cross-reference for the provider id goes straight to the stored team
2. Otherwise the team's country is resolved (code first, then name) and
   TeamMatcher compares it against the catalog teams of that country
3. A match merges the provider's spelling (alt name) and logo into the team
4. A miss is only allowed to create a team when the caller says so
   (create_unmatched for authoritative imports, or the name is in
   priority_names). Everything else goes to the review queue with fuzzy
   suggestions and is reported as a failure.

Before creating, the derived canonical id is probed: a team that already
exists under exactly that id is updated, not duplicated.
"""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from rugbylive.config import settings
from rugbylive.db.store import SqlCatalogStore
from rugbylive.entities import TEAM, Country, Team
from rugbylive.errors import AmbiguousMatch, NotFound, ReconciliationError, ValidationGap
from rugbylive.providers.base import TeamRecord
from rugbylive.reconcile.names import build_canonical_id, compare_names
from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables
from rugbylive.reconcile.teams import TeamMatcher
from rugbylive.services.base import IngestionStats, persist, resolve_country

logger = logging.getLogger(__name__)


def review_suggestions(
    name: str,
    candidates: Iterable[Team],
    threshold: Optional[float] = None,
    limit: Optional[int] = None,
) -> list[dict[str, Any]]:
    """
    Best fuzzy candidates for an unmatched name, for manual review only.

    Returns:
        [{"id": ..., "name": ..., "score": ...}], best first
    """
    if threshold is None:
        threshold = settings.review_suggestion_threshold
    if limit is None:
        limit = settings.review_max_suggestions

    scored = []
    for team in candidates:
        score = max(
            [compare_names(name, team.name)] + [compare_names(name, alt) for alt in team.alt_names]
        )
        if score >= threshold:
            scored.append({"id": team.id, "name": team.name, "score": round(score, 3)})
    scored.sort(key=lambda s: (-s["score"], s["id"]))
    return scored[:limit]


def _with_provider_details(team: Team, record: TeamRecord, provider: str) -> Team:
    """Incoming version of a stored team: its alt names plus the provider logo."""
    return Team(
        id=team.id,
        name=team.name,
        country_code=team.country_code,
        alt_names=list(team.alt_names),
        logo_url=record.logo_url or team.logo_url,
        logo_source=provider if record.logo_url else team.logo_source,
    )


def ingest_team(
    store: SqlCatalogStore,
    record: TeamRecord,
    provider: str,
    matcher: TeamMatcher,
    stats: IngestionStats,
    create: bool = False,
    tables: ReferenceTables = DEFAULT_TABLES,
) -> Optional[Team]:
    """
    Reconcile one provider team and return the stored team.

    Returns None when the record went to the review queue instead; the
    queue entry and the failure (AmbiguousMatch for strict-match names,
    NotFound otherwise) are recorded here.

    Raises:
        ValidationGap: no country could be resolved for the team
    """
    mapped = store.get_cross_reference(provider, record.provider_id, TEAM)
    if mapped:
        existing = store.get_by_canonical_id(TEAM, mapped)
        if existing is not None:
            incoming = _with_provider_details(existing, record, provider)
            return persist(store, TEAM, existing, incoming, provider, stats).entity

    country: Optional[Country] = resolve_country(
        store, record.country_code, record.country_name, tables
    )
    if country is None:
        raise ValidationGap(
            f"no country for team {record.name!r} ({record.country_code or record.country_name!r})"
        )

    candidates = store.teams_in_country(country.code)
    result = matcher.match(record.name, country.code, candidates)

    team: Optional[Team] = None
    if result.matched:
        existing = next(c for c in candidates if c.id == result.team.id)
        incoming = _with_provider_details(result.team, record, provider)
        team = persist(store, TEAM, existing, incoming, provider, stats).entity
        logger.debug("Matched %r to %s (%s)", record.name, team.id, result.reason)
    elif result.reason == "strict_no_match":
        error = AmbiguousMatch(f"{record.name!r} may only be matched through the nickname table")
        _queue_for_review(store, record, provider, country, result.reason, candidates, stats, error)
        return None
    else:
        name = record.name.strip()
        team_id = build_canonical_id(country.code, name)
        existing = store.get_by_canonical_id(TEAM, team_id)
        if existing is not None:
            incoming = _with_provider_details(existing, record, provider)
            team = persist(store, TEAM, existing, incoming, provider, stats).entity
        elif create:
            incoming = Team(
                id=team_id,
                name=name,
                country_code=country.code,
                logo_url=record.logo_url,
                logo_source=provider if record.logo_url else "",
            )
            team = persist(store, TEAM, None, incoming, provider, stats).entity
            logger.info("Created team %s (%s)", team.name, team.id)
        else:
            error = NotFound(f"no catalog team matches {record.name!r} in {country.name}")
            _queue_for_review(store, record, provider, country, result.reason, candidates, stats, error)
            return None

    previous = store.upsert_cross_reference(provider, record.provider_id, TEAM, team.id)
    stats.record_conflict(record.provider_id, previous, team.id)
    return team


def _queue_for_review(
    store: SqlCatalogStore,
    record: TeamRecord,
    provider: str,
    country: Country,
    reason: str,
    candidates: Iterable[Team],
    stats: IngestionStats,
    error: ReconciliationError,
) -> None:
    store.record_unmatched(
        entity_type=TEAM,
        provider=provider,
        name=record.name,
        country=country.code,
        reason=reason,
        provider_id=record.provider_id,
        suggestions=review_suggestions(record.name, candidates),
    )
    stats.queued_for_review += 1
    stats.record_failure(error, record.name, record.provider_id)


def ingest_teams(
    store: SqlCatalogStore,
    records: list[TeamRecord],
    provider: str,
    priority_names: Iterable[str] = (),
    create_unmatched: bool = False,
    tables: ReferenceTables = DEFAULT_TABLES,
    matcher: Optional[TeamMatcher] = None,
) -> IngestionStats:
    """
    Reconcile provider teams into the team catalog.

    Args:
        store: Catalog store (caller owns the transaction)
        records: Teams as decoded by the provider client
        provider: Provider name
        priority_names: Team names that are created when nothing matches
        create_unmatched: Create every unmatched team (authoritative imports)
        tables: Static reference tables
        matcher: TeamMatcher to use (built from tables if omitted)

    Returns:
        IngestionStats with counts, review-queue entries and failures
    """
    matcher = matcher or TeamMatcher(tables)
    priority = {name.strip() for name in priority_names}
    stats = IngestionStats(entity_type=TEAM, provider=provider)

    for record in records:
        stats.total += 1
        create = create_unmatched or record.name.strip() in priority
        try:
            with store.atomic():
                ingest_team(store, record, provider, matcher, stats, create, tables)
        except (ReconciliationError, SQLAlchemyError) as e:
            stats.record_failure(e, record.name, record.provider_id)

    logger.info(stats.summary())
    return stats
