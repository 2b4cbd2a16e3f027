"""
Shared pieces of the ingestion services.

Every service follows the same per-record loop:

    for record in records:
        try:
            with store.atomic():
                ... match, merge, persist ...
        except (ReconciliationError, SQLAlchemyError) as e:
            stats.record_failure(...)

so one bad record rolls back its own savepoint and is reported, while the
rest of the batch still lands. IngestionStats is the run report for one
entity type from one provider.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from rugbylive.entities import COUNTRY, Country
from rugbylive.errors import Failure, MappingConflict
from rugbylive.reconcile.merge import SPECS, MergeResult, merge_entity
from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables
from rugbylive.db.store import SqlCatalogStore

logger = logging.getLogger(__name__)


@dataclass
class IngestionStats:
    """Statistics from one ingestion run (one entity type, one provider)."""
    entity_type: str
    provider: str
    total: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    queued_for_review: int = 0
    failures: list[Failure] = field(default_factory=list)
    conflicts: list[MappingConflict] = field(default_factory=list)

    def record_failure(
        self,
        error: Exception,
        name: str,
        provider_id: Optional[str] = None,
    ) -> Failure:
        failure = Failure.from_error(error, self.entity_type, self.provider, name, provider_id)
        self.failures.append(failure)
        logger.warning(
            "Failed to ingest %s %r from %s: %s", self.entity_type, name, self.provider, error
        )
        return failure

    def record_conflict(
        self,
        provider_id: str,
        existing_id: Optional[str],
        new_id: str,
        entity_type: Optional[str] = None,
    ) -> None:
        """Note a cross-reference that moved to a different internal id."""
        if not existing_id or existing_id == new_id:
            return
        conflict = MappingConflict(
            self.provider, provider_id, entity_type or self.entity_type, existing_id, new_id
        )
        self.conflicts.append(conflict)
        logger.warning("Mapping conflict: %s", conflict)

    def count(self, result: MergeResult) -> None:
        if result.is_new:
            self.created += 1
        elif result.changes:
            self.updated += 1
        else:
            self.unchanged += 1

    def summary(self) -> str:
        """Return a human-readable summary of ingestion results."""
        lines = [
            f"{self.entity_type.capitalize()} ingestion from {self.provider} complete:",
            f"  Total records processed:  {self.total}",
            f"  Created:                  {self.created}",
            f"  Updated:                  {self.updated}",
            f"  Unchanged:                {self.unchanged}",
            f"  Queued for review:        {self.queued_for_review}",
        ]
        if self.conflicts:
            lines.append(f"  Mapping conflicts: {len(self.conflicts)}")
        if self.failures:
            lines.append(f"  Failures: {len(self.failures)}")
            for failure in self.failures[:5]:
                lines.append(f"    - {failure.name}: [{failure.kind}] {failure.reason}")
            if len(self.failures) > 5:
                lines.append(f"    ... and {len(self.failures) - 5} more")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_type": self.entity_type,
            "provider": self.provider,
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "queued_for_review": self.queued_for_review,
            "failures": [f.to_dict() for f in self.failures],
            "conflicts": [str(c) for c in self.conflicts],
        }


def persist(
    store: SqlCatalogStore,
    entity_type: str,
    existing: Any,
    incoming: Any,
    provider: str,
    stats: IngestionStats,
) -> MergeResult:
    """
    Merge incoming into existing, write it if anything changed and log
    the change.
    """
    result = merge_entity(entity_type, existing, incoming, provider)
    if result.needs_write:
        store.upsert(entity_type, result.entity)
        store.record_change(
            entity_type,
            SPECS[entity_type].key(result.entity),
            provider,
            result.is_new,
            result.changes,
        )
    stats.count(result)
    return result


def resolve_country(
    store: SqlCatalogStore,
    code: str = "",
    name: str = "",
    tables: ReferenceTables = DEFAULT_TABLES,
) -> Optional[Country]:
    """
    Find the catalog country for a provider's code and/or name.

    Two-letter provider codes are translated first; the name is the
    fallback ("World" resolves to the WLD region).
    """
    if code:
        mapped = tables.country_codes.get(code.strip().upper())
        if mapped:
            country = store.get_by_canonical_id(COUNTRY, mapped)
            if country is not None:
                return country
        country = store.find_country(code)
        if country is not None:
            return country
    if name:
        return store.find_country(name)
    return None
