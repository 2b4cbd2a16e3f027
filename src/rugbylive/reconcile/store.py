"""
Storage contracts consumed by the reconcile package.

The reconcile components never talk to a database directly. They call an
object satisfying CatalogStore; rugbylive.db.store.SqlCatalogStore is the
SQLAlchemy implementation.

Cross-reference contract:
- get_cross_reference returns the internal id mapped to a
  (provider, provider_id, entity_type) triple, or None.
- upsert_cross_reference is idempotent. Writing a different internal id
  for an existing triple replaces it (the storage layer enforces one row
  per triple) and returns the id that was replaced, so the caller can
  report a mapping conflict instead of letting it pass silently.
"""

from typing import Any, Optional, Protocol, Sequence

from rugbylive.entities import Country, League, Season, Team


class CrossReferenceStore(Protocol):
    def get_cross_reference(
        self, provider: str, provider_id: str, entity_type: str
    ) -> Optional[str]:
        ...

    def upsert_cross_reference(
        self, provider: str, provider_id: str, entity_type: str, internal_id: str
    ) -> Optional[str]:
        ...


class CatalogStore(CrossReferenceStore, Protocol):
    def get_by_canonical_id(self, entity_type: str, internal_id: str) -> Optional[Any]:
        ...

    def upsert(self, entity_type: str, entity: Any) -> None:
        ...

    def find_country(self, name_or_code: str) -> Optional[Country]:
        ...

    def get_league_by_name(self, name: str) -> Optional[League]:
        ...

    def teams_in_country(self, country_code: str) -> Sequence[Team]:
        ...

    def set_current_season(self, season: Season) -> None:
        ...

    def record_unmatched(
        self,
        entity_type: str,
        provider: str,
        name: str,
        country: str,
        reason: str,
        provider_id: Optional[str] = None,
        suggestions: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        ...

    def record_change(
        self,
        entity_type: str,
        entity_id: str,
        provider: str,
        is_new: bool,
        changes: dict[str, dict[str, Any]],
    ) -> None:
        ...
