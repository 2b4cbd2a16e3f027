"""
SQLAlchemy implementation of the catalog store.

Converts between domain entities (rugbylive.entities) and ORM rows, and
implements every write as a dialect-level upsert (INSERT ... ON CONFLICT DO
UPDATE) against the table's uniqueness constraint. Concurrent imports that
race on the same key therefore converge on one row instead of erroring.

Supported dialects: PostgreSQL (production) and SQLite (tests).

Like the rest of the services layer, the store never commits; the caller
owns the transaction (see db.session.get_session). atomic() opens a
savepoint so one failing record can be rolled back without losing the
rest of the batch.
"""

import dataclasses
import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Generator, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from rugbylive import entities
from rugbylive.db import models
from rugbylive.reconcile.names import NameNormalizer
from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables

logger = logging.getLogger(__name__)

# entity type -> (ORM model, domain dataclass, primary key column)
_MODELS: dict[str, tuple[type, type, str]] = {
    entities.COUNTRY: (models.Country, entities.Country, "code"),
    entities.LEAGUE: (models.League, entities.League, "id"),
    entities.SEASON: (models.Season, entities.Season, "id"),
    entities.TEAM: (models.Team, entities.Team, "id"),
    entities.MATCH: (models.Match, entities.Match, "id"),
}


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class SqlCatalogStore:
    """
    Catalog store backed by a SQLAlchemy session.

    Args:
        session: Session whose transaction the caller commits
        tables: Reference tables (country code and alias lookups)
    """

    def __init__(self, session: Session, tables: ReferenceTables = DEFAULT_TABLES):
        self.session = session
        self.tables = tables
        self._normalizer = NameNormalizer(tables)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _insert(self, model: type):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(model)
        if dialect == "sqlite":
            return sqlite_insert(model)
        raise NotImplementedError(f"Upserts are not supported on dialect {dialect!r}")

    @staticmethod
    def _lookup(entity_type: str) -> tuple[type, type, str]:
        try:
            return _MODELS[entity_type]
        except KeyError as exc:
            raise KeyError(f"Unknown entity type: {entity_type}") from exc

    @staticmethod
    def _to_entity(row: Any, entity_cls: type) -> Any:
        values = {
            f.name: getattr(row, f.name)
            for f in dataclasses.fields(entity_cls)
            if hasattr(row, f.name) and f.name != "country_name"
        }
        for list_field in ("alt_names", "phases"):
            if list_field in values and values[list_field] is None:
                values[list_field] = []
        return entity_cls(**values)

    def _team_entity(self, row: models.Team) -> entities.Team:
        team = self._to_entity(row, entities.Team)
        team.country_name = row.country.name if row.country is not None else ""
        return team

    @contextmanager
    def atomic(self) -> Generator[None, None, None]:
        """Savepoint around one record's writes."""
        with self.session.begin_nested():
            yield

    # =========================================================================
    # Entities
    # =========================================================================

    def get_by_canonical_id(self, entity_type: str, internal_id: str) -> Optional[Any]:
        model, entity_cls, _ = self._lookup(entity_type)
        row = self.session.get(model, internal_id)
        if row is None:
            return None
        if entity_type == entities.TEAM:
            return self._team_entity(row)
        return self._to_entity(row, entity_cls)

    def upsert(self, entity_type: str, entity: Any) -> None:
        model, _, pk = self._lookup(entity_type)
        columns = model.__table__.columns.keys()
        values = {
            f.name: getattr(entity, f.name)
            for f in dataclasses.fields(entity)
            if f.name in columns
        }
        now = datetime.utcnow()
        values["updated_at"] = now

        stmt = self._insert(model).values(created_at=now, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[pk],
            set_={k: stmt.excluded[k] for k in values if k != pk},
        )
        self.session.execute(stmt)
        # Rows loaded earlier in this session would otherwise keep stale values
        self.session.expire_all()

    def find_country(self, name_or_code: str) -> Optional[entities.Country]:
        """
        Find a country by internal code, two-letter provider code or name.

        Names are compared ignoring case, hyphens and spacing, after the
        country alias table ("Fiji Islands" -> "Fiji").
        """
        if not name_or_code:
            return None
        value = name_or_code.strip()

        code = self.tables.country_codes.get(value.upper(), value.upper())
        if len(code) == 3:
            row = self.session.get(models.Country, code)
            if row is not None:
                return self._to_entity(row, entities.Country)

        for row in self.session.scalars(select(models.Country)):
            if self._normalizer.same_country(row.name, value):
                return self._to_entity(row, entities.Country)
        return None

    def get_league_by_name(self, name: str) -> Optional[entities.League]:
        if not name:
            return None
        row = self.session.scalars(
            select(models.League).where(models.League.name == name)
        ).first()
        return self._to_entity(row, entities.League) if row is not None else None

    def teams_in_country(self, country_code: str) -> Sequence[entities.Team]:
        rows = self.session.scalars(
            select(models.Team)
            .where(models.Team.country_code == country_code)
            .order_by(models.Team.id)
        )
        return [self._team_entity(row) for row in rows]

    def set_current_season(self, season: entities.Season) -> None:
        """Flag one season as current and clear the flag on its siblings."""
        self.session.execute(
            update(models.Season)
            .where(models.Season.league_id == season.league_id)
            .where(models.Season.id != season.id)
            .where(models.Season.current.is_(True))
            .values(current=False)
        )
        self.session.execute(
            update(models.Season)
            .where(models.Season.id == season.id)
            .values(current=True)
        )
        self.session.expire_all()

    def current_season(self, league_id: str) -> Optional[entities.Season]:
        row = self.session.scalars(
            select(models.Season)
            .where(models.Season.league_id == league_id)
            .where(models.Season.current.is_(True))
        ).first()
        return self._to_entity(row, entities.Season) if row is not None else None

    # =========================================================================
    # Cross-references
    # =========================================================================

    def get_cross_reference(
        self, provider: str, provider_id: str, entity_type: str
    ) -> Optional[str]:
        return self.session.scalars(
            select(models.CrossReference.internal_id).where(
                models.CrossReference.provider == provider,
                models.CrossReference.provider_id == str(provider_id),
                models.CrossReference.entity_type == entity_type,
            )
        ).first()

    def upsert_cross_reference(
        self, provider: str, provider_id: str, entity_type: str, internal_id: str
    ) -> Optional[str]:
        """
        Map (provider, provider_id, entity_type) to internal_id.

        Returns:
            The previously mapped internal id if it was different, else None
        """
        provider_id = str(provider_id)
        previous = self.get_cross_reference(provider, provider_id, entity_type)
        if previous == internal_id:
            return None

        now = datetime.utcnow()
        stmt = self._insert(models.CrossReference).values(
            provider=provider,
            provider_id=provider_id,
            entity_type=entity_type,
            internal_id=internal_id,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["provider", "provider_id", "entity_type"],
            set_={"internal_id": internal_id, "updated_at": now},
        )
        self.session.execute(stmt)
        return previous

    # =========================================================================
    # Review queue and audit log
    # =========================================================================

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
        now = datetime.utcnow()
        values = {
            "reason": reason,
            "provider_id": str(provider_id) if provider_id is not None else None,
            "suggestions": suggestions or [],
            "updated_at": now,
        }
        stmt = self._insert(models.UnmatchedRecord).values(
            entity_type=entity_type,
            provider=provider,
            name=name,
            country=country or "",
            status="pending",
            created_at=now,
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["provider", "entity_type", "name", "country"],
            set_=values,
        )
        self.session.execute(stmt)

    def pending_unmatched(self, entity_type: Optional[str] = None) -> list[models.UnmatchedRecord]:
        query = select(models.UnmatchedRecord).where(models.UnmatchedRecord.status == "pending")
        if entity_type:
            query = query.where(models.UnmatchedRecord.entity_type == entity_type)
        return list(self.session.scalars(query.order_by(models.UnmatchedRecord.created_at)))

    def record_change(
        self,
        entity_type: str,
        entity_id: str,
        provider: str,
        is_new: bool,
        changes: dict[str, dict[str, Any]],
    ) -> None:
        payload = {
            field_name: {key: _jsonable(value) for key, value in change.items()}
            for field_name, change in changes.items()
        }
        self.session.add(
            models.ChangeLog(
                entity_type=entity_type,
                entity_id=entity_id,
                provider=provider,
                is_new=is_new,
                changes=payload,
            )
        )
        self.session.flush()
