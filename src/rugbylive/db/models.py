"""
SQLAlchemy ORM models for Rugby Live.

This module defines all database tables. The schema is built around stable
canonical ids derived from country + normalized name, with every provider
identifier kept in a single cross-reference table rather than one column
per provider.

Key design decisions:
- Canonical ids are strings and never change once created
- Entities are never deleted; leagues are superseded via successor_id
- parent_id / successor_id are plain columns, not foreign keys, because the
  referenced league may only be imported in a later run
- Alternate names and phases are JSON lists (JSONB on PostgreSQL)
- Uniqueness constraints back every upsert, so concurrent imports are safe
  without in-process locks

Tables:
- countries: Countries and regional buckets (WLD, EUR, OCE)
- leagues: Competitions
- seasons: One row per (league, internal year)
- teams: Teams
- matches: Fixtures and results
- cross_references: (provider, provider id, entity type) -> internal id
- unmatched_records: Provider records awaiting manual review
- change_log: Audit trail of every persisted merge
"""

from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


# =============================================================================
# Catalog Models
# =============================================================================

class Country(Base):
    """
    Country or regional bucket.

    Codes are three-letter uppercase rugby/IOC style codes. Cross-border
    competitions are owned by one of the regional buckets WLD (World),
    EUR (Europe) or OCE (Oceania).
    """
    __tablename__ = "countries"

    code: Mapped[str] = mapped_column(String(3), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    flag_url: Mapped[str] = mapped_column(Text, default="")
    flag_source: Mapped[str] = mapped_column(String(50), default="")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    teams: Mapped[list["Team"]] = relationship(back_populates="country")

    def __repr__(self) -> str:
        return f"<Country(code='{self.code}', name='{self.name}')>"


class League(Base):
    """
    Competition (league, cup, tour or test series).

    Examples:
    - EUR-UNITED-RUGBY-CHAMPIONSHIP
    - NZL-NATIONAL-PROVINCIAL-CHAMPIONSHIP
    - WLD-WXV-(W)
    """
    __tablename__ = "leagues"

    id: Mapped[str] = mapped_column(String(150), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    country_code: Mapped[str] = mapped_column(ForeignKey("countries.code"), nullable=False)

    alt_names: Mapped[list[str]] = mapped_column(JSONType, default=list)

    parent_id: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    successor_id: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)

    tier: Mapped[int] = mapped_column(Integer, default=0)
    format: Mapped[str] = mapped_column(String(30), default="League")
    phases: Mapped[list[str]] = mapped_column(JSONType, default=list)
    gender: Mapped[str] = mapped_column(String(10), default="Men")
    international: Mapped[bool] = mapped_column(Boolean, default=False)

    logo_url: Mapped[str] = mapped_column(Text, default="")
    logo_source: Mapped[str] = mapped_column(String(50), default="")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    seasons: Mapped[list["Season"]] = relationship(back_populates="league")

    __table_args__ = (
        Index("idx_leagues_country", "country_code"),
    )

    def __repr__(self) -> str:
        return f"<League(id='{self.id}', name='{self.name}')>"


class Season(Base):
    """
    One season of a league, keyed by internal year.

    Split-year leagues use the year the season starts in, e.g. the URC
    2016-2017 season has year=2016. At most one season per league is
    current; the store clears the flag on siblings when setting it.
    """
    __tablename__ = "seasons"

    id: Mapped[str] = mapped_column(String(170), primary_key=True)
    league_id: Mapped[str] = mapped_column(ForeignKey("leagues.id"), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    year_range: Mapped[str] = mapped_column(String(9), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    current: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    league: Mapped["League"] = relationship(back_populates="seasons")

    __table_args__ = (
        UniqueConstraint("league_id", "year", name="uq_season_league_year"),
        Index("idx_seasons_league_current", "league_id", "current"),
    )

    def __repr__(self) -> str:
        return f"<Season(id='{self.id}', current={self.current})>"


class Team(Base):
    """
    Canonical team record.

    alt_names holds every provider spelling that has been matched to this
    team, e.g. the All Blacks carry "New Zealand".
    """
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(150), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country_code: Mapped[str] = mapped_column(ForeignKey("countries.code"), nullable=False)
    alt_names: Mapped[list[str]] = mapped_column(JSONType, default=list)

    logo_url: Mapped[str] = mapped_column(Text, default="")
    logo_source: Mapped[str] = mapped_column(String(50), default="")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    country: Mapped["Country"] = relationship(back_populates="teams")

    __table_args__ = (
        Index("idx_teams_country", "country_code"),
    )

    def __repr__(self) -> str:
        return f"<Team(id='{self.id}', name='{self.name}')>"


class Match(Base):
    """
    Fixture or result.

    id = <season id>-<home team id>-<away team id>-<YYYYMMDD>
    status: 'upcoming', 'live', 'finished'
    """
    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(String(500), primary_key=True)
    season_id: Mapped[str] = mapped_column(ForeignKey("seasons.id"), nullable=False)
    home_team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False)
    away_team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False)
    kick_off: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="upcoming")
    home_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        Index("idx_matches_season", "season_id"),
        Index("idx_matches_kick_off", "kick_off"),
    )

    def __repr__(self) -> str:
        return f"<Match(id='{self.id}', status='{self.status}')>"


# =============================================================================
# Identity Mapping Models
# =============================================================================

class CrossReference(Base):
    """
    Maps a provider's own identifier to an internal id.

    Exactly one row per (provider, provider_id, entity_type); many rows may
    point at the same internal id. Written lazily the first time a provider
    record is matched, then used to skip matching on later imports.
    """
    __tablename__ = "cross_references"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    provider_id: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    internal_id: Mapped[str] = mapped_column(String(500), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        UniqueConstraint(
            "provider", "provider_id", "entity_type", name="uq_cross_reference_key"
        ),
        Index("idx_cross_references_internal", "entity_type", "internal_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<CrossReference({self.provider}:{self.entity_type}:{self.provider_id} "
            f"-> '{self.internal_id}')>"
        )


class UnmatchedRecord(Base):
    """
    Queue for provider records that couldn't be matched automatically.

    The matchers never guess: a team that is neither an exact match nor
    allowed to be created ends up here with up to a few fuzzy suggestions
    for a human to confirm.

    Status: 'pending', 'resolved', 'ignored'
    """
    __tablename__ = "unmatched_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    provider_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(100), default="")
    reason: Mapped[str] = mapped_column(String(255), nullable=False)

    # [{"id": ..., "name": ..., "score": ...}, ...]
    suggestions: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, default=list)

    status: Mapped[str] = mapped_column(String(20), default="pending")
    resolved_id: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        UniqueConstraint(
            "provider", "entity_type", "name", "country", name="uq_unmatched_record"
        ),
        Index("idx_unmatched_status", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<UnmatchedRecord(name='{self.name}', status='{self.status}')>"


class ChangeLog(Base):
    """
    Audit trail for catalog writes.

    One row per persisted merge: what changed ({field: {old, new}}), on
    which entity, and which provider caused it.
    """
    __tablename__ = "change_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(500), nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    is_new: Mapped[bool] = mapped_column(Boolean, nullable=False)
    changes: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_change_log_entity", "entity_type", "entity_id"),
    )

    def __repr__(self) -> str:
        return f"<ChangeLog({self.entity_type} '{self.entity_id}', new={self.is_new})>"
