"""
Domain entities for the canonical catalog.

These are plain dataclasses: the reconcile package works exclusively with
them, and the SQL store converts to and from ORM rows at the storage
boundary. Keeping them free of SQLAlchemy state means matchers and the
merger can be exercised (and parallelized) without a session.

Entity type names double as the `entity_type` column of cross-references.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

COUNTRY = "country"
LEAGUE = "league"
SEASON = "season"
TEAM = "team"
MATCH = "match"


@dataclass
class Country:
    code: str
    name: str
    flag_url: str = ""
    flag_source: str = ""


@dataclass
class League:
    id: str
    name: str
    country_code: str
    alt_names: list[str] = field(default_factory=list)
    parent_id: Optional[str] = None
    successor_id: Optional[str] = None
    tier: int = 0
    format: str = "League"
    phases: list[str] = field(default_factory=list)
    gender: str = "Men"
    international: bool = False
    logo_url: str = ""
    logo_source: str = ""


@dataclass
class Season:
    id: str
    league_id: str
    year: int
    year_range: str
    start_date: date
    end_date: date
    current: bool = False


@dataclass
class Team:
    id: str
    name: str
    country_code: str
    alt_names: list[str] = field(default_factory=list)
    logo_url: str = ""
    logo_source: str = ""
    # Populated by the store for matching; not persisted on the team row
    country_name: str = ""


@dataclass
class Match:
    id: str
    season_id: str
    home_team_id: str
    away_team_id: str
    kick_off: datetime
    status: str = "upcoming"
    home_score: Optional[int] = None
    away_score: Optional[int] = None

