"""
Database module for Rugby Live.

Provides SQLAlchemy ORM models, session management, and the catalog store.

Usage:
    from rugbylive.db import get_session, SqlCatalogStore

    with get_session() as session:
        store = SqlCatalogStore(session)
        team = store.get_by_canonical_id("team", "NZL-CRUSADERS")
"""

from rugbylive.db.models import (
    Base,
    ChangeLog,
    Country,
    CrossReference,
    League,
    Match,
    Season,
    Team,
    UnmatchedRecord,
)
from rugbylive.db.session import get_engine, get_session
from rugbylive.db.store import SqlCatalogStore

__all__ = [
    # Base
    "Base",
    # Models
    "ChangeLog",
    "Country",
    "CrossReference",
    "League",
    "Match",
    "Season",
    "Team",
    "UnmatchedRecord",
    # Session management
    "get_engine",
    "get_session",
    # Store
    "SqlCatalogStore",
]
