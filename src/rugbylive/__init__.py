"""
Rugby Live - Rugby catalog reconciliation engine

Consolidates countries, leagues, seasons, teams and matches from several
inconsistent rugby data providers into one canonical catalog with stable
internal identifiers.

Main components:
- reconcile: Name normalization, team/league matching, season normalization, merges
- providers: Async clients for API-Sports, rugbydatabase.co.nz, RapidAPI and Wikidata
- services: Per-entity ingestion that runs provider records through reconcile
- db: SQLAlchemy models and the catalog store
- tasks: Stage registry used by the import pipeline
"""

__version__ = "1.0.0"
