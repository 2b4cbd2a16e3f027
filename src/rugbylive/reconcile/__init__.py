"""
Entity reconciliation and identity mapping.

Decides whether an incoming provider record refers to an entity already in
the catalog, derives stable ids, and computes auditable merges. Nothing in
this package performs network I/O; storage access goes through the
CatalogStore protocol.

Usage:
    from rugbylive.reconcile import TeamMatcher, LeagueMatcher, merge_entity

    matcher = TeamMatcher()
    result = matcher.match("Crusaders (W)", "New Zealand", candidates)
"""

from rugbylive.reconcile.leagues import LeagueMatch, LeagueMatcher
from rugbylive.reconcile.merge import EntitySpec, FieldRule, MergeResult, merge, merge_entity
from rugbylive.reconcile.names import (
    NameNormalizer,
    build_canonical_id,
    compare_names,
    country_key,
    match_id,
    season_id,
)
from rugbylive.reconcile.seasons import NormalizedSeason, SeasonNormalizer
from rugbylive.reconcile.store import CatalogStore, CrossReferenceStore
from rugbylive.reconcile.suffixes import SuffixClassifier
from rugbylive.reconcile.tables import DEFAULT_TABLES, LeagueProfile, ReferenceTables
from rugbylive.reconcile.teams import TeamMatch, TeamMatcher

__all__ = [
    "CatalogStore",
    "CrossReferenceStore",
    "DEFAULT_TABLES",
    "EntitySpec",
    "FieldRule",
    "LeagueMatch",
    "LeagueMatcher",
    "LeagueProfile",
    "MergeResult",
    "NameNormalizer",
    "NormalizedSeason",
    "ReferenceTables",
    "SeasonNormalizer",
    "SuffixClassifier",
    "TeamMatch",
    "TeamMatcher",
    "build_canonical_id",
    "compare_names",
    "country_key",
    "match_id",
    "merge",
    "merge_entity",
    "season_id",
]
