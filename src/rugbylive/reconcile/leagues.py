"""
League (competition) matching and creation.

Competition names vary more than team names: sponsors come and go
("Guinness Pro14" -> "United Rugby Championship"), providers abbreviate
("T14"), and tours are split into child competitions ("All Blacks in
Europe" belongs to the Autumn Nations Series).

Matching order:
0. Cross-reference for (provider, provider_id) - skips everything else
1. Normalize the name (year tokens, standardization table)
2. Direct lookup in the registry (stored leagues, then static profiles)
3. Alt-name table, case-insensitive
4. Parent map - reported so creation can inherit the parent's identity

A successful match with a provider id writes the cross-reference, so the
next import of the same provider league takes the fast path.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from rugbylive.entities import LEAGUE, League
from rugbylive.errors import ValidationGap
from rugbylive.reconcile.names import NameNormalizer, build_canonical_id
from rugbylive.reconcile.store import CatalogStore
from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables

logger = logging.getLogger(__name__)

DIRECT_MATCH = "direct_match"
ALT_NAME_MATCH = "alt_name_match"
CROSS_REFERENCE = "cross_reference"
NO_MATCH = "no_match"


@dataclass
class LeagueMatch:
    """
    Result of a league matching attempt.

    canonical_name is always the normalized (and, for alt-name matches,
    resolved) name, even on no_match, so callers can create the league
    under it. replaced_id is set when writing the cross-reference replaced
    a different internal id.
    """
    internal_id: Optional[str]
    reason: str
    canonical_name: str
    parent_name: Optional[str] = None
    replaced_id: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.internal_id is not None


class LeagueMatcher:
    """
    Resolves provider competitions to canonical leagues.

    Args:
        store: Catalog store used for registry and cross-reference lookups
        tables: Static reference tables
        normalizer: Name normalizer (built from tables if omitted)
    """

    def __init__(
        self,
        store: CatalogStore,
        tables: ReferenceTables = DEFAULT_TABLES,
        normalizer: Optional[NameNormalizer] = None,
    ):
        self.store = store
        self.tables = tables
        self.normalizer = normalizer or NameNormalizer(tables)

    def match(
        self,
        name: str,
        provider: Optional[str] = None,
        provider_id: Optional[str] = None,
    ) -> LeagueMatch:
        """
        Resolve a provider competition name to an internal league id.

        Args:
            name: Competition name as the provider spells it
            provider: Provider name, required for cross-reference handling
            provider_id: The provider's own competition id

        Returns:
            LeagueMatch with reason one of cross_reference, direct_match,
            alt_name_match or no_match
        """
        normalized = self.normalizer.normalize(name)

        if provider and provider_id:
            mapped = self.store.get_cross_reference(provider, provider_id, LEAGUE)
            if mapped:
                return LeagueMatch(mapped, CROSS_REFERENCE, normalized)

        result = self._match_name(normalized)

        if result.matched and provider and provider_id:
            previous = self.store.upsert_cross_reference(
                provider, provider_id, LEAGUE, result.internal_id
            )
            if previous and previous != result.internal_id:
                logger.warning(
                    "League mapping %s:%s moved from %s to %s",
                    provider, provider_id, previous, result.internal_id,
                )
                result.replaced_id = previous
        return result

    def _match_name(self, normalized: str) -> LeagueMatch:
        internal_id = self.resolve_id(normalized)
        if internal_id:
            return LeagueMatch(internal_id, DIRECT_MATCH, normalized)

        folded = normalized.casefold()
        for canonical, aliases in self.tables.league_alt_names.items():
            if any(alias.casefold() == folded for alias in aliases):
                internal_id = self.resolve_id(canonical)
                if internal_id:
                    return LeagueMatch(internal_id, ALT_NAME_MATCH, canonical)
                logger.debug("Alias %s resolves to unknown league %s", normalized, canonical)

        return LeagueMatch(
            internal_id=None,
            reason=NO_MATCH,
            canonical_name=normalized,
            parent_name=self.tables.league_parents.get(normalized),
        )

    def resolve_id(self, canonical_name: str) -> Optional[str]:
        """Internal id for a canonical name: stored league first, then static profile."""
        stored = self.store.get_league_by_name(canonical_name)
        if stored is not None:
            return stored.id
        profile = self.tables.league_profile(canonical_name)
        if profile is not None:
            return build_canonical_id(profile.country, canonical_name)
        return None

    # =========================================================================
    # Creation
    # =========================================================================

    def build_league(
        self,
        name: str,
        country_code: Optional[str] = None,
        logo_url: str = "",
        provider: str = "",
    ) -> League:
        """
        Build a new League from provider metadata plus static tables.

        Country, format and phases come from the league's own static profile,
        then from its parent (stored league first, then the parent's profile),
        then from the provider. Defaults: tier 0, format "Cup" when the name
        contains "cup" else "League", gender "Women" when the name carries
        "(W)" or "women".

        Raises:
            ValidationGap: no country could be determined
        """
        name = self.normalizer.normalize(name)
        profile = self.tables.league_profile(name)

        parent_name = self.tables.league_parents.get(name)
        parent = self.store.get_league_by_name(parent_name) if parent_name else None
        parent_profile = self.tables.league_profile(parent_name) if parent_name else None

        country = None
        if profile is not None:
            country = profile.country
        elif parent is not None:
            country = parent.country_code
        elif parent_profile is not None:
            country = parent_profile.country
        else:
            country = country_code
        if not country:
            raise ValidationGap(f"no country mapping for league {name!r}")

        fmt = "Cup" if "cup" in name.lower() else "League"
        phases: list[str] = []
        international = False
        if profile is not None:
            fmt, phases, international = profile.format, list(profile.phases), profile.international
        elif parent is not None:
            fmt, phases, international = parent.format, list(parent.phases), parent.international
        elif parent_profile is not None:
            fmt = parent_profile.format
            phases = list(parent_profile.phases)
            international = parent_profile.international

        parent_id = None
        if parent is not None:
            parent_id = parent.id
        elif parent_profile is not None:
            parent_id = build_canonical_id(parent_profile.country, parent_name)

        successor_id = None
        successor = self.tables.league_successors.get(name)
        if successor is not None:
            successor_id = self.resolve_id(successor)

        gender = "Women" if "(W)" in name or "women" in name.lower() else "Men"

        return League(
            id=build_canonical_id(country, name),
            name=name,
            country_code=country,
            alt_names=list(self.tables.league_alt_names.get(name, ())),
            parent_id=parent_id,
            successor_id=successor_id,
            tier=profile.tier if profile else 0,
            format=fmt,
            phases=phases,
            gender=gender,
            international=international,
            logo_url=logo_url or "",
            logo_source=provider if logo_url else "",
        )
