"""
Name normalization, canonical id derivation and fuzzy name comparison.

Provider names arrive in many shapes:
- API-Sports: "Top 14"
- RapidAPI: "T14", "Guinness Pro14"
- rugbydatabase.co.nz: "Super Rugby Pacific (2024)"
- Wikidata: "Crusaders" with a country label like "New Zealand"

NameNormalizer turns competition names into the canonical form used as
matcher input and for display. build_canonical_id derives the stable
internal identifier from a country code and a normalized name.

compare_names gives a fuzzy similarity score. It is only used to suggest
candidates for the review queue; automatic matching in TeamMatcher and
LeagueMatcher is always exact after normalization.
"""

import re
from datetime import datetime
from typing import Mapping

import jellyfish
from rapidfuzz import fuzz

from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables

# "(2024)", "(2024-25)", "(2024-2025)"
YEAR_TOKEN_RE = re.compile(r"\s*\(\d{4}(?:-\d{2,4})?\)")


class NameNormalizer:
    """
    Cleans free-text competition and country names.

    Args:
        tables: Reference tables providing the standardization and
                country alias tables
    """

    def __init__(self, tables: ReferenceTables = DEFAULT_TABLES):
        self._standardization: Mapping[str, str] = tables.league_standardization
        self._country_aliases: Mapping[str, str] = tables.country_aliases

    def normalize(self, name: str) -> str:
        """
        Normalize a competition name.

        Steps:
        1. Remove embedded year / year-range tokens like "(2024-25)"
        2. Trim surrounding whitespace
        3. Apply the case-sensitive standardization table

        Casing is never changed. normalize(normalize(x)) == normalize(x).

        Examples:
            >>> NameNormalizer().normalize("Guinness Pro14 (2019-20)")
            'United Rugby Championship'
            >>> NameNormalizer().normalize("Top 14")
            'Top 14'
        """
        if not name:
            return ""
        cleaned = YEAR_TOKEN_RE.sub("", name).strip()
        return self._standardization.get(cleaned, cleaned).strip()

    def normalize_country(self, name: str) -> str:
        """Map provider country spellings ("Fiji Islands") to the canonical name."""
        if not name:
            return ""
        cleaned = " ".join(name.split())
        return self._country_aliases.get(country_key(cleaned), cleaned)

    def same_country(self, a: str, b: str) -> bool:
        """Compare two country names ignoring case, hyphens and spacing."""
        if not a or not b:
            return False
        return country_key(self.normalize_country(a)) == country_key(self.normalize_country(b))


def country_key(name: str) -> str:
    """Lowercase, treat hyphens as spaces and collapse whitespace."""
    return " ".join(name.lower().replace("-", " ").split())


def build_canonical_id(country_code: str, name: str) -> str:
    """
    Derive the internal id for a league or team.

    Examples:
        >>> build_canonical_id("NZL", "Chiefs Manawa")
        'NZL-CHIEFS-MANAWA'
        >>> build_canonical_id("FRA", "Stade Français")
        'FRA-STADE-FRANÇAIS'
        >>> build_canonical_id("OCE", "Laurie O'Reilly Cup (W)")
        'OCE-LAURIE-OREILLY-CUP-(W)'
    """
    key = name.upper().replace(" ", "-").replace("'", "").replace(".", "")
    return f"{country_code}-{key}"


def season_id(league_id: str, year: int) -> str:
    return f"{league_id}-SEASON-{year}"


def match_id(season: str, home_team_id: str, away_team_id: str, kick_off: datetime) -> str:
    return f"{season}-{home_team_id}-{away_team_id}-{kick_off:%Y%m%d}"


def compare_names(name1: str, name2: str) -> float:
    """
    Compare two team or league names and return a similarity score.

    Uses multiple algorithms and takes the best score:
    1. Jaro-Winkler similarity (good for typos and sponsor prefixes)
    2. Token sort ratio (handles word order: "Rugby Club Toulonnais" vs "Toulonnais Rugby Club")
    3. Partial ratio (handles extra words: "Crusaders" vs "BNZ Crusaders")

    Args:
        name1: First name
        name2: Second name

    Returns:
        Similarity score between 0.0 (completely different) and 1.0 (identical)
    """
    if not name1 or not name2:
        return 0.0

    n1 = " ".join(name1.lower().split())
    n2 = " ".join(name2.lower().split())

    if n1 == n2:
        return 1.0

    jw_score = jellyfish.jaro_winkler_similarity(n1, n2)
    token_sort_score = fuzz.token_sort_ratio(n1, n2) / 100.0

    # Partial matches are penalised slightly: "Blues" is contained in
    # "Blues Women" but they are different teams.
    partial_score = fuzz.partial_ratio(n1, n2) / 100.0 * 0.9

    return max(jw_score, token_sort_score, partial_score)
