"""
Team matching against the canonical catalog.

Resolves an incoming provider team (name + country) to an existing internal
team, or signals an explicit no-match. The matching strategy prioritizes
avoiding false positives over match rate:

1. Nickname table - "New Zealand" is the All Blacks, whatever else exists
2. Strict-match guard - short ambiguous names only match via step 1
3. Narrow to teams from the same country
4. Exact name equality after suffix handling, with two vetoes:
   directional opposites ("Northern Knights" vs "Southern Knights")
   and incompatible qualifiers ("Crusaders" vs "Crusaders Women")
5. Record the provider spelling as an alternate name on the match

There is no fuzzy auto-matching here. Anything that falls through goes to
the caller, which either creates a team (priority names, authoritative
providers) or queues the record for manual review.

The matcher holds no mutable state, so independent records can be matched
concurrently against the same candidate list.
"""

import dataclasses
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from rugbylive.entities import Team
from rugbylive.reconcile.names import NameNormalizer
from rugbylive.reconcile.suffixes import SuffixClassifier
from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables

_WORD_RE = re.compile(r"[a-z]+")


@dataclass
class TeamMatch:
    """
    Result of a team matching attempt.

    When matched, `team` is a copy of the candidate (never the candidate
    object itself) with the incoming spelling already added to alt_names
    if it was new; `alt_name_added` says whether that happened.
    """
    team: Optional[Team]
    reason: str  # 'nickname', 'name_match', 'strict_no_match', 'no_match'
    alt_name_added: bool = False

    @property
    def matched(self) -> bool:
        return self.team is not None

    def __repr__(self) -> str:
        team_id = self.team.id if self.team else None
        return f"<TeamMatch(id={team_id}, reason='{self.reason}')>"


class TeamMatcher:
    """
    Matches provider team names to canonical teams.

    Usage:
        matcher = TeamMatcher()
        result = matcher.match("Crusaders (W)", "New Zealand", store.teams_in_country("NZL"))
        if result.matched:
            store.upsert("team", result.team)
    """

    def __init__(
        self,
        tables: ReferenceTables = DEFAULT_TABLES,
        classifier: Optional[SuffixClassifier] = None,
        normalizer: Optional[NameNormalizer] = None,
    ):
        self._nicknames: Mapping[str, str] = tables.team_nicknames
        self._strict: frozenset[str] = tables.strict_match_teams
        self._opposites: Mapping[str, str] = tables.opposite_words
        self._classifier = classifier or SuffixClassifier(tables)
        self._normalizer = normalizer or NameNormalizer(tables)

    def match(
        self,
        incoming_name: str,
        incoming_country: str,
        candidates: Iterable[Team],
    ) -> TeamMatch:
        """
        Resolve an incoming team to one of the candidates.

        Args:
            incoming_name: Team name as the provider spells it
            incoming_country: Provider country name or internal country code
            candidates: Known teams to match against

        Returns:
            TeamMatch; check `.matched` before using `.team`
        """
        incoming_name = incoming_name.strip()
        pool = list(candidates)

        # Strategy 1: Nickname override, bypasses every other check
        for candidate in pool:
            if self._nicknames.get(candidate.name) == incoming_name:
                return self._matched(candidate, incoming_name, "nickname")

        # Strategy 2: Strict names never fall through to heuristics
        if incoming_name in self._strict:
            return TeamMatch(team=None, reason="strict_no_match")

        # Strategy 3: Same country only
        local = [c for c in pool if self._same_country(c, incoming_country)]

        # Strategy 4: Exact comparison after suffix handling
        incoming_key = self._classifier.comparison_key(incoming_name)
        for candidate in local:
            if self.has_opposite_directions(incoming_name, candidate.name):
                continue
            if not self._classifier.compatible(incoming_name, candidate.name):
                continue
            if self._classifier.comparison_key(candidate.name) == incoming_key:
                return self._matched(candidate, incoming_name, "name_match")

        return TeamMatch(team=None, reason="no_match")

    def has_opposite_directions(self, a: str, b: str) -> bool:
        """True if one name uses a direction word whose opposite is in the other."""
        words_a = set(_WORD_RE.findall(a.lower()))
        words_b = set(_WORD_RE.findall(b.lower()))
        for word in words_a:
            opposite = self._opposites.get(word)
            if opposite and opposite in words_b:
                return True
        return False

    def _same_country(self, candidate: Team, incoming_country: str) -> bool:
        if not incoming_country:
            return False
        if candidate.country_code and candidate.country_code.upper() == incoming_country.strip().upper():
            return True
        return self._normalizer.same_country(candidate.country_name, incoming_country)

    def _matched(self, candidate: Team, incoming_name: str, reason: str) -> TeamMatch:
        # Step 5: remember the provider spelling (idempotent set insert)
        alt_names = list(candidate.alt_names)
        added = False
        if incoming_name != candidate.name and incoming_name not in alt_names:
            alt_names.append(incoming_name)
            added = True
        team = dataclasses.replace(candidate, alt_names=alt_names)
        return TeamMatch(team=team, reason=reason, alt_name_added=added)
