"""
Unit tests for team matching.

Mirrors the disambiguation cases the catalog has to get right:
men's vs women's sides, directional names, nicknames and strict names.
"""

import pytest

from rugbylive.entities import Team
from rugbylive.reconcile.teams import TeamMatcher


def nz_team(team_id, name, alt_names=None):
    return Team(
        id=team_id,
        name=name,
        country_code="NZL",
        alt_names=list(alt_names or []),
        country_name="New Zealand",
    )


@pytest.fixture
def matcher():
    return TeamMatcher()


@pytest.fixture
def crusaders():
    return nz_team("NZL-CRUSADERS", "Crusaders")


@pytest.fixture
def crusaders_women():
    return nz_team("NZL-CRUSADERS-WOMEN", "Crusaders Women")


class TestSuffixMatching:
    """Qualified and unqualified sides must never be confused."""

    def test_plain_name_picks_mens_side(self, matcher, crusaders, crusaders_women):
        result = matcher.match("Crusaders", "NZL", [crusaders_women, crusaders])
        assert result.matched
        assert result.team.id == "NZL-CRUSADERS"
        assert result.reason == "name_match"
        assert result.alt_name_added is False

    def test_w_marker_matches_women_side(self, matcher, crusaders, crusaders_women):
        result = matcher.match("Crusaders (W)", "New Zealand", [crusaders, crusaders_women])
        assert result.team.id == "NZL-CRUSADERS-WOMEN"
        assert result.alt_name_added is True
        assert "Crusaders (W)" in result.team.alt_names

    def test_women_name_does_not_match_mens_side(self, matcher, crusaders):
        result = matcher.match("Crusaders Women", "NZL", [crusaders])
        assert not result.matched
        assert result.reason == "no_match"

    def test_case_insensitive(self, matcher, crusaders):
        result = matcher.match("CRUSADERS", "NZL", [crusaders])
        assert result.team.id == "NZL-CRUSADERS"
        assert result.team.alt_names == ["CRUSADERS"]


class TestVetoes:

    def test_directional_opposites(self, matcher):
        assert matcher.has_opposite_directions("North Harbour", "South Harbour")
        assert matcher.has_opposite_directions("Southern Knights", "Northern Knights")
        assert not matcher.has_opposite_directions("Northern Knights", "Knights")

    def test_opposite_never_matches(self, matcher):
        northern = nz_team("NZL-NORTHERN-KNIGHTS", "Northern Knights")
        result = matcher.match("Southern Knights", "NZL", [northern])
        assert not result.matched

    def test_other_country_is_ignored(self, matcher, crusaders):
        result = matcher.match("Crusaders", "France", [crusaders])
        assert not result.matched

    def test_empty_country_is_ignored(self, matcher, crusaders):
        result = matcher.match("Crusaders", "", [crusaders])
        assert not result.matched


class TestNicknames:

    def test_nickname_beats_literal_team(self, matcher):
        """'New Zealand' is the All Blacks even when a literal 'New Zealand' team exists."""
        all_blacks = nz_team("NZL-ALL-BLACKS", "All Blacks")
        literal = nz_team("NZL-NEW-ZEALAND", "New Zealand")
        result = matcher.match("New Zealand", "New Zealand", [literal, all_blacks])
        assert result.team.id == "NZL-ALL-BLACKS"
        assert result.reason == "nickname"
        assert result.team.alt_names == ["New Zealand"]

    def test_nickname_ignores_country(self, matcher):
        all_blacks = nz_team("NZL-ALL-BLACKS", "All Blacks")
        result = matcher.match("New Zealand", "World", [all_blacks])
        assert result.reason == "nickname"

    def test_candidate_is_not_mutated(self, matcher):
        all_blacks = nz_team("NZL-ALL-BLACKS", "All Blacks")
        result = matcher.match("New Zealand", "NZL", [all_blacks])
        assert result.team is not all_blacks
        assert all_blacks.alt_names == []

    def test_known_alt_name_not_added_twice(self, matcher):
        women = nz_team("NZL-CRUSADERS-WOMEN", "Crusaders Women", alt_names=["Crusaders (W)"])
        result = matcher.match("Crusaders (W)", "NZL", [women])
        assert result.alt_name_added is False
        assert result.team.alt_names == ["Crusaders (W)"]


class TestStrictNames:

    def test_strict_name_without_nickname_is_refused(self, matcher):
        cardiff = Team(id="WAL-CARDIFF", name="Cardiff", country_code="WAL", country_name="Wales")
        result = matcher.match("Cardiff", "Wales", [cardiff])
        assert not result.matched
        assert result.reason == "strict_no_match"

    def test_strict_name_through_nickname(self, matcher):
        cardiff = Team(
            id="WAL-CARDIFF-RUGBY", name="Cardiff Rugby", country_code="WAL", country_name="Wales"
        )
        result = matcher.match("Cardiff", "Wales", [cardiff])
        assert result.team.id == "WAL-CARDIFF-RUGBY"
        assert result.reason == "nickname"
