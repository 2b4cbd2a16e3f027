"""
Unit tests for name normalization, canonical ids and fuzzy comparison.
"""

from datetime import datetime

import pytest

from rugbylive.reconcile.names import (
    NameNormalizer,
    build_canonical_id,
    compare_names,
    country_key,
    match_id,
    season_id,
)
from rugbylive.reconcile.tables import LEAGUE_STANDARDIZATION


@pytest.fixture
def normalizer():
    return NameNormalizer()


class TestNormalize:
    """Tests for competition name normalization."""

    def test_strips_year_range_and_standardizes(self, normalizer):
        """Year tokens go first, then the standardization table applies."""
        assert normalizer.normalize("Guinness Pro14 (2019-20)") == "United Rugby Championship"

    def test_strips_single_year(self, normalizer):
        assert normalizer.normalize("Super Rugby Pacific (2024)") == "Super Rugby Pacific"

    def test_strips_full_year_range(self, normalizer):
        assert normalizer.normalize("Top 14 (2024-2025)") == "Top 14"

    def test_abbreviation(self, normalizer):
        assert normalizer.normalize("T14") == "Top 14"

    def test_trims_whitespace(self, normalizer):
        assert normalizer.normalize("  Top 14  ") == "Top 14"

    def test_casing_untouched(self, normalizer):
        """The standardization table is case-sensitive and casing is kept."""
        assert normalizer.normalize("top 14") == "top 14"

    def test_women_marker_is_not_a_year(self, normalizer):
        assert normalizer.normalize("WXV 2024 (W)") == "WXV (W)"

    def test_empty(self, normalizer):
        assert normalizer.normalize("") == ""

    @pytest.mark.parametrize(
        "name",
        list(LEAGUE_STANDARDIZATION) + ["Top 14 (2023-24)", "Bunnings NPC (2024)", "Currie Cup"],
    )
    def test_idempotent(self, normalizer, name):
        once = normalizer.normalize(name)
        assert normalizer.normalize(once) == once


class TestCountryNames:
    """Tests for country name helpers."""

    def test_country_key(self):
        assert country_key("  New-Zealand ") == "new zealand"

    def test_alias(self, normalizer):
        assert normalizer.normalize_country("Fiji Islands") == "Fiji"
        assert normalizer.normalize_country("United States of America") == "USA"

    def test_unknown_name_passes_through(self, normalizer):
        assert normalizer.normalize_country("New Zealand") == "New Zealand"

    def test_same_country_ignores_case_and_hyphens(self, normalizer):
        assert normalizer.same_country("New-Zealand", "new zealand")

    def test_same_country_through_alias(self, normalizer):
        assert normalizer.same_country("Fiji Islands", "Fiji")

    def test_different_countries(self, normalizer):
        assert not normalizer.same_country("France", "Fiji")

    def test_empty_is_never_the_same(self, normalizer):
        assert not normalizer.same_country("", "Fiji")
        assert not normalizer.same_country("", "")


class TestCanonicalIds:
    """Tests for id derivation."""

    def test_spaces_become_hyphens(self):
        assert build_canonical_id("NZL", "Chiefs Manawa") == "NZL-CHIEFS-MANAWA"

    def test_apostrophes_removed(self):
        assert build_canonical_id("OCE", "Laurie O'Reilly Cup (W)") == "OCE-LAURIE-OREILLY-CUP-(W)"

    def test_periods_removed(self):
        assert build_canonical_id("FRA", "St. Etienne") == "FRA-ST-ETIENNE"

    def test_deterministic(self):
        assert build_canonical_id("AUS", "Super W (W)") == build_canonical_id("AUS", "Super W (W)")
        assert build_canonical_id("AUS", "Super W (W)") == "AUS-SUPER-W-(W)"

    def test_season_id(self):
        assert season_id("FRA-TOP-14", 2016) == "FRA-TOP-14-SEASON-2016"

    def test_match_id(self):
        kick_off = datetime(2024, 9, 7, 19, 5)
        assert match_id("S", "H", "A", kick_off) == "S-H-A-20240907"


class TestCompareNames:
    """Tests for fuzzy comparison used by review suggestions."""

    def test_exact_match(self):
        assert compare_names("Crusaders", "crusaders") == 1.0

    def test_sponsor_prefix(self):
        assert compare_names("Crusaders", "BNZ Crusaders") >= 0.85

    def test_completely_different(self):
        assert compare_names("Crusaders", "Toulouse") < 0.7

    def test_empty(self):
        assert compare_names("", "Crusaders") == 0.0
