"""
Unit tests for season label normalization.
"""

from datetime import date

import pytest

from rugbylive.errors import ValidationGap
from rugbylive.reconcile.seasons import SeasonNormalizer


@pytest.fixture
def normalizer():
    return SeasonNormalizer()


class TestNormalize:
    """RapidAPI labels to internal seasons."""

    def test_split_year_league(self, normalizer):
        """The label's first year is one ahead for split-year leagues."""
        season = normalizer.normalize("United Rugby Championship", "Season 2017/2018")
        assert season.year == 2016
        assert season.year_range == "2016-2017"
        assert season.start_date == date(2016, 8, 1)
        assert season.end_date == date(2017, 5, 31)

    def test_split_year_league_single_year_label(self, normalizer):
        season = normalizer.normalize("Top 14", "Season 2021")
        assert season.year == 2020
        assert season.year_range == "2020-2021"

    def test_calendar_league(self, normalizer):
        season = normalizer.normalize("Six Nations Championship", "Season 2020")
        assert season.year == 2020
        assert season.year_range == "2020"
        assert season.start_date == date(2020, 1, 1)
        assert season.end_date == date(2020, 12, 31)

    def test_unknown_league_is_calendar(self, normalizer):
        season = normalizer.normalize("Mystery League", "Season 2019/2020")
        assert season.year == 2019
        assert season.year_range == "2019"

    def test_label_case_and_spacing(self, normalizer):
        assert normalizer.parse_label("season 2017 / 2018") == 2017

    @pytest.mark.parametrize("label", ["2020", "Season twenty", "", "Season 20/21"])
    def test_bad_label(self, normalizer, label):
        with pytest.raises(ValidationGap):
            normalizer.normalize("Top 14", label)

    def test_same_label_same_id(self, normalizer):
        first = normalizer.normalize("United Rugby Championship", "Season 2017/2018")
        second = normalizer.normalize("United Rugby Championship", "Season 2017/2018")
        league_id = "EUR-UNITED-RUGBY-CHAMPIONSHIP"
        assert first.to_season(league_id).id == second.to_season(league_id).id
        assert first.to_season(league_id).id == "EUR-UNITED-RUGBY-CHAMPIONSHIP-SEASON-2016"


class TestFromStartYear:
    """Start years as API-Sports reports them."""

    def test_split_year(self, normalizer):
        season = normalizer.from_start_year("Top 14", 2023)
        assert season.year == 2023
        assert season.year_range == "2023-2024"
        assert season.start_date == date(2023, 8, 1)

    def test_calendar(self, normalizer):
        season = normalizer.from_start_year("Super Rugby Pacific", 2024)
        assert season.year_range == "2024"

    def test_provider_dates_override_window(self, normalizer):
        season = normalizer.from_start_year("Top 14", 2023, start=date(2023, 9, 2))
        assert season.start_date == date(2023, 9, 2)
        assert season.end_date == date(2024, 5, 31)


class TestFromYearRange:
    """Year ranges of the rugbydatabase competitions page."""

    def test_split_year_uses_start(self, normalizer):
        season = normalizer.from_year_range("Top 14", 2024, 2025)
        assert season.year == 2024
        assert season.year_range == "2024-2025"

    def test_calendar_uses_end(self, normalizer):
        season = normalizer.from_year_range("Super Rugby Pacific", 2024, 2025)
        assert season.year == 2025
        assert season.year_range == "2025"
        assert season.start_date == date(2025, 1, 1)

    def test_single_year_page(self, normalizer):
        assert normalizer.from_year_range("Super Rugby Pacific", 2025, 2025).year == 2025


class TestIsCurrent:

    def test_inside_window(self, normalizer):
        season = normalizer.normalize("United Rugby Championship", "Season 2017/2018")
        assert normalizer.is_current(season, today=date(2017, 1, 15))

    def test_outside_window(self, normalizer):
        season = normalizer.normalize("United Rugby Championship", "Season 2017/2018")
        assert not normalizer.is_current(season, today=date(2017, 6, 15))
