"""
Season normalization across provider year conventions.

Providers disagree on how to name a season. RapidAPI labels seasons
"Season 2017/2018" or "Season 2020"; API-Sports reports the start year
directly; rugbydatabase only gives the year range of the page the season
is listed on. Internally a season is keyed by (league id, year):

- Split-year leagues (URC, Top 14, Premiership...) run August to May.
  A RapidAPI label's first year is one ahead of the internal year, so
  "Season 2017/2018" becomes 2016 with range "2016-2017",
  2016-08-01 -> 2017-05-31.
- Calendar leagues (Six Nations, Super Rugby...) run January to December.
  "Season 2020" is 2020, range "2020", 2020-01-01 -> 2020-12-31.

Re-deriving a season from the same label always gives the same id, so
repeated imports update the same row.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from rugbylive.entities import Season
from rugbylive.errors import ValidationGap
from rugbylive.reconcile.names import season_id
from rugbylive.reconcile.tables import DEFAULT_TABLES, ReferenceTables

SEASON_LABEL_RE = re.compile(r"^\s*Season\s+(\d{4})(?:\s*/\s*(\d{4}))?\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class NormalizedSeason:
    year: int
    year_range: str
    start_date: date
    end_date: date

    def to_season(self, league_id: str, current: bool = False) -> Season:
        return Season(
            id=season_id(league_id, self.year),
            league_id=league_id,
            year=self.year,
            year_range=self.year_range,
            start_date=self.start_date,
            end_date=self.end_date,
            current=current,
        )

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class SeasonNormalizer:
    """Converts provider season labels into internal season keys."""

    def __init__(self, tables: ReferenceTables = DEFAULT_TABLES):
        self.tables = tables

    def parse_label(self, label: str) -> int:
        """
        Return the provisional start year of a "Season <Y1>/<Y2>" or
        "Season <Y>" label.

        Raises:
            ValidationGap: label matches neither form
        """
        match = SEASON_LABEL_RE.match(label or "")
        if match is None:
            raise ValidationGap(f"unrecognized season label {label!r}")
        return int(match.group(1))

    def normalize(self, league_name: str, label: str) -> NormalizedSeason:
        """Normalize a RapidAPI-style season label for a canonical league name."""
        provisional = self.parse_label(label)
        if self.tables.is_split_year(league_name):
            return self._split(provisional - 1)
        return self._calendar(provisional)

    def from_start_year(
        self,
        league_name: str,
        year: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> NormalizedSeason:
        """
        Normalize a season reported by its internal start year.

        Provider dates, when given, override the default window.
        """
        if self.tables.is_split_year(league_name):
            season = self._split(year)
        else:
            season = self._calendar(year)
        if start is None and end is None:
            return season
        return NormalizedSeason(
            year=season.year,
            year_range=season.year_range,
            start_date=start or season.start_date,
            end_date=end or season.end_date,
        )

    def from_year_range(
        self,
        league_name: str,
        start_year: int,
        end_year: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> NormalizedSeason:
        """
        Normalize a season reported only by its year range.

        Split-year leagues are keyed by the start year and calendar leagues
        by the end year: a "2024-2025" listing is Top 14 2024 but Super
        Rugby Pacific 2025.
        """
        if self.tables.is_split_year(league_name):
            return self.from_start_year(league_name, start_year, start, end)
        return self.from_start_year(league_name, end_year, start, end)

    @staticmethod
    def is_current(season: NormalizedSeason, today: Optional[date] = None) -> bool:
        """True if today falls inside the season window."""
        return season.contains(today or date.today())

    @staticmethod
    def _split(year: int) -> NormalizedSeason:
        return NormalizedSeason(
            year=year,
            year_range=f"{year}-{year + 1}",
            start_date=date(year, 8, 1),
            end_date=date(year + 1, 5, 31),
        )

    @staticmethod
    def _calendar(year: int) -> NormalizedSeason:
        return NormalizedSeason(
            year=year,
            year_range=str(year),
            start_date=date(year, 1, 1),
            end_date=date(year, 12, 31),
        )
