"""
Static reference tables used by the reconciliation components.

Everything in here is loaded once per process and handed to components as a
read-only ReferenceTables instance. Components never import the raw dicts
directly, so tests (and alternative deployments) can inject their own tables.

Country codes are three-letter rugby/IOC style codes (NZL, RSA, ENG, ...)
plus three regional buckets for cross-border competitions:
    WLD  World
    EUR  Europe
    OCE  Oceania

League names used as keys are canonical names, i.e. the output of
NameNormalizer.normalize().
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class LeagueProfile:
    """Static metadata for a known competition."""

    country: str
    tier: int = 0
    format: str = "League"
    phases: tuple[str, ...] = ()
    international: bool = False


# =============================================================================
# Countries
# =============================================================================

REGIONS: dict[str, str] = {
    "WLD": "World",
    "EUR": "Europe",
    "OCE": "Oceania",
}

# Two-letter provider codes -> internal three-letter codes
COUNTRY_CODES: dict[str, str] = {
    "AR": "ARG",
    "AU": "AUS",
    "BE": "BEL",
    "BR": "BRA",
    "CA": "CAN",
    "CL": "CHL",
    "CN": "CHN",
    "CZ": "CZE",
    "DE": "GER",
    "ES": "ESP",
    "FJ": "FJI",
    "FR": "FRA",
    "GB-ENG": "ENG",
    "GB-SCT": "SCO",
    "GB-WLS": "WAL",
    "GE": "GEO",
    "HK": "HKG",
    "IE": "IRL",
    "IT": "ITA",
    "JP": "JPN",
    "KE": "KEN",
    "KR": "KOR",
    "NA": "NAM",
    "NL": "NLD",
    "NZ": "NZL",
    "PG": "PNG",
    "PT": "POR",
    "RO": "ROU",
    "RU": "RUS",
    "CH": "SWI",
    "TO": "TGA",
    "US": "USA",
    "UY": "UGY",
    "WS": "SAM",
    "ZA": "RSA",
    "ZW": "ZIM",
}

# Lowercased provider spellings -> canonical country name
COUNTRY_ALIASES: dict[str, str] = {
    "fiji islands": "Fiji",
    "france, french republic": "France",
    "russian federation": "Russia",
    "united states of america": "USA",
    "united states": "USA",
    "republic of ireland": "Ireland",
    "korea, republic of": "South Korea",
    "republic of korea": "South Korea",
    "holland": "Netherlands",
    "western samoa": "Samoa",
    "world": "World",
    "international": "World",
}

# =============================================================================
# League name tables
# =============================================================================

# Case-sensitive; applied after year tokens are stripped
LEAGUE_STANDARDIZATION: dict[str, str] = {
    "JRLO - Division 1": "Japan Rugby League One - Division 1",
    "JRLO - Division 2": "Japan Rugby League One - Division 2",
    "JRLO - Division 3": "Japan Rugby League One - Division 3",
    "Japan Rugby League One D1": "Japan Rugby League One - Division 1",
    "Japan Rugby League One D2": "Japan Rugby League One - Division 2",
    "Japan Rugby League One D3": "Japan Rugby League One - Division 3",
    "WXV 2024 (W)": "WXV (W)",
    "World Rugby Pacific Nations Cup": "Pacific Nations Cup",
    "T14": "Top 14",
    "Guinness Pro14": "United Rugby Championship",
    "Guinness Pro12": "United Rugby Championship",
    "RaboDirect Pro 12": "United Rugby Championship",
    "Heineken Cup": "European Rugby Champions Cup",
    "Heineken Champions Cup": "European Rugby Champions Cup",
    "Investec Champions Cup": "European Rugby Champions Cup",
    "European Champions Cup": "European Rugby Champions Cup",
    "European Challenge Cup": "EPCR Challenge Cup",
    "European Rugby Challenge Cup": "EPCR Challenge Cup",
    "Super Rugby": "Super Rugby Pacific",
    "Farah Palmer Cup": "Farah Palmer Cup (W)",
    "Women's Six Nations": "Women's Six Nations Championship (W)",
    "British & Irish Lions": "British & Irish Lions Tour",
    "Six Nations": "Six Nations Championship",
    "Aviva Premiership": "Premiership Rugby",
    "Gallagher Premiership": "Premiership Rugby",
    "Premiership": "Premiership Rugby",
    "Championship": "RFU Championship",
    "Super W": "Super W (W)",
    "Super Rugby Aupiki": "Super Rugby Aupiki (W)",
    "Pacific Four Series": "Pacific Four Series (W)",
    "Bunnings NPC": "National Provincial Championship",
}

# Canonical name -> aliases, compared case-insensitively
LEAGUE_ALT_NAMES: dict[str, tuple[str, ...]] = {
    "United Rugby Championship": (
        "URC", "Pro14", "Pro 14", "Pro12", "Pro 12", "Magners League", "Celtic League",
    ),
    "The Rugby Championship": ("Rugby Championship", "SANZAAR Rugby Championship"),
    "European Rugby Champions Cup": ("Champions Cup", "European Cup"),
    "EPCR Challenge Cup": ("Challenge Cup", "Investec Rugby Challenge Cup"),
    "British & Irish Lions Tour": ("Lions Tour",),
    "National Provincial Championship": ("NPC", "ITM Cup", "Mitre 10 Cup"),
    "Six Nations Championship": ("Guinness Six Nations", "6 Nations"),
    "Premiership Rugby": ("English Premiership", "Gallagher Premiership Rugby"),
    "WXV (W)": ("WXV",),
    "Super Rugby Aupiki (W)": ("Sky Super Rugby Aupiki",),
}

_WORLD_FRIENDLY = LeagueProfile("WLD", 0, "Friendly", ("Friendly",), True)

LEAGUE_PROFILES: dict[str, LeagueProfile] = {
    # Club competitions
    "Super Rugby Pacific": LeagueProfile("OCE", 1, "Hybrid", ("League", "Playoffs")),
    "Super Rugby Aupiki (W)": LeagueProfile("OCE", 1, "Hybrid", ("League", "Playoffs")),
    "Super W (W)": LeagueProfile("AUS", 1, "Hybrid", ("League", "Playoffs")),
    "United Rugby Championship": LeagueProfile("EUR", 1, "Hybrid", ("League", "Playoffs")),
    "Premiership Rugby": LeagueProfile("ENG", 1, "Hybrid", ("League", "Playoffs")),
    "Premiership Rugby Cup": LeagueProfile("ENG", 2, "Cup", ("Playoffs",)),
    "RFU Championship": LeagueProfile("ENG", 2, "Hybrid", ("League", "Playoffs")),
    "Top 14": LeagueProfile("FRA", 1, "Hybrid", ("League", "Playoffs")),
    "Pro D2": LeagueProfile("FRA", 2, "Hybrid", ("League", "Playoffs")),
    "European Rugby Champions Cup": LeagueProfile("EUR", 1, "Hybrid", ("Pools", "Playoffs")),
    "EPCR Challenge Cup": LeagueProfile("EUR", 2, "Hybrid", ("Pools", "Playoffs")),
    "Currie Cup": LeagueProfile("RSA", 2, "Hybrid", ("League", "Playoffs")),
    "National Provincial Championship": LeagueProfile("NZL", 2, "Hybrid", ("League", "Playoffs")),
    "Heartland Championship": LeagueProfile("NZL", 3, "Hybrid", ("League", "Playoffs")),
    "Farah Palmer Cup (W)": LeagueProfile("NZL", 2, "Hybrid", ("League", "Playoffs")),
    "Ranfurly Shield": LeagueProfile("NZL", 2, "Lineal", ("Lineal",)),
    "Major League Rugby": LeagueProfile("USA", 1, "Hybrid", ("League", "Playoffs")),
    "Japan Rugby League One - Division 1": LeagueProfile("JPN", 1, "Hybrid", ("League", "Playoffs")),
    "Japan Rugby League One - Division 2": LeagueProfile("JPN", 2, "League", ("League",)),
    "Japan Rugby League One - Division 3": LeagueProfile("JPN", 3, "League", ("League",)),
    # International competitions
    "Six Nations Championship": LeagueProfile("EUR", 1, "League", ("League",), True),
    "Women's Six Nations Championship (W)": LeagueProfile("EUR", 1, "League", ("League",), True),
    "Six Nations Under 20s Championship": LeagueProfile("EUR", 2, "League", ("League",), True),
    "Rugby Europe Championship": LeagueProfile("EUR", 2, "Hybrid", ("Pools", "Playoffs"), True),
    "The Rugby Championship": LeagueProfile("WLD", 1, "League", ("League",), True),
    "Tri Nations": LeagueProfile("WLD", 1, "League", ("League",), True),
    "Bledisloe Cup": LeagueProfile("OCE", 1, "Series", ("Test Match",), True),
    "Laurie O'Reilly Cup (W)": LeagueProfile("OCE", 1, "Series", ("Test Match",), True),
    "Pacific Four Series (W)": LeagueProfile("WLD", 1, "League", ("League",), True),
    "Pacific Nations Cup": LeagueProfile("WLD", 1, "Hybrid", ("League", "Playoffs"), True),
    "Rugby World Cup": LeagueProfile("WLD", 1, "Hybrid", ("Pools", "Playoffs"), True),
    "World Rugby U20 Championship": LeagueProfile("WLD", 1, "Hybrid", ("Pools", "Playoffs"), True),
    "WXV (W)": LeagueProfile("WLD", 1, "League", ("League",), True),
    "British & Irish Lions Tour": LeagueProfile("WLD", 1, "Series", ("Tour Match", "Test Match"), True),
    "Autumn Nations Series": _WORLD_FRIENDLY,
    "November Internationals": _WORLD_FRIENDLY,
    "Summer Tests": _WORLD_FRIENDLY,
    "Summer Test Series": LeagueProfile("WLD", 0, "Series", ("Series",), True),
    "International Friendly": _WORLD_FRIENDLY,
    "International Friendly (W)": _WORLD_FRIENDLY,
}

# Child competition -> parent competition
LEAGUE_PARENTS: dict[str, str] = {
    "All Blacks in Europe": "Autumn Nations Series",
    "All Blacks XV in Europe": "International Friendly",
    "Argentina in Europe": "Autumn Nations Series",
    "Australia in Europe": "Autumn Nations Series",
    "Australia A in England": "International Friendly",
    "Bledisloe Cup": "The Rugby Championship",
    "Black Ferns in England (W)": "International Friendly (W)",
    "British & Irish Lions in Australia": "British & Irish Lions Tour",
    "England in Japan": "Summer Tests",
    "England in New Zealand": "Summer Test Series",
    "Fiji in Europe": "Summer Tests",
    "France in England (W)": "International Friendly (W)",
    "Ireland in South Africa": "Summer Test Series",
    "Japan in Europe": "Autumn Nations Series",
    "Laurie O'Reilly Cup (W)": "Pacific Four Series (W)",
    "Maori All Blacks in Japan": "International Friendly",
    "South Africa in Europe": "Autumn Nations Series",
    "Summer Test Series": "Summer Tests",
    "Wales in Australia": "Summer Test Series",
    "WXV Qualifiers (W)": "WXV (W)",
    "WXV Warm Up Games (W)": "International Friendly (W)",
}

# Leagues renamed or replaced by another known league
LEAGUE_SUCCESSORS: dict[str, str] = {
    "Tri Nations": "The Rugby Championship",
    "November Internationals": "Autumn Nations Series",
}

# Leagues whose season spans two calendar years (Aug -> May)
SPLIT_YEAR_LEAGUES: dict[str, bool] = {
    "United Rugby Championship": True,
    "Top 14": True,
    "Premiership Rugby": True,
    "Premiership Rugby Cup": True,
    "RFU Championship": True,
    "European Rugby Champions Cup": True,
    "EPCR Challenge Cup": True,
    "Pro D2": True,
    "Six Nations Championship": False,
    "The Rugby Championship": False,
    "Super Rugby Pacific": False,
    "Super W (W)": False,
    "Pacific Four Series (W)": False,
    "National Provincial Championship": False,
}

# =============================================================================
# Team tables
# =============================================================================

# Ordered longest-first within each class; the classifier sorts anyway
SUFFIX_CLASSES: dict[str, tuple[str, ...]] = {
    "women": (" Women (W)", " Women", " (W)", " W"),
    "u20": (" Under 20", " Under20", " U20"),
    "a": (" A",),
    "b": (" B",),
    "c": (" C",),
    "xv": (" XV",),
}

OPPOSITE_WORDS: dict[str, str] = {
    "northern": "southern",
    "southern": "northern",
    "eastern": "western",
    "western": "eastern",
    "north": "south",
    "south": "north",
    "east": "west",
    "west": "east",
}

# Short names that may only be resolved through the nickname table
STRICT_MATCH_TEAMS: frozenset[str] = frozenset({"Cardiff"})

# Canonical internal team name -> the alias one provider uses for it
TEAM_NICKNAMES: dict[str, str] = {
    "All Blacks": "New Zealand",
    "Springboks": "South Africa",
    "Wallabies": "Australia",
    "Les Bleus": "France",
    "Black Ferns W": "New Zealand W",
    "Cardiff Rugby": "Cardiff",
}


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ReferenceTables:
    """Immutable bundle of every static table the reconcile package consults."""

    league_standardization: Mapping[str, str] = field(
        default_factory=lambda: _frozen(LEAGUE_STANDARDIZATION)
    )
    league_alt_names: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: _frozen(LEAGUE_ALT_NAMES)
    )
    league_profiles: Mapping[str, LeagueProfile] = field(
        default_factory=lambda: _frozen(LEAGUE_PROFILES)
    )
    league_parents: Mapping[str, str] = field(default_factory=lambda: _frozen(LEAGUE_PARENTS))
    league_successors: Mapping[str, str] = field(
        default_factory=lambda: _frozen(LEAGUE_SUCCESSORS)
    )
    split_year_leagues: Mapping[str, bool] = field(
        default_factory=lambda: _frozen(SPLIT_YEAR_LEAGUES)
    )
    suffix_classes: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: _frozen(SUFFIX_CLASSES)
    )
    opposite_words: Mapping[str, str] = field(default_factory=lambda: _frozen(OPPOSITE_WORDS))
    strict_match_teams: frozenset[str] = STRICT_MATCH_TEAMS
    team_nicknames: Mapping[str, str] = field(default_factory=lambda: _frozen(TEAM_NICKNAMES))
    country_codes: Mapping[str, str] = field(default_factory=lambda: _frozen(COUNTRY_CODES))
    country_aliases: Mapping[str, str] = field(default_factory=lambda: _frozen(COUNTRY_ALIASES))
    regions: Mapping[str, str] = field(default_factory=lambda: _frozen(REGIONS))

    def __post_init__(self) -> None:
        # Normalizing twice must give the same name, so no target may be
        # rewritten again.
        for source, target in self.league_standardization.items():
            chained = self.league_standardization.get(target)
            if chained is not None and chained != target:
                raise ValueError(
                    f"Standardization of {source!r} -> {target!r} is not idempotent "
                    f"({target!r} -> {chained!r})"
                )

        seen: dict[str, str] = {}
        for canonical, aliases in self.league_alt_names.items():
            for alias in aliases:
                key = alias.casefold()
                if key in seen and seen[key] != canonical:
                    raise ValueError(
                        f"Alias {alias!r} is listed for both {seen[key]!r} and {canonical!r}"
                    )
                seen[key] = canonical

    def league_profile(self, name: str) -> Optional[LeagueProfile]:
        return self.league_profiles.get(name)

    def is_split_year(self, league_name: str) -> bool:
        return self.split_year_leagues.get(league_name, False)


DEFAULT_TABLES = ReferenceTables()
