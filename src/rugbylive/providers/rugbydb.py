"""
rugbydatabase.co.nz scraper.

The site has no API; two server-rendered pages are parsed with
BeautifulSoup:

- teams.php: <h3> country headers, each followed by .wrapper blocks
  holding a .playerLink anchor (team/index.php?teamId=123) and a logo
- competitions.php?year=2024-2025: .competition blocks with an <h2> name,
  an anchor carrying competitionId= and a logo

Teams without a logo get a generic "TeamImage.webp" placeholder; that URL
is dropped so it never counts as a real logo.

Competition names carry year tokens ("Top 14 (2024-25)"), which
NameNormalizer strips downstream; the parser keeps them verbatim.
"""

import logging
import re
from typing import Any, Optional

import httpx
from bs4 import BeautifulSoup

from rugbylive.config import settings
from rugbylive.errors import ValidationGap
from rugbylive.providers.base import LeagueRecord, ProviderClient, SeasonRecord, TeamRecord

logger = logging.getLogger(__name__)

PROVIDER = "rugbydatabase"

PLACEHOLDER_LOGO = "TeamImage.webp"

_YEAR_RE = re.compile(r"^(\d{4})(?:-(\d{4}))?$")


def absolute_url(src: str, base_url: str) -> str:
    if not src:
        return ""
    if src.startswith("http"):
        return src
    return f"{base_url.rstrip('/')}/{src.lstrip('/')}"


def real_logo(url: str) -> str:
    """Return the URL unless it is the site's generic placeholder."""
    if not url or url.endswith(PLACEHOLDER_LOGO):
        return ""
    return url


def _query_value(href: Optional[str], key: str) -> str:
    if not href or f"{key}=" not in href:
        return ""
    return href.split(f"{key}=", 1)[1].split("&", 1)[0]


def parse_teams_page(html: str, base_url: Optional[str] = None) -> list[TeamRecord]:
    """Parse teams.php into TeamRecords, tracking the current <h3> country."""
    base_url = base_url or settings.rugbydb_base_url
    soup = BeautifulSoup(html, "html.parser")

    records = []
    current_country = ""
    for element in soup.select("h3, .wrapper"):
        if element.name == "h3":
            current_country = " ".join(element.get_text().split())
            continue

        link = element.select_one(".playerLink a")
        if link is None:
            continue
        name = " ".join(link.get_text().split())
        if name.endswith(" Logo"):
            name = name[: -len(" Logo")]
        team_id = _query_value(link.get("href"), "teamId")
        if not name or not team_id:
            continue

        img = element.select_one(".img img")
        logo = absolute_url(img.get("src", ""), base_url) if img is not None else ""

        records.append(
            TeamRecord(
                provider_id=team_id,
                name=name,
                country_name=current_country,
                logo_url=real_logo(logo),
            )
        )
    return records


def season_years(year: str) -> tuple[int, int]:
    """
    Start and end year of a competitions page year parameter.

    "2024-2025" -> (2024, 2025), "2024" -> (2024, 2024).

    The same page lists split-year competitions under their start year
    ("Top 14 (2024-25)") and calendar competitions under the end year
    ("Super Rugby Pacific (2025)"), so both are kept.

    Raises:
        ValidationGap: not a year or year range
    """
    match = _YEAR_RE.match(year.strip())
    if match is None:
        raise ValidationGap(f"invalid season year {year!r}")
    start = int(match.group(1))
    return start, int(match.group(2) or start)


def parse_competitions_page(
    html: str,
    year: str,
    base_url: Optional[str] = None,
) -> list[LeagueRecord]:
    """Parse competitions.php into LeagueRecords carrying one season each."""
    base_url = base_url or settings.rugbydb_base_url
    start_year, end_year = season_years(year)
    soup = BeautifulSoup(html, "html.parser")

    records = []
    for block in soup.select(".competition"):
        heading = block.find("h2")
        link = block.find("a")
        name = heading.get_text().strip() if heading is not None else ""
        if not name and link is not None:
            name = link.get_text().strip()
        competition_id = _query_value(link.get("href") if link is not None else None, "competitionId")
        if not name or not competition_id:
            continue

        img = block.find("img")
        logo = absolute_url(img.get("src", ""), base_url) if img is not None else ""

        records.append(
            LeagueRecord(
                provider_id=competition_id,
                name=name,
                logo_url=real_logo(logo),
                seasons=[
                    SeasonRecord(
                        competition_id=competition_id,
                        competition_name=name,
                        year=start_year,
                        end_year=end_year,
                    )
                ],
            )
        )
    return records


class RugbyDatabaseClient(ProviderClient):
    """
    Scraper for rugbydatabase.co.nz.

    Usage:
        async with RugbyDatabaseClient() as client:
            teams = await client.fetch_teams()
            leagues = await client.fetch_leagues(year="2024-2025")
    """

    name = PROVIDER
    required_options = {"fetch_leagues": ("year",)}

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ):
        super().__init__(
            base_url=base_url or settings.rugbydb_base_url,
            headers={"User-Agent": settings.provider_user_agent},
            transport=transport,
            **kwargs,
        )

    async def fetch_teams(self, country: Optional[str] = None, **kwargs: Any) -> list[TeamRecord]:
        html = await self.get_text("/teams.php")
        records = parse_teams_page(html, self.base_url)
        if country:
            wanted = " ".join(country.lower().replace("-", " ").split())
            records = [
                r for r in records
                if " ".join(r.country_name.lower().replace("-", " ").split()) == wanted
            ]
        logger.info("Parsed %d teams from %s", len(records), PROVIDER)
        return records

    async def fetch_leagues(self, year: str = "", **kwargs: Any) -> list[LeagueRecord]:
        if not year:
            raise ValidationGap("rugbydatabase competitions need a year, e.g. '2024-2025'")
        html = await self.get_text("/competitions.php", {"year": year})
        records = parse_competitions_page(html, year, self.base_url)
        logger.info("Parsed %d competitions for %s from %s", len(records), year, PROVIDER)
        return records
