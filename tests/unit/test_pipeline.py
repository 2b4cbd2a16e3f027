"""
Tests for the staged catalog import, with in-process provider clients.
"""

import asyncio
from contextlib import contextmanager

import httpx
import pytest

from rugbylive.errors import ProviderUnavailable
from rugbylive.pipeline import CatalogImporter, supports
from rugbylive.providers.base import (
    CountryRecord,
    LeagueRecord,
    ProviderClient,
    SeasonRecord,
    TeamRecord,
)
from rugbylive.providers.rugbydb import RugbyDatabaseClient

COMPETITIONS_HTML = """
<div class="competition">
  <a href="competition.php?competitionId=77"><h2>Top 14 (2024-25)</h2></a>
</div>
"""


class FakeApiSports(ProviderClient):
    name = "api_sports"

    def __init__(self):
        super().__init__(base_url="https://api.test", min_interval=0)
        self.league_calls = 0

    async def fetch_countries(self):
        return [CountryRecord("1", "France", "FR")]

    async def fetch_leagues(self, **kwargs):
        self.league_calls += 1
        return [
            LeagueRecord(
                provider_id="16",
                name="Top 14",
                country_code="FR",
                seasons=[SeasonRecord("16", "Top 14", year=2024, current=True)],
            )
        ]

    async def fetch_teams(self, **kwargs):
        return [TeamRecord("100", "Toulouse", country_code="FR")]


class FakeScraper(ProviderClient):
    name = "rugbydatabase"

    def __init__(self):
        super().__init__(base_url="https://scraper.test", min_interval=0)

    async def fetch_teams(self, **kwargs):
        return [TeamRecord("7", "Stade Francais", country_name="France")]


class BrokenLeagues(FakeApiSports):

    async def fetch_leagues(self, **kwargs):
        raise ProviderUnavailable("api_sports", "HTTP 503")


class BrokenRapidApi(ProviderClient):
    name = "rapidapi"

    def __init__(self):
        super().__init__(base_url="https://rapid.test", min_interval=0)

    async def fetch_leagues(self, **kwargs):
        raise ProviderUnavailable("rapidapi", "HTTP 429")


def scraper_client(requested):
    def handler(request):
        requested.append(request.url)
        if request.url.path == "/competitions.php":
            return httpx.Response(200, text=COMPETITIONS_HTML)
        return httpx.Response(200, text="<html></html>")

    return RugbyDatabaseClient(
        base_url="https://scraper.test", transport=httpx.MockTransport(handler), min_interval=0
    )


@pytest.fixture
def session_factory(db_session):
    @contextmanager
    def factory():
        yield db_session

    return factory


def test_supports_only_overridden_methods():
    client = FakeScraper()
    assert supports(client, "fetch_teams")
    assert not supports(client, "fetch_leagues")


def test_full_run(session_factory, store):
    client = FakeApiSports()
    importer = CatalogImporter(
        {"api_sports": client, "rugbydatabase": FakeScraper()},
        session_factory=session_factory,
    )
    results = asyncio.run(importer.run())

    assert [r.stage_name for r in results] == ["countries", "leagues", "seasons", "teams", "matches"]
    assert [r.status for r in results] == ["success", "success", "success", "partial", "skipped"]

    # Leagues are fetched once and reused for seasons
    assert client.league_calls == 1
    assert store.current_season("FRA-TOP-14").year == 2024
    assert store.get_by_canonical_id("team", "FRA-TOULOUSE") is not None

    teams = results[3].metrics["providers"]
    assert [p["provider"] for p in teams] == ["api_sports", "rugbydatabase"]
    assert teams[1]["queued_for_review"] == 1


def test_failed_stage_stops_the_run(session_factory):
    importer = CatalogImporter({"api_sports": BrokenLeagues()}, session_factory=session_factory)
    results = asyncio.run(importer.run())

    assert [r.status for r in results] == ["success", "failed"]
    assert "503" in results[1].error


def test_priority_teams_option(session_factory, store):
    importer = CatalogImporter(
        {"api_sports": FakeApiSports(), "rugbydatabase": FakeScraper()},
        session_factory=session_factory,
    )
    results = asyncio.run(
        importer.run(options={"priority_teams": ["Stade Francais"]})
    )
    assert results[3].status == "success"
    assert store.get_by_canonical_id("team", "FRA-STADE-FRANCAIS") is not None


def test_selected_stages(session_factory):
    importer = CatalogImporter({"api_sports": FakeApiSports()}, session_factory=session_factory)
    results = asyncio.run(importer.run(include=["leagues", "countries"]))
    assert [r.stage_name for r in results] == ["countries", "leagues"]


def test_provider_missing_required_option_is_skipped(session_factory, store):
    requested = []
    importer = CatalogImporter(
        {"api_sports": FakeApiSports(), "rugbydatabase": scraper_client(requested)},
        session_factory=session_factory,
    )
    results = asyncio.run(importer.run())

    assert [r.status for r in results] == ["success", "success", "success", "success", "skipped"]
    leagues = results[1].metrics["providers"]
    assert [p["provider"] for p in leagues] == ["api_sports"]
    assert [url.path for url in requested] == ["/teams.php"]
    assert store.current_season("FRA-TOP-14").year == 2024


def test_required_option_given(session_factory, store):
    requested = []
    importer = CatalogImporter(
        {"api_sports": FakeApiSports(), "rugbydatabase": scraper_client(requested)},
        session_factory=session_factory,
    )
    options = {"provider_options": {"rugbydatabase": {"year": "2024-2025"}}}
    results = asyncio.run(importer.run(include=["countries", "leagues", "seasons"], options=options))

    assert [r.status for r in results] == ["success", "success", "success"]
    assert [p["provider"] for p in results[1].metrics["providers"]] == ["api_sports", "rugbydatabase"]
    assert requested[0].params["year"] == "2024-2025"
    assert store.get_cross_reference("rugbydatabase", "77-2024", "season") == "FRA-TOP-14-SEASON-2024"


def test_failed_stage_keeps_finished_provider_stats(session_factory, store):
    importer = CatalogImporter(
        {"api_sports": FakeApiSports(), "rapidapi": BrokenRapidApi()},
        session_factory=session_factory,
    )
    results = asyncio.run(importer.run())

    assert [r.status for r in results] == ["success", "failed"]
    assert "429" in results[1].error
    leagues = results[1].metrics["providers"]
    assert [p["provider"] for p in leagues] == ["api_sports"]
    assert store.get_by_canonical_id("league", "FRA-TOP-14") is not None
