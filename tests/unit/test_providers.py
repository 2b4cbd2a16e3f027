"""
Tests for provider payload decoding and the shared HTTP client behaviour.

No network: parsers get literal payloads, clients get an httpx.MockTransport.
"""

import asyncio
from datetime import date, datetime

import httpx
import pytest

from rugbylive.errors import ProviderUnavailable, ValidationGap
from rugbylive.providers import (
    ApiSportsClient,
    RapidApiClient,
    RugbyDatabaseClient,
    WikidataClient,
)
from rugbylive.providers.apisports import map_status, parse_countries, parse_games, parse_leagues
from rugbylive.providers.base import with_retry
from rugbylive.providers.rapidapi import parse_competitions
from rugbylive.providers.rugbydb import (
    parse_competitions_page,
    parse_teams_page,
    season_years,
)
from rugbylive.providers.wikidata import entity_id, parse_team_bindings

BASE = "https://www.rugbydatabase.co.nz"

TEAMS_HTML = """
<html><body>
<h3>New Zealand</h3>
<div class="wrapper">
  <div class="img"><img src="/images/teams/crusaders.png"></div>
  <div class="playerLink"><a href="team/index.php?teamId=12">Crusaders Logo</a></div>
</div>
<div class="wrapper">
  <div class="img"><img src="https://cdn.example/TeamImage.webp"></div>
  <div class="playerLink"><a href="team/index.php?teamId=13&amp;tab=1">Blues</a></div>
</div>
<h3>France</h3>
<div class="wrapper">
  <div class="playerLink"><a href="team/index.php?teamId=40">Toulouse</a></div>
</div>
<div class="wrapper">
  <div class="playerLink"><a href="team/index.php">No Id</a></div>
</div>
</body></html>
"""

COMPETITIONS_HTML = """
<div class="competition">
  <a href="competition.php?competitionId=77"><img src="/img/top14.png"><h2>Top 14 (2024-25)</h2></a>
</div>
<div class="competition"><h2>No Id Cup</h2></div>
"""


def run(coro):
    return asyncio.run(coro)


class TestApiSportsParsing:

    def test_countries(self):
        payload = {
            "errors": [],
            "response": [
                {"id": 1, "name": "Argentina", "code": "AR", "flag": "http://f/ar.svg"},
                {"id": 2, "name": ""},
            ],
        }
        records = parse_countries(payload)
        assert len(records) == 1
        assert records[0].provider_id == "1"
        assert records[0].code == "AR"

    def test_errors_payload(self):
        with pytest.raises(ProviderUnavailable):
            parse_countries({"errors": {"token": "Missing API key"}, "response": []})

    def test_leagues_with_seasons(self):
        payload = {
            "errors": [],
            "response": [
                {
                    "id": 16,
                    "name": "Top 14",
                    "type": "League",
                    "logo": "http://l/16.png",
                    "country": {"name": "France", "code": "FR"},
                    "seasons": [
                        {"season": 2023, "current": False, "start": "2023-08-19", "end": "2024-06-28"},
                        {"season": 2024, "current": True, "start": None, "end": None},
                    ],
                }
            ],
        }
        (league,) = parse_leagues(payload)
        assert league.country_code == "FR"
        assert [s.year for s in league.seasons] == [2023, 2024]
        assert league.seasons[0].start_date == date(2023, 8, 19)
        assert league.seasons[1].current is True
        assert league.seasons[1].start_date is None

    def test_games(self):
        payload = {
            "errors": [],
            "response": [
                {
                    "id": 5000,
                    "date": "2024-09-07T19:05:00+00:00",
                    "status": {"long": "Finished", "short": "FT"},
                    "league": {"id": 16, "season": 2024},
                    "teams": {"home": {"id": 100}, "away": {"id": 101}},
                    "scores": {"home": 30, "away": 10},
                },
                {"id": 5001, "date": None, "teams": {}},
            ],
        }
        (game,) = parse_games(payload)
        assert game.kick_off == datetime(2024, 9, 7, 19, 5)
        assert game.status == "finished"
        assert game.league_provider_id == "16"
        assert (game.home_score, game.away_score) == (30, 10)

    @pytest.mark.parametrize(
        "long_status,short_status,expected",
        [("Finished", "FT", "finished"), ("First Half", "1H", "live"), ("Not Started", "NS", "upcoming")],
    )
    def test_map_status(self, long_status, short_status, expected):
        assert map_status(long_status, short_status) == expected


class TestRugbyDatabaseParsing:

    def test_teams_page(self):
        records = parse_teams_page(TEAMS_HTML, BASE)
        assert [(r.provider_id, r.name, r.country_name) for r in records] == [
            ("12", "Crusaders", "New Zealand"),
            ("13", "Blues", "New Zealand"),
            ("40", "Toulouse", "France"),
        ]
        assert records[0].logo_url == f"{BASE}/images/teams/crusaders.png"
        # Placeholder and missing logos are both empty
        assert records[1].logo_url == ""
        assert records[2].logo_url == ""

    def test_competitions_page(self):
        records = parse_competitions_page(COMPETITIONS_HTML, "2024-2025", BASE)
        assert len(records) == 1
        top14 = records[0]
        assert top14.provider_id == "77"
        assert top14.name == "Top 14 (2024-25)"
        assert top14.logo_url == f"{BASE}/img/top14.png"
        assert [(s.year, s.end_year) for s in top14.seasons] == [(2024, 2025)]

    def test_season_years(self):
        assert season_years("2024-2025") == (2024, 2025)
        assert season_years("2024") == (2024, 2024)
        with pytest.raises(ValidationGap):
            season_years("last year")


class TestRapidApiParsing:

    def test_rows_grouped_by_competition(self):
        payload = {
            "results": [
                {"id": 1236, "name": "Guinness Pro14", "season_name": "Season 2017/2018"},
                {"id": 1236, "name": "Guinness Pro14", "season_name": "Season 2018/2019"},
                {"id": 1300, "name": "T14", "season_name": "Season 2020/2021"},
            ]
        }
        records = parse_competitions(payload)
        assert [r.provider_id for r in records] == ["1236", "1300"]
        assert [s.label for s in records[0].seasons] == ["Season 2017/2018", "Season 2018/2019"]

    def test_missing_results(self):
        with pytest.raises(ProviderUnavailable):
            parse_competitions({"message": "You are not subscribed to this API."})


class TestWikidataParsing:

    def test_entity_id(self):
        assert entity_id("http://www.wikidata.org/entity/Q123") == "Q123"

    def test_bindings(self):
        payload = {
            "results": {
                "bindings": [
                    {
                        "team": {"value": "http://www.wikidata.org/entity/Q1"},
                        "teamLabel": {"value": "Crusaders"},
                        "countryLabel": {"value": "New Zealand"},
                        "logo": {"value": "http://commons/crusaders.svg"},
                    },
                    {
                        "team": {"value": "http://www.wikidata.org/entity/Q1"},
                        "teamLabel": {"value": "Crusaders"},
                        "countryLabel": {"value": "Aotearoa"},
                    },
                    {
                        "team": {"value": "http://www.wikidata.org/entity/Q2"},
                        "teamLabel": {"value": "Q2"},
                    },
                ]
            }
        }
        records = parse_team_bindings(payload)
        assert len(records) == 1
        assert records[0].provider_id == "Q1"
        assert records[0].country_name == "New Zealand"

    def test_bad_shape(self):
        with pytest.raises(ProviderUnavailable):
            parse_team_bindings({"head": {}})


class TestClients:

    def test_api_sports_request(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"errors": [], "response": [{"id": 1, "name": "Fiji", "code": "FJ"}]})

        client = ApiSportsClient(
            api_key="secret",
            base_url="https://api.test",
            transport=httpx.MockTransport(handler),
            min_interval=0,
            retry_delay=0,
        )

        async def fetch():
            async with client:
                return await client.fetch_countries()

        records = run(fetch())
        assert records[0].code == "FJ"
        assert seen[0].url.path == "/countries"
        assert seen[0].headers["x-apisports-key"] == "secret"

    def test_api_sports_fixture_filters(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"errors": [], "response": []})

        client = ApiSportsClient(
            api_key="k", base_url="https://api.test", transport=httpx.MockTransport(handler), min_interval=0
        )

        async def fetch():
            async with client:
                return await client.fetch_matches(league="16", season=2024)

        assert run(fetch()) == []
        assert dict(seen[0].url.params) == {"league": "16", "season": "2024"}

    def test_transient_errors_are_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"results": []})

        client = RapidApiClient(
            api_key="k",
            host="rugby.test",
            transport=httpx.MockTransport(handler),
            min_interval=0,
            max_attempts=3,
            retry_delay=0,
        )

        async def fetch():
            async with client:
                return await client.fetch_leagues()

        assert run(fetch()) == []
        assert len(calls) == 3
        assert calls[0].headers["X-RapidAPI-Host"] == "rugby.test"

    def test_retries_exhausted(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        client = RapidApiClient(
            api_key="k",
            host="rugby.test",
            transport=httpx.MockTransport(handler),
            min_interval=0,
            max_attempts=2,
            retry_delay=0,
        )

        async def fetch():
            async with client:
                return await client.fetch_leagues()

        with pytest.raises(ProviderUnavailable):
            run(fetch())
        assert len(calls) == 2

    def test_permanent_error_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        client = RugbyDatabaseClient(
            base_url=BASE,
            transport=httpx.MockTransport(handler),
            min_interval=0,
            max_attempts=3,
            retry_delay=0,
        )

        async def fetch():
            async with client:
                return await client.fetch_teams()

        with pytest.raises(ProviderUnavailable):
            run(fetch())
        assert len(calls) == 1

    def test_rugbydb_country_filter(self):
        def handler(request):
            return httpx.Response(200, text=TEAMS_HTML)

        client = RugbyDatabaseClient(base_url=BASE, transport=httpx.MockTransport(handler), min_interval=0)

        async def fetch():
            async with client:
                return await client.fetch_teams(country="france")

        assert [r.name for r in run(fetch())] == ["Toulouse"]

    def test_rugbydb_competitions_need_year(self):
        client = RugbyDatabaseClient(base_url=BASE, transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        async def fetch():
            async with client:
                return await client.fetch_leagues()

        with pytest.raises(ValidationGap):
            run(fetch())

    def test_wikidata_query(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"results": {"bindings": []}})

        client = WikidataClient(
            endpoint="https://query.example.org/sparql",
            transport=httpx.MockTransport(handler),
            min_interval=0,
        )

        async def fetch():
            async with client:
                return await client.fetch_teams(limit=10)

        assert run(fetch()) == []
        assert seen[0].url.host == "query.example.org"
        assert seen[0].url.path == "/sparql"
        assert "Q476028" in seen[0].url.params["query"]
        assert "LIMIT 10" in seen[0].url.params["query"]


def test_with_retry_does_not_retry_other_errors():
    calls = []

    async def failing():
        calls.append(1)
        raise ValueError("bad payload")

    with pytest.raises(ValueError):
        run(with_retry(failing, max_attempts=3, base_delay=0))
    assert len(calls) == 1
