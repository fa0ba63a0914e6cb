"""
Unit Tests for the CSV and in-memory data sources

HTTP traffic goes through httpx.MockTransport; nothing touches the network.
"""

import asyncio
from collections import Counter

import httpx
import pytest

from goal_getter.application.use_cases.use_cases import GetMatchAnalysisUseCase, PredictionDataSources
from goal_getter.domain.entities.entities import VenueRole
from goal_getter.domain.exceptions import (
    DataSourceUnavailableException,
    MalformedRecordException,
)
from goal_getter.infrastructure.data_sources.goal_stats_csv import (
    GoalStatsCSVConfig,
    GoalStatsCSVSource,
)
from goal_getter.infrastructure.data_sources.http_csv import (
    add_cache_busting,
    fetch_csv_with_retry,
    read_csv_text,
)
from goal_getter.infrastructure.data_sources.in_memory import InMemoryMatchRepository
from goal_getter.infrastructure.data_sources.results_csv import (
    ResultsCSVConfig,
    ResultsCSVSource,
    parse_score,
)


RESULTS_CSV = """League,Team_Home,Team_Away,Score,HT Score,Date,Status
EPL,Arsenal,Chelsea,2-1,1-0,2024-08-17,FT
EPL,Spurs,Arsenal,abc,,2024-08-10,FT
EPL,Arsenal,Spurs,1-1,,2024-08-24,PST
EPL,Chelsea,Spurs,0 - 3,0-2,2024-08-01,FT
"""

OLD_RESULTS_CSV = """Liga,HomeTeam,AwayTeam,FTHG,FTAG,Data
EPL,Spurs,Chelsea,1,1,15/03/2023
EPL,Arsenal,Spurs,,2,16/03/2023
"""

HOME_STATS_CSV = """Team,League_Name,GP,0.5+,1.5+,2.5+,3.5+,4.5+,5.5+,BTS,CS,Goals,Avg
England - Premier League,,0,,,,,,,,,,
Arsenal,Premier League,10,100%,90%,60%,30%,10%,0%,50%,40%,22,2.2
League average,Premier League,10,95%,80%,50%,20%,5%,1%,45%,30%,15,1.5
Chelsea,Premier League,9,88%,77%,44%,22%,11%,0%,55%,33%,14,1.56
"""

AWAY_STATS_CSV = """Team,League_Name,GP,0.5+,1.5+,2.5+,3.5+,4.5+,5.5+,BTS,CS,Goals,Avg
Arsenal,Premier League,10,90%,70%,50%,20%,0%,0%,40%,30%,12,1.2
Man City,Premier League,10,100%,90%,70%,40%,20%,10%,60%,20%,25,2.5
"""


def mock_client(routes, calls=None):
    """AsyncClient answering by URL path; unknown paths return 500."""
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request.url.path)
        body = routes.get(request.url.path)
        if body is None:
            return httpx.Response(500, text="boom")
        return httpx.Response(200, text=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestParseScore:

    @pytest.mark.parametrize("text,expected", [("2-1", (2, 1)), (" 0 - 3 ", (0, 3)), ("10-0", (10, 0))])
    def test_valid(self, text, expected):
        assert parse_score(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "1-", "1-2-3", "x-1", None])
    def test_malformed(self, text):
        with pytest.raises(MalformedRecordException):
            parse_score(text)


class TestHttpCsv:

    def test_cache_busting(self):
        assert "?_t=" in add_cache_busting("https://example.com/a.csv")
        assert "&_t=" in add_cache_busting("https://example.com/a.csv?x=1")

    def test_read_csv_keeps_strings(self):
        df = read_csv_text(' "Team" ,GP\nArsenal,010\n')
        assert list(df.columns) == ["Team", "GP"]
        assert df["GP"][0] == "010"

    def test_retries_until_success(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                return httpx.Response(503)
            return httpx.Response(200, text="a,b\n1,2\n")

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await fetch_csv_with_retry(client, "https://example.com/x.csv", retries=3, retry_delay=0)

        df = asyncio.run(run())

        assert len(attempts) == 3
        assert df["a"][0] == "1"

    def test_raises_after_last_attempt(self):
        async def run():
            async with mock_client({}) as client:
                return await fetch_csv_with_retry(client, "https://example.com/x.csv", retries=2, retry_delay=0)

        with pytest.raises(DataSourceUnavailableException, match="after 2 attempts"):
            asyncio.run(run())


class TestResultsCSVSource:

    @pytest.fixture
    def config(self):
        return ResultsCSVConfig(
            urls=("https://example.com/results.csv", "https://example.com/results_2023.csv"),
            retries=1,
            retry_delay=0,
        )

    def test_parse_matches_skips_bad_rows(self):
        matches = ResultsCSVSource().parse_matches(read_csv_text(RESULTS_CSV))

        assert [(m.home_team, m.score) for m in matches] == [("Arsenal", "2-1"), ("Chelsea", "0-3")]
        assert matches[0].half_time_score == "1-0"
        assert matches[0].match_date.year == 2024
        assert matches[0].league == "EPL"

    def test_parse_matches_goal_columns(self):
        matches = ResultsCSVSource().parse_matches(read_csv_text(OLD_RESULTS_CSV))

        assert len(matches) == 1
        assert matches[0].score == "1-1"
        assert matches[0].match_date.day == 15

    def test_parse_matches_missing_columns(self):
        assert ResultsCSVSource().parse_matches(read_csv_text("Foo,Bar\n1,2\n")) == []

    def test_load_matches_chronological_and_cached(self, config):
        calls = []
        routes = {"/results.csv": RESULTS_CSV, "/results_2023.csv": OLD_RESULTS_CSV}

        async def run():
            async with mock_client(routes, calls) as client:
                source = ResultsCSVSource(config, client=client)
                first = await source.load_matches()
                second = await source.load_matches()
                return source, first, second

        source, first, second = asyncio.run(run())

        assert [m.score for m in first] == ["1-1", "0-3", "2-1"]
        assert first == second
        assert len(calls) == 2
        assert source.last_loaded_at is not None

    def test_partial_failure_uses_remaining_files(self, config):
        async def run():
            async with mock_client({"/results.csv": RESULTS_CSV}) as client:
                return await ResultsCSVSource(config, client=client).load_matches()

        assert len(asyncio.run(run())) == 2

    def test_total_failure_raises(self, config):
        async def run():
            async with mock_client({}) as client:
                return await ResultsCSVSource(config, client=client).load_matches()

        with pytest.raises(DataSourceUnavailableException):
            asyncio.run(run())

    def test_repository_queries(self, config):
        routes = {"/results.csv": RESULTS_CSV, "/results_2023.csv": OLD_RESULTS_CSV}

        async def run():
            async with mock_client(routes) as client:
                source = ResultsCSVSource(config, client=client)
                return (
                    await source.fetch_recent_matches("Chelsea", VenueRole.HOME),
                    await source.fetch_head_to_head("Chelsea", "Spurs"),
                    await source.fetch_league_matches("EPL", limit=2),
                )

        recent, h2h, league = asyncio.run(run())

        assert [m.score for m in recent] == ["0-3"]
        assert [m.score for m in h2h] == ["0-3", "1-1"]
        assert [m.score for m in league] == ["0-3", "2-1"]

    def test_concurrent_loads_share_one_download(self, config):
        downloads = []

        async def handler(request: httpx.Request) -> httpx.Response:
            downloads.append(request.url.path)
            await asyncio.sleep(0.01)
            return httpx.Response(200, text=RESULTS_CSV)

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                source = ResultsCSVSource(config, client=client)
                return await asyncio.gather(*[source.load_matches() for _ in range(8)])

        results = asyncio.run(run())

        assert sorted(downloads) == ["/results.csv", "/results_2023.csv"]
        assert all(r == results[0] for r in results)

    def test_expired_files_are_downloaded_again(self, config):
        config.cache_ttl = 0
        routes = {"/results.csv": RESULTS_CSV, "/results_2023.csv": OLD_RESULTS_CSV}

        async def run():
            async with mock_client(routes) as client:
                source = ResultsCSVSource(config, client=client)
                before = await source.fetch_recent_matches("Arsenal", VenueRole.HOME)
                routes["/results.csv"] = RESULTS_CSV + "EPL,Arsenal,Everton,3-0,,2024-09-01,FT\n"
                after = await source.fetch_recent_matches("Arsenal", VenueRole.HOME)
                return before, after

        before, after = asyncio.run(run())

        assert [m.score for m in before] == ["2-1"]
        assert [m.score for m in after] == ["3-0", "2-1"]

    def test_refresh_drops_cached_files(self, config):
        calls = []
        routes = {"/results.csv": RESULTS_CSV, "/results_2023.csv": OLD_RESULTS_CSV}

        async def run():
            async with mock_client(routes, calls) as client:
                source = ResultsCSVSource(config, client=client)
                await source.load_matches()
                source.refresh()
                await source.load_matches()

        asyncio.run(run())

        assert len(calls) == 4

    def test_failed_file_is_not_cached(self, config):
        routes = {"/results.csv": RESULTS_CSV}

        async def run():
            async with mock_client(routes) as client:
                source = ResultsCSVSource(config, client=client)
                first = await source.load_matches()
                routes["/results_2023.csv"] = OLD_RESULTS_CSV
                second = await source.load_matches()
                return first, second

        first, second = asyncio.run(run())

        assert len(first) == 2
        assert len(second) == 3


class TestGoalStatsCSVSource:

    def test_parse_stats(self):
        stats = GoalStatsCSVSource.parse_stats(read_csv_text(HOME_STATS_CSV), VenueRole.HOME)

        assert [s.team for s in stats] == ["Arsenal", "Chelsea"]
        arsenal = stats[0]
        assert arsenal.games_played == 10
        assert arsenal.goals_scored == 22
        assert arsenal.avg_goals == pytest.approx(2.2)
        assert arsenal.over_percentage(2.5) == pytest.approx(60.0)
        assert arsenal.both_teams_scored_pct == pytest.approx(50.0)
        assert arsenal.clean_sheet_pct == pytest.approx(40.0)
        assert arsenal.league_name == "Premier League"

    def test_fetch_aggregate_stats(self):
        config = GoalStatsCSVConfig(
            home_url="https://example.com/home.csv",
            away_url="https://example.com/away.csv",
            retries=1,
            retry_delay=0,
        )
        routes = {"/home.csv": HOME_STATS_CSV, "/away.csv": AWAY_STATS_CSV}

        async def run():
            async with mock_client(routes) as client:
                source = GoalStatsCSVSource(config, client=client)
                return (
                    await source.fetch_aggregate_stats("Arsenal FC", VenueRole.AWAY),
                    await source.fetch_aggregate_stats("Manchester City", VenueRole.AWAY),
                    await source.fetch_aggregate_stats("Everton", VenueRole.HOME),
                )

        arsenal, city, everton = asyncio.run(run())

        assert arsenal.goals_scored == 12
        assert arsenal.venue == VenueRole.AWAY
        assert city.avg_goals == pytest.approx(2.5)
        assert everton is None

    def test_missing_file_raises(self):
        config = GoalStatsCSVConfig(
            home_url="https://example.com/home.csv",
            away_url="https://example.com/missing.csv",
            retries=1,
            retry_delay=0,
        )

        async def run():
            async with mock_client({"/home.csv": HOME_STATS_CSV}) as client:
                return await GoalStatsCSVSource(config, client=client).fetch_aggregate_stats("Arsenal", VenueRole.HOME)

        with pytest.raises(DataSourceUnavailableException):
            asyncio.run(run())

    def test_expired_stats_are_downloaded_again(self):
        config = GoalStatsCSVConfig(
            home_url="https://example.com/home.csv",
            away_url="https://example.com/away.csv",
            retries=1,
            retry_delay=0,
            cache_ttl=0,
        )
        routes = {"/home.csv": HOME_STATS_CSV, "/away.csv": AWAY_STATS_CSV}

        async def run():
            async with mock_client(routes) as client:
                source = GoalStatsCSVSource(config, client=client)
                before = await source.fetch_aggregate_stats("Everton", VenueRole.AWAY)
                routes["/away.csv"] = AWAY_STATS_CSV + "Everton,Premier League,8,75%,50%,25%,0%,0%,0%,25%,25%,7,0.88\n"
                after = await source.fetch_aggregate_stats("Everton", VenueRole.AWAY)
                return before, after

        before, after = asyncio.run(run())

        assert before is None
        assert after.goals_scored == 7


class TestSharedDownloads:
    """A full analysis downloads each file once, however many models read it."""

    def test_match_analysis_downloads_each_file_once(self):
        downloads = Counter()
        routes = {
            "/results.csv": RESULTS_CSV,
            "/home.csv": HOME_STATS_CSV,
            "/away.csv": AWAY_STATS_CSV,
        }

        async def handler(request: httpx.Request) -> httpx.Response:
            downloads[request.url.path] += 1
            await asyncio.sleep(0.01)
            return httpx.Response(200, text=routes[request.url.path])

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                data_sources = PredictionDataSources(
                    matches=ResultsCSVSource(
                        ResultsCSVConfig(urls=("https://example.com/results.csv",), retries=1, retry_delay=0),
                        client=client,
                    ),
                    team_stats=GoalStatsCSVSource(
                        GoalStatsCSVConfig(
                            home_url="https://example.com/home.csv",
                            away_url="https://example.com/away.csv",
                            retries=1,
                            retry_delay=0,
                        ),
                        client=client,
                    ),
                )
                return await GetMatchAnalysisUseCase(data_sources).execute("Arsenal", "Chelsea", "EPL")

        result = asyncio.run(run())

        assert downloads == Counter({"/results.csv": 1, "/home.csv": 1, "/away.csv": 1})
        assert result.markov is not None


class TestInMemoryMatchRepository:

    def test_recent_matches_most_recent_first(self, make_match):
        repo = InMemoryMatchRepository([
            make_match("A", "B", "1-0"),
            make_match("A", "C", "2-0"),
            make_match("A", "D", "3-0"),
        ])

        recent = asyncio.run(repo.fetch_recent_matches("A", VenueRole.HOME, limit=2))

        assert [m.score for m in recent] == ["3-0", "2-0"]

    def test_derived_stats(self, make_match):
        repo = InMemoryMatchRepository([make_match("A", "B", "2-0"), make_match("A", "C", "1-1")])

        stats = asyncio.run(repo.fetch_aggregate_stats("A", VenueRole.HOME))

        assert stats.avg_goals == pytest.approx(1.5)
        assert asyncio.run(repo.fetch_aggregate_stats("A", VenueRole.AWAY)) is None

    def test_league_matches_tail(self, make_match):
        repo = InMemoryMatchRepository([make_match("A", "B", f"{i}-0", league="L") for i in range(5)])
        repo.add(make_match("A", "B", "9-9", league="Other"))

        league = asyncio.run(repo.fetch_league_matches("L", limit=2))

        assert [m.score for m in league] == ["3-0", "4-0"]
