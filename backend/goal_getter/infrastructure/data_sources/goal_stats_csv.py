"""
Goal Statistics CSV Data Source

Per-team aggregate statistics for home games (Goals_Stats_Home.csv) and
away games (Goals_Stats_Away.csv).

Columns: Team, League_Name, GP, 0.5+ ... 5.5+, BTS, CS, Goals, Avg.
Percent columns may carry a trailing "%".
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
import numpy as np
import pandas as pd

from goal_getter.config import Settings, DEFAULT_HOME_STATS_URL, DEFAULT_AWAY_STATS_URL
from goal_getter.domain.constants import GOAL_THRESHOLDS
from goal_getter.domain.entities.entities import TeamAggregateStats, VenueRole
from goal_getter.domain.repositories.repositories import TeamStatsRepository
from goal_getter.domain.services.statistics_service import StatisticsService
from goal_getter.infrastructure.cache.cache_service import CacheService
from goal_getter.infrastructure.data_sources.http_csv import DownloadCache, fetch_csv_with_retry


logger = logging.getLogger(__name__)


@dataclass
class GoalStatsCSVConfig:
    """Configuration for the goal statistics CSV data source."""
    home_url: str = DEFAULT_HOME_STATS_URL
    away_url: str = DEFAULT_AWAY_STATS_URL
    timeout: float = 30.0
    retries: int = 3
    retry_delay: float = 1.0
    cache_ttl: float = CacheService.TTL_HISTORICAL


def _numeric(series: pd.Series) -> pd.Series:
    """Convert a column to floats, stripping "%" and mapping blanks/garbage to 0."""
    values = pd.to_numeric(series.astype(str).str.replace("%", "", regex=False).str.strip(), errors="coerce")
    return pd.Series(np.nan_to_num(values.to_numpy(dtype=float), nan=0.0), index=series.index)


class GoalStatsCSVSource(TeamStatsRepository):
    """
    TeamStatsRepository backed by the home/away goal statistics files.

    Each file is cached for ``config.cache_ttl`` seconds.
    """

    SOURCE_NAME = "Goal Stats CSV"

    def __init__(
        self,
        config: Optional[GoalStatsCSVConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or GoalStatsCSVConfig()
        self._client = client
        self._files = DownloadCache(self.config.cache_ttl)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoalStatsCSVSource":
        return cls(GoalStatsCSVConfig(
            home_url=settings.home_stats_url,
            away_url=settings.away_stats_url,
            timeout=settings.http_timeout,
            retries=settings.http_retries,
            retry_delay=settings.retry_delay,
            cache_ttl=settings.data_ttl,
        ))

    @staticmethod
    def parse_stats(df: pd.DataFrame, venue: VenueRole) -> list[TeamAggregateStats]:
        """
        Parse a goal statistics DataFrame.

        League-average summary rows and blank team names are skipped.

        Args:
            df: DataFrame with string columns
            venue: Venue the file describes

        Returns:
            List of TeamAggregateStats in file order
        """
        team_col = next((c for c in df.columns if "team" in c.lower()), None)
        if team_col is None:
            logger.warning(f"Missing team column in stats data. Available: {df.columns.tolist()}")
            return []

        numeric = {
            col: _numeric(df[col])
            for col in df.columns
            if col not in (team_col, "League_Name")
        }

        def number(col: str, idx) -> float:
            return float(numeric[col][idx]) if col in numeric else 0.0

        stats = []
        for idx, row in df.iterrows():
            team = str(row[team_col]).strip()
            if not team or "league average" in team.lower():
                continue

            games_played = int(number("GP", idx))
            # "Country - League" header rows carry no games
            if " - " in team and games_played == 0:
                continue
            goals = int(number("Goals", idx)) if "Goals" in numeric else None

            stats.append(TeamAggregateStats(
                team=team,
                league_name=str(row.get("League_Name", "")).strip(),
                venue=venue,
                games_played=games_played,
                avg_goals=number("Avg", idx),
                goals_scored=goals,
                over_percentages={t: number(f"{t}+", idx) for t in GOAL_THRESHOLDS},
                both_teams_scored_pct=number("BTS", idx),
                clean_sheet_pct=number("CS", idx),
            ))
        return stats

    async def _download(self, client: httpx.AsyncClient, venue: VenueRole) -> list[TeamAggregateStats]:
        url = self.config.home_url if venue == VenueRole.HOME else self.config.away_url
        df = await fetch_csv_with_retry(
            client,
            url,
            retries=self.config.retries,
            retry_delay=self.config.retry_delay,
            timeout=self.config.timeout,
        )
        stats = self.parse_stats(df, venue)
        logger.info(f"Parsed {len(stats)} {venue.value} team stats from {url}")
        return stats

    async def _load(self, client: httpx.AsyncClient, venue: VenueRole) -> list[TeamAggregateStats]:
        return await self._files.load(venue, lambda: self._download(client, venue))

    async def load_all(self) -> dict[VenueRole, list[TeamAggregateStats]]:
        """
        Load both files concurrently.

        Raises:
            DataSourceUnavailableException: If a file cannot be downloaded
        """
        venues = (VenueRole.HOME, VenueRole.AWAY)
        if self._client is not None:
            results = await asyncio.gather(*[self._load(self._client, v) for v in venues])
        else:
            async with httpx.AsyncClient() as client:
                results = await asyncio.gather(*[self._load(client, v) for v in venues])
        return dict(zip(venues, results))

    def refresh(self):
        self._files.clear()

    async def fetch_aggregate_stats(
        self,
        team: str,
        venue_role: VenueRole,
    ) -> Optional[TeamAggregateStats]:
        all_stats = await self.load_all()
        for stats in all_stats[venue_role]:
            if StatisticsService.is_same_team(stats.team, team):
                return stats
        logger.debug(f"No {venue_role.value} stats for {team}")
        return None
