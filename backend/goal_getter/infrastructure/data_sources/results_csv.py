"""
Match Results CSV Data Source

Downloads and parses the historical results files (all leagues, one file
per season) into MatchRecord entities.

Expected columns: League, Team_Home (or HomeTeam), Team_Away (or AwayTeam),
Score ("h-a"), HT Score, Date, Status. Files without a Score column may
carry Goals_Home / Goals_Away instead.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import httpx
import pandas as pd

from goal_getter.config import Settings, DEFAULT_RESULTS_URLS
from goal_getter.domain.constants import HEAD_TO_HEAD_LIMIT
from goal_getter.domain.entities.entities import MatchRecord, VenueRole
from goal_getter.domain.exceptions import (
    DataSourceUnavailableException,
    MalformedRecordException,
)
from goal_getter.domain.repositories.repositories import MatchRepository
from goal_getter.domain.services.statistics_service import StatisticsService
from goal_getter.infrastructure.cache.cache_service import CacheService
from goal_getter.infrastructure.data_sources.http_csv import DownloadCache, fetch_csv_with_retry
from goal_getter.utils.time_utils import get_current_time, parse_match_date


logger = logging.getLogger(__name__)


COLUMN_ALIASES = {
    "home_team": ("Team_Home", "HomeTeam", "Home"),
    "away_team": ("Team_Away", "AwayTeam", "Away"),
    "score": ("Score", "FT Score"),
    "ht_score": ("HT Score", "HT_Score", "HTScore"),
    "home_goals": ("Goals_Home", "FTHG"),
    "away_goals": ("Goals_Away", "FTAG"),
    "date": ("Date", "Data"),
    "league": ("League", "Liga"),
    "status": ("Status",),
}


def parse_score(text) -> tuple[int, int]:
    """
    Parse an "h-a" score string.

    Raises:
        MalformedRecordException: If the text is not two non-negative integers
    """
    raw = "" if text is None else str(text).strip()
    parts = raw.split("-")
    if len(parts) != 2:
        raise MalformedRecordException(f"Unparseable score: {raw!r}")
    try:
        home, away = int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        raise MalformedRecordException(f"Unparseable score: {raw!r}")
    if home < 0 or away < 0:
        raise MalformedRecordException(f"Negative goals in score: {raw!r}")
    return home, away


def _optional_score(text) -> tuple[Optional[int], Optional[int]]:
    try:
        return parse_score(text)
    except MalformedRecordException:
        return None, None


@dataclass
class ResultsCSVConfig:
    """Configuration for the results CSV data source."""
    urls: tuple[str, ...] = DEFAULT_RESULTS_URLS
    timeout: float = 30.0
    retries: int = 3
    retry_delay: float = 1.0
    skipped_statuses: tuple[str, ...] = ("PST", "CANC", "ABD")
    cache_ttl: float = CacheService.TTL_HISTORICAL


class ResultsCSVSource(MatchRepository):
    """
    MatchRepository backed by the results CSV files.

    Parsed records are cached per URL for ``config.cache_ttl`` seconds;
    call ``refresh()`` to download again.
    """

    SOURCE_NAME = "Results CSV"

    def __init__(
        self,
        config: Optional[ResultsCSVConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or ResultsCSVConfig()
        self._client = client
        self._files = DownloadCache(self.config.cache_ttl)
        self.last_loaded_at: Optional[datetime] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResultsCSVSource":
        return cls(ResultsCSVConfig(
            urls=settings.results_urls,
            timeout=settings.http_timeout,
            retries=settings.http_retries,
            retry_delay=settings.retry_delay,
            cache_ttl=settings.data_ttl,
        ))

    @staticmethod
    def _column(df: pd.DataFrame, key: str) -> Optional[str]:
        for name in COLUMN_ALIASES[key]:
            if name in df.columns:
                return name
        return None

    def parse_matches(self, df: pd.DataFrame) -> list[MatchRecord]:
        """
        Parse a results DataFrame into MatchRecord entities.

        Rows whose score does not parse are excluded (never coerced to 0-0)
        and logged at DEBUG.

        Args:
            df: DataFrame with string columns

        Returns:
            List of MatchRecord in file order
        """
        cols = {key: self._column(df, key) for key in COLUMN_ALIASES}

        if not cols["home_team"] or not cols["away_team"]:
            logger.warning(f"Missing team columns in data. Available: {df.columns.tolist()}")
            return []
        if not cols["score"] and not (cols["home_goals"] and cols["away_goals"]):
            logger.warning(f"Missing score columns in data. Available: {df.columns.tolist()}")
            return []

        def value(row, key: str) -> str:
            col = cols[key]
            return str(row[col]).strip() if col else ""

        matches = []
        skipped = 0

        for idx, row in df.iterrows():
            home_team = value(row, "home_team")
            away_team = value(row, "away_team")
            if not home_team or not away_team:
                skipped += 1
                continue

            status = value(row, "status") or "FT"
            if status.upper() in self.config.skipped_statuses:
                skipped += 1
                continue

            try:
                if cols["score"]:
                    home_goals, away_goals = parse_score(value(row, "score"))
                else:
                    home_goals, away_goals = parse_score(
                        f"{value(row, 'home_goals')}-{value(row, 'away_goals')}"
                    )
            except MalformedRecordException as e:
                logger.debug(f"Skipping row {idx} ({home_team} vs {away_team}): {e}")
                skipped += 1
                continue

            ht_home, ht_away = _optional_score(value(row, "ht_score"))

            matches.append(MatchRecord(
                home_team=home_team,
                away_team=away_team,
                home_goals=home_goals,
                away_goals=away_goals,
                league=value(row, "league"),
                match_date=parse_match_date(value(row, "date")),
                half_time_home_goals=ht_home,
                half_time_away_goals=ht_away,
                status=status,
            ))

        if skipped:
            logger.debug(f"Excluded {skipped} of {len(df)} rows without a usable score")
        return matches

    async def _download(self, client: httpx.AsyncClient, url: str) -> list[MatchRecord]:
        df = await fetch_csv_with_retry(
            client,
            url,
            retries=self.config.retries,
            retry_delay=self.config.retry_delay,
            timeout=self.config.timeout,
        )
        matches = self.parse_matches(df)
        logger.info(f"Parsed {len(matches)} matches from {url}")
        return matches

    async def _load_url(self, client: httpx.AsyncClient, url: str) -> Optional[list[MatchRecord]]:
        try:
            return await self._files.load(url, lambda: self._download(client, url))
        except DataSourceUnavailableException as e:
            logger.warning(f"{self.SOURCE_NAME}: {e}")
            return None

    async def load_matches(self) -> list[MatchRecord]:
        """
        Get every match from all configured files, oldest first.

        Raises:
            DataSourceUnavailableException: If no file could be downloaded
        """
        if self._client is not None:
            results = await asyncio.gather(*[self._load_url(self._client, u) for u in self.config.urls])
        else:
            async with httpx.AsyncClient() as client:
                results = await asyncio.gather(*[self._load_url(client, u) for u in self.config.urls])

        loaded = [r for r in results if r is not None]
        if not loaded:
            raise DataSourceUnavailableException(
                f"None of the {len(self.config.urls)} results files could be downloaded"
            )

        self.last_loaded_at = get_current_time()
        return self.chronological([m for batch in loaded for m in batch])

    @staticmethod
    def chronological(matches: list[MatchRecord]) -> list[MatchRecord]:
        """Oldest first; undated records lead."""
        return list(reversed(StatisticsService.sort_recent_first(matches)))

    def refresh(self):
        """Drop cached files so the next call downloads them again."""
        self._files.clear()

    async def fetch_recent_matches(
        self,
        team: str,
        venue_role: VenueRole,
        limit: int = 6,
    ) -> list[MatchRecord]:
        matches = await self.load_matches()
        return StatisticsService.recent_matches(matches, team, venue_role, limit)

    async def fetch_head_to_head(
        self,
        team_a: str,
        team_b: str,
        limit: int = HEAD_TO_HEAD_LIMIT,
    ) -> list[MatchRecord]:
        matches = await self.load_matches()
        return StatisticsService.head_to_head(matches, team_a, team_b, limit)

    async def fetch_league_matches(
        self,
        league: str,
        limit: Optional[int] = None,
    ) -> list[MatchRecord]:
        matches = await self.load_matches()
        selected = [m for m in matches if m.league == league]
        return selected[-limit:] if limit else selected
