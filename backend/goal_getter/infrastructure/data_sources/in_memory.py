"""
In-memory data source.

Serves a fixed list of match records, for tests, scripts and offline
analysis. Aggregate statistics are derived from the same records.
"""

from typing import Iterable, Optional

from goal_getter.domain.constants import HEAD_TO_HEAD_LIMIT
from goal_getter.domain.entities.entities import MatchRecord, TeamAggregateStats, VenueRole
from goal_getter.domain.repositories.repositories import MatchRepository, TeamStatsRepository
from goal_getter.domain.services.statistics_service import StatisticsService


class InMemoryMatchRepository(MatchRepository, TeamStatsRepository):
    """
    Repository over records held in memory.

    Records are kept in the order given, which is taken as chronological
    (oldest first).
    """

    def __init__(
        self,
        matches: Iterable[MatchRecord] = (),
        team_stats: Optional[Iterable[TeamAggregateStats]] = None,
    ):
        self.matches = list(matches)
        self._team_stats = list(team_stats) if team_stats is not None else None

    def add(self, match: MatchRecord):
        self.matches.append(match)

    async def fetch_recent_matches(
        self,
        team: str,
        venue_role: VenueRole,
        limit: int = 6,
    ) -> list[MatchRecord]:
        # Undated records keep insertion order, so newest-first means reversed
        ordered = list(reversed(self.matches))
        return StatisticsService.recent_matches(ordered, team, venue_role, limit)

    async def fetch_head_to_head(
        self,
        team_a: str,
        team_b: str,
        limit: int = HEAD_TO_HEAD_LIMIT,
    ) -> list[MatchRecord]:
        return StatisticsService.head_to_head(list(reversed(self.matches)), team_a, team_b, limit)

    async def fetch_league_matches(
        self,
        league: str,
        limit: Optional[int] = None,
    ) -> list[MatchRecord]:
        selected = [m for m in self.matches if m.league == league]
        return selected[-limit:] if limit else selected

    async def fetch_aggregate_stats(
        self,
        team: str,
        venue_role: VenueRole,
    ) -> Optional[TeamAggregateStats]:
        if self._team_stats is not None:
            for stats in self._team_stats:
                if stats.venue == venue_role and StatisticsService.is_same_team(stats.team, team):
                    return stats
            return None

        stats = StatisticsService.calculate_aggregate_stats(team, self.matches, venue_role)
        return stats if stats.games_played > 0 else None
