"""
Statistics Domain Service

Selection of team matches and calculation of aggregate team statistics
from match history.
"""

from datetime import datetime
from typing import Optional, Sequence

from goal_getter.domain.constants import GOAL_THRESHOLDS, HEAD_TO_HEAD_LIMIT
from goal_getter.domain.entities.entities import (
    MatchRecord,
    TeamAggregateStats,
    VenueRole,
    team_name_matches,
)


class StatisticsService:
    @staticmethod
    def _resolve_alias(name: str) -> str:
        """Resolve common team name aliases."""
        aliases = {
            "man city": "manchester city",
            "man utd": "manchester united",
            "man united": "manchester united",
            "spurs": "tottenham",
            "wolves": "wolverhampton",
            "nottm forest": "nottingham forest",
            "atletico mg": "atletico mineiro",
            "athletico-pr": "athletico paranaense",
            "sao paulo": "são paulo",
            "gremio": "grêmio",
        }
        normalized = name.lower().strip()
        return aliases.get(normalized, normalized)

    @staticmethod
    def normalize_name(name: str) -> str:
        """Normalize team name for comparison."""
        name = StatisticsService._resolve_alias(name)

        remove = ["fc", "cf", "sc", "ac", "ec", "club"]
        words = [w for w in name.split() if w not in remove]
        return "".join(words)

    @staticmethod
    def is_same_team(a: str, b: str) -> bool:
        if not a or not b:
            return False
        return StatisticsService.normalize_name(a) == StatisticsService.normalize_name(b)

    @staticmethod
    def sort_recent_first(matches: Sequence[MatchRecord]) -> list[MatchRecord]:
        """Sort by date, newest first; undated matches go last in input order."""
        dated = [m for m in matches if m.match_date is not None]
        undated = [m for m in matches if m.match_date is None]
        dated.sort(key=lambda m: m.match_date, reverse=True)
        return dated + undated

    @staticmethod
    def filter_by_role(
        matches: Sequence[MatchRecord],
        team: str,
        role: VenueRole,
    ) -> list[MatchRecord]:
        """Matches where ``team`` (case-insensitive) played in ``role``, input order kept."""
        wanted = team.strip().lower()
        return [
            m for m in matches
            if (m.home_team if role == VenueRole.HOME else m.away_team).strip().lower() == wanted
        ]

    @staticmethod
    def recent_matches(
        matches: Sequence[MatchRecord],
        team: str,
        role: VenueRole,
        limit: Optional[int] = None,
    ) -> list[MatchRecord]:
        """Get a team's matches in ``role``, most recent first."""
        selected = StatisticsService.filter_by_role(matches, team, role)
        selected = StatisticsService.sort_recent_first(selected)
        return selected[:limit] if limit is not None else selected

    @staticmethod
    def head_to_head(
        matches: Sequence[MatchRecord],
        team_a: str,
        team_b: str,
        limit: int = HEAD_TO_HEAD_LIMIT,
    ) -> list[MatchRecord]:
        """Meetings between two teams in either venue order, most recent first."""
        def is_direct(m: MatchRecord) -> bool:
            return (
                (team_name_matches(m.home_team, team_a) and team_name_matches(m.away_team, team_b))
                or (team_name_matches(m.home_team, team_b) and team_name_matches(m.away_team, team_a))
            )

        return StatisticsService.sort_recent_first([m for m in matches if is_direct(m)])[:limit]

    @staticmethod
    def calculate_aggregate_stats(
        team: str,
        matches: Sequence[MatchRecord],
        venue: VenueRole,
        league_name: str = "",
    ) -> TeamAggregateStats:
        """
        Calculate per-venue aggregate statistics for a team.

        Args:
            team: Team name
            matches: Historical matches (any order)
            venue: Venue whose games are aggregated
            league_name: League reported on the result

        Returns:
            TeamAggregateStats; zeros when the team has no games at the venue
        """
        games = [m for m in matches if StatisticsService.is_same_team(
            m.home_team if venue == VenueRole.HOME else m.away_team, team
        )]
        played = len(games)

        if played == 0:
            return TeamAggregateStats(
                team=team,
                league_name=league_name,
                venue=venue,
                games_played=0,
                avg_goals=0.0,
                goals_scored=0,
                over_percentages={t: 0.0 for t in GOAL_THRESHOLDS},
            )

        goals_scored = sum(m.goals_for(venue) for m in games)
        over = {
            t: sum(1 for m in games if m.total_goals > t) / played * 100
            for t in GOAL_THRESHOLDS
        }
        both_scored = sum(1 for m in games if m.home_goals > 0 and m.away_goals > 0)
        clean_sheets = sum(1 for m in games if m.goals_against(venue) == 0)

        return TeamAggregateStats(
            team=team,
            league_name=league_name or games[0].league,
            venue=venue,
            games_played=played,
            avg_goals=goals_scored / played,
            goals_scored=goals_scored,
            over_percentages=over,
            both_teams_scored_pct=both_scored / played * 100,
            clean_sheet_pct=clean_sheets / played * 100,
        )

    @staticmethod
    def latest_match_date(matches: Sequence[MatchRecord]) -> Optional[datetime]:
        dates = [m.match_date for m in matches if m.match_date is not None]
        return max(dates) if dates else None
