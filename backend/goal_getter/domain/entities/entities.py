"""
Domain Entities Module

This module contains the core domain entities for the score prediction system.
These entities represent the historical inputs the models consume and are
independent of any infrastructure.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from enum import Enum


class ResultState(Enum):
    """Result of a match from one team's point of view."""
    WIN = "V"
    DRAW = "E"
    LOSS = "D"


class VenueRole(Enum):
    """Role a team played in a fixture."""
    HOME = "home"
    AWAY = "away"


def team_name_matches(candidate: str, team: str) -> bool:
    """Case-insensitive containment check used to look teams up by name."""
    if not candidate or not team:
        return False
    return team.strip().lower() in candidate.strip().lower()


@dataclass(frozen=True)
class MatchRecord:
    """
    One historical fixture with a parsed full-time score.

    Records whose score could not be parsed are never built; they are
    dropped by the data source instead of being coerced to 0-0.

    Attributes:
        home_team: Name of the home team
        away_team: Name of the away team
        home_goals: Full-time goals scored by the home team
        away_goals: Full-time goals scored by the away team
        league: League identifier/name
        match_date: Date of the fixture (None if unknown)
        half_time_home_goals: Half-time home goals (optional)
        half_time_away_goals: Half-time away goals (optional)
        status: Match status (FT = full time)
    """
    home_team: str
    away_team: str
    home_goals: int
    away_goals: int
    league: str = ""
    match_date: Optional[datetime] = None
    half_time_home_goals: Optional[int] = None
    half_time_away_goals: Optional[int] = None
    status: str = "FT"

    def __post_init__(self):
        if not self.home_team or not self.away_team:
            raise ValueError("Team names cannot be empty")
        if self.home_goals < 0 or self.away_goals < 0:
            raise ValueError("Goals cannot be negative")

    @property
    def score(self) -> str:
        """Score in compact 'h-a' form."""
        return f"{self.home_goals}-{self.away_goals}"

    @property
    def half_time_score(self) -> Optional[str]:
        if self.half_time_home_goals is None or self.half_time_away_goals is None:
            return None
        return f"{self.half_time_home_goals}-{self.half_time_away_goals}"

    @property
    def total_goals(self) -> int:
        return self.home_goals + self.away_goals

    def involves(self, team: str) -> bool:
        return self.home_team == team or self.away_team == team

    def played_as(self, team: str, role: VenueRole) -> bool:
        """Check whether ``team`` played this match in ``role``."""
        name = self.home_team if role == VenueRole.HOME else self.away_team
        return team_name_matches(name, team)

    def goals_for(self, role: VenueRole) -> int:
        return self.home_goals if role == VenueRole.HOME else self.away_goals

    def goals_against(self, role: VenueRole) -> int:
        return self.away_goals if role == VenueRole.HOME else self.home_goals

    def result_for(self, role: VenueRole) -> ResultState:
        """
        Get the result from the perspective of the team playing ``role``.

        Equal goals are always a draw.
        """
        scored = self.goals_for(role)
        conceded = self.goals_against(role)
        if scored == conceded:
            return ResultState.DRAW
        return ResultState.WIN if scored > conceded else ResultState.LOSS


@dataclass(frozen=True)
class TeamAggregateStats:
    """
    Per-team, per-venue summary statistics.

    Immutable once built; a refresh builds a new instance from source data.

    Attributes:
        team: Team name
        league_name: League the statistics belong to
        venue: Venue the statistics cover (home or away games)
        games_played: Games played at that venue
        avg_goals: Average goals scored per game
        goals_scored: Total goals scored (None if the source does not report it)
        over_percentages: % of games whose total goals exceed each threshold
        both_teams_scored_pct: % of games where both teams scored
        clean_sheet_pct: % of games without conceding
    """
    team: str
    league_name: str
    venue: VenueRole
    games_played: int
    avg_goals: float
    goals_scored: Optional[int] = None
    over_percentages: dict[float, float] = field(default_factory=dict)
    both_teams_scored_pct: float = 0.0
    clean_sheet_pct: float = 0.0

    def __post_init__(self):
        if not self.team:
            raise ValueError("Team name cannot be empty")
        if self.games_played < 0:
            raise ValueError("Games played cannot be negative")

    @property
    def scored_per_match(self) -> float:
        """Goals scored per match, flooring the match count at 1."""
        if self.goals_scored is not None:
            return self.goals_scored / max(self.games_played, 1)
        return self.avg_goals

    def over_percentage(self, threshold: float) -> float:
        return self.over_percentages.get(threshold, 0.0)
