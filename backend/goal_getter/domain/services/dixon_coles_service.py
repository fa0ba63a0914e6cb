"""
Dixon-Coles Service Module

Dixon-Coles scoreline model: a Poisson grid whose low scores (0-0, 1-0,
0-1, 1-1) are corrected by the tau factor, with attack/defense ratings
derived from the teams' average goals.

The parameters are fixed empirical defaults; nothing here is fitted.
"""

import math
import logging
from dataclasses import dataclass

from goal_getter.domain.constants import (
    DIXON_COLES_HOME_ADVANTAGE,
    DIXON_COLES_RHO,
    DIXON_COLES_LEAGUE_FACTOR,
    DIXON_COLES_DEFENSE_TEAM_WEIGHT,
    DIXON_COLES_DEFENSE_LEAGUE_WEIGHT,
    DIXON_COLES_MAX_GOALS,
    DIXON_COLES_RESULT_COUNT,
    DIXON_COLES_MARKET_MAX_GOALS,
    DIXON_COLES_MARKET_RESULT_COUNT,
    OVER_UNDER_LINES,
)
from goal_getter.domain.services.poisson_math import poisson_pmf
from goal_getter.domain.value_objects.value_objects import MarketStats, ScoreProbability


logger = logging.getLogger(__name__)


def round_percentage(probability: float) -> int:
    """Probability as a whole percentage, halves rounded up."""
    return math.floor(probability * 100 + 0.5)


@dataclass(frozen=True)
class DixonColesParams:
    """Model parameters."""
    home_advantage: float = DIXON_COLES_HOME_ADVANTAGE
    rho: float = DIXON_COLES_RHO


@dataclass(frozen=True)
class TeamRatings:
    """Attack and defense ratings relative to the league average."""
    attack: float
    defense: float


class DixonColesService:
    """
    Domain service for Dixon-Coles score predictions.

    Pure functions of their inputs: calling any method twice with the same
    arguments yields the same output.
    """

    def __init__(self, params: DixonColesParams = DixonColesParams()):
        self.params = params

    @staticmethod
    def estimate_league_average(home_avg: float, away_avg: float) -> float:
        """Estimate the league goal average from the two team averages."""
        return (home_avg + away_avg) / 2 * DIXON_COLES_LEAGUE_FACTOR

    @staticmethod
    def calculate_team_ratings(team_avg: float, league_avg: float) -> TeamRatings:
        """
        Calculate a team's attack and defense ratings.

        Defense is estimated from the team's own scoring average blended
        with the league average, since conceded goals are not available.
        """
        attack = team_avg / league_avg
        defense = league_avg / (
            team_avg * DIXON_COLES_DEFENSE_TEAM_WEIGHT
            + league_avg * DIXON_COLES_DEFENSE_LEAGUE_WEIGHT
        )
        return TeamRatings(attack=attack, defense=defense)

    def calculate_lambda(
        self,
        attack: float,
        opponent_defense: float,
        league_avg: float,
        is_home: bool,
    ) -> float:
        """Expected goals for one side; only the home side gets the advantage term."""
        advantage = self.params.home_advantage if is_home else 0.0
        return (league_avg / 2) * attack * opponent_defense * math.exp(advantage)

    @staticmethod
    def tau_correction(home_goals: int, away_goals: int, rho: float) -> float:
        """Low-score dependence correction."""
        if home_goals == 0 and away_goals == 0:
            return 1 - rho
        if home_goals == 0 and away_goals == 1:
            return 1 + rho
        if home_goals == 1 and away_goals == 0:
            return 1 + rho
        if home_goals == 1 and away_goals == 1:
            return 1 - rho
        return 1.0

    def calculate_expected_goals(self, home_avg: float, away_avg: float) -> tuple[float, float]:
        """
        Calculate (lambda_home, lambda_away) from the teams' average goals.

        Both averages must be positive.
        """
        league_avg = self.estimate_league_average(home_avg, away_avg)
        home_ratings = self.calculate_team_ratings(home_avg, league_avg)
        away_ratings = self.calculate_team_ratings(away_avg, league_avg)

        lambda_home = self.calculate_lambda(
            home_ratings.attack, away_ratings.defense, league_avg, is_home=True
        )
        lambda_away = self.calculate_lambda(
            away_ratings.attack, home_ratings.defense, league_avg, is_home=False
        )

        logger.debug(
            f"Dixon-Coles parameters: home_avg={home_avg}, away_avg={away_avg}, "
            f"league_avg={league_avg:.3f}, lambda_home={lambda_home:.3f}, "
            f"lambda_away={lambda_away:.3f}"
        )
        return lambda_home, lambda_away

    def build_grid(
        self,
        home_avg: float,
        away_avg: float,
        max_goals: int = DIXON_COLES_MAX_GOALS,
    ) -> list[ScoreProbability]:
        """
        Build the full normalized scoreline grid over [0, max_goals]^2.

        Returns:
            Grid in (home, away) order summing to 1, or an empty list when
            either average is not positive.
        """
        if home_avg <= 0 or away_avg <= 0:
            return []

        lambda_home, lambda_away = self.calculate_expected_goals(home_avg, away_avg)

        raw: list[tuple[int, int, float]] = []
        for home_goals in range(max_goals + 1):
            home_prob = poisson_pmf(home_goals, lambda_home)
            for away_goals in range(max_goals + 1):
                away_prob = poisson_pmf(away_goals, lambda_away)
                tau = self.tau_correction(home_goals, away_goals, self.params.rho)
                raw.append((home_goals, away_goals, home_prob * away_prob * tau))

        total = sum(p for _, _, p in raw)
        if total > 0:
            raw = [(h, a, p / total) for h, a, p in raw]

        return [ScoreProbability(home_goals=h, away_goals=a, probability=p) for h, a, p in raw]

    def compute_scores(
        self,
        home_avg: float,
        away_avg: float,
        max_goals: int = DIXON_COLES_MAX_GOALS,
        count: int = DIXON_COLES_RESULT_COUNT,
    ) -> list[ScoreProbability]:
        """
        Get the most probable scorelines.

        Args:
            home_avg: Home team's average goals
            away_avg: Away team's average goals
            max_goals: Maximum goals per side considered
            count: Number of scorelines to return

        Returns:
            Scorelines sorted by probability, highest first
        """
        grid = self.build_grid(home_avg, away_avg, max_goals)
        return sorted(grid, key=lambda s: s.probability, reverse=True)[:count]

    def compute_market_stats(self, home_avg: float, away_avg: float) -> MarketStats:
        """
        Aggregate the grid into 1X2, over/under and both-teams-to-score.

        All values are rounded percentages; degenerate inputs give zeros.
        """
        scores = self.compute_scores(
            home_avg,
            away_avg,
            max_goals=DIXON_COLES_MARKET_MAX_GOALS,
            count=DIXON_COLES_MARKET_RESULT_COUNT,
        )

        home_win = draw = away_win = both_scored = 0.0
        over = {line: 0.0 for line in OVER_UNDER_LINES}

        for s in scores:
            if s.is_home_win:
                home_win += s.probability
            elif s.is_draw:
                draw += s.probability
            else:
                away_win += s.probability

            total_goals = s.home_goals + s.away_goals
            for line in OVER_UNDER_LINES:
                if total_goals > line:
                    over[line] += s.probability
            if s.home_goals > 0 and s.away_goals > 0:
                both_scored += s.probability

        return MarketStats(
            home_win=round_percentage(home_win),
            draw=round_percentage(draw),
            away_win=round_percentage(away_win),
            over_15=round_percentage(over[1.5]),
            over_25=round_percentage(over[2.5]),
            over_35=round_percentage(over[3.5]),
            both_teams_scored=round_percentage(both_scored),
        )
