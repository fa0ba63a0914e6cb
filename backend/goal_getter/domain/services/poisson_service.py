"""
Poisson Service Module

Classic independent-Poisson scoreline model. Expected goals are supplied
directly by the caller (e.g. raw average goals).

The grid is not renormalized: truncating two Poisson vectors at max_goals
leaves a small amount of mass outside the grid, which is an accepted
approximation of this model.
"""

from goal_getter.domain.constants import POISSON_MAX_GOALS, POISSON_RESULT_COUNT
from goal_getter.domain.services.poisson_math import poisson_vector
from goal_getter.domain.value_objects.value_objects import ScoreProbability


class PoissonService:
    """Domain service for baseline Poisson score predictions."""

    def build_grid(
        self,
        lambda_home: float,
        lambda_away: float,
        max_goals: int = POISSON_MAX_GOALS,
    ) -> list[ScoreProbability]:
        """Build the (un-renormalized) grid, or [] if either lambda is not positive."""
        if lambda_home <= 0 or lambda_away <= 0:
            return []

        # Pre-calculate distributions
        home_probs = poisson_vector(lambda_home, max_goals)
        away_probs = poisson_vector(lambda_away, max_goals)

        return [
            ScoreProbability(
                home_goals=home_goals,
                away_goals=away_goals,
                probability=home_probs[home_goals] * away_probs[away_goals],
            )
            for home_goals in range(max_goals + 1)
            for away_goals in range(max_goals + 1)
        ]

    def compute_scores(
        self,
        lambda_home: float,
        lambda_away: float,
        max_goals: int = POISSON_MAX_GOALS,
        count: int = POISSON_RESULT_COUNT,
    ) -> list[ScoreProbability]:
        """
        Get the most probable scorelines.

        Args:
            lambda_home: Expected goals for the home team
            lambda_away: Expected goals for the away team
            max_goals: Maximum goals per side considered
            count: Number of scorelines to return

        Returns:
            Scorelines sorted by probability, highest first
        """
        grid = self.build_grid(lambda_home, lambda_away, max_goals)
        return sorted(grid, key=lambda s: s.probability, reverse=True)[:count]

    def outcome_probabilities(
        self,
        lambda_home: float,
        lambda_away: float,
        max_goals: int = POISSON_MAX_GOALS,
    ) -> tuple[float, float, float]:
        """
        Calculate (home_win, draw, away_win) over the truncated grid.

        Returns zeros when either lambda is not positive.
        """
        home_win = draw = away_win = 0.0
        for s in self.build_grid(lambda_home, lambda_away, max_goals):
            if s.is_home_win:
                home_win += s.probability
            elif s.is_draw:
                draw += s.probability
            else:
                away_win += s.probability
        return (home_win, draw, away_win)
