"""
Markov-Poisson Service Module

Hybrid model: a Poisson scoreline grid built from aggregate scoring rates,
boosted towards the outcome the Markov form model favours, then blended
again with the raw Markov percentages.
"""

import logging

from goal_getter.domain.constants import (
    MARKOV_POISSON_MAX_GOALS,
    MARKOV_POISSON_RESULT_COUNT,
    MARKOV_POISSON_WIN_BOOST,
    MARKOV_POISSON_DRAW_BOOST,
    MARKOV_POISSON_BASE_CONFIDENCE,
    MARKOV_POISSON_MAX_CONFIDENCE,
)
from goal_getter.domain.entities.entities import TeamAggregateStats
from goal_getter.domain.services.poisson_math import point_mass_vector, poisson_vector
from goal_getter.domain.value_objects.value_objects import (
    MarkovPoissonPrediction,
    MarkovPrediction,
    ScoreProbability,
)


logger = logging.getLogger(__name__)


class MarkovPoissonService:
    """Domain service combining Poisson scorelines with Markov form."""

    @staticmethod
    def _distribution(expected: float, max_goals: int) -> list[float]:
        # A team that has not scored is a point mass at zero goals
        if expected <= 0:
            return point_mass_vector(max_goals)
        return poisson_vector(expected, max_goals)

    def build_base_grid(
        self,
        lambda_home: float,
        lambda_away: float,
        max_goals: int = MARKOV_POISSON_MAX_GOALS,
    ) -> list[ScoreProbability]:
        """Poisson grid over [0, max_goals]^2 normalized to sum 1."""
        home_probs = self._distribution(lambda_home, max_goals)
        away_probs = self._distribution(lambda_away, max_goals)

        cells = [
            (h, a, home_probs[h] * away_probs[a])
            for h in range(max_goals + 1)
            for a in range(max_goals + 1)
        ]
        total = sum(p for _, _, p in cells)
        return [
            ScoreProbability(home_goals=h, away_goals=a, probability=p / total)
            for h, a, p in cells
        ]

    @staticmethod
    def markov_adjustment(
        score: ScoreProbability,
        markov: MarkovPrediction,
        influence: float,
    ) -> float:
        """
        Multiplicative boost for a scoreline matching the Markov favourite.

        Only one rule can apply; scorelines matching none are unmodified.
        """
        if markov.favours_home and score.is_home_win:
            return 1.0 + (markov.home_win / 100) * influence * MARKOV_POISSON_WIN_BOOST
        if markov.favours_away and score.is_away_win:
            return 1.0 + (markov.away_win / 100) * influence * MARKOV_POISSON_WIN_BOOST
        if markov.favours_draw and score.is_draw:
            return 1.0 + (markov.draw / 100) * influence * MARKOV_POISSON_DRAW_BOOST
        return 1.0

    def predict(
        self,
        home_stats: TeamAggregateStats,
        away_stats: TeamAggregateStats,
        markov: MarkovPrediction,
    ) -> MarkovPoissonPrediction:
        """
        Generate the hybrid prediction.

        Args:
            home_stats: Home team's home statistics
            away_stats: Away team's away statistics
            markov: Markov-chain prediction for the same fixture

        Returns:
            MarkovPoissonPrediction with the top 8 blended scorelines
        """
        lambda_home = home_stats.scored_per_match
        lambda_away = away_stats.scored_per_match

        base_grid = self.build_base_grid(lambda_home, lambda_away)
        influence = markov.confidence / 100

        adjusted = [
            (s, s.probability * self.markov_adjustment(s, markov, influence))
            for s in base_grid
        ]
        total = sum(p for _, p in adjusted)

        blended = sorted(
            (
                ScoreProbability(home_goals=s.home_goals, away_goals=s.away_goals, probability=p / total)
                for s, p in adjusted
            ),
            key=lambda s: s.probability,
            reverse=True,
        )[:MARKOV_POISSON_RESULT_COUNT]

        # Outcome sums over the kept scorelines, in percent
        grid_home = sum(s.probability for s in blended if s.is_home_win) * 100
        grid_draw = sum(s.probability for s in blended if s.is_draw) * 100
        grid_away = sum(s.probability for s in blended if s.is_away_win) * 100

        home_win = (grid_home + markov.home_win * influence) / (1 + influence)
        draw = (grid_draw + markov.draw * influence) / (1 + influence)
        away_win = (grid_away + markov.away_win * influence) / (1 + influence)

        confidence = min(
            (markov.confidence + MARKOV_POISSON_BASE_CONFIDENCE) / 2,
            MARKOV_POISSON_MAX_CONFIDENCE,
        )

        logger.debug(
            f"Markov-Poisson {home_stats.team} vs {away_stats.team}: "
            f"lambda=({lambda_home:.2f}, {lambda_away:.2f}) "
            f"-> {home_win:.1f}/{draw:.1f}/{away_win:.1f}"
        )

        return MarkovPoissonPrediction(
            home_win=home_win,
            draw=draw,
            away_win=away_win,
            most_probable_scores=blended,
            confidence=confidence,
            markov_influence=influence * 100,
        )
