"""
Enhanced Poisson Service Module

Poisson scorelines whose expected goals blend each team's recent scoring
in its venue role with its scoring in head-to-head meetings.
"""

import logging
from typing import Sequence

from goal_getter.domain.constants import (
    ENHANCED_RECENT_MATCHES,
    ENHANCED_DEFAULT_AVERAGE,
    ENHANCED_H2H_THRESHOLD,
    ENHANCED_RECENT_WEIGHT,
    ENHANCED_H2H_WEIGHT,
    ENHANCED_HOME_NUDGE,
    ENHANCED_AWAY_NUDGE,
    ENHANCED_MAX_GOALS,
    ENHANCED_RESULT_COUNT,
)
from goal_getter.domain.entities.entities import MatchRecord, VenueRole, team_name_matches
from goal_getter.domain.services.poisson_math import poisson_pmf
from goal_getter.domain.value_objects.value_objects import EnhancedPoissonResult, ScoreProbability


logger = logging.getLogger(__name__)


class EnhancedPoissonService:
    """Domain service for recency/head-to-head weighted Poisson predictions."""

    @staticmethod
    def recent_average(
        matches: Sequence[MatchRecord],
        team: str,
        role: VenueRole,
        limit: int = ENHANCED_RECENT_MATCHES,
    ) -> float:
        """
        Average goals scored in the team's most recent matches in ``role``.

        Args:
            matches: Matches sorted most-recent-first
            team: Team name
            role: Venue role to consider
            limit: Number of recent matches used

        Returns:
            Average goals, or 1.0 without data
        """
        relevant = [m for m in matches if m.played_as(team, role)][:limit]
        if not relevant:
            return ENHANCED_DEFAULT_AVERAGE
        return sum(m.goals_for(role) for m in relevant) / len(relevant)

    @staticmethod
    def head_to_head_average(h2h_matches: Sequence[MatchRecord], team: str) -> float:
        """Average goals the team scored across head-to-head meetings, 1.0 without data."""
        if not h2h_matches:
            return ENHANCED_DEFAULT_AVERAGE

        total = 0
        for match in h2h_matches:
            if team_name_matches(match.home_team, team):
                total += match.home_goals
            else:
                total += match.away_goals
        return total / len(h2h_matches)

    def calculate_expected_goals(
        self,
        recent_matches: Sequence[MatchRecord],
        h2h_matches: Sequence[MatchRecord],
        home_team: str,
        away_team: str,
    ) -> tuple[float, float, bool]:
        """
        Calculate (lambda_home, lambda_away, used_head_to_head).

        With at least 3 head-to-head matches the recent and H2H averages are
        blended 60/40; otherwise the recent averages get a small home
        advantage / away disadvantage nudge.
        """
        home_recent = self.recent_average(recent_matches, home_team, VenueRole.HOME)
        away_recent = self.recent_average(recent_matches, away_team, VenueRole.AWAY)

        home_h2h = self.head_to_head_average(h2h_matches, home_team)
        away_h2h = self.head_to_head_average(h2h_matches, away_team)

        has_h2h = len(h2h_matches) >= ENHANCED_H2H_THRESHOLD
        if has_h2h:
            lambda_home = home_recent * ENHANCED_RECENT_WEIGHT + home_h2h * ENHANCED_H2H_WEIGHT
            lambda_away = away_recent * ENHANCED_RECENT_WEIGHT + away_h2h * ENHANCED_H2H_WEIGHT
        else:
            lambda_home = home_recent * ENHANCED_HOME_NUDGE
            lambda_away = away_recent * ENHANCED_AWAY_NUDGE

        logger.debug(
            f"Enhanced Poisson {home_team} vs {away_team}: recent=({home_recent:.2f}, {away_recent:.2f}) "
            f"h2h=({home_h2h:.2f}, {away_h2h:.2f}) matches={len(h2h_matches)} "
            f"-> lambda=({lambda_home:.3f}, {lambda_away:.3f})"
        )
        return lambda_home, lambda_away, has_h2h

    def predict(
        self,
        recent_matches: Sequence[MatchRecord],
        h2h_matches: Sequence[MatchRecord],
        home_team: str,
        away_team: str,
    ) -> EnhancedPoissonResult:
        """
        Generate the enhanced Poisson prediction.

        Args:
            recent_matches: Recent matches of both teams, most recent first
            h2h_matches: Head-to-head matches between the teams
            home_team: Home team name
            away_team: Away team name

        Returns:
            EnhancedPoissonResult with the top 6 scorelines
        """
        lambda_home, lambda_away, has_h2h = self.calculate_expected_goals(
            recent_matches, h2h_matches, home_team, away_team
        )

        cells = [
            (h, a, poisson_pmf(h, lambda_home) * poisson_pmf(a, lambda_away))
            for h in range(ENHANCED_MAX_GOALS + 1)
            for a in range(ENHANCED_MAX_GOALS + 1)
        ]

        total = sum(p for _, _, p in cells)
        if total > 0:
            cells = [(h, a, p / total) for h, a, p in cells]

        scores = sorted(
            (ScoreProbability(home_goals=h, away_goals=a, probability=p) for h, a, p in cells),
            key=lambda s: s.probability,
            reverse=True,
        )[:ENHANCED_RESULT_COUNT]

        return EnhancedPoissonResult(
            scores=scores,
            lambda_home=lambda_home,
            lambda_away=lambda_away,
            used_head_to_head=has_h2h,
            head_to_head_matches=len(h2h_matches),
        )

    def compute_scores(
        self,
        recent_matches: Sequence[MatchRecord],
        h2h_matches: Sequence[MatchRecord],
        home_team: str,
        away_team: str,
    ) -> list[ScoreProbability]:
        """Top 6 scorelines of the enhanced Poisson model."""
        return self.predict(recent_matches, h2h_matches, home_team, away_team).scores
