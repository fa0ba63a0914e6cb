"""
Markov Chain Service Module

Form model based on result-transition matrices.

Each team's recent results (home team at home, away team away) are turned
into a 3x3 matrix of Win/Draw/Loss -> next Win/Draw/Loss frequencies. The
row for the team's most recent result gives its next-match distribution,
and the two rows are combined into home/draw/away percentages.

Note on direction: results are consumed most-recent-first and a transition
is counted from ``results[i]`` to ``results[i + 1]``, i.e. from a result to
the one played *before* it. This list-order adjacency is kept as is; changing
it would change every downstream probability.
"""

import logging
from typing import Optional, Sequence

from goal_getter.domain.constants import (
    MARKOV_MAX_RECENT_MATCHES,
    MARKOV_WIN_WIN_DRAW_FACTOR,
    MARKOV_LOSS_LOSS_DRAW_FACTOR,
    MARKOV_FULL_CONFIDENCE_MATCHES,
)
from goal_getter.domain.entities.entities import MatchRecord, ResultState, VenueRole
from goal_getter.domain.value_objects.value_objects import (
    MarkovPrediction,
    TransitionMatrix,
    TransitionRow,
)


logger = logging.getLogger(__name__)

_STATES = (ResultState.WIN, ResultState.DRAW, ResultState.LOSS)


class MarkovChainService:
    """Domain service for Markov-chain form predictions."""

    @staticmethod
    def select_results(
        matches: Sequence[MatchRecord],
        team: str,
        role: VenueRole,
        limit: int = MARKOV_MAX_RECENT_MATCHES,
    ) -> list[ResultState]:
        """
        Map a team's recent matches in ``role`` to results, keeping list order.

        Args:
            matches: Matches sorted most-recent-first
            team: Team name (case-insensitive containment)
            role: Venue role the team must have played
            limit: Maximum matches kept

        Returns:
            Results from the team's perspective, most recent first
        """
        qualifying = [m for m in matches if m.played_as(team, role)][:limit]
        return [m.result_for(role) for m in qualifying]

    @staticmethod
    def build_transition_matrix(results: Sequence[ResultState]) -> TransitionMatrix:
        """
        Count adjacent transitions and normalize each row.

        Rows with no observed transitions default to uniform 1/3.
        """
        counts = {state: {s: 0 for s in _STATES} for state in _STATES}

        for current_state, next_state in zip(results, results[1:]):
            counts[current_state][next_state] += 1

        rows = {}
        for state in _STATES:
            total = sum(counts[state].values())
            if total > 0:
                rows[state] = TransitionRow(
                    win=counts[state][ResultState.WIN] / total,
                    draw=counts[state][ResultState.DRAW] / total,
                    loss=counts[state][ResultState.LOSS] / total,
                )
            else:
                rows[state] = TransitionRow.uniform()

        return TransitionMatrix(
            win=rows[ResultState.WIN],
            draw=rows[ResultState.DRAW],
            loss=rows[ResultState.LOSS],
        )

    @staticmethod
    def last_state(results: Sequence[ResultState]) -> Optional[ResultState]:
        """Most recent result, or None without qualifying matches."""
        return results[0] if results else None

    @staticmethod
    def outcome_probabilities(
        home_row: TransitionRow,
        away_row: TransitionRow,
    ) -> tuple[float, float, float]:
        """
        Combine the two next-result distributions into match percentages.

        Returns:
            Tuple of (home_win, draw, away_win) percentages summing to 100
        """
        home_win = home_row.win * (away_row.draw + away_row.loss)

        draw = (
            home_row.draw * away_row.draw
            + home_row.win * away_row.win * MARKOV_WIN_WIN_DRAW_FACTOR
            + home_row.loss * away_row.loss * MARKOV_LOSS_LOSS_DRAW_FACTOR
        )

        away_win = away_row.win * (home_row.draw + home_row.loss)

        total = home_win + draw + away_win
        if total <= 0:
            # e.g. a certain loss facing a certain draw: no formula term survives
            return (100 / 3, 100 / 3, 100 / 3)
        return (
            home_win / total * 100,
            draw / total * 100,
            away_win / total * 100,
        )

    @staticmethod
    def calculate_confidence(home_games: int, away_games: int) -> float:
        """Data-sufficiency heuristic: 100 once 12 matches are available."""
        return min(100.0, (home_games + away_games) / MARKOV_FULL_CONFIDENCE_MATCHES * 100)

    def predict(
        self,
        home_recent: Sequence[MatchRecord],
        away_recent: Sequence[MatchRecord],
        home_team: str,
        away_team: str,
    ) -> MarkovPrediction:
        """
        Predict the next match from both teams' form chains.

        Args:
            home_recent: Home team's recent matches, most recent first
            away_recent: Away team's recent matches, most recent first
            home_team: Home team name
            away_team: Away team name

        Returns:
            MarkovPrediction. Teams without history fall back to a uniform row.
        """
        home_results = self.select_results(home_recent, home_team, VenueRole.HOME)
        away_results = self.select_results(away_recent, away_team, VenueRole.AWAY)

        home_matrix = self.build_transition_matrix(home_results)
        away_matrix = self.build_transition_matrix(away_results)

        home_last = self.last_state(home_results)
        away_last = self.last_state(away_results)

        home_row = home_matrix.row(home_last) if home_last else TransitionRow.uniform()
        away_row = away_matrix.row(away_last) if away_last else TransitionRow.uniform()

        home_win, draw, away_win = self.outcome_probabilities(home_row, away_row)
        confidence = self.calculate_confidence(len(home_results), len(away_results))

        logger.debug(
            f"Markov {home_team} vs {away_team}: "
            f"home={[r.value for r in home_results]} away={[r.value for r in away_results]} "
            f"-> {home_win:.1f}/{draw:.1f}/{away_win:.1f} (confidence {confidence:.0f})"
        )

        return MarkovPrediction(
            home_win=home_win,
            draw=draw,
            away_win=away_win,
            confidence=confidence,
            home_transition_matrix=home_matrix,
            away_transition_matrix=away_matrix,
            home_last_state=home_last,
            away_last_state=away_last,
            home_games_analyzed=len(home_results),
            away_games_analyzed=len(away_results),
        )
