"""
Unit Tests for Markov Chain Service
"""

import pytest

from goal_getter.domain.entities.entities import ResultState, VenueRole
from goal_getter.domain.services.markov_chain_service import MarkovChainService
from goal_getter.domain.value_objects.value_objects import TransitionRow


W, D, L = ResultState.WIN, ResultState.DRAW, ResultState.LOSS


class TestMarkovChainService:
    """Tests for MarkovChainService."""

    @pytest.fixture
    def service(self):
        return MarkovChainService()

    @pytest.fixture
    def alpha_home_form(self, make_match):
        """Alpha at home, most recent first: W W D L W W."""
        return [
            make_match("Alpha", "Beta", "2-0"),
            make_match("Alpha", "Gamma", "1-0"),
            make_match("Alpha", "Delta", "1-1"),
            make_match("Alpha", "Beta", "0-2"),
            make_match("Alpha", "Gamma", "3-1"),
            make_match("Alpha", "Delta", "2-1"),
        ]

    def test_select_results_filters_role_and_limits(self, service, alpha_home_form, make_match):
        matches = [make_match("Beta", "Alpha", "0-5")] + alpha_home_form + [make_match("Alpha", "Omega", "0-0")]

        results = service.select_results(matches, "alpha", VenueRole.HOME)

        assert results == [W, W, D, L, W, W]

    def test_transition_matrix_counts_list_order(self, service):
        matrix = service.build_transition_matrix([W, W, D, L, W, W])

        assert matrix.win == TransitionRow(win=2 / 3, draw=1 / 3, loss=0.0)
        assert matrix.draw == TransitionRow(win=0.0, draw=0.0, loss=1.0)
        assert matrix.loss == TransitionRow(win=1.0, draw=0.0, loss=0.0)

    def test_unobserved_rows_are_uniform(self, service):
        matrix = service.build_transition_matrix([W])
        for state in (W, D, L):
            assert matrix.row(state) == TransitionRow.uniform()

    def test_rows_sum_to_one(self, service):
        matrix = service.build_transition_matrix([L, D, D, W, L, D])
        for state in (W, D, L):
            assert matrix.row(state).total == pytest.approx(1.0)

    def test_predict_without_history(self, service):
        prediction = service.predict([], [], "Alpha", "Beta")

        # uniform rows: 2/9 home, 1.5/9 draw, 2/9 away before normalization
        assert prediction.home_win == pytest.approx(2 / 5.5 * 100)
        assert prediction.draw == pytest.approx(1.5 / 5.5 * 100)
        assert prediction.away_win == pytest.approx(2 / 5.5 * 100)
        assert prediction.confidence == 0
        assert prediction.home_last_state is None

    def test_predict_with_form(self, service, alpha_home_form, make_match):
        beta_away_form = [
            make_match("Gamma", "Beta", "2-0"),
            make_match("Delta", "Beta", "1-0"),
            make_match("Alpha", "Beta", "3-1"),
        ]

        prediction = service.predict(alpha_home_form, beta_away_form, "Alpha", "Beta")

        assert prediction.home_win == pytest.approx(100.0)
        assert prediction.draw == pytest.approx(0.0)
        assert prediction.away_win == pytest.approx(0.0)
        assert prediction.confidence == pytest.approx(75.0)
        assert prediction.home_last_state == W
        assert prediction.away_last_state == L
        assert prediction.home_games_analyzed == 6
        assert prediction.away_games_analyzed == 3
        assert prediction.favours_home

    def test_percentages_sum_to_100(self, service, alpha_home_form, make_match):
        away_form = [
            make_match("Gamma", "Beta", "1-1"),
            make_match("Delta", "Beta", "0-1"),
            make_match("Alpha", "Beta", "2-2"),
            make_match("Omega", "Beta", "3-0"),
        ]
        p = service.predict(alpha_home_form, away_form, "Alpha", "Beta")
        assert p.home_win + p.draw + p.away_win == pytest.approx(100.0)

    def test_confidence_caps_at_100(self, service):
        assert service.calculate_confidence(6, 6) == 100
        assert service.calculate_confidence(10, 10) == 100
        assert service.calculate_confidence(3, 0) == pytest.approx(25.0)

    def test_zero_total_falls_back_to_uniform(self, service):
        certain_loss = TransitionRow(win=0.0, draw=0.0, loss=1.0)
        certain_draw = TransitionRow(win=0.0, draw=1.0, loss=0.0)

        assert service.outcome_probabilities(certain_loss, certain_draw) == pytest.approx(
            (100 / 3, 100 / 3, 100 / 3)
        )
