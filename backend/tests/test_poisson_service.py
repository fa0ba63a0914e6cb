"""
Unit Tests for the classic Poisson Service
"""

import pytest

from goal_getter.domain.services.poisson_service import PoissonService


class TestPoissonService:
    """Tests for PoissonService."""

    @pytest.fixture
    def service(self):
        return PoissonService()

    def test_grid_is_not_renormalized(self, service):
        grid = service.build_grid(1.5, 1.0)
        total = sum(s.probability for s in grid)
        assert len(grid) == 121
        assert 0.99 < total < 1.0

    def test_most_probable_scores(self, service):
        scores = service.compute_scores(1.5, 1.0)

        assert len(scores) == 8
        # 1-0 and 1-1 tie (P(away=0) == P(away=1) when λ=1); grid order breaks it
        assert [s.score for s in scores[:2]] == ["1 - 0", "1 - 1"]
        assert scores[0].probability == pytest.approx(0.334695 * 0.367879, rel=1e-4)

    def test_custom_count(self, service):
        assert len(service.compute_scores(1.2, 1.2, count=3)) == 3

    @pytest.mark.parametrize("lambda_home,lambda_away", [(0.0, 1.0), (1.0, 0.0), (-0.5, 2.0)])
    def test_non_positive_lambda(self, service, lambda_home, lambda_away):
        assert service.compute_scores(lambda_home, lambda_away) == []
        assert service.outcome_probabilities(lambda_home, lambda_away) == (0.0, 0.0, 0.0)

    def test_outcome_probabilities(self, service):
        home_win, draw, away_win = service.outcome_probabilities(1.8, 0.9)
        assert home_win > away_win
        assert home_win + draw + away_win == pytest.approx(1.0, abs=0.01)
