"""
Unit Tests for Domain Entities

Tests the core domain entities, value objects and their validation logic.
"""

import pytest

from goal_getter.domain.entities.entities import (
    MatchRecord,
    ResultState,
    TeamAggregateStats,
    VenueRole,
    team_name_matches,
)
from goal_getter.domain.value_objects.value_objects import (
    RankingScore,
    ScoreProbability,
    TransitionMatrix,
    TransitionRow,
)


class TestMatchRecord:
    """Tests for MatchRecord entity."""

    def test_create_match_valid(self):
        """Test creating a valid match."""
        match = MatchRecord(home_team="Arsenal", away_team="Chelsea", home_goals=2, away_goals=1)
        assert match.score == "2-1"
        assert match.total_goals == 3
        assert match.status == "FT"
        assert match.half_time_score is None

    def test_half_time_score(self):
        match = MatchRecord(
            home_team="Arsenal",
            away_team="Chelsea",
            home_goals=2,
            away_goals=1,
            half_time_home_goals=1,
            half_time_away_goals=0,
        )
        assert match.half_time_score == "1-0"

    def test_match_is_frozen(self):
        """Test that MatchRecord is immutable."""
        match = MatchRecord(home_team="Arsenal", away_team="Chelsea", home_goals=0, away_goals=0)
        with pytest.raises(AttributeError):
            match.home_goals = 3

    def test_empty_team_raises_error(self):
        with pytest.raises(ValueError, match="Team names cannot be empty"):
            MatchRecord(home_team="", away_team="Chelsea", home_goals=0, away_goals=0)

    def test_negative_goals_raise_error(self):
        with pytest.raises(ValueError, match="Goals cannot be negative"):
            MatchRecord(home_team="Arsenal", away_team="Chelsea", home_goals=-1, away_goals=0)

    def test_result_for_each_role(self, make_match):
        match = make_match("A", "B", "3-1")
        assert match.result_for(VenueRole.HOME) == ResultState.WIN
        assert match.result_for(VenueRole.AWAY) == ResultState.LOSS
        assert make_match("A", "B", "2-2").result_for(VenueRole.AWAY) == ResultState.DRAW

    def test_goals_for_and_against(self, make_match):
        match = make_match("A", "B", "3-1")
        assert match.goals_for(VenueRole.AWAY) == 1
        assert match.goals_against(VenueRole.AWAY) == 3

    def test_played_as_uses_containment(self, make_match):
        match = make_match("Atletico Madrid", "Real Madrid", "1-1")
        assert match.played_as("atletico", VenueRole.HOME)
        assert not match.played_as("atletico", VenueRole.AWAY)

    def test_involves_is_exact(self, make_match):
        match = make_match("Atletico Madrid", "Real Madrid", "1-1")
        assert match.involves("Real Madrid")
        assert not match.involves("Real")


class TestTeamNameMatches:

    def test_case_insensitive_containment(self):
        assert team_name_matches("Manchester United", "manchester")
        assert team_name_matches("  Chelsea ", "CHELSEA")

    def test_empty_names(self):
        assert not team_name_matches("", "Chelsea")
        assert not team_name_matches("Chelsea", "")


class TestTeamAggregateStats:
    """Tests for TeamAggregateStats entity."""

    def test_scored_per_match_floors_games(self):
        stats = TeamAggregateStats(
            team="Arsenal", league_name="EPL", venue=VenueRole.HOME,
            games_played=0, avg_goals=0.0, goals_scored=0,
        )
        assert stats.scored_per_match == 0.0

    def test_scored_per_match_falls_back_to_average(self):
        stats = TeamAggregateStats(
            team="Arsenal", league_name="EPL", venue=VenueRole.HOME,
            games_played=10, avg_goals=1.7,
        )
        assert stats.scored_per_match == 1.7

    def test_over_percentage_default(self):
        stats = TeamAggregateStats(
            team="Arsenal", league_name="EPL", venue=VenueRole.AWAY,
            games_played=4, avg_goals=1.0, over_percentages={2.5: 50.0},
        )
        assert stats.over_percentage(2.5) == 50.0
        assert stats.over_percentage(3.5) == 0.0

    def test_negative_games_raise_error(self):
        with pytest.raises(ValueError, match="Games played cannot be negative"):
            TeamAggregateStats(
                team="Arsenal", league_name="EPL", venue=VenueRole.HOME,
                games_played=-1, avg_goals=0.0,
            )


class TestValueObjects:
    """Tests for the model output value objects."""

    def test_score_probability(self):
        score = ScoreProbability(home_goals=2, away_goals=1, probability=0.125)
        assert score.score == "2 - 1"
        assert score.is_home_win
        assert score.as_percentage() == 12.5
        assert str(score) == "2 - 1 (12.5%)"

    def test_score_probability_negative_raises(self):
        with pytest.raises(ValueError):
            ScoreProbability(home_goals=0, away_goals=0, probability=-0.1)

    def test_ranking_score_bounds(self):
        assert float(RankingScore(100.0)) == 100.0
        with pytest.raises(ValueError, match="Ranking score must be between 0 and 100"):
            RankingScore(100.5)

    def test_transition_matrix_as_dict(self):
        row = TransitionRow(win=0.5, draw=0.25, loss=0.25)
        matrix = TransitionMatrix(win=row, draw=TransitionRow.uniform(), loss=TransitionRow.uniform())
        assert matrix.as_dict()["V"] == {"V": 0.5, "E": 0.25, "D": 0.25}
        assert matrix.row(ResultState.WIN).draw == 0.25
