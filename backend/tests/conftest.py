"""Shared fixtures for the test suite."""

from datetime import datetime, timedelta

import pytest

from goal_getter.domain.entities.entities import MatchRecord


def build_match(home, away, score, league="Test League", days_ago=None):
    """Build a MatchRecord from an "h-a" score string."""
    home_goals, away_goals = (int(x) for x in score.split("-"))
    match_date = datetime(2025, 6, 1) - timedelta(days=days_ago) if days_ago is not None else None
    return MatchRecord(
        home_team=home,
        away_team=away,
        home_goals=home_goals,
        away_goals=away_goals,
        league=league,
        match_date=match_date,
    )


@pytest.fixture
def make_match():
    """Factory fixture for MatchRecord."""
    return build_match


@pytest.fixture
def league_history():
    """A small EPL history, oldest first."""
    return [
        build_match("Alpha", "Beta", "2-1", league="EPL", days_ago=70),
        build_match("Gamma", "Beta", "1-1", league="EPL", days_ago=60),
        build_match("Alpha", "Gamma", "3-0", league="EPL", days_ago=50),
        build_match("Beta", "Alpha", "0-0", league="EPL", days_ago=40),
        build_match("Delta", "Beta", "2-0", league="EPL", days_ago=30),
        build_match("Alpha", "Delta", "1-1", league="EPL", days_ago=20),
        build_match("Alpha", "Beta", "1-0", league="EPL", days_ago=10),
    ]
