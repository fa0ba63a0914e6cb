"""
Frequency Blender Service Module

Non-Poisson score predictions built from literal historical scoreline
frequencies.

Weighted blender: four populations (head-to-head, home team's games, away
team's games, league sample) are tabulated separately and each scoreline's
share of a population is weighted and summed. The final value of a
scoreline is a RankingScore relative to the best scoreline (best = 100);
it is a ranking, not a probability distribution.

Tiered frequencies: a single frequency table from the most specific
population with enough matches.
"""

import logging
from collections import Counter
from typing import Optional, Sequence

from goal_getter.domain.constants import (
    FREQUENCY_SOURCE_WEIGHTS,
    FREQUENCY_TEAM_MATCHES,
    FREQUENCY_LEAGUE_MATCHES,
    FREQUENCY_RESULT_COUNT,
    HISTORICAL_MIN_H2H_MATCHES,
    HISTORICAL_MIN_TEAM_MATCHES,
    HISTORICAL_RESULT_COUNT,
)
from goal_getter.domain.entities.entities import MatchRecord
from goal_getter.domain.exceptions import InsufficientDataException
from goal_getter.domain.value_objects.value_objects import (
    PredictionResult,
    RankingScore,
    ScoreFrequency,
)


logger = logging.getLogger(__name__)


class FrequencyBlenderService:
    """Domain service for historical scoreline frequency predictions."""

    def __init__(self, weights: Optional[dict[str, float]] = None):
        self.weights = dict(weights or FREQUENCY_SOURCE_WEIGHTS)

    @staticmethod
    def score_frequencies(
        matches: Sequence[MatchRecord],
        source: Optional[str] = None,
        weight: float = 0.0,
    ) -> list[ScoreFrequency]:
        """
        Tabulate scoreline -> count -> percentage of the population.

        Scorelines keep first-seen order; callers sort as needed.
        """
        if not matches:
            return []

        counts = Counter(m.score for m in matches)
        total = len(matches)
        return [
            ScoreFrequency(
                score=score,
                count=count,
                percentage=count / total * 100,
                source=source,
                weight=weight,
            )
            for score, count in counts.items()
        ]

    @staticmethod
    def combine_and_rank(
        frequencies: Sequence[ScoreFrequency],
        count: int = FREQUENCY_RESULT_COUNT,
    ) -> list[PredictionResult]:
        """
        Merge per-population frequencies into ranked predictions.

        Each appearance adds (percentage / 100) * weight to the scoreline's
        total weight and records a provenance string.
        """
        totals: dict[str, float] = {}
        sources: dict[str, list[str]] = {}

        for freq in frequencies:
            totals[freq.score] = totals.get(freq.score, 0.0) + (freq.percentage / 100) * freq.weight
            sources.setdefault(freq.score, []).append(f"{freq.source} ({freq.percentage:.1f}%)")

        if not totals:
            return []

        max_weight = max(totals.values())
        if max_weight <= 0:
            return []

        results = [
            PredictionResult(
                score=score,
                total_weight=weight,
                final_probability=RankingScore(min(100.0, weight / max_weight * 100)),
                sources=tuple(sources[score]),
            )
            for score, weight in totals.items()
        ]
        results.sort(key=lambda r: r.final_probability.value, reverse=True)
        return results[:count]

    @staticmethod
    def _validate_identifiers(league: Optional[str], home_team: Optional[str], away_team: Optional[str]):
        if not home_team or not away_team or not league:
            raise InsufficientDataException("Home team, away team and league are required")

    @staticmethod
    def _is_head_to_head(match: MatchRecord, home_team: str, away_team: str) -> bool:
        return (
            (match.home_team == home_team and match.away_team == away_team)
            or (match.home_team == away_team and match.away_team == home_team)
        )

    def predict(
        self,
        league_matches: Sequence[MatchRecord],
        league: Optional[str],
        home_team: Optional[str],
        away_team: Optional[str],
    ) -> list[PredictionResult]:
        """
        Rank scorelines across the four weighted populations.

        Args:
            league_matches: Matches in chronological order (oldest first)
            league: League identifier; matches from other leagues are ignored
            home_team: Home team name
            away_team: Away team name

        Returns:
            Top 6 PredictionResults, best first

        Raises:
            InsufficientDataException: If the league or a team is missing
        """
        self._validate_identifiers(league, home_team, away_team)

        matches = [m for m in league_matches if m.league == league]

        h2h = [m for m in matches if self._is_head_to_head(m, home_team, away_team)]
        home_games = [m for m in matches if m.involves(home_team)][-FREQUENCY_TEAM_MATCHES:]
        away_games = [m for m in matches if m.involves(away_team)][-FREQUENCY_TEAM_MATCHES:]
        league_sample = matches[-FREQUENCY_LEAGUE_MATCHES:]

        logger.debug(
            f"Frequency blend {home_team} vs {away_team} ({league}): "
            f"h2h={len(h2h)} home={len(home_games)} away={len(away_games)} league={len(league_sample)}"
        )

        frequencies = (
            self.score_frequencies(h2h, "H2H", self.weights["H2H"])
            + self.score_frequencies(home_games, "Home", self.weights["Home"])
            + self.score_frequencies(away_games, "Away", self.weights["Away"])
            + self.score_frequencies(league_sample, "League", self.weights["League"])
        )
        return self.combine_and_rank(frequencies)

    def select_historical_population(
        self,
        matches: Sequence[MatchRecord],
        league: Optional[str],
        home_team: Optional[str],
        away_team: Optional[str],
    ) -> tuple[list[MatchRecord], Optional[str]]:
        """
        Pick the most specific population with enough matches.

        Uses head-to-head matches when there are at least 5, otherwise all
        matches involving either team when there are at least 20, otherwise
        the whole league.

        Returns:
            (population, source label); ([], None) when an identifier is
            missing or the league has no matches
        """
        if not home_team or not away_team or not league:
            return [], None

        league_matches = [m for m in matches if m.league == league]
        if not league_matches:
            return [], None

        h2h = [m for m in league_matches if self._is_head_to_head(m, home_team, away_team)]
        if len(h2h) >= HISTORICAL_MIN_H2H_MATCHES:
            return h2h, "H2H"

        team_matches = [
            m for m in league_matches
            if m.involves(home_team) or m.involves(away_team)
        ]
        if len(team_matches) >= HISTORICAL_MIN_TEAM_MATCHES:
            return team_matches, "Teams"
        return league_matches, "League"

    def historical_score_frequencies(
        self,
        matches: Sequence[MatchRecord],
        league: Optional[str],
        home_team: Optional[str],
        away_team: Optional[str],
        count: int = HISTORICAL_RESULT_COUNT,
    ) -> list[ScoreFrequency]:
        """
        Frequency table from the most specific population with enough data.

        Returns:
            Top ``count`` frequencies by percentage, [] without a population
        """
        population, source = self.select_historical_population(matches, league, home_team, away_team)
        if not population:
            return []

        logger.debug(f"Historical scores {home_team} vs {away_team}: using {len(population)} {source} matches")

        frequencies = self.score_frequencies(population, source)
        frequencies.sort(key=lambda f: f.percentage, reverse=True)
        return frequencies[:count]
