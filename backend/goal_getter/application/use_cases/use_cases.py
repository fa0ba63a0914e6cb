"""
Application Use Cases Module

Use cases represent application-specific business rules and orchestrate
the flow of data between the domain layer and the infrastructure layer.

Each use case gathers its inputs from the repositories concurrently and
then runs one synchronous model over them.
"""

from typing import Optional
from dataclasses import dataclass
import logging
import asyncio

from goal_getter.domain.constants import (
    HEAD_TO_HEAD_LIMIT,
    MARKOV_MAX_RECENT_MATCHES,
    ENHANCED_RECENT_MATCHES,
)
from goal_getter.domain.entities.entities import TeamAggregateStats, VenueRole
from goal_getter.domain.exceptions import InsufficientDataException, InvalidInputException
from goal_getter.domain.repositories.repositories import MatchRepository, TeamStatsRepository
from goal_getter.domain.services.dixon_coles_service import DixonColesService
from goal_getter.domain.services.poisson_service import PoissonService
from goal_getter.domain.services.markov_chain_service import MarkovChainService
from goal_getter.domain.services.markov_poisson_service import MarkovPoissonService
from goal_getter.domain.services.enhanced_poisson_service import EnhancedPoissonService
from goal_getter.domain.services.frequency_blender_service import FrequencyBlenderService
from goal_getter.domain.value_objects.value_objects import (
    MarkovPrediction,
    ScoreProbability,
)
from goal_getter.application.dtos.dtos import (
    ScoreProbabilityDTO,
    MarketStatsDTO,
    ScoreGridResponseDTO,
    DixonColesMarketsResponseDTO,
    MarkovPredictionDTO,
    MarkovPoissonPredictionDTO,
    EnhancedPoissonResponseDTO,
    RankedScoreDTO,
    WeightedFrequencyResponseDTO,
    ScoreFrequencyDTO,
    HistoricalScoresResponseDTO,
    MatchAnalysisResponseDTO,
)


logger = logging.getLogger(__name__)


@dataclass
class PredictionDataSources:
    """Container for the repositories the models read from."""
    matches: MatchRepository
    team_stats: TeamStatsRepository


def _score_dto(score: ScoreProbability) -> ScoreProbabilityDTO:
    return ScoreProbabilityDTO(
        home_goals=score.home_goals,
        away_goals=score.away_goals,
        score=score.score,
        probability=score.probability,
        percentage=score.as_percentage(),
    )


def _markov_dto(prediction: MarkovPrediction, home_team: str, away_team: str) -> MarkovPredictionDTO:
    return MarkovPredictionDTO(
        home_team=home_team,
        away_team=away_team,
        home_win=prediction.home_win,
        draw=prediction.draw,
        away_win=prediction.away_win,
        confidence=prediction.confidence,
        home_transition_matrix=prediction.home_transition_matrix.as_dict(),
        away_transition_matrix=prediction.away_transition_matrix.as_dict(),
        home_last_state=prediction.home_last_state.value if prediction.home_last_state else None,
        away_last_state=prediction.away_last_state.value if prediction.away_last_state else None,
        home_games_analyzed=prediction.home_games_analyzed,
        away_games_analyzed=prediction.away_games_analyzed,
    )


def _require_teams(home_team: Optional[str], away_team: Optional[str]):
    if not home_team or not away_team:
        raise InsufficientDataException("Home team and away team are required")


async def _gather(*aws):
    """
    Run awaitables concurrently and wait for all of them to settle.

    The first failure, in argument order, is raised once every sibling has
    finished, so no failure goes unobserved.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


def _require_league(league: Optional[str]):
    if not league:
        raise InsufficientDataException("League is required")


async def _fetch_fixture_stats(
    data_sources: PredictionDataSources,
    home_team: str,
    away_team: str,
) -> tuple[TeamAggregateStats, TeamAggregateStats]:
    """Home team's home statistics and away team's away statistics."""
    home_stats, away_stats = await _gather(
        data_sources.team_stats.fetch_aggregate_stats(home_team, VenueRole.HOME),
        data_sources.team_stats.fetch_aggregate_stats(away_team, VenueRole.AWAY),
    )
    if home_stats is None:
        raise InsufficientDataException(f"No home statistics for {home_team}")
    if away_stats is None:
        raise InsufficientDataException(f"No away statistics for {away_team}")
    return home_stats, away_stats


async def _resolve_averages(
    data_sources: PredictionDataSources,
    home_team: str,
    away_team: str,
    home_avg: Optional[float],
    away_avg: Optional[float],
) -> tuple[float, float]:
    """Use explicit averages when both are given, otherwise the teams' statistics."""
    if home_avg is not None and away_avg is not None:
        if home_avg < 0 or away_avg < 0:
            raise InvalidInputException("Average goals cannot be negative")
        return home_avg, away_avg

    home_stats, away_stats = await _fetch_fixture_stats(data_sources, home_team, away_team)
    return home_stats.avg_goals, away_stats.avg_goals


class GetDixonColesPredictionUseCase:
    """Use case for Dixon-Coles scorelines."""

    def __init__(self, data_sources: PredictionDataSources, service: Optional[DixonColesService] = None):
        self.data_sources = data_sources
        self.service = service or DixonColesService()

    async def execute(
        self,
        home_team: str,
        away_team: str,
        home_avg: Optional[float] = None,
        away_avg: Optional[float] = None,
    ) -> ScoreGridResponseDTO:
        """
        Get the most probable Dixon-Coles scorelines for a fixture.

        Args:
            home_team: Home team name
            away_team: Away team name
            home_avg: Explicit home average goals (overrides statistics)
            away_avg: Explicit away average goals (overrides statistics)

        Returns:
            Top 8 scorelines; empty when either average is zero
        """
        _require_teams(home_team, away_team)
        home_avg, away_avg = await _resolve_averages(
            self.data_sources, home_team, away_team, home_avg, away_avg
        )

        scores = self.service.compute_scores(home_avg, away_avg)
        lambda_home, lambda_away = (
            self.service.calculate_expected_goals(home_avg, away_avg) if scores else (0.0, 0.0)
        )

        return ScoreGridResponseDTO(
            model="dixon_coles",
            home_team=home_team,
            away_team=away_team,
            home_expected_goals=lambda_home,
            away_expected_goals=lambda_away,
            scores=[_score_dto(s) for s in scores],
        )


class GetDixonColesMarketsUseCase:
    """Use case for Dixon-Coles market aggregates (1X2, over/under, BTTS)."""

    def __init__(self, data_sources: PredictionDataSources, service: Optional[DixonColesService] = None):
        self.data_sources = data_sources
        self.service = service or DixonColesService()

    async def execute(
        self,
        home_team: str,
        away_team: str,
        home_avg: Optional[float] = None,
        away_avg: Optional[float] = None,
    ) -> DixonColesMarketsResponseDTO:
        _require_teams(home_team, away_team)
        home_avg, away_avg = await _resolve_averages(
            self.data_sources, home_team, away_team, home_avg, away_avg
        )
        stats = self.service.compute_market_stats(home_avg, away_avg)
        return DixonColesMarketsResponseDTO(
            home_team=home_team,
            away_team=away_team,
            markets=MarketStatsDTO.model_validate(stats),
        )


class GetPoissonPredictionUseCase:
    """Use case for classic (independent) Poisson scorelines."""

    def __init__(self, data_sources: PredictionDataSources, service: Optional[PoissonService] = None):
        self.data_sources = data_sources
        self.service = service or PoissonService()

    async def execute(
        self,
        home_team: str,
        away_team: str,
        home_avg: Optional[float] = None,
        away_avg: Optional[float] = None,
    ) -> ScoreGridResponseDTO:
        _require_teams(home_team, away_team)
        lambda_home, lambda_away = await _resolve_averages(
            self.data_sources, home_team, away_team, home_avg, away_avg
        )
        scores = self.service.compute_scores(lambda_home, lambda_away)
        return ScoreGridResponseDTO(
            model="poisson",
            home_team=home_team,
            away_team=away_team,
            home_expected_goals=lambda_home,
            away_expected_goals=lambda_away,
            scores=[_score_dto(s) for s in scores],
        )


class GetMarkovPredictionUseCase:
    """Use case for Markov-chain form predictions."""

    def __init__(self, data_sources: PredictionDataSources, service: Optional[MarkovChainService] = None):
        self.data_sources = data_sources
        self.service = service or MarkovChainService()

    async def predict(self, home_team: str, away_team: str) -> MarkovPrediction:
        """Run the model and return the domain value (used by the hybrid)."""
        _require_teams(home_team, away_team)
        home_recent, away_recent = await _gather(
            self.data_sources.matches.fetch_recent_matches(
                home_team, VenueRole.HOME, MARKOV_MAX_RECENT_MATCHES
            ),
            self.data_sources.matches.fetch_recent_matches(
                away_team, VenueRole.AWAY, MARKOV_MAX_RECENT_MATCHES
            ),
        )
        return self.service.predict(home_recent, away_recent, home_team, away_team)

    async def execute(self, home_team: str, away_team: str) -> MarkovPredictionDTO:
        prediction = await self.predict(home_team, away_team)
        return _markov_dto(prediction, home_team, away_team)


class GetMarkovPoissonPredictionUseCase:
    """Use case for the Markov-Poisson hybrid."""

    def __init__(
        self,
        data_sources: PredictionDataSources,
        service: Optional[MarkovPoissonService] = None,
        markov_service: Optional[MarkovChainService] = None,
    ):
        self.data_sources = data_sources
        self.service = service or MarkovPoissonService()
        self.markov_use_case = GetMarkovPredictionUseCase(data_sources, markov_service)

    async def execute(self, home_team: str, away_team: str) -> MarkovPoissonPredictionDTO:
        _require_teams(home_team, away_team)
        (home_stats, away_stats), markov = await _gather(
            _fetch_fixture_stats(self.data_sources, home_team, away_team),
            self.markov_use_case.predict(home_team, away_team),
        )

        prediction = self.service.predict(home_stats, away_stats, markov)
        return MarkovPoissonPredictionDTO(
            home_team=home_team,
            away_team=away_team,
            home_win=prediction.home_win,
            draw=prediction.draw,
            away_win=prediction.away_win,
            most_probable_scores=[_score_dto(s) for s in prediction.most_probable_scores],
            confidence=prediction.confidence,
            markov_influence=prediction.markov_influence,
        )


class GetEnhancedPoissonPredictionUseCase:
    """Use case for recency/head-to-head weighted Poisson scorelines."""

    def __init__(self, data_sources: PredictionDataSources, service: Optional[EnhancedPoissonService] = None):
        self.data_sources = data_sources
        self.service = service or EnhancedPoissonService()

    async def execute(self, home_team: str, away_team: str) -> EnhancedPoissonResponseDTO:
        _require_teams(home_team, away_team)
        repo = self.data_sources.matches
        home_recent, away_recent, h2h = await _gather(
            repo.fetch_recent_matches(home_team, VenueRole.HOME, ENHANCED_RECENT_MATCHES),
            repo.fetch_recent_matches(away_team, VenueRole.AWAY, ENHANCED_RECENT_MATCHES),
            repo.fetch_head_to_head(home_team, away_team, HEAD_TO_HEAD_LIMIT),
        )

        result = self.service.predict(home_recent + away_recent, h2h, home_team, away_team)
        return EnhancedPoissonResponseDTO(
            home_team=home_team,
            away_team=away_team,
            lambda_home=result.lambda_home,
            lambda_away=result.lambda_away,
            used_head_to_head=result.used_head_to_head,
            head_to_head_matches=result.head_to_head_matches,
            scores=[_score_dto(s) for s in result.scores],
        )


class GetWeightedFrequencyPredictionUseCase:
    """Use case for the weighted historical-frequency blender."""

    def __init__(self, data_sources: PredictionDataSources, service: Optional[FrequencyBlenderService] = None):
        self.data_sources = data_sources
        self.service = service or FrequencyBlenderService()

    async def execute(self, league: str, home_team: str, away_team: str) -> WeightedFrequencyResponseDTO:
        """
        Rank scorelines by weighted historical frequency.

        Raises:
            InsufficientDataException: If the league or a team is missing
        """
        _require_teams(home_team, away_team)
        _require_league(league)

        league_matches = await self.data_sources.matches.fetch_league_matches(league)
        results = self.service.predict(league_matches, league, home_team, away_team)

        return WeightedFrequencyResponseDTO(
            league=league,
            home_team=home_team,
            away_team=away_team,
            predictions=[
                RankedScoreDTO(
                    score=r.score,
                    total_weight=r.total_weight,
                    ranking_score=float(r.final_probability),
                    sources=list(r.sources),
                )
                for r in results
            ],
        )


class GetHistoricalScoresUseCase:
    """Use case for the tiered historical scoreline frequencies."""

    def __init__(self, data_sources: PredictionDataSources, service: Optional[FrequencyBlenderService] = None):
        self.data_sources = data_sources
        self.service = service or FrequencyBlenderService()

    async def execute(self, league: str, home_team: str, away_team: str) -> HistoricalScoresResponseDTO:
        _require_teams(home_team, away_team)
        _require_league(league)

        league_matches = await self.data_sources.matches.fetch_league_matches(league)
        population, source = self.service.select_historical_population(
            league_matches, league, home_team, away_team
        )
        frequencies = self.service.historical_score_frequencies(
            league_matches, league, home_team, away_team
        )

        return HistoricalScoresResponseDTO(
            league=league,
            home_team=home_team,
            away_team=away_team,
            source=source,
            total_matches=len(population),
            frequencies=[ScoreFrequencyDTO.model_validate(f) for f in frequencies],
        )


class GetMatchAnalysisUseCase:
    """
    Use case running every model for one fixture.

    A model lacking data is reported in ``unavailable_models`` instead of
    failing the whole analysis; data source outages still propagate.
    """

    def __init__(self, data_sources: PredictionDataSources):
        self.data_sources = data_sources

    @staticmethod
    async def _optional(name: str, coro, unavailable: dict[str, str]):
        try:
            return await coro
        except InsufficientDataException as e:
            logger.info(f"Model {name} skipped: {e}")
            unavailable[name] = str(e)
            return None

    async def execute(
        self,
        home_team: str,
        away_team: str,
        league: Optional[str] = None,
    ) -> MatchAnalysisResponseDTO:
        _require_teams(home_team, away_team)
        unavailable: dict[str, str] = {}
        ds = self.data_sources

        results = await _gather(
            self._optional("dixon_coles", GetDixonColesPredictionUseCase(ds).execute(home_team, away_team), unavailable),
            self._optional("dixon_coles_markets", GetDixonColesMarketsUseCase(ds).execute(home_team, away_team), unavailable),
            self._optional("poisson", GetPoissonPredictionUseCase(ds).execute(home_team, away_team), unavailable),
            self._optional("markov", GetMarkovPredictionUseCase(ds).execute(home_team, away_team), unavailable),
            self._optional("markov_poisson", GetMarkovPoissonPredictionUseCase(ds).execute(home_team, away_team), unavailable),
            self._optional("enhanced_poisson", GetEnhancedPoissonPredictionUseCase(ds).execute(home_team, away_team), unavailable),
            self._optional(
                "weighted_frequency",
                GetWeightedFrequencyPredictionUseCase(ds).execute(league, home_team, away_team),
                unavailable,
            ),
        )
        dixon_coles, markets, poisson, markov, markov_poisson, enhanced, weighted = results

        return MatchAnalysisResponseDTO(
            home_team=home_team,
            away_team=away_team,
            league=league,
            dixon_coles=dixon_coles,
            dixon_coles_markets=markets.markets if markets else None,
            poisson=poisson,
            markov=markov,
            markov_poisson=markov_poisson,
            enhanced_poisson=enhanced,
            weighted_frequency=weighted,
            unavailable_models=unavailable,
        )
