"""
Predictions Router

API endpoints for the score prediction models of a single fixture.
"""

from typing import Awaitable, Callable, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query

from goal_getter.application.dtos.dtos import (
    ScoreGridResponseDTO,
    DixonColesMarketsResponseDTO,
    MarkovPredictionDTO,
    MarkovPoissonPredictionDTO,
    EnhancedPoissonResponseDTO,
    WeightedFrequencyResponseDTO,
    HistoricalScoresResponseDTO,
    MatchAnalysisResponseDTO,
    ErrorResponseDTO,
)
from goal_getter.application.use_cases.use_cases import (
    PredictionDataSources,
    GetDixonColesPredictionUseCase,
    GetDixonColesMarketsUseCase,
    GetPoissonPredictionUseCase,
    GetMarkovPredictionUseCase,
    GetMarkovPoissonPredictionUseCase,
    GetEnhancedPoissonPredictionUseCase,
    GetWeightedFrequencyPredictionUseCase,
    GetHistoricalScoresUseCase,
    GetMatchAnalysisUseCase,
)
from goal_getter.api.dependencies import get_cache, get_data_sources
from goal_getter.domain.exceptions import (
    DataSourceUnavailableException,
    InsufficientDataException,
    InvalidInputException,
)
from goal_getter.infrastructure.cache.cache_service import CacheService


router = APIRouter(prefix="/predictions", tags=["Predictions"])

T = TypeVar("T")

ERROR_RESPONSES = {
    400: {"model": ErrorResponseDTO, "description": "Invalid input"},
    422: {"model": ErrorResponseDTO, "description": "Insufficient data for this fixture"},
    503: {"model": ErrorResponseDTO, "description": "Data source unavailable"},
}


async def _cached(
    cache: CacheService,
    cache_key: str,
    call: Callable[[], Awaitable[T]],
    historical: bool = False,
) -> T:
    """
    Serve from cache, or run the use case and map domain errors to HTTP errors.

    Frequency tables only change when the results files do, so they are kept
    under the longer historical TTL.
    """
    get, put = (
        (cache.get_historical, cache.set_historical) if historical
        else (cache.get_predictions, cache.set_predictions)
    )
    cached_result = get(cache_key)
    if cached_result is not None:
        return cached_result

    try:
        result = await call()
    except InvalidInputException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InsufficientDataException as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DataSourceUnavailableException as e:
        raise HTTPException(status_code=503, detail=str(e))

    put(cache_key, result)
    return result


@router.get(
    "/dixon-coles",
    response_model=ScoreGridResponseDTO,
    responses=ERROR_RESPONSES,
    summary="Dixon-Coles scorelines",
    description="Most probable scorelines of the Dixon-Coles model. Averages default to the teams' goal statistics.",
)
async def get_dixon_coles(
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    home_avg: Optional[float] = Query(default=None, description="Override home average goals"),
    away_avg: Optional[float] = Query(default=None, description="Override away average goals"),
    data_sources: PredictionDataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_cache),
) -> ScoreGridResponseDTO:
    use_case = GetDixonColesPredictionUseCase(data_sources)
    return await _cached(
        cache,
        f"dixon_coles:{home_team}:{away_team}:{home_avg}:{away_avg}",
        lambda: use_case.execute(home_team, away_team, home_avg, away_avg),
    )


@router.get(
    "/dixon-coles/markets",
    response_model=DixonColesMarketsResponseDTO,
    responses=ERROR_RESPONSES,
    summary="Dixon-Coles market statistics",
    description="1X2, over 1.5/2.5/3.5 and both-teams-to-score percentages from the Dixon-Coles grid.",
)
async def get_dixon_coles_markets(
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    home_avg: Optional[float] = Query(default=None, description="Override home average goals"),
    away_avg: Optional[float] = Query(default=None, description="Override away average goals"),
    data_sources: PredictionDataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_cache),
) -> DixonColesMarketsResponseDTO:
    use_case = GetDixonColesMarketsUseCase(data_sources)
    return await _cached(
        cache,
        f"dixon_coles_markets:{home_team}:{away_team}:{home_avg}:{away_avg}",
        lambda: use_case.execute(home_team, away_team, home_avg, away_avg),
    )


@router.get(
    "/poisson",
    response_model=ScoreGridResponseDTO,
    responses=ERROR_RESPONSES,
    summary="Classic Poisson scorelines",
)
async def get_poisson(
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    home_avg: Optional[float] = Query(default=None, description="Override home expected goals"),
    away_avg: Optional[float] = Query(default=None, description="Override away expected goals"),
    data_sources: PredictionDataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_cache),
) -> ScoreGridResponseDTO:
    use_case = GetPoissonPredictionUseCase(data_sources)
    return await _cached(
        cache,
        f"poisson:{home_team}:{away_team}:{home_avg}:{away_avg}",
        lambda: use_case.execute(home_team, away_team, home_avg, away_avg),
    )


@router.get(
    "/markov",
    response_model=MarkovPredictionDTO,
    responses=ERROR_RESPONSES,
    summary="Markov-chain form prediction",
    description="Home/draw/away percentages from each team's recent result transitions.",
)
async def get_markov(
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    data_sources: PredictionDataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_cache),
) -> MarkovPredictionDTO:
    use_case = GetMarkovPredictionUseCase(data_sources)
    return await _cached(
        cache,
        f"markov:{home_team}:{away_team}",
        lambda: use_case.execute(home_team, away_team),
    )


@router.get(
    "/markov-poisson",
    response_model=MarkovPoissonPredictionDTO,
    responses=ERROR_RESPONSES,
    summary="Markov-Poisson hybrid prediction",
)
async def get_markov_poisson(
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    data_sources: PredictionDataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_cache),
) -> MarkovPoissonPredictionDTO:
    use_case = GetMarkovPoissonPredictionUseCase(data_sources)
    return await _cached(
        cache,
        f"markov_poisson:{home_team}:{away_team}",
        lambda: use_case.execute(home_team, away_team),
    )


@router.get(
    "/enhanced-poisson",
    response_model=EnhancedPoissonResponseDTO,
    responses=ERROR_RESPONSES,
    summary="Recency and head-to-head weighted Poisson",
)
async def get_enhanced_poisson(
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    data_sources: PredictionDataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_cache),
) -> EnhancedPoissonResponseDTO:
    use_case = GetEnhancedPoissonPredictionUseCase(data_sources)
    return await _cached(
        cache,
        f"enhanced_poisson:{home_team}:{away_team}",
        lambda: use_case.execute(home_team, away_team),
    )


@router.get(
    "/weighted-frequency",
    response_model=WeightedFrequencyResponseDTO,
    responses=ERROR_RESPONSES,
    summary="Weighted historical scoreline frequencies",
    description=(
        "Scorelines ranked by frequency across head-to-head, home team, away team and "
        "league samples. ranking_score is relative to the best scoreline, not a probability."
    ),
)
async def get_weighted_frequency(
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    league: str = Query(..., min_length=1, description="League name as it appears in the results data"),
    data_sources: PredictionDataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_cache),
) -> WeightedFrequencyResponseDTO:
    use_case = GetWeightedFrequencyPredictionUseCase(data_sources)
    return await _cached(
        cache,
        f"weighted_frequency:{league}:{home_team}:{away_team}",
        lambda: use_case.execute(league, home_team, away_team),
        historical=True,
    )


@router.get(
    "/historical-scores",
    response_model=HistoricalScoresResponseDTO,
    responses=ERROR_RESPONSES,
    summary="Historical scoreline frequencies",
    description="Frequencies from head-to-head, team or league matches, whichever is the most specific with enough data.",
)
async def get_historical_scores(
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    league: str = Query(..., min_length=1, description="League name as it appears in the results data"),
    data_sources: PredictionDataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_cache),
) -> HistoricalScoresResponseDTO:
    use_case = GetHistoricalScoresUseCase(data_sources)
    return await _cached(
        cache,
        f"historical_scores:{league}:{home_team}:{away_team}",
        lambda: use_case.execute(league, home_team, away_team),
        historical=True,
    )


@router.get(
    "/analysis",
    response_model=MatchAnalysisResponseDTO,
    responses=ERROR_RESPONSES,
    summary="All models for a fixture",
    description="Runs every model; models without enough data are listed in unavailable_models.",
)
async def get_match_analysis(
    home_team: str = Query(..., min_length=1, description="Home team name"),
    away_team: str = Query(..., min_length=1, description="Away team name"),
    league: Optional[str] = Query(default=None, description="League name (needed by the frequency blender)"),
    data_sources: PredictionDataSources = Depends(get_data_sources),
    cache: CacheService = Depends(get_cache),
) -> MatchAnalysisResponseDTO:
    use_case = GetMatchAnalysisUseCase(data_sources)
    return await _cached(
        cache,
        f"analysis:{league}:{home_team}:{away_team}",
        lambda: use_case.execute(home_team, away_team, league),
    )
