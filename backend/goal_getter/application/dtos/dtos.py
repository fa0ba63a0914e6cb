"""
Data Transfer Objects (DTOs) Module

DTOs are used to transfer data between layers and to/from the API.
They use Pydantic for validation and serialization.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# Response DTOs
# ============================================================

class ScoreProbabilityDTO(BaseModel):
    """Scoreline with probability (0-1) and percentage (0-100)."""
    home_goals: int = Field(..., ge=0)
    away_goals: int = Field(..., ge=0)
    score: str
    probability: float = Field(..., ge=0)
    percentage: float = Field(..., ge=0)

    class Config:
        from_attributes = True


class MarketStatsDTO(BaseModel):
    """Dixon-Coles market aggregates, rounded percentages."""
    home_win: int
    draw: int
    away_win: int
    over_15: int
    over_25: int
    over_35: int
    both_teams_scored: int

    class Config:
        from_attributes = True


class ScoreGridResponseDTO(BaseModel):
    """Top scorelines of a score-grid model."""
    model: str
    home_team: str
    away_team: str
    home_expected_goals: float
    away_expected_goals: float
    scores: list[ScoreProbabilityDTO] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=_utcnow)


class DixonColesMarketsResponseDTO(BaseModel):
    home_team: str
    away_team: str
    markets: MarketStatsDTO
    generated_at: datetime = Field(default_factory=_utcnow)


class MarkovPredictionDTO(BaseModel):
    """Markov-chain outcome percentages and the matrices behind them."""
    home_team: str
    away_team: str
    home_win: float = Field(..., ge=0, le=100)
    draw: float = Field(..., ge=0, le=100)
    away_win: float = Field(..., ge=0, le=100)
    confidence: float = Field(..., ge=0, le=100)
    home_transition_matrix: dict[str, dict[str, float]]
    away_transition_matrix: dict[str, dict[str, float]]
    home_last_state: Optional[str] = None
    away_last_state: Optional[str] = None
    home_games_analyzed: int
    away_games_analyzed: int


class MarkovPoissonPredictionDTO(BaseModel):
    """Hybrid prediction: blended outcomes plus adjusted scorelines."""
    home_team: str
    away_team: str
    home_win: float
    draw: float
    away_win: float
    most_probable_scores: list[ScoreProbabilityDTO] = Field(default_factory=list)
    confidence: float = Field(..., ge=0, le=100)
    markov_influence: float = Field(..., ge=0, le=100)


class EnhancedPoissonResponseDTO(BaseModel):
    home_team: str
    away_team: str
    lambda_home: float
    lambda_away: float
    used_head_to_head: bool
    head_to_head_matches: int
    scores: list[ScoreProbabilityDTO] = Field(default_factory=list)


class RankedScoreDTO(BaseModel):
    """
    Scoreline ranked by the frequency blender.

    ``ranking_score`` is relative to the best scoreline (best = 100); the
    values of a response do not sum to 100.
    """
    score: str
    total_weight: float
    ranking_score: float = Field(..., ge=0, le=100)
    sources: list[str] = Field(default_factory=list)


class WeightedFrequencyResponseDTO(BaseModel):
    league: str
    home_team: str
    away_team: str
    predictions: list[RankedScoreDTO] = Field(default_factory=list)


class ScoreFrequencyDTO(BaseModel):
    score: str
    count: int
    percentage: float
    source: Optional[str] = None

    class Config:
        from_attributes = True


class HistoricalScoresResponseDTO(BaseModel):
    league: str
    home_team: str
    away_team: str
    source: Optional[str] = None
    total_matches: int = 0
    frequencies: list[ScoreFrequencyDTO] = Field(default_factory=list)


class MatchAnalysisResponseDTO(BaseModel):
    """All models for one fixture. Models without enough data are omitted and listed."""
    home_team: str
    away_team: str
    league: Optional[str] = None
    dixon_coles: Optional[ScoreGridResponseDTO] = None
    dixon_coles_markets: Optional[MarketStatsDTO] = None
    poisson: Optional[ScoreGridResponseDTO] = None
    markov: Optional[MarkovPredictionDTO] = None
    markov_poisson: Optional[MarkovPoissonPredictionDTO] = None
    enhanced_poisson: Optional[EnhancedPoissonResponseDTO] = None
    weighted_frequency: Optional[WeightedFrequencyResponseDTO] = None
    unavailable_models: dict[str, str] = Field(default_factory=dict)
    generated_at: datetime = Field(default_factory=_utcnow)


class HealthResponseDTO(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
    timestamp: datetime = Field(default_factory=_utcnow)


class ErrorResponseDTO(BaseModel):
    """Error response."""
    error: str
    message: str
    details: Optional[dict] = None
