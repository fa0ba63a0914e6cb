"""
Domain Value Objects Module

Value objects are immutable objects that are defined by their attributes rather than identity.
They carry the outputs of the prediction models.
"""

from dataclasses import dataclass, field
from typing import Optional

from goal_getter.domain.entities.entities import ResultState


@dataclass(frozen=True)
class ScoreProbability:
    """
    A scoreline with its probability (0.0 to 1.0).
    """
    home_goals: int
    away_goals: int
    probability: float

    def __post_init__(self):
        if self.home_goals < 0 or self.away_goals < 0:
            raise ValueError("Goals cannot be negative")
        if self.probability < 0:
            raise ValueError(f"Probability cannot be negative, got {self.probability}")

    @property
    def score(self) -> str:
        return f"{self.home_goals} - {self.away_goals}"

    @property
    def is_home_win(self) -> bool:
        return self.home_goals > self.away_goals

    @property
    def is_draw(self) -> bool:
        return self.home_goals == self.away_goals

    @property
    def is_away_win(self) -> bool:
        return self.away_goals > self.home_goals

    def as_percentage(self) -> float:
        """Convert to percentage (0-100)."""
        return self.probability * 100

    def __str__(self) -> str:
        return f"{self.score} ({self.as_percentage():.1f}%)"


@dataclass(frozen=True)
class TransitionRow:
    """
    Probability distribution over the next result given the current one.
    """
    win: float
    draw: float
    loss: float

    @classmethod
    def uniform(cls) -> "TransitionRow":
        return cls(win=1 / 3, draw=1 / 3, loss=1 / 3)

    @property
    def total(self) -> float:
        return self.win + self.draw + self.loss

    def as_dict(self) -> dict[str, float]:
        return {
            ResultState.WIN.value: self.win,
            ResultState.DRAW.value: self.draw,
            ResultState.LOSS.value: self.loss,
        }


@dataclass(frozen=True)
class TransitionMatrix:
    """
    3x3 stochastic matrix mapping a result to the distribution of the next one.

    Rows without observed transitions are uniform.
    """
    win: TransitionRow
    draw: TransitionRow
    loss: TransitionRow

    def row(self, state: ResultState) -> TransitionRow:
        if state == ResultState.WIN:
            return self.win
        if state == ResultState.DRAW:
            return self.draw
        return self.loss

    def as_dict(self) -> dict[str, dict[str, float]]:
        return {
            ResultState.WIN.value: self.win.as_dict(),
            ResultState.DRAW.value: self.draw.as_dict(),
            ResultState.LOSS.value: self.loss.as_dict(),
        }


@dataclass(frozen=True)
class MarketStats:
    """
    Aggregate market probabilities as rounded percentages (0-100).
    """
    home_win: int = 0
    draw: int = 0
    away_win: int = 0
    over_15: int = 0
    over_25: int = 0
    over_35: int = 0
    both_teams_scored: int = 0


@dataclass(frozen=True)
class MarkovPrediction:
    """
    Next-match outcome percentages derived from the teams' form chains.

    Percentages sum to 100. Confidence is a data-sufficiency heuristic,
    not a statistical confidence interval.
    """
    home_win: float
    draw: float
    away_win: float
    confidence: float
    home_transition_matrix: TransitionMatrix
    away_transition_matrix: TransitionMatrix
    home_last_state: Optional[ResultState]
    away_last_state: Optional[ResultState]
    home_games_analyzed: int
    away_games_analyzed: int

    @property
    def favours_home(self) -> bool:
        return self.home_win > self.away_win

    @property
    def favours_away(self) -> bool:
        return self.away_win > self.home_win

    @property
    def favours_draw(self) -> bool:
        return self.draw > max(self.home_win, self.away_win)


@dataclass(frozen=True)
class MarkovPoissonPrediction:
    """Poisson scorelines adjusted by Markov form, with blended outcome percentages."""
    home_win: float
    draw: float
    away_win: float
    most_probable_scores: list[ScoreProbability]
    confidence: float
    markov_influence: float  # Percentage (0-100)


@dataclass(frozen=True)
class EnhancedPoissonResult:
    """Recency/head-to-head Poisson scorelines plus the expected goals used."""
    scores: list[ScoreProbability]
    lambda_home: float
    lambda_away: float
    used_head_to_head: bool
    head_to_head_matches: int


@dataclass(frozen=True)
class RankingScore:
    """
    Relative ranking score on a 0-100 scale.

    The best entry of a result set is always 100; the scores of a set do NOT
    sum to 100 and must not be read as probabilities.
    """
    value: float

    def __post_init__(self):
        if not 0.0 <= self.value <= 100.0:
            raise ValueError(f"Ranking score must be between 0 and 100, got {self.value}")

    def __float__(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"{self.value:.1f}"


@dataclass(frozen=True)
class ScoreFrequency:
    """
    Literal occurrence count of one scoreline within a population of matches.
    """
    score: str
    count: int
    percentage: float
    source: Optional[str] = None
    weight: float = 0.0


@dataclass(frozen=True)
class PredictionResult:
    """
    A scoreline ranked by the weighted historical-frequency blender.

    Attributes:
        score: Scoreline in 'h-a' form
        total_weight: Sum of (percentage/100 * population weight) across populations
        sources: Provenance strings, e.g. "H2H (25.0%)"
        final_probability: Ranking score relative to the best scoreline
    """
    score: str
    total_weight: float
    final_probability: RankingScore
    sources: tuple[str, ...] = field(default_factory=tuple)
