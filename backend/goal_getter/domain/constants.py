"""
Domain Constants

Fixed model parameters used across the prediction services.
None of these values are fitted; they are empirical defaults.
"""

# Dixon-Coles
DIXON_COLES_HOME_ADVANTAGE = 0.3
DIXON_COLES_RHO = -0.18  # Low-score correction (0-0, 1-0, 0-1, 1-1)
DIXON_COLES_LEAGUE_FACTOR = 1.1
DIXON_COLES_DEFENSE_TEAM_WEIGHT = 0.8
DIXON_COLES_DEFENSE_LEAGUE_WEIGHT = 0.2
DIXON_COLES_MAX_GOALS = 8
DIXON_COLES_RESULT_COUNT = 8
DIXON_COLES_MARKET_MAX_GOALS = 10
DIXON_COLES_MARKET_RESULT_COUNT = 100

# Classic Poisson
POISSON_MAX_GOALS = 10
POISSON_RESULT_COUNT = 8

# Goal lines reported by the market statistics
OVER_UNDER_LINES = (1.5, 2.5, 3.5)

# Goal thresholds tracked by aggregate team statistics
GOAL_THRESHOLDS = (0.5, 1.5, 2.5, 3.5, 4.5, 5.5)

# Markov chain
MARKOV_MAX_RECENT_MATCHES = 6
MARKOV_WIN_WIN_DRAW_FACTOR = 0.3   # Competitive games
MARKOV_LOSS_LOSS_DRAW_FACTOR = 0.2  # Defensive games
MARKOV_FULL_CONFIDENCE_MATCHES = 12

# Markov-Poisson hybrid
MARKOV_POISSON_MAX_GOALS = 5
MARKOV_POISSON_RESULT_COUNT = 8
MARKOV_POISSON_WIN_BOOST = 0.5
MARKOV_POISSON_DRAW_BOOST = 0.3
MARKOV_POISSON_BASE_CONFIDENCE = 70
MARKOV_POISSON_MAX_CONFIDENCE = 95

# Enhanced (recency / head-to-head) Poisson
ENHANCED_RECENT_MATCHES = 6
ENHANCED_DEFAULT_AVERAGE = 1.0
ENHANCED_H2H_THRESHOLD = 3
ENHANCED_RECENT_WEIGHT = 0.6
ENHANCED_H2H_WEIGHT = 0.4
ENHANCED_HOME_NUDGE = 1.1
ENHANCED_AWAY_NUDGE = 0.9
ENHANCED_MAX_GOALS = 6
ENHANCED_RESULT_COUNT = 6

# Weighted historical-frequency blender
FREQUENCY_SOURCE_WEIGHTS = {
    "H2H": 0.4,
    "Home": 0.25,
    "Away": 0.25,
    "League": 0.1,
}
FREQUENCY_TEAM_MATCHES = 20
FREQUENCY_LEAGUE_MATCHES = 100
FREQUENCY_RESULT_COUNT = 6

# Tiered historical score frequencies
HISTORICAL_MIN_H2H_MATCHES = 5
HISTORICAL_MIN_TEAM_MATCHES = 20
HISTORICAL_RESULT_COUNT = 8

# Head-to-head lookups
HEAD_TO_HEAD_LIMIT = 10
