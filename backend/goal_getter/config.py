"""
Application configuration.

Values are read from environment variables (a ``.env`` file is loaded by
the API entry point). Model parameters are not configurable here; they are
fixed constants in ``goal_getter.domain.constants``.
"""

import os
from dataclasses import dataclass, field


DEFAULT_RESULTS_URLS = (
    "https://raw.githubusercontent.com/scooby75/goal-getter-reborn-pro/main/public/Data/all_leagues_results.csv",
    "https://raw.githubusercontent.com/scooby75/goal-getter-reborn-pro/main/public/Data/all_leagues_results_2024.csv",
    "https://raw.githubusercontent.com/scooby75/goal-getter-reborn-pro/main/public/Data/all_leagues_results_2023.csv",
)
DEFAULT_HOME_STATS_URL = "https://raw.githubusercontent.com/scooby75/goal-getter-reborn-pro/main/Goals_Stats_Home.csv"
DEFAULT_AWAY_STATS_URL = "https://raw.githubusercontent.com/scooby75/goal-getter-reborn-pro/main/Goals_Stats_Away.csv"


def _split_urls(value: str) -> tuple[str, ...]:
    return tuple(u.strip() for u in value.split(",") if u.strip())


@dataclass
class Settings:
    """Runtime settings for data sources and the API."""
    results_urls: tuple[str, ...] = DEFAULT_RESULTS_URLS
    home_stats_url: str = DEFAULT_HOME_STATS_URL
    away_stats_url: str = DEFAULT_AWAY_STATS_URL
    http_timeout: float = 30.0
    http_retries: int = 3
    retry_delay: float = 1.0
    data_ttl: float = 3600.0
    cors_origins: list[str] = field(default_factory=list)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment."""
        urls = os.getenv("GOAL_GETTER_RESULTS_URLS", "")
        return cls(
            results_urls=_split_urls(urls) or DEFAULT_RESULTS_URLS,
            home_stats_url=os.getenv("GOAL_GETTER_HOME_STATS_URL", DEFAULT_HOME_STATS_URL),
            away_stats_url=os.getenv("GOAL_GETTER_AWAY_STATS_URL", DEFAULT_AWAY_STATS_URL),
            http_timeout=float(os.getenv("GOAL_GETTER_HTTP_TIMEOUT", "30")),
            http_retries=int(os.getenv("GOAL_GETTER_HTTP_RETRIES", "3")),
            retry_delay=float(os.getenv("GOAL_GETTER_RETRY_DELAY", "1.0")),
            data_ttl=float(os.getenv("GOAL_GETTER_DATA_TTL", "3600")),
            cors_origins=[o for o in os.getenv("CORS_ORIGINS", "").split(",") if o],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
