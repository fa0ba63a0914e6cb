"""
API Dependencies Module

Provides dependency injection for FastAPI routes.
Contains factory functions for creating use case dependencies.
"""

from functools import lru_cache

from goal_getter.config import Settings
from goal_getter.infrastructure.data_sources.results_csv import ResultsCSVSource
from goal_getter.infrastructure.data_sources.goal_stats_csv import GoalStatsCSVSource
from goal_getter.infrastructure.cache.cache_service import CacheService, get_cache_service
from goal_getter.application.use_cases.use_cases import PredictionDataSources


@lru_cache()
def get_settings() -> Settings:
    """Get settings from the environment (cached)."""
    return Settings.from_env()


@lru_cache()
def get_results_source() -> ResultsCSVSource:
    """Get results CSV data source (cached)."""
    return ResultsCSVSource.from_settings(get_settings())


@lru_cache()
def get_goal_stats_source() -> GoalStatsCSVSource:
    """Get goal statistics CSV data source (cached)."""
    return GoalStatsCSVSource.from_settings(get_settings())


def get_data_sources() -> PredictionDataSources:
    """Get all data sources container."""
    return PredictionDataSources(
        matches=get_results_source(),
        team_stats=get_goal_stats_source(),
    )


def get_cache() -> CacheService:
    return get_cache_service()
