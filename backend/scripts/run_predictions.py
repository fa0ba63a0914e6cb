#!/usr/bin/env python3
"""
Prediction Runner Script

Runs every model for one fixture and prints the analysis as JSON.
Uses the remote CSV files by default, or local files when given.

    python scripts/run_predictions.py "Flamengo" "Palmeiras" --league "Brazil Serie A"
    python scripts/run_predictions.py Arsenal Chelsea --league "England Premier League" \\
        --results-file data/all_leagues_results.csv
"""
import sys
import os
import argparse
import asyncio
import logging
from pathlib import Path

# Add parent directory to path to import goal_getter
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from goal_getter.config import Settings
from goal_getter.application.use_cases.use_cases import (
    GetMatchAnalysisUseCase,
    PredictionDataSources,
)
from goal_getter.domain.entities.entities import VenueRole
from goal_getter.domain.exceptions import PredictionException
from goal_getter.infrastructure.data_sources.goal_stats_csv import GoalStatsCSVSource
from goal_getter.infrastructure.data_sources.http_csv import read_csv_text
from goal_getter.infrastructure.data_sources.in_memory import InMemoryMatchRepository
from goal_getter.infrastructure.data_sources.results_csv import ResultsCSVSource


logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Predict the most likely scores of a fixture.")
    parser.add_argument("home_team", help="Home team name")
    parser.add_argument("away_team", help="Away team name")
    parser.add_argument("--league", default=None, help="League name (needed by the frequency blender)")
    parser.add_argument("--results-file", type=Path, default=None, help="Local results CSV")
    parser.add_argument("--home-stats-file", type=Path, default=None, help="Local Goals_Stats_Home.csv")
    parser.add_argument("--away-stats-file", type=Path, default=None, help="Local Goals_Stats_Away.csv")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    return parser.parse_args(argv)


def build_data_sources(args: argparse.Namespace) -> PredictionDataSources:
    """Local files when given, otherwise the configured remote sources."""
    if args.results_file is None:
        settings = Settings.from_env()
        return PredictionDataSources(
            matches=ResultsCSVSource.from_settings(settings),
            team_stats=GoalStatsCSVSource.from_settings(settings),
        )

    source = ResultsCSVSource()
    matches = source.chronological(source.parse_matches(read_csv_text(args.results_file.read_text(encoding="utf-8"))))
    logger.info(f"Loaded {len(matches)} matches from {args.results_file}")

    team_stats = None
    if args.home_stats_file and args.away_stats_file:
        team_stats = (
            GoalStatsCSVSource.parse_stats(read_csv_text(args.home_stats_file.read_text(encoding="utf-8")), VenueRole.HOME)
            + GoalStatsCSVSource.parse_stats(read_csv_text(args.away_stats_file.read_text(encoding="utf-8")), VenueRole.AWAY)
        )

    repository = InMemoryMatchRepository(matches, team_stats)
    return PredictionDataSources(matches=repository, team_stats=repository)


async def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    use_case = GetMatchAnalysisUseCase(build_data_sources(args))
    try:
        analysis = await use_case.execute(args.home_team, args.away_team, args.league)
    except PredictionException as e:
        logger.error(f"Prediction failed: {e}")
        return 1

    print(analysis.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
