"""
Domain Repository Interfaces Module

These are abstract interfaces that define how the domain layer accesses data.
Concrete implementations are provided in the infrastructure layer.
This follows the Dependency Inversion Principle (DIP).
"""

from abc import ABC, abstractmethod
from typing import Optional

from goal_getter.domain.entities.entities import (
    MatchRecord,
    TeamAggregateStats,
    VenueRole,
)


class MatchRepository(ABC):
    """Abstract repository for historical match records."""

    @abstractmethod
    async def fetch_recent_matches(
        self,
        team: str,
        venue_role: VenueRole,
        limit: int = 6,
    ) -> list[MatchRecord]:
        """Get a team's recent matches in a venue role, most recent first."""
        pass

    @abstractmethod
    async def fetch_head_to_head(
        self,
        team_a: str,
        team_b: str,
        limit: int = 10,
    ) -> list[MatchRecord]:
        """Get head-to-head matches between two teams, most recent first."""
        pass

    @abstractmethod
    async def fetch_league_matches(
        self,
        league: str,
        limit: Optional[int] = None,
    ) -> list[MatchRecord]:
        """Get a league's matches in chronological order (oldest first)."""
        pass


class TeamStatsRepository(ABC):
    """Abstract repository for aggregate team statistics."""

    @abstractmethod
    async def fetch_aggregate_stats(
        self,
        team: str,
        venue_role: VenueRole,
    ) -> Optional[TeamAggregateStats]:
        """Get a team's aggregate statistics for a venue, or None if unknown."""
        pass
