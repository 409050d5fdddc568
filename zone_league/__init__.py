"""zone_league package exposing the season scheduler, standings engine and repository."""

from .models import (
    Fixture,
    Goal,
    Player,
    PlayerCounters,
    PlayerPosition,
    PlayerStats,
    SeasonSummary,
    Team,
    TeamStanding,
    Zone,
    ZoneSnapshot,
)
from .repository import LeagueRepository, TeamInUseError
from .results import ResultValidationError, clear_result, record_result
from .scheduling import (
    HomeAwayPolicy,
    SlotPolicy,
    VenueBalancedPolicy,
    VenueHistory,
    generate_fixtures,
)
from .standings import compute_player_stats, compute_standings, summarize_season, top_scorers

__all__ = [
    "Fixture",
    "Goal",
    "HomeAwayPolicy",
    "LeagueRepository",
    "Player",
    "PlayerCounters",
    "PlayerPosition",
    "PlayerStats",
    "ResultValidationError",
    "SeasonSummary",
    "SlotPolicy",
    "Team",
    "TeamInUseError",
    "TeamStanding",
    "VenueBalancedPolicy",
    "VenueHistory",
    "Zone",
    "ZoneSnapshot",
    "clear_result",
    "compute_player_stats",
    "compute_standings",
    "generate_fixtures",
    "record_result",
    "summarize_season",
    "top_scorers",
]
