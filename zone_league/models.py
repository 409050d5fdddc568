"""Domain models for the zone_league project.

Entities (zones, teams, players, fixtures and goals) are frozen dataclasses so
that the scheduler and the standings engine can treat them as plain snapshots.
Derived rows (standings and player statistics) are mutable and rebuilt from
scratch every time they are computed. Nothing here knows about storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
import uuid
from typing import Dict, List, Optional, Tuple


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlayerPosition(Enum):
    """Positions a player can be registered under."""

    GOALKEEPER = "Goalkeeper"
    DEFENDER = "Defender"
    MIDFIELDER = "Midfielder"
    FORWARD = "Forward"


@dataclass(frozen=True)
class Zone:
    """An independent mini-league with its own teams and season."""

    id: uuid.UUID
    name: str
    letter: str


@dataclass(frozen=True)
class Team:
    id: uuid.UUID
    zone_id: uuid.UUID
    name: str
    home_ground: str
    logo: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class Player:
    id: uuid.UUID
    team_id: uuid.UUID
    name: str
    position: PlayerPosition
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class PlayerCounters:
    """Hand-maintained counters that goal events cannot tell us."""

    player_id: uuid.UUID
    assists: int = 0
    clean_sheets: int = 0
    appearances: int = 0


@dataclass(frozen=True)
class Goal:
    """A single goal scored in a fixture.

    ``player_id`` stays ``None`` until the scorer has been picked; such goals
    are dropped when the result is recorded.
    """

    id: uuid.UUID
    fixture_id: uuid.UUID
    team_id: uuid.UUID
    player_id: Optional[uuid.UUID] = None
    minute: Optional[int] = None


@dataclass(frozen=True)
class Fixture:
    """A scheduled match between two teams of the same zone."""

    id: uuid.UUID
    zone_id: uuid.UUID
    matchweek: int
    home_team_id: uuid.UUID
    away_team_id: uuid.UUID
    scheduled_on: date
    venue: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    played: bool = False
    goals: Tuple[Goal, ...] = ()

    def __post_init__(self) -> None:
        if self.home_team_id == self.away_team_id:
            raise ValueError("a team cannot play against itself")

    @property
    def has_result(self) -> bool:
        """Return ``True`` when the fixture counts towards the table."""

        return self.played and self.home_score is not None and self.away_score is not None

    def involves(self, team_id: uuid.UUID) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)


@dataclass
class TeamStanding:
    """One row of the league table."""

    team_id: uuid.UUID
    team_name: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    position: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    @property
    def points(self) -> int:
        return 3 * self.won + self.drawn

    def record(self, goals_for: int, goals_against: int) -> None:
        """Update the row with one finished fixture seen from this team."""

        self.played += 1
        self.goals_for += goals_for
        self.goals_against += goals_against

        if goals_for > goals_against:
            self.won += 1
        elif goals_for < goals_against:
            self.lost += 1
        else:
            self.drawn += 1


@dataclass
class PlayerStats:
    player_id: uuid.UUID
    player_name: str
    team_name: str
    goals: int = 0
    assists: int = 0
    clean_sheets: int = 0
    appearances: int = 0


@dataclass(frozen=True)
class SeasonSummary:
    team_count: int
    total_matches: int
    matches_played: int
    total_goals: int
    matchweeks: int
    matches_per_week: int


@dataclass(frozen=True)
class ZoneSnapshot:
    """Everything the core needs about a zone, loaded in one go."""

    zone_id: uuid.UUID
    teams: List[Team] = field(default_factory=list)
    fixtures: List[Fixture] = field(default_factory=list)
    players: List[Player] = field(default_factory=list)
    counters: Dict[uuid.UUID, PlayerCounters] = field(default_factory=dict)


__all__ = [
    "Fixture",
    "Goal",
    "Player",
    "PlayerCounters",
    "PlayerPosition",
    "PlayerStats",
    "SeasonSummary",
    "Team",
    "TeamStanding",
    "Zone",
    "ZoneSnapshot",
]
