"""SQLite repository for the zone_league domain models."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from typing import Dict, Iterable, Iterator, List, Optional
import uuid

from .models import (
    Fixture,
    Goal,
    Player,
    PlayerCounters,
    PlayerPosition,
    Team,
    Zone,
    ZoneSnapshot,
)


logger = logging.getLogger(__name__)

DEFAULT_ZONES = [
    Zone(id=uuid.UUID("11111111-1111-1111-1111-111111111111"), name="Zone A", letter="A"),
    Zone(id=uuid.UUID("22222222-2222-2222-2222-222222222222"), name="Zone B", letter="B"),
    Zone(id=uuid.UUID("33333333-3333-3333-3333-333333333333"), name="Zone C", letter="C"),
    Zone(id=uuid.UUID("44444444-4444-4444-4444-444444444444"), name="Zone D", letter="D"),
    Zone(id=uuid.UUID("55555555-5555-5555-5555-555555555555"), name="Zone E", letter="E"),
]


class TeamInUseError(ValueError):
    """Raised when deleting a team that fixtures still refer to."""


def _iso_datetime(value: datetime) -> str:
    return value.replace(microsecond=0).isoformat(timespec="seconds")


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _iso_date(value: date) -> str:
    return value.isoformat()


def _parse_date(value: str) -> date:
    return date.fromisoformat(value)


def _as_uuid(value: str) -> uuid.UUID:
    return uuid.UUID(value)


def _optional_uuid(value: Optional[str]) -> Optional[uuid.UUID]:
    return _as_uuid(value) if value else None


def _row_to_team(row: sqlite3.Row) -> Team:
    return Team(
        id=_as_uuid(row["id"]),
        zone_id=_as_uuid(row["zone_id"]),
        name=row["name"],
        home_ground=row["home_ground"],
        logo=row["logo"],
        created_at=_parse_datetime(row["created_at"]),
    )


def _row_to_player(row: sqlite3.Row) -> Player:
    return Player(
        id=_as_uuid(row["id"]),
        team_id=_as_uuid(row["team_id"]),
        name=row["name"],
        position=PlayerPosition(row["position"]),
        created_at=_parse_datetime(row["created_at"]),
    )


def _row_to_goal(row: sqlite3.Row) -> Goal:
    return Goal(
        id=_as_uuid(row["id"]),
        fixture_id=_as_uuid(row["fixture_id"]),
        team_id=_as_uuid(row["team_id"]),
        player_id=_optional_uuid(row["player_id"]),
        minute=row["minute"],
    )


def _row_to_fixture(row: sqlite3.Row, goals: Iterable[Goal]) -> Fixture:
    return Fixture(
        id=_as_uuid(row["id"]),
        zone_id=_as_uuid(row["zone_id"]),
        matchweek=row["matchweek"],
        home_team_id=_as_uuid(row["home_team_id"]),
        away_team_id=_as_uuid(row["away_team_id"]),
        scheduled_on=_parse_date(row["scheduled_on"]),
        venue=row["venue"],
        home_score=row["home_score"],
        away_score=row["away_score"],
        played=bool(row["played"]),
        goals=tuple(goals),
    )


class LeagueRepository:
    """Persistence layer backed by SQLite."""

    def __init__(self, path: str) -> None:
        self._path = path

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def initialize_schema(self) -> None:
        """Create tables if they do not already exist and seed the zones."""

        with self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS zones (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    letter TEXT NOT NULL UNIQUE
                );

                CREATE TABLE IF NOT EXISTS teams (
                    id TEXT PRIMARY KEY,
                    zone_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    home_ground TEXT NOT NULL,
                    logo TEXT,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (zone_id) REFERENCES zones (id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS players (
                    id TEXT PRIMARY KEY,
                    team_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    position TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (team_id) REFERENCES teams (id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS player_counters (
                    player_id TEXT PRIMARY KEY,
                    assists INTEGER NOT NULL DEFAULT 0,
                    clean_sheets INTEGER NOT NULL DEFAULT 0,
                    appearances INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY (player_id) REFERENCES players (id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS fixtures (
                    id TEXT PRIMARY KEY,
                    zone_id TEXT NOT NULL,
                    matchweek INTEGER NOT NULL,
                    home_team_id TEXT NOT NULL,
                    away_team_id TEXT NOT NULL,
                    scheduled_on TEXT NOT NULL,
                    venue TEXT NOT NULL,
                    home_score INTEGER,
                    away_score INTEGER,
                    played INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY (zone_id) REFERENCES zones (id) ON DELETE CASCADE,
                    FOREIGN KEY (home_team_id) REFERENCES teams (id),
                    FOREIGN KEY (away_team_id) REFERENCES teams (id)
                );

                CREATE TABLE IF NOT EXISTS goals (
                    id TEXT PRIMARY KEY,
                    fixture_id TEXT NOT NULL,
                    team_id TEXT NOT NULL,
                    player_id TEXT,
                    minute INTEGER,
                    FOREIGN KEY (fixture_id) REFERENCES fixtures (id) ON DELETE CASCADE,
                    FOREIGN KEY (team_id) REFERENCES teams (id),
                    FOREIGN KEY (player_id) REFERENCES players (id) ON DELETE SET NULL
                );
                """
            )
            conn.executemany(
                "INSERT OR IGNORE INTO zones (id, name, letter) VALUES (?, ?, ?)",
                [(str(zone.id), zone.name, zone.letter) for zone in DEFAULT_ZONES],
            )

    # Zone operations ---------------------------------------------------
    def list_zones(self) -> List[Zone]:
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM zones ORDER BY letter").fetchall()
        return [Zone(id=_as_uuid(row["id"]), name=row["name"], letter=row["letter"]) for row in rows]

    def get_zone(self, zone_id: uuid.UUID) -> Optional[Zone]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM zones WHERE id = ?", (str(zone_id),)).fetchone()
        if row is None:
            return None
        return Zone(id=_as_uuid(row["id"]), name=row["name"], letter=row["letter"])

    def _require_zone(self, zone_id: uuid.UUID) -> Zone:
        zone = self.get_zone(zone_id)
        if zone is None:
            raise ValueError(f"Unknown zone: {zone_id}")
        return zone

    # Team operations ---------------------------------------------------
    def create_team(
        self,
        zone_id: uuid.UUID,
        name: str,
        *,
        home_ground: str,
        logo: Optional[str] = None,
    ) -> Team:
        team = Team(id=uuid.uuid4(), zone_id=zone_id, name=name, home_ground=home_ground, logo=logo)
        self.add_team(team)
        return team

    def add_team(self, team: Team) -> None:
        self._require_zone(team.zone_id)
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO teams (id, zone_id, name, home_ground, logo, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(team.id),
                    str(team.zone_id),
                    team.name,
                    team.home_ground,
                    team.logo,
                    _iso_datetime(team.created_at),
                ),
            )

    def list_teams(self, zone_id: uuid.UUID) -> List[Team]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM teams WHERE zone_id = ? ORDER BY created_at, rowid",
                (str(zone_id),),
            ).fetchall()
        return [_row_to_team(row) for row in rows]

    def get_team(self, team_id: uuid.UUID) -> Optional[Team]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM teams WHERE id = ?", (str(team_id),)).fetchone()
        if row is None:
            return None
        return _row_to_team(row)

    def update_team(self, team: Team) -> Optional[Team]:
        """Rename a team or change its ground. The zone is never moved."""

        with self._connection() as conn:
            cursor = conn.execute(
                "UPDATE teams SET name = ?, home_ground = ?, logo = ? WHERE id = ?",
                (team.name, team.home_ground, team.logo, str(team.id)),
            )

        if cursor.rowcount == 0:
            return None
        return team

    def delete_team(self, team_id: uuid.UUID) -> bool:
        with self._connection() as conn:
            (references,) = conn.execute(
                "SELECT COUNT(*) FROM fixtures WHERE home_team_id = ? OR away_team_id = ?",
                (str(team_id), str(team_id)),
            ).fetchone()
            if references:
                raise TeamInUseError(f"Team {team_id} is referenced by {references} fixture(s)")
            cursor = conn.execute("DELETE FROM teams WHERE id = ?", (str(team_id),))
        return cursor.rowcount > 0

    # Player operations -------------------------------------------------
    def create_player(self, team_id: uuid.UUID, name: str, *, position: PlayerPosition) -> Player:
        player = Player(id=uuid.uuid4(), team_id=team_id, name=name, position=position)
        self.add_player(player)
        return player

    def add_player(self, player: Player) -> None:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO players (id, team_id, name, position, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    str(player.id),
                    str(player.team_id),
                    player.name,
                    player.position.value,
                    _iso_datetime(player.created_at),
                ),
            )

    def list_players(self, zone_id: uuid.UUID) -> List[Player]:
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT players.* FROM players
                JOIN teams ON teams.id = players.team_id
                WHERE teams.zone_id = ?
                ORDER BY players.created_at, players.rowid
                """,
                (str(zone_id),),
            ).fetchall()
        return [_row_to_player(row) for row in rows]

    def get_player(self, player_id: uuid.UUID) -> Optional[Player]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM players WHERE id = ?", (str(player_id),)).fetchone()
        if row is None:
            return None
        return _row_to_player(row)

    def set_player_counters(self, counters: PlayerCounters) -> None:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO player_counters (player_id, assists, clean_sheets, appearances)
                VALUES (?, ?, ?, ?)
                """,
                (
                    str(counters.player_id),
                    counters.assists,
                    counters.clean_sheets,
                    counters.appearances,
                ),
            )

    def list_player_counters(self, zone_id: uuid.UUID) -> Dict[uuid.UUID, PlayerCounters]:
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT player_counters.* FROM player_counters
                JOIN players ON players.id = player_counters.player_id
                JOIN teams ON teams.id = players.team_id
                WHERE teams.zone_id = ?
                """,
                (str(zone_id),),
            ).fetchall()
        return {
            _as_uuid(row["player_id"]): PlayerCounters(
                player_id=_as_uuid(row["player_id"]),
                assists=row["assists"],
                clean_sheets=row["clean_sheets"],
                appearances=row["appearances"],
            )
            for row in rows
        }

    # Fixture operations ------------------------------------------------
    @staticmethod
    def _insert_goals(conn: sqlite3.Connection, fixture: Fixture) -> None:
        conn.executemany(
            """
            INSERT INTO goals (id, fixture_id, team_id, player_id, minute)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (
                    str(goal.id),
                    str(fixture.id),
                    str(goal.team_id),
                    str(goal.player_id) if goal.player_id else None,
                    goal.minute,
                )
                for goal in fixture.goals
            ],
        )

    def save_fixtures(self, zone_id: uuid.UUID, fixtures: Iterable[Fixture]) -> None:
        """Replace the zone's whole season with ``fixtures``."""

        self._require_zone(zone_id)
        fixtures = list(fixtures)
        with self._connection() as conn:
            conn.execute("DELETE FROM fixtures WHERE zone_id = ?", (str(zone_id),))
            conn.executemany(
                """
                INSERT INTO fixtures (
                    id,
                    zone_id,
                    matchweek,
                    home_team_id,
                    away_team_id,
                    scheduled_on,
                    venue,
                    home_score,
                    away_score,
                    played
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        str(fixture.id),
                        str(zone_id),
                        fixture.matchweek,
                        str(fixture.home_team_id),
                        str(fixture.away_team_id),
                        _iso_date(fixture.scheduled_on),
                        fixture.venue,
                        fixture.home_score,
                        fixture.away_score,
                        int(fixture.played),
                    )
                    for fixture in fixtures
                ],
            )
            for fixture in fixtures:
                self._insert_goals(conn, fixture)
        logger.info("Saved %d fixtures for zone %s", len(fixtures), zone_id)

    def _goals_by_fixture(self, conn: sqlite3.Connection, where: str, params: tuple) -> Dict[uuid.UUID, List[Goal]]:
        rows = conn.execute(
            f"""
            SELECT goals.* FROM goals
            JOIN fixtures ON fixtures.id = goals.fixture_id
            WHERE {where}
            ORDER BY goals.rowid
            """,
            params,
        ).fetchall()
        grouped: Dict[uuid.UUID, List[Goal]] = {}
        for row in rows:
            goal = _row_to_goal(row)
            grouped.setdefault(goal.fixture_id, []).append(goal)
        return grouped

    def list_fixtures(self, zone_id: uuid.UUID, *, matchweek: Optional[int] = None) -> List[Fixture]:
        where = "fixtures.zone_id = ?"
        params: tuple = (str(zone_id),)
        if matchweek is not None:
            where += " AND fixtures.matchweek = ?"
            params = (str(zone_id), matchweek)
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM fixtures WHERE {where} ORDER BY matchweek, rowid",
                params,
            ).fetchall()
            goals = self._goals_by_fixture(conn, where, params)
        return [_row_to_fixture(row, goals.get(_as_uuid(row["id"]), [])) for row in rows]

    def get_fixture(self, fixture_id: uuid.UUID) -> Optional[Fixture]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM fixtures WHERE id = ?", (str(fixture_id),)).fetchone()
            if row is None:
                return None
            goals = self._goals_by_fixture(conn, "fixtures.id = ?", (str(fixture_id),))
        return _row_to_fixture(row, goals.get(fixture_id, []))

    def update_fixture(self, fixture: Fixture) -> Optional[Fixture]:
        """Persist the result fields and goals of an existing fixture."""

        with self._connection() as conn:
            cursor = conn.execute(
                """
                UPDATE fixtures
                SET home_score = ?, away_score = ?, played = ?, scheduled_on = ?, venue = ?
                WHERE id = ?
                """,
                (
                    fixture.home_score,
                    fixture.away_score,
                    int(fixture.played),
                    _iso_date(fixture.scheduled_on),
                    fixture.venue,
                    str(fixture.id),
                ),
            )
            if cursor.rowcount == 0:
                return None
            conn.execute("DELETE FROM goals WHERE fixture_id = ?", (str(fixture.id),))
            self._insert_goals(conn, fixture)
        return fixture

    # Reporting helpers -------------------------------------------------
    def load_snapshot(self, zone_id: uuid.UUID) -> ZoneSnapshot:
        self._require_zone(zone_id)
        return ZoneSnapshot(
            zone_id=zone_id,
            teams=self.list_teams(zone_id),
            fixtures=self.list_fixtures(zone_id),
            players=self.list_players(zone_id),
            counters=self.list_player_counters(zone_id),
        )


__all__ = ["DEFAULT_ZONES", "LeagueRepository", "TeamInUseError"]
