"""FastAPI application for managing zone seasons."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from typing import List, Literal, Optional
import uuid

from fastapi import Depends, FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from .models import (
    Fixture,
    Goal,
    Player,
    PlayerCounters,
    PlayerPosition,
    PlayerStats,
    Team,
    TeamStanding,
    Zone,
)
from .repository import LeagueRepository, TeamInUseError
from .results import ResultValidationError, clear_result, record_result
from .scheduling import generate_fixtures, get_policy
from .standings import compute_player_stats, compute_standings, summarize_season, top_scorers


DATABASE_PATH = os.getenv("ZONE_LEAGUE_DB_PATH", "zone_league.db")
LOG_LEVEL = os.getenv("ZONE_LEAGUE_LOG_LEVEL", "INFO")

logger = logging.getLogger(__name__)

app = FastAPI(title="Zone League API")

_repository = LeagueRepository(DATABASE_PATH)


@app.on_event("startup")
def _initialize_schema() -> None:
    logging.basicConfig(level=LOG_LEVEL)
    _repository.initialize_schema()
    logger.info("Using database at %s", DATABASE_PATH)


def get_repository() -> LeagueRepository:
    """Provide the repository instance for FastAPI dependencies."""

    return _repository


class ZoneResponse(BaseModel):
    id: uuid.UUID
    name: str
    letter: str


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1)
    home_ground: str = Field(..., min_length=1)
    logo: Optional[str] = None


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    home_ground: Optional[str] = Field(None, min_length=1)
    logo: Optional[str] = None


class TeamResponse(BaseModel):
    id: uuid.UUID
    zone_id: uuid.UUID
    name: str
    home_ground: str
    logo: Optional[str]
    created_at: datetime


class PlayerCreate(BaseModel):
    team_id: uuid.UUID
    name: str = Field(..., min_length=1)
    position: PlayerPosition


class PlayerResponse(BaseModel):
    id: uuid.UUID
    team_id: uuid.UUID
    name: str
    position: PlayerPosition
    created_at: datetime


class CountersUpdate(BaseModel):
    assists: int = Field(0, ge=0)
    clean_sheets: int = Field(0, ge=0)
    appearances: int = Field(0, ge=0)


class ScheduleRequest(BaseModel):
    start_date: date
    policy: Literal["balanced", "slot"] = "balanced"


class GoalPayload(BaseModel):
    team_id: uuid.UUID
    player_id: Optional[uuid.UUID] = None
    minute: Optional[int] = Field(None, ge=1)


class ResultPayload(BaseModel):
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)
    goals: List[GoalPayload] = Field(default_factory=list)


class GoalResponse(BaseModel):
    id: uuid.UUID
    team_id: uuid.UUID
    player_id: Optional[uuid.UUID]
    minute: Optional[int]


class FixtureResponse(BaseModel):
    id: uuid.UUID
    zone_id: uuid.UUID
    matchweek: int
    home_team_id: uuid.UUID
    away_team_id: uuid.UUID
    scheduled_on: date
    venue: str
    home_score: Optional[int]
    away_score: Optional[int]
    played: bool
    goals: List[GoalResponse]


class StandingResponse(BaseModel):
    position: int
    team_id: uuid.UUID
    team_name: str
    played: int
    won: int
    drawn: int
    lost: int
    goals_for: int
    goals_against: int
    goal_difference: int
    points: int


class PlayerStatsResponse(BaseModel):
    player_id: uuid.UUID
    player_name: str
    team_name: str
    goals: int
    assists: int
    clean_sheets: int
    appearances: int


class SummaryResponse(BaseModel):
    team_count: int
    total_matches: int
    matches_played: int
    total_goals: int
    matchweeks: int
    matches_per_week: int


def _zone_to_response(zone: Zone) -> ZoneResponse:
    return ZoneResponse(id=zone.id, name=zone.name, letter=zone.letter)


def _team_to_response(team: Team) -> TeamResponse:
    return TeamResponse(
        id=team.id,
        zone_id=team.zone_id,
        name=team.name,
        home_ground=team.home_ground,
        logo=team.logo,
        created_at=team.created_at,
    )


def _player_to_response(player: Player) -> PlayerResponse:
    return PlayerResponse(
        id=player.id,
        team_id=player.team_id,
        name=player.name,
        position=player.position,
        created_at=player.created_at,
    )


def _fixture_to_response(fixture: Fixture) -> FixtureResponse:
    return FixtureResponse(
        id=fixture.id,
        zone_id=fixture.zone_id,
        matchweek=fixture.matchweek,
        home_team_id=fixture.home_team_id,
        away_team_id=fixture.away_team_id,
        scheduled_on=fixture.scheduled_on,
        venue=fixture.venue,
        home_score=fixture.home_score,
        away_score=fixture.away_score,
        played=fixture.played,
        goals=[
            GoalResponse(id=goal.id, team_id=goal.team_id, player_id=goal.player_id, minute=goal.minute)
            for goal in fixture.goals
        ],
    )


def _standing_to_response(standing: TeamStanding) -> StandingResponse:
    return StandingResponse(
        position=standing.position,
        team_id=standing.team_id,
        team_name=standing.team_name,
        played=standing.played,
        won=standing.won,
        drawn=standing.drawn,
        lost=standing.lost,
        goals_for=standing.goals_for,
        goals_against=standing.goals_against,
        goal_difference=standing.goal_difference,
        points=standing.points,
    )


def _stats_to_response(stats: PlayerStats) -> PlayerStatsResponse:
    return PlayerStatsResponse(
        player_id=stats.player_id,
        player_name=stats.player_name,
        team_name=stats.team_name,
        goals=stats.goals,
        assists=stats.assists,
        clean_sheets=stats.clean_sheets,
        appearances=stats.appearances,
    )


def _require_zone(repository: LeagueRepository, zone_id: uuid.UUID) -> Zone:
    zone = repository.get_zone(zone_id)
    if zone is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Zone not found")
    return zone


def _require_team(repository: LeagueRepository, team_id: uuid.UUID) -> Team:
    team = repository.get_team(team_id)
    if team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return team


def _require_fixture(repository: LeagueRepository, fixture_id: uuid.UUID) -> Fixture:
    fixture = repository.get_fixture(fixture_id)
    if fixture is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fixture not found")
    return fixture


# Zones ----------------------------------------------------------------
@app.get("/zones", response_model=List[ZoneResponse])
def list_zones(
    repository: LeagueRepository = Depends(get_repository),
) -> List[ZoneResponse]:
    return [_zone_to_response(zone) for zone in repository.list_zones()]


# Teams ----------------------------------------------------------------
@app.get("/zones/{zone_id}/teams", response_model=List[TeamResponse])
def list_teams(
    zone_id: uuid.UUID,
    repository: LeagueRepository = Depends(get_repository),
) -> List[TeamResponse]:
    _require_zone(repository, zone_id)
    return [_team_to_response(team) for team in repository.list_teams(zone_id)]


@app.post("/zones/{zone_id}/teams", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
def create_team(
    zone_id: uuid.UUID,
    payload: TeamCreate,
    repository: LeagueRepository = Depends(get_repository),
) -> TeamResponse:
    _require_zone(repository, zone_id)
    team = repository.create_team(
        zone_id,
        payload.name,
        home_ground=payload.home_ground,
        logo=payload.logo,
    )
    return _team_to_response(team)


@app.put("/teams/{team_id}", response_model=TeamResponse)
def update_team(
    team_id: uuid.UUID,
    payload: TeamUpdate,
    repository: LeagueRepository = Depends(get_repository),
) -> TeamResponse:
    existing = _require_team(repository, team_id)

    updated = Team(
        id=existing.id,
        zone_id=existing.zone_id,
        name=payload.name if payload.name is not None else existing.name,
        home_ground=payload.home_ground if payload.home_ground is not None else existing.home_ground,
        logo=payload.logo if payload.logo is not None else existing.logo,
        created_at=existing.created_at,
    )

    saved = repository.update_team(updated)
    if saved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return _team_to_response(saved)


@app.delete("/teams/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_team(
    team_id: uuid.UUID,
    repository: LeagueRepository = Depends(get_repository),
) -> None:
    try:
        deleted = repository.delete_team(team_id)
    except TeamInUseError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")


# Players --------------------------------------------------------------
@app.get("/zones/{zone_id}/players", response_model=List[PlayerResponse])
def list_players(
    zone_id: uuid.UUID,
    repository: LeagueRepository = Depends(get_repository),
) -> List[PlayerResponse]:
    _require_zone(repository, zone_id)
    return [_player_to_response(player) for player in repository.list_players(zone_id)]


@app.post("/zones/{zone_id}/players", response_model=PlayerResponse, status_code=status.HTTP_201_CREATED)
def create_player(
    zone_id: uuid.UUID,
    payload: PlayerCreate,
    repository: LeagueRepository = Depends(get_repository),
) -> PlayerResponse:
    _require_zone(repository, zone_id)
    team = _require_team(repository, payload.team_id)
    if team.zone_id != zone_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="team does not belong to this zone",
        )
    player = repository.create_player(team.id, payload.name, position=payload.position)
    return _player_to_response(player)


@app.put("/players/{player_id}/counters", response_model=PlayerStatsResponse)
def update_player_counters(
    player_id: uuid.UUID,
    payload: CountersUpdate,
    repository: LeagueRepository = Depends(get_repository),
) -> PlayerStatsResponse:
    player = repository.get_player(player_id)
    if player is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")

    repository.set_player_counters(
        PlayerCounters(
            player_id=player.id,
            assists=payload.assists,
            clean_sheets=payload.clean_sheets,
            appearances=payload.appearances,
        )
    )

    team = _require_team(repository, player.team_id)
    snapshot = repository.load_snapshot(team.zone_id)
    stats = compute_player_stats([player], snapshot.fixtures, snapshot.teams, snapshot.counters)
    return _stats_to_response(stats[0])


# Fixtures -------------------------------------------------------------
@app.post(
    "/zones/{zone_id}/fixtures",
    response_model=List[FixtureResponse],
    status_code=status.HTTP_201_CREATED,
)
def schedule_season(
    zone_id: uuid.UUID,
    payload: ScheduleRequest,
    repository: LeagueRepository = Depends(get_repository),
) -> List[FixtureResponse]:
    _require_zone(repository, zone_id)
    teams = repository.list_teams(zone_id)
    if len(teams) < 2:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="at least two teams are required to generate fixtures",
        )

    fixtures = generate_fixtures(teams, payload.start_date, policy=get_policy(payload.policy))
    repository.save_fixtures(zone_id, fixtures)
    return [_fixture_to_response(fixture) for fixture in fixtures]


@app.get("/zones/{zone_id}/fixtures", response_model=List[FixtureResponse])
def list_fixtures(
    zone_id: uuid.UUID,
    matchweek: Optional[int] = None,
    repository: LeagueRepository = Depends(get_repository),
) -> List[FixtureResponse]:
    _require_zone(repository, zone_id)
    fixtures = repository.list_fixtures(zone_id, matchweek=matchweek)
    return [_fixture_to_response(fixture) for fixture in fixtures]


@app.put("/fixtures/{fixture_id}/result", response_model=FixtureResponse)
def save_result(
    fixture_id: uuid.UUID,
    payload: ResultPayload,
    repository: LeagueRepository = Depends(get_repository),
) -> FixtureResponse:
    fixture = _require_fixture(repository, fixture_id)

    goals = []
    for entry in payload.goals:
        if entry.player_id is not None:
            scorer = repository.get_player(entry.player_id)
            if scorer is None or scorer.team_id != entry.team_id:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=f"player {entry.player_id} does not play for team {entry.team_id}",
                )
        goals.append(
            Goal(
                id=uuid.uuid4(),
                fixture_id=fixture.id,
                team_id=entry.team_id,
                player_id=entry.player_id,
                minute=entry.minute,
            )
        )

    try:
        updated = record_result(fixture, payload.home_score, payload.away_score, goals)
    except ResultValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    saved = repository.update_fixture(updated)
    if saved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fixture not found")
    return _fixture_to_response(saved)


@app.delete("/fixtures/{fixture_id}/result", response_model=FixtureResponse)
def reset_result(
    fixture_id: uuid.UUID,
    repository: LeagueRepository = Depends(get_repository),
) -> FixtureResponse:
    fixture = _require_fixture(repository, fixture_id)
    saved = repository.update_fixture(clear_result(fixture))
    if saved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fixture not found")
    return _fixture_to_response(saved)


# Tables and statistics ------------------------------------------------
@app.get("/zones/{zone_id}/standings", response_model=List[StandingResponse])
def get_standings(
    zone_id: uuid.UUID,
    repository: LeagueRepository = Depends(get_repository),
) -> List[StandingResponse]:
    _require_zone(repository, zone_id)
    snapshot = repository.load_snapshot(zone_id)
    return [_standing_to_response(row) for row in compute_standings(snapshot.teams, snapshot.fixtures)]


@app.get("/zones/{zone_id}/player-stats", response_model=List[PlayerStatsResponse])
def get_player_stats(
    zone_id: uuid.UUID,
    repository: LeagueRepository = Depends(get_repository),
) -> List[PlayerStatsResponse]:
    _require_zone(repository, zone_id)
    snapshot = repository.load_snapshot(zone_id)
    stats = compute_player_stats(snapshot.players, snapshot.fixtures, snapshot.teams, snapshot.counters)
    return [_stats_to_response(row) for row in stats]


@app.get("/zones/{zone_id}/top-scorers", response_model=List[PlayerStatsResponse])
def get_top_scorers(
    zone_id: uuid.UUID,
    repository: LeagueRepository = Depends(get_repository),
) -> List[PlayerStatsResponse]:
    _require_zone(repository, zone_id)
    snapshot = repository.load_snapshot(zone_id)
    stats = compute_player_stats(snapshot.players, snapshot.fixtures, snapshot.teams, snapshot.counters)
    return [_stats_to_response(row) for row in top_scorers(stats)]


@app.get("/zones/{zone_id}/summary", response_model=SummaryResponse)
def get_summary(
    zone_id: uuid.UUID,
    repository: LeagueRepository = Depends(get_repository),
) -> SummaryResponse:
    _require_zone(repository, zone_id)
    snapshot = repository.load_snapshot(zone_id)
    summary = summarize_season(snapshot.teams, snapshot.fixtures)
    return SummaryResponse(
        team_count=summary.team_count,
        total_matches=summary.total_matches,
        matches_played=summary.matches_played,
        total_goals=summary.total_goals,
        matchweeks=summary.matchweeks,
        matches_per_week=summary.matches_per_week,
    )
