from __future__ import annotations

from datetime import date
import uuid

import pytest

from zone_league.models import Goal, PlayerCounters, PlayerPosition, Team
from zone_league.repository import DEFAULT_ZONES, TeamInUseError
from zone_league.results import record_result
from zone_league.scheduling import generate_fixtures
from zone_league.standings import compute_standings


ZONE_A = DEFAULT_ZONES[0].id
ZONE_B = DEFAULT_ZONES[1].id


def _register(repository, zone_id, names):
    return [repository.create_team(zone_id, name, home_ground=f"{name} Ground") for name in names]


def test_default_zones_are_seeded_once(repository):
    repository.initialize_schema()

    zones = repository.list_zones()
    assert [zone.letter for zone in zones] == ["A", "B", "C", "D", "E"]
    assert repository.get_zone(ZONE_A).name == "Zone A"
    assert repository.get_zone(uuid.uuid4()) is None


def test_teams_are_listed_per_zone_in_registration_order(repository):
    a_teams = _register(repository, ZONE_A, ["Lions", "Tigers", "Bears"])
    _register(repository, ZONE_B, ["Eagles"])

    listed = repository.list_teams(ZONE_A)
    assert [team.id for team in listed] == [team.id for team in a_teams]
    assert listed[0].home_ground == "Lions Ground"


def test_team_in_unknown_zone_is_rejected(repository):
    with pytest.raises(ValueError):
        repository.create_team(uuid.uuid4(), "Nomads", home_ground="Nowhere")


def test_fixtures_round_trip(repository):
    teams = _register(repository, ZONE_A, ["Lions", "Tigers", "Bears"])
    fixtures = generate_fixtures(teams, date(2025, 2, 1))

    repository.save_fixtures(ZONE_A, fixtures)

    assert repository.list_fixtures(ZONE_A) == fixtures
    assert repository.list_fixtures(ZONE_B) == []
    week_two = repository.list_fixtures(ZONE_A, matchweek=2)
    assert week_two == [fixture for fixture in fixtures if fixture.matchweek == 2]


def test_saving_fixtures_replaces_the_season(repository):
    teams = _register(repository, ZONE_A, ["Lions", "Tigers"])
    repository.save_fixtures(ZONE_A, generate_fixtures(teams, date(2025, 2, 1)))

    replacement = generate_fixtures(teams, date(2025, 9, 6))
    repository.save_fixtures(ZONE_A, replacement)

    stored = repository.list_fixtures(ZONE_A)
    assert [fixture.scheduled_on for fixture in stored] == [date(2025, 9, 6), date(2025, 9, 27)]


def test_recorded_result_with_goals_is_persisted(repository):
    home, away = _register(repository, ZONE_A, ["Lions", "Tigers"])
    striker = repository.create_player(home.id, "Striker", position=PlayerPosition.FORWARD)
    fixture = generate_fixtures([home, away], date(2025, 2, 1))[0]
    repository.save_fixtures(ZONE_A, [fixture])

    goal = Goal(id=uuid.uuid4(), fixture_id=fixture.id, team_id=home.id, player_id=striker.id, minute=77)
    updated = record_result(fixture, 1, 0, [goal])
    assert repository.update_fixture(updated) == updated

    stored = repository.get_fixture(fixture.id)
    assert stored == updated
    assert stored.goals[0].minute == 77
    assert repository.get_fixture(uuid.uuid4()) is None


def test_update_unknown_fixture_returns_none(repository):
    home, away = _register(repository, ZONE_A, ["Lions", "Tigers"])
    fixture = generate_fixtures([home, away], date(2025, 2, 1))[0]

    assert repository.update_fixture(fixture) is None


def test_team_referenced_by_fixtures_cannot_be_deleted(repository):
    teams = _register(repository, ZONE_A, ["Lions", "Tigers", "Bears"])
    spare = repository.create_team(ZONE_A, "Spare", home_ground="Bench")
    repository.save_fixtures(ZONE_A, generate_fixtures(teams, date(2025, 2, 1)))

    with pytest.raises(TeamInUseError):
        repository.delete_team(teams[0].id)

    assert repository.delete_team(spare.id) is True
    assert repository.delete_team(spare.id) is False
    assert repository.get_team(teams[0].id) is not None


def test_rename_team(repository):
    (team,) = _register(repository, ZONE_A, ["Lions"])

    renamed = repository.update_team(
        Team(
            id=team.id,
            zone_id=team.zone_id,
            name="Kings",
            home_ground=team.home_ground,
            created_at=team.created_at,
        )
    )

    assert renamed is not None
    assert repository.get_team(team.id).name == "Kings"


def test_snapshot_feeds_the_standings(repository):
    home, away = _register(repository, ZONE_A, ["Lions", "Tigers"])
    keeper = repository.create_player(away.id, "Keeper", position=PlayerPosition.GOALKEEPER)
    repository.set_player_counters(PlayerCounters(player_id=keeper.id, clean_sheets=2, appearances=3))
    fixtures = generate_fixtures([home, away], date(2025, 2, 1))
    fixtures[0] = record_result(fixtures[0], 0, 2)
    repository.save_fixtures(ZONE_A, fixtures)

    snapshot = repository.load_snapshot(ZONE_A)

    assert [team.id for team in snapshot.teams] == [home.id, away.id]
    assert [player.id for player in snapshot.players] == [keeper.id]
    assert snapshot.counters[keeper.id].clean_sheets == 2
    table = compute_standings(snapshot.teams, snapshot.fixtures)
    assert table[0].team_id == away.id
    assert table[0].points == 3


def test_snapshot_of_unknown_zone_raises(repository):
    with pytest.raises(ValueError):
        repository.load_snapshot(uuid.uuid4())
