"""HTTP-level tests for the zone_league API.

The repository dependency is swapped for one backed by a temporary SQLite
file; the startup hook is never run because the client is not used as a
context manager.
"""

from __future__ import annotations

import uuid

import pytest
from starlette.testclient import TestClient

from zone_league.api import app, get_repository
from zone_league.repository import DEFAULT_ZONES


ZONE = str(DEFAULT_ZONES[0].id)


@pytest.fixture
def client(repository):
    app.dependency_overrides[get_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_teams(client, names):
    teams = []
    for name in names:
        r = client.post(f"/zones/{ZONE}/teams", json={"name": name, "home_ground": f"{name} Arena"})
        assert r.status_code == 201
        teams.append(r.json())
    return teams


def test_list_zones(client):
    r = client.get("/zones")
    assert r.status_code == 200
    assert [zone["letter"] for zone in r.json()] == ["A", "B", "C", "D", "E"]


def test_unknown_zone_is_404(client):
    r = client.get(f"/zones/{uuid.uuid4()}/teams")
    assert r.status_code == 404


def test_team_validation(client):
    r = client.post(f"/zones/{ZONE}/teams", json={"name": "", "home_ground": "Somewhere"})
    assert r.status_code == 422


def test_schedule_requires_two_teams(client):
    _create_teams(client, ["Solo"])
    r = client.post(f"/zones/{ZONE}/fixtures", json={"start_date": "2025-04-05"})
    assert r.status_code == 422


def test_full_season_flow(client):
    w, x, y, z = _create_teams(client, ["W", "X", "Y", "Z"])
    r = client.post(f"/zones/{ZONE}/players", json={"team_id": w["id"], "name": "Ace", "position": "Forward"})
    assert r.status_code == 201
    ace = r.json()

    r = client.post(f"/zones/{ZONE}/fixtures", json={"start_date": "2025-04-05", "policy": "slot"})
    assert r.status_code == 201
    fixtures = r.json()
    assert len(fixtures) == 12
    assert {fixture["matchweek"] for fixture in fixtures} == set(range(1, 7))

    week_one = client.get(f"/zones/{ZONE}/fixtures", params={"matchweek": 1}).json()
    assert [(f["home_team_id"], f["away_team_id"]) for f in week_one] == [
        (w["id"], z["id"]),
        (x["id"], y["id"]),
    ]

    opener, other = week_one
    r = client.put(
        f"/fixtures/{opener['id']}/result",
        json={
            "home_score": 2,
            "away_score": 1,
            "goals": [
                {"team_id": w["id"], "player_id": ace["id"], "minute": 3},
                {"team_id": w["id"], "player_id": ace["id"], "minute": 80},
                {"team_id": z["id"], "player_id": None},
            ],
        },
    )
    assert r.status_code == 422

    r = client.put(
        f"/fixtures/{opener['id']}/result",
        json={
            "home_score": 2,
            "away_score": 0,
            "goals": [
                {"team_id": w["id"], "player_id": ace["id"], "minute": 3},
                {"team_id": w["id"], "player_id": ace["id"], "minute": 80},
            ],
        },
    )
    assert r.status_code == 200
    assert r.json()["played"] is True

    r = client.put(f"/fixtures/{other['id']}/result", json={"home_score": 0, "away_score": 0})
    assert r.status_code == 200

    table = client.get(f"/zones/{ZONE}/standings").json()
    assert table[0]["team_name"] == "W"
    assert table[0]["points"] == 3
    assert table[0]["goal_difference"] == 2
    assert table[-1]["team_name"] == "Z"
    assert {row["team_name"] for row in table[1:3]} == {"X", "Y"}

    scorers = client.get(f"/zones/{ZONE}/top-scorers").json()
    assert [(row["player_name"], row["goals"]) for row in scorers] == [("Ace", 2)]

    summary = client.get(f"/zones/{ZONE}/summary").json()
    assert summary == {
        "team_count": 4,
        "total_matches": 12,
        "matches_played": 2,
        "total_goals": 2,
        "matchweeks": 6,
        "matches_per_week": 2,
    }

    r = client.delete(f"/teams/{w['id']}")
    assert r.status_code == 409

    r = client.delete(f"/fixtures/{other['id']}/result")
    assert r.status_code == 200
    assert r.json()["played"] is False


def test_scorer_must_play_for_the_credited_team(client):
    home, away = _create_teams(client, ["Home", "Away"])
    outsider = client.post(
        f"/zones/{ZONE}/players",
        json={"team_id": away["id"], "name": "Outsider", "position": "Midfielder"},
    ).json()
    fixture = client.post(f"/zones/{ZONE}/fixtures", json={"start_date": "2025-04-05"}).json()[0]

    r = client.put(
        f"/fixtures/{fixture['id']}/result",
        json={"home_score": 1, "away_score": 0, "goals": [{"team_id": home["id"], "player_id": outsider["id"]}]},
    )
    assert r.status_code == 422


def test_player_counters_and_stats(client):
    (team,) = _create_teams(client, ["Keepers"])
    keeper = client.post(
        f"/zones/{ZONE}/players",
        json={"team_id": team["id"], "name": "Safe Hands", "position": "Goalkeeper"},
    ).json()

    r = client.put(f"/players/{keeper['id']}/counters", json={"clean_sheets": 5, "appearances": 7})
    assert r.status_code == 200
    assert r.json()["clean_sheets"] == 5

    stats = client.get(f"/zones/{ZONE}/player-stats").json()
    assert stats == [
        {
            "player_id": keeper["id"],
            "player_name": "Safe Hands",
            "team_name": "Keepers",
            "goals": 0,
            "assists": 0,
            "clean_sheets": 5,
            "appearances": 7,
        }
    ]

    r = client.put(f"/players/{uuid.uuid4()}/counters", json={"assists": 1})
    assert r.status_code == 404


def test_rename_and_delete_team(client):
    (team,) = _create_teams(client, ["Old Name"])

    r = client.put(f"/teams/{team['id']}", json={"name": "New Name"})
    assert r.status_code == 200
    assert r.json()["name"] == "New Name"
    assert r.json()["home_ground"] == "Old Name Arena"

    assert client.delete(f"/teams/{team['id']}").status_code == 204
    assert client.delete(f"/teams/{team['id']}").status_code == 404
    assert client.put(f"/teams/{team['id']}", json={"name": "Ghost"}).status_code == 404
