"""Shared fixtures for the zone_league tests."""

from __future__ import annotations

import uuid
from typing import Callable, List, Sequence, Union

import pytest

from zone_league.models import Team
from zone_league.repository import DEFAULT_ZONES, LeagueRepository


ZONE_ID = DEFAULT_ZONES[0].id


def build_teams(names: Sequence[str], zone_id: uuid.UUID = ZONE_ID) -> List[Team]:
    return [
        Team(id=uuid.uuid4(), zone_id=zone_id, name=name, home_ground=f"{name} Park")
        for name in names
    ]


@pytest.fixture
def make_teams() -> Callable[..., List[Team]]:
    """Return a factory building teams from a count (named T1..Tn) or a list of names."""

    def factory(names_or_count: Union[int, Sequence[str]]) -> List[Team]:
        if isinstance(names_or_count, int):
            return build_teams([f"T{index}" for index in range(1, names_or_count + 1)])
        return build_teams(list(names_or_count))

    return factory


@pytest.fixture
def repository(tmp_path) -> LeagueRepository:
    repo = LeagueRepository(str(tmp_path / "league.db"))
    repo.initialize_schema()
    return repo
