"""Double round-robin fixture generation.

The first half of a season is built with the circle method: slot 0 stays put
while every other team rotates one place per round, so after ``n - 1`` rounds
each team has met every other team once. The second half replays the first
with home and away swapped, after a two-week break.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import date, timedelta
from enum import Enum
import logging
import uuid
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Fixture, Team


logger = logging.getLogger(__name__)

MATCHWEEK_INTERVAL = timedelta(weeks=1)
SECOND_HALF_BREAK = timedelta(weeks=2)

# Fixture ids are uuid5 values in this namespace, so regenerating a season
# with the same teams and start date yields the same ids.
FIXTURE_NAMESPACE = uuid.UUID("6f1c2a8e-3d4b-5e6f-9a0b-1c2d3e4f5a6b")

_BYE = None


class Venue(Enum):
    HOME = "home"
    AWAY = "away"


class VenueHistory:
    """Where each team played its most recent fixture."""

    def __init__(self) -> None:
        self._last: Dict[uuid.UUID, Venue] = {}

    def last_venue(self, team_id: uuid.UUID) -> Optional[Venue]:
        return self._last.get(team_id)

    def record(self, home_id: uuid.UUID, away_id: uuid.UUID) -> None:
        self._last[home_id] = Venue.HOME
        self._last[away_id] = Venue.AWAY


class HomeAwayPolicy(ABC):
    """Decides which side of a first-half pairing plays at home."""

    name: str

    @abstractmethod
    def assign(
        self,
        first: Team,
        second: Team,
        round_index: int,
        history: VenueHistory,
    ) -> Tuple[Team, Team]:
        """Return ``(home, away)`` for the pairing ``first`` vs ``second``.

        ``first`` is the team in the lower circle slot. ``round_index`` is
        0-based.
        """


class SlotPolicy(HomeAwayPolicy):
    """The lower slot always hosts. Does not rebalance around byes."""

    name = "slot"

    def assign(
        self,
        first: Team,
        second: Team,
        round_index: int,
        history: VenueHistory,
    ) -> Tuple[Team, Team]:
        return first, second


class VenueBalancedPolicy(HomeAwayPolicy):
    """Give home to the side that did not host its previous fixture.

    When both or neither side qualify, even rounds give home to the lower slot
    and odd rounds to the upper slot.
    """

    name = "balanced"

    def assign(
        self,
        first: Team,
        second: Team,
        round_index: int,
        history: VenueHistory,
    ) -> Tuple[Team, Team]:
        first_due = history.last_venue(first.id) is not Venue.HOME
        second_due = history.last_venue(second.id) is not Venue.HOME

        if first_due and not second_due:
            return first, second
        if second_due and not first_due:
            return second, first
        if round_index % 2 == 1:
            return second, first
        return first, second


POLICIES: Dict[str, HomeAwayPolicy] = {
    policy.name: policy for policy in (VenueBalancedPolicy(), SlotPolicy())
}


def get_policy(name: str) -> HomeAwayPolicy:
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown home/away policy: {name}") from None


def expected_fixture_count(team_count: int) -> int:
    if team_count < 2:
        return 0
    return team_count * (team_count - 1)


def expected_matchweek_count(team_count: int) -> int:
    """Odd leagues need one extra round per half so every team sits out once."""

    if team_count < 2:
        return 0
    padded = team_count + team_count % 2
    return 2 * (padded - 1)


def fixture_id_for(zone_id: uuid.UUID, matchweek: int, home_id: uuid.UUID, away_id: uuid.UUID) -> uuid.UUID:
    return uuid.uuid5(FIXTURE_NAMESPACE, f"{zone_id}:{matchweek}:{home_id}:{away_id}")


def _build_fixture(home: Team, away: Team, matchweek: int, scheduled_on: date) -> Fixture:
    return Fixture(
        id=fixture_id_for(home.zone_id, matchweek, home.id, away.id),
        zone_id=home.zone_id,
        matchweek=matchweek,
        home_team_id=home.id,
        away_team_id=away.id,
        scheduled_on=scheduled_on,
        venue=home.home_ground,
    )


def generate_fixtures(
    teams: Sequence[Team],
    start_date: date,
    *,
    policy: Optional[HomeAwayPolicy] = None,
) -> List[Fixture]:
    """Build a full double round-robin season for ``teams``.

    Returns an empty list when fewer than two teams are given. The result is
    ordered by matchweek and is deterministic for a given team order, start
    date and policy.
    """

    if len(teams) < 2:
        logger.warning("Cannot schedule a season with %d team(s)", len(teams))
        return []

    if len({team.id for team in teams}) != len(teams):
        raise ValueError("team ids must be unique")

    policy = policy or VenueBalancedPolicy()
    slots: List[Optional[Team]] = list(teams)
    if len(slots) % 2 == 1:
        slots.append(_BYE)

    n = len(slots)
    rounds = n - 1
    history = VenueHistory()
    first_half: List[Tuple[int, Team, Team, date]] = []
    kickoff = start_date

    for round_index in range(rounds):
        for i in range(n // 2):
            first = slots[i]
            second = slots[n - 1 - i]
            if first is _BYE or second is _BYE:
                continue
            home, away = policy.assign(first, second, round_index, history)
            history.record(home.id, away.id)
            first_half.append((round_index + 1, home, away, kickoff))

        slots = [slots[0], slots[-1]] + slots[1:-1]
        kickoff += MATCHWEEK_INTERVAL

    second_half_start = kickoff + SECOND_HALF_BREAK

    fixtures = [
        _build_fixture(home, away, matchweek, scheduled_on)
        for matchweek, home, away, scheduled_on in first_half
    ]
    fixtures.extend(
        _build_fixture(
            away,
            home,
            matchweek + rounds,
            second_half_start + (matchweek - 1) * MATCHWEEK_INTERVAL,
        )
        for matchweek, home, away, _ in first_half
    )

    logger.info(
        "Scheduled %d fixtures over %d matchweeks for %d teams (%s policy)",
        len(fixtures),
        2 * rounds,
        len(teams),
        policy.name,
    )
    return fixtures


def group_by_matchweek(fixtures: Iterable[Fixture]) -> "OrderedDict[int, List[Fixture]]":
    """Bucket fixtures by matchweek, in ascending matchweek order."""

    buckets: Dict[int, List[Fixture]] = {}
    for fixture in fixtures:
        buckets.setdefault(fixture.matchweek, []).append(fixture)
    return OrderedDict(sorted(buckets.items()))


__all__ = [
    "FIXTURE_NAMESPACE",
    "HomeAwayPolicy",
    "MATCHWEEK_INTERVAL",
    "POLICIES",
    "SECOND_HALF_BREAK",
    "SlotPolicy",
    "Venue",
    "VenueBalancedPolicy",
    "VenueHistory",
    "expected_fixture_count",
    "expected_matchweek_count",
    "fixture_id_for",
    "generate_fixtures",
    "get_policy",
    "group_by_matchweek",
]
