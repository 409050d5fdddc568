"""League table and player statistics derived from a zone's fixtures.

Every function here is a pure fold over its inputs: rows are rebuilt from zero
on each call and nothing passed in is modified.
"""

from __future__ import annotations

import uuid
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .models import (
    Fixture,
    Player,
    PlayerCounters,
    PlayerStats,
    SeasonSummary,
    Team,
    TeamStanding,
)


TOP_SCORER_LIMIT = 10


def _table_order(standing: TeamStanding) -> tuple:
    return (standing.points, standing.goal_difference, standing.goals_for)


def compute_standings(teams: Iterable[Team], fixtures: Iterable[Fixture]) -> List[TeamStanding]:
    """Return the sorted league table for ``teams``.

    Only fixtures that are played and carry both scores count. Teams that are
    level on points, goal difference and goals scored keep their roster order.
    """

    standings: Dict[uuid.UUID, TeamStanding] = {
        team.id: TeamStanding(team_id=team.id, team_name=team.name) for team in teams
    }

    for fixture in fixtures:
        if not fixture.has_result:
            continue
        home = standings.get(fixture.home_team_id)
        away = standings.get(fixture.away_team_id)
        if home is None or away is None:
            continue
        home.record(fixture.home_score, fixture.away_score)
        away.record(fixture.away_score, fixture.home_score)

    table = sorted(standings.values(), key=_table_order, reverse=True)
    for position, standing in enumerate(table, start=1):
        standing.position = position
    return table


def compute_player_stats(
    players: Iterable[Player],
    fixtures: Iterable[Fixture],
    teams: Iterable[Team],
    counters: Optional[Mapping[uuid.UUID, PlayerCounters]] = None,
) -> List[PlayerStats]:
    """Return one stats row per player, in roster order.

    Goals are counted from the fixtures' goal events. Assists, clean sheets
    and appearances are copied from ``counters`` when available.
    """

    team_names = {team.id: team.name for team in teams}
    counters = counters or {}

    stats: Dict[uuid.UUID, PlayerStats] = {}
    for player in players:
        counter = counters.get(player.id)
        stats[player.id] = PlayerStats(
            player_id=player.id,
            player_name=player.name,
            team_name=team_names.get(player.team_id, "Unknown Team"),
            assists=counter.assists if counter else 0,
            clean_sheets=counter.clean_sheets if counter else 0,
            appearances=counter.appearances if counter else 0,
        )

    for fixture in fixtures:
        for goal in fixture.goals:
            row = stats.get(goal.player_id) if goal.player_id is not None else None
            if row is not None:
                row.goals += 1

    return list(stats.values())


def top_scorers(stats: Sequence[PlayerStats], limit: int = TOP_SCORER_LIMIT) -> List[PlayerStats]:
    scorers = [row for row in stats if row.goals > 0]
    scorers.sort(key=lambda row: row.goals, reverse=True)
    return scorers[:limit]


def summarize_season(teams: Sequence[Team], fixtures: Sequence[Fixture]) -> SeasonSummary:
    matchweeks = len({fixture.matchweek for fixture in fixtures})
    return SeasonSummary(
        team_count=len(teams),
        total_matches=len(fixtures),
        matches_played=sum(1 for fixture in fixtures if fixture.played),
        total_goals=sum(len(fixture.goals) for fixture in fixtures),
        matchweeks=matchweeks,
        matches_per_week=round(len(fixtures) / matchweeks) if matchweeks else 0,
    )


__all__ = [
    "TOP_SCORER_LIMIT",
    "compute_player_stats",
    "compute_standings",
    "summarize_season",
    "top_scorers",
]
