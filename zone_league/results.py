"""Recording match results on fixtures."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Iterable, List, Sequence

from .models import Fixture, Goal


logger = logging.getLogger(__name__)


class ResultValidationError(ValueError):
    """Raised when a result cannot be recorded on a fixture."""


def _validate_score(label: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ResultValidationError(f"{label} must be a non-negative integer, got {value!r}")
    return value


def _scored_goals(fixture: Fixture, goals: Iterable[Goal]) -> List[Goal]:
    kept: List[Goal] = []
    for goal in goals:
        if goal.player_id is None:
            continue
        if not fixture.involves(goal.team_id):
            raise ResultValidationError(f"goal {goal.id} is credited to a team not playing this fixture")
        if goal.minute is not None and (isinstance(goal.minute, bool) or goal.minute < 1):
            raise ResultValidationError(f"goal {goal.id} has an invalid minute: {goal.minute!r}")
        kept.append(replace(goal, fixture_id=fixture.id))
    return kept


def record_result(
    fixture: Fixture,
    home_score: int,
    away_score: int,
    goals: Sequence[Goal] = (),
) -> Fixture:
    """Return ``fixture`` marked as played with the given score.

    Goals without a scorer are dropped. If any goals were supplied, the ones
    left must add up to the score on both sides.
    """

    home_score = _validate_score("home_score", home_score)
    away_score = _validate_score("away_score", away_score)
    kept = _scored_goals(fixture, goals)

    if goals:
        expected = home_score + away_score
        if len(kept) != expected:
            raise ResultValidationError(
                f"Number of goals ({len(kept)}) must match total score ({expected})"
            )
        home_goals = sum(1 for goal in kept if goal.team_id == fixture.home_team_id)
        if home_goals != home_score:
            raise ResultValidationError(
                f"{home_goals} goal(s) credited to the home side for a score of {home_score}"
            )

    logger.info(
        "Recorded result %d-%d for fixture %s (matchweek %d)",
        home_score,
        away_score,
        fixture.id,
        fixture.matchweek,
    )
    return replace(
        fixture,
        home_score=home_score,
        away_score=away_score,
        played=True,
        goals=tuple(kept),
    )


def clear_result(fixture: Fixture) -> Fixture:
    return replace(fixture, home_score=None, away_score=None, played=False, goals=())


__all__ = ["ResultValidationError", "clear_result", "record_result"]
