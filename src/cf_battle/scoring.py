"""
cf_battle.scoring — Point formula and multipliers
==================================================

Points = 500 * 1.32 ** ((rating - 800) / 200), with ratings below 800
(or missing) counted as 800. Multipliers stack multiplicatively:

    x2  mystery problem
    x2  solve at or after the final-lap start (when final lap is enabled)

The multiplier of a solve is always evaluated at the solve's own timestamp.
"""

from __future__ import annotations

import math
from typing import Dict, Optional

from .models import MatchConfig

BASE_POINTS = 500
GROWTH = 1.32
RATING_FLOOR = 800
RATING_STEP = 200

MYSTERY_MULTIPLIER = 2
FINAL_LAP_MULTIPLIER = 2


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Math.round semantics)."""
    return int(math.floor(value + 0.5))


def base_points(rating: Optional[int]) -> int:
    """Points for solving a problem of the given rating, no multiplier."""
    if not rating or rating < RATING_FLOOR:
        rating = RATING_FLOOR
    exponent = (rating - RATING_FLOOR) / RATING_STEP
    return round_half_up(BASE_POINTS * GROWTH ** exponent)


def awarded_points(rating: Optional[int], multiplier: float = 1) -> int:
    """Base points scaled by the multiplier, rounded once on the product."""
    return round_half_up(base_points(rating) * multiplier)


def is_final_lap(config: MatchConfig, at_ms: float) -> bool:
    """True when the final-lap bonus applies at ``at_ms`` (inclusive)."""
    return config.final_lap_enabled and at_ms >= config.final_lap_start


def multiplier_for(config: MatchConfig, problem_id: str, at_ms: float) -> int:
    multiplier = 1
    if problem_id == config.mystery_problem_id:
        multiplier *= MYSTERY_MULTIPLIER
    if is_final_lap(config, at_ms):
        multiplier *= FINAL_LAP_MULTIPLIER
    return multiplier


def solve_points(config: MatchConfig, problem_id: str, solve_time_ms: float) -> int:
    """
    Points credited for a solve of ``problem_id`` made at ``solve_time_ms``.

    Returns 0 for problems that are not part of the match.
    """
    problem = config.get_problem(problem_id)
    if problem is None:
        return 0
    return awarded_points(
        problem.rating, multiplier_for(config, problem_id, solve_time_ms)
    )


def problem_points_table(config: MatchConfig, now_ms: float) -> Dict[str, int]:
    """What every problem is worth if solved at ``now_ms``."""
    return {
        problem.problem_id: solve_points(config, problem.problem_id, now_ms)
        for problem in config.problems
    }
