# Area: Match
"""
cf_battle._match.scoreboard — Winner resolution and running scores
==================================================================

Consumes delivered submissions and keeps three structures in sync:

- solve records: the current winning solve of every solved problem
- scores: cumulative points per handle
- problem statuses: last observed verdict per (problem, handle), display only

The winner of a problem is the accepted submission with the earliest
solve time; equal times go to the smaller submission id, and a full tie
to the player listed first in the match config. Because submissions of
different players arrive out of real-time order, a later delivery may
replace the current winner; the points then move from the old winner to
the new one inside the same call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from ..models import MatchConfig, SolveRecord, Submission, Verdict
from ..scoring import solve_points

logger = logging.getLogger("cf_battle.scoreboard")


@dataclass
class ScoreUpdate:
    """What a single ``apply`` changed, for event emission."""
    status_changed: bool = False
    solve: Optional[SolveRecord] = None
    previous_solve: Optional[SolveRecord] = None
    score_changes: Dict[str, int] = field(default_factory=dict)

    @property
    def winner_changed(self) -> bool:
        if self.solve is None:
            return False
        if self.previous_solve is None:
            return True
        return self.previous_solve.winning_handle != self.solve.winning_handle


class Scoreboard:
    """Scores, solve records and verdict overlay of one match."""

    def __init__(self, config: MatchConfig):
        self.config = config
        self._player_order = {h: i for i, h in enumerate(config.handles)}
        self._scores: Dict[str, int] = {h: 0 for h in config.handles}
        self._solves: Dict[str, SolveRecord] = {}
        self._statuses: Dict[str, Dict[str, Verdict]] = {}

    # ── Read access ──────────────────────────────────────────

    @property
    def scores(self) -> Mapping[str, int]:
        return MappingProxyType(self._scores)

    @property
    def solves(self) -> Mapping[str, SolveRecord]:
        return MappingProxyType(self._solves)

    def statuses_for(self, problem_id: str) -> Mapping[str, Verdict]:
        return MappingProxyType(self._statuses.get(problem_id, {}))

    def display_status(self, problem_id: str) -> Optional[str]:
        """Best status any player has on a problem: AC, then TLE, then WA."""
        if problem_id in self._solves:
            return "AC"
        verdicts = set(self._statuses.get(problem_id, {}).values())
        if Verdict.ACCEPTED in verdicts:
            return "AC"
        if Verdict.TIME_LIMIT_EXCEEDED in verdicts:
            return "TLE"
        if Verdict.WRONG_ANSWER in verdicts:
            return "WA"
        return None

    def standings(self) -> List[Tuple[str, int]]:
        """(handle, points) sorted by points, ties kept in player order."""
        return sorted(
            self._scores.items(),
            key=lambda item: (-item[1], self._player_order[item[0]]),
        )

    # ── Mutation ─────────────────────────────────────────────

    def apply(self, handle: str, submission: Submission) -> ScoreUpdate:
        """
        Fold one delivered submission into the board.

        Non-accepted verdicts only touch the status overlay. Accepted
        solves may create or replace the problem's solve record.
        """
        update = ScoreUpdate()
        problem_id = submission.problem_id

        if handle not in self._scores:
            logger.warning(f"Submission {submission.id} from unknown handle {handle}, ignoring")
            return update
        if self.config.get_problem(problem_id) is None:
            logger.debug(f"Submission {submission.id} is for {problem_id}, not in this match")
            return update
        if not self.config.start_time <= submission.submission_time_ms < self.config.end_time:
            logger.debug(f"Submission {submission.id} made outside the match window, ignoring")
            return update
        if submission.is_pending:
            return update

        per_problem = self._statuses.setdefault(problem_id, {})
        if per_problem.get(handle) is not submission.verdict:
            per_problem[handle] = submission.verdict
            update.status_changed = True

        if not submission.is_accepted:
            return update

        existing = self._solves.get(problem_id)
        if existing is not None and not self._beats(handle, submission, existing):
            return update

        points = solve_points(self.config, problem_id, submission.submission_time_ms)
        record = SolveRecord(
            problem_id=problem_id,
            winning_handle=handle,
            winning_submission_id=submission.id,
            solve_time_millis=submission.submission_time_ms,
            points=points,
        )

        # Debit, credit and record replacement happen together.
        if existing is not None:
            self._scores[existing.winning_handle] -= existing.points
        self._scores[handle] += points
        self._solves[problem_id] = record

        update.solve = record
        update.previous_solve = existing
        if existing is not None:
            update.score_changes[existing.winning_handle] = self._scores[existing.winning_handle]
        update.score_changes[handle] = self._scores[handle]

        if existing is None:
            logger.info(f"{problem_id} solved by {handle} (+{points})")
        else:
            logger.info(
                f"{problem_id} winner revised: {existing.winning_handle} "
                f"(-{existing.points}) → {handle} (+{points})"
            )
        return update

    def _beats(self, handle: str, submission: Submission, record: SolveRecord) -> bool:
        """True when ``submission`` precedes the recorded winning solve."""
        challenger = (
            submission.submission_time_ms,
            submission.id,
            self._player_order[handle],
        )
        incumbent = (
            record.solve_time_millis,
            record.winning_submission_id,
            self._player_order.get(record.winning_handle, len(self._player_order)),
        )
        return challenger < incumbent

    def clear(self) -> None:
        """Reset to the empty board of a fresh match."""
        self._scores = {h: 0 for h in self.config.handles}
        self._solves.clear()
        self._statuses.clear()
