# Area: Match
"""
cf_battle._match.results — Final Results Snapshot
=================================================

Defines the immutable MatchResults produced when a match ends. This is
the only match artifact, besides the config, that the host persists.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..models import MatchConfig, SolveRecord, load_match_config
from ..types import MatchResultsDict, PlayerStandingDict
from .scoreboard import Scoreboard


@dataclass(frozen=True)
class PlayerStanding:
    """
    One row of the final leaderboard.

    Attributes:
        rank: 1-based position; tied players share a rank
        handle: Player handle
        points: Final points
        rating: Player rating from the config, if known
        solved: Number of problems this player holds the winning solve for
    """

    rank: int
    handle: str
    points: int
    rating: Optional[int]
    solved: int

    def to_dict(self) -> PlayerStandingDict:
        return {
            "rank": self.rank,
            "handle": self.handle,
            "points": self.points,
            "rating": self.rating,
            "solved": self.solved,
        }


@dataclass(frozen=True)
class MatchResults:
    """
    Frozen outcome of a finished match.

    Attributes:
        match_id: Match identifier
        ended_at: Epoch ms at which the match was frozen
        standings: Players ordered by points, best first
        solves: Winning solve of every solved problem, in config order
        mystery_problem_index: Mystery problem index (-1 for none)
        config: The match configuration
    """

    match_id: str
    ended_at: int
    standings: Tuple[PlayerStanding, ...]
    solves: Tuple[SolveRecord, ...]
    mystery_problem_index: int
    config: MatchConfig

    @property
    def winner(self) -> Optional[str]:
        """Handle of the sole leader, or None when nobody scored or the top is tied."""
        if not self.standings or self.standings[0].points == 0:
            return None
        if len(self.standings) > 1 and self.standings[1].points == self.standings[0].points:
            return None
        return self.standings[0].handle

    def points_of(self, handle: str) -> int:
        for row in self.standings:
            if row.handle == handle:
                return row.points
        raise KeyError(handle)

    def to_dict(self) -> MatchResultsDict:
        return {
            "match_id": self.match_id,
            "ended_at": self.ended_at,
            "standings": [row.to_dict() for row in self.standings],
            "solves": [solve.to_dict() for solve in self.solves],
            "mystery_problem_index": self.mystery_problem_index,
            "config": self.config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchResults":
        return cls(
            match_id=data["match_id"],
            ended_at=int(data["ended_at"]),
            standings=tuple(PlayerStanding(**row) for row in data["standings"]),
            solves=tuple(SolveRecord.from_dict(s) for s in data["solves"]),
            mystery_problem_index=int(data.get("mystery_problem_index", -1)),
            config=load_match_config(data["config"]),
        )


def build_results(board: Scoreboard, ended_at: int) -> MatchResults:
    """Freeze the scoreboard into a MatchResults snapshot."""
    config = board.config
    ratings = {p.handle: p.rating for p in config.players}
    solved_counts: Dict[str, int] = {h: 0 for h in config.handles}
    for record in board.solves.values():
        solved_counts[record.winning_handle] += 1

    standings = []
    rank = 0
    previous_points = None
    for position, (handle, points) in enumerate(board.standings(), start=1):
        if points != previous_points:
            rank = position
            previous_points = points
        standings.append(PlayerStanding(
            rank=rank,
            handle=handle,
            points=points,
            rating=ratings.get(handle),
            solved=solved_counts[handle],
        ))

    solves = tuple(
        board.solves[p.problem_id]
        for p in config.problems
        if p.problem_id in board.solves
    )
    mystery = config.mystery_problem_index
    return MatchResults(
        match_id=config.match_id,
        ended_at=ended_at,
        standings=tuple(standings),
        solves=solves,
        mystery_problem_index=-1 if mystery is None else mystery,
        config=config,
    )
