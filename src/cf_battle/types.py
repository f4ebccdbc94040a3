"""
cf_battle.types — TypedDict schemas for serialized match data
=============================================================

Documents the JSON shapes the package reads and writes: stored configs
and invite payloads (camelCase keys), and results snapshots (snake_case
keys, as written by ``MatchResults.to_dict``).

Use __annotations__ to inspect fields:

    >>> PlayerStandingDict.__annotations__
    {'rank': int, 'handle': str, 'points': int, 'rating': Optional[int], 'solved': int}
"""

from typing import List, Optional, TypedDict


# ============================================
# Match configuration (stored / invite payload)
# ============================================

class PlayerDict(TypedDict):
    """A player entry of a match config."""
    handle: str                 # Codeforces handle, e.g. "tourist"
    rating: Optional[int]       # Player rating, display only


class ProblemDict(TypedDict):
    """A problem entry of a match config."""
    contestId: int              # e.g. 1850
    index: str                  # e.g. "A"
    name: str
    rating: Optional[int]       # Problem difficulty; None counts as 800


class MatchConfigDict(TypedDict):
    """Serialized MatchConfig.

    Fields
    ------
    matchId : str
        e.g. "match-1718000000000-k3j9x0a1b".
    startTime, endTime : int
        Epoch milliseconds.
    finalLapEnabled : bool
        Double points during the last quarter of the match.
    mysteryProblemIndex : int or None
        Index into ``problems``; -1 or None for no mystery problem.
    """
    matchId: str
    players: List[PlayerDict]
    problems: List[ProblemDict]
    startTime: int
    endTime: int
    finalLapEnabled: bool
    mysteryProblemIndex: Optional[int]


# ============================================
# Results snapshot
# ============================================

class SolveRecordDict(TypedDict):
    """Winning solve of one problem."""
    problem_id: str             # "<contestId>-<index>", e.g. "1850-A"
    winning_handle: str
    winning_submission_id: int
    solve_time_millis: int
    points: int                 # Exactly what the winner was credited


class PlayerStandingDict(TypedDict):
    """One leaderboard row."""
    rank: int                   # Tied players share a rank
    handle: str
    points: int
    rating: Optional[int]
    solved: int


class MatchResultsDict(TypedDict):
    """Serialized MatchResults, as stored by MatchRepository."""
    match_id: str
    ended_at: int
    standings: List[PlayerStandingDict]
    solves: List[SolveRecordDict]
    mystery_problem_index: int
    config: MatchConfigDict
