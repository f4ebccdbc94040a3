"""
cf_battle — Codeforces Battle Match Engine
==========================================

Runs timed multi-player battles on Codeforces problems: polls the judge
for each player's submissions, awards the first accepted solve of every
problem, and keeps live standings until the match ends.

Quick Start:
    from cf_battle import MatchConfig, MatchRunner, LoggingObserver
    config = MatchConfig.create(players=[...], problems=[...], start_time=...)
    results = MatchRunner(config, observers=[LoggingObserver()]).run()

Embedding the engine in your own event loop:
    from cf_battle import MatchEngine, MatchObserver, CodeforcesClient
    class Board(MatchObserver): ...   # Override the events you need
    engine = MatchEngine(CodeforcesClient(), observers=[Board()])
    engine.start_match(config)
    engine.tick()                     # Call at least once per second

Scoring
-------
A problem of rating r is worth round(500 * 1.32 ** ((max(r, 800) - 800) / 200))
points, doubled for the mystery problem and doubled again for solves in the
final lap (the last quarter of the match, when enabled).
"""

from .callbacks import LoggingObserver, MatchObserver
from .errors import (
    BattleError,
    InvalidInviteError,
    InvalidMatchConfigError,
    JudgeQueryError,
    MalformedSubmissionError,
    MatchStateError,
)
from .models import (
    MatchConfig,
    Player,
    Problem,
    SolveRecord,
    Submission,
    Verdict,
    generate_match_id,
    load_match_config,
    problem_key,
)
from .scoring import (
    awarded_points,
    base_points,
    is_final_lap,
    problem_points_table,
    solve_points,
)
from ._judge import CodeforcesClient, JudgeClient
from ._match import (
    MatchEngine,
    MatchPhase,
    MatchResults,
    PlayerStanding,
    SubmissionPoller,
    format_clock,
    now_ms,
)
from ._runner_config import RunnerSettings, load_settings
from ._store import MatchRepository
from .invite import decode_invite, encode_invite, invite_link
from .runner import MatchRunner

__all__ = [
    # Main classes
    "MatchEngine",
    "MatchRunner",
    "MatchObserver",
    "LoggingObserver",
    "SubmissionPoller",
    "CodeforcesClient",
    "JudgeClient",
    "MatchRepository",
    "RunnerSettings",
    "load_settings",
    # Models
    "MatchConfig",
    "Player",
    "Problem",
    "Submission",
    "Verdict",
    "SolveRecord",
    "MatchPhase",
    "MatchResults",
    "PlayerStanding",
    "load_match_config",
    "generate_match_id",
    "problem_key",
    # Scoring
    "base_points",
    "awarded_points",
    "solve_points",
    "is_final_lap",
    "problem_points_table",
    # Invites
    "encode_invite",
    "decode_invite",
    "invite_link",
    # Helpers
    "format_clock",
    "now_ms",
    # Errors
    "BattleError",
    "InvalidMatchConfigError",
    "JudgeQueryError",
    "MalformedSubmissionError",
    "MatchStateError",
    "InvalidInviteError",
]
__version__ = "1.0.0"
