# Area: Match
"""
Match - Lifecycle, polling and scoring of one battle.

This package handles:
- The match lifecycle state machine
- Polling the judge for new submissions
- Winner resolution and running scores
- The frozen results snapshot
"""

from .engine import MatchEngine, format_clock, now_ms
from .enums import MatchEvent, MatchPhase
from .poller import SubmissionPoller
from .results import MatchResults, PlayerStanding, build_results
from .scoreboard import Scoreboard, ScoreUpdate
from .state_machine import TRANSITIONS, MatchStateMachine, phase_at

__all__ = [
    "MatchEngine",
    "format_clock",
    "now_ms",
    "MatchEvent",
    "MatchPhase",
    "SubmissionPoller",
    "MatchResults",
    "PlayerStanding",
    "build_results",
    "Scoreboard",
    "ScoreUpdate",
    "TRANSITIONS",
    "MatchStateMachine",
    "phase_at",
]
