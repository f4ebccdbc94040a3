# Area: Match
"""
cf_battle._match.state_machine — Match Lifecycle State Machine
==============================================================

Tracks the phase of a single match instance. Transitions are driven by
wall-clock comparison against the match window, plus an explicit abandon.
"""

import logging
from typing import Optional

from ..models import MatchConfig
from .enums import MatchEvent, MatchPhase

logger = logging.getLogger("cf_battle.state_machine")


# Valid phase transitions: {current_phase: {event: next_phase}}
TRANSITIONS = {
    MatchPhase.SCHEDULED: {
        MatchEvent.START_TIME_REACHED: MatchPhase.LIVE,
        MatchEvent.ABANDON: MatchPhase.ABANDONED,
    },
    MatchPhase.LIVE: {
        MatchEvent.END_TIME_REACHED: MatchPhase.ENDED,
        MatchEvent.ABANDON: MatchPhase.ABANDONED,
    },
    MatchPhase.ENDED: {},
    MatchPhase.ABANDONED: {},
}

TERMINAL_PHASES = frozenset({MatchPhase.ENDED, MatchPhase.ABANDONED})


def phase_at(config: MatchConfig, now_ms: float) -> MatchPhase:
    """
    Phase implied by the clock alone.

    ``now == start_time`` is LIVE and ``now == end_time`` is ENDED.
    """
    if now_ms < config.start_time:
        return MatchPhase.SCHEDULED
    if now_ms < config.end_time:
        return MatchPhase.LIVE
    return MatchPhase.ENDED


class MatchStateMachine:
    """
    State machine for one match's lifecycle.

    Attributes:
        current_phase: The current phase of the match
    """

    def __init__(self, match_id: str = ""):
        """Initialize state machine in SCHEDULED."""
        self.match_id = match_id
        self.current_phase = MatchPhase.SCHEDULED

    @property
    def is_terminal(self) -> bool:
        return self.current_phase in TERMINAL_PHASES

    def can_transition(self, event: MatchEvent) -> bool:
        """
        Check if a transition is valid from the current phase.

        Args:
            event: The event to check

        Returns:
            True if the transition is valid, False otherwise
        """
        return event in TRANSITIONS.get(self.current_phase, {})

    def transition(self, event: MatchEvent) -> MatchPhase:
        """
        Execute a phase transition.

        Args:
            event: The event triggering the transition

        Returns:
            The new phase after transition

        Raises:
            ValueError: If the transition is not valid
        """
        if not self.can_transition(event):
            raise ValueError(
                f"Invalid transition: {event.value} from {self.current_phase.value}"
            )
        previous = self.current_phase
        self.current_phase = TRANSITIONS[previous][event]
        logger.info(
            f"[{self.match_id}] Phase: {previous.value} → {self.current_phase.value}"
        )
        return self.current_phase

    def next_event(self, config: MatchConfig, now_ms: float) -> Optional[MatchEvent]:
        """The clock event due at ``now_ms``, if any."""
        target = phase_at(config, now_ms)
        if self.current_phase == MatchPhase.SCHEDULED and target != MatchPhase.SCHEDULED:
            return MatchEvent.START_TIME_REACHED
        if self.current_phase == MatchPhase.LIVE and target == MatchPhase.ENDED:
            return MatchEvent.END_TIME_REACHED
        return None
