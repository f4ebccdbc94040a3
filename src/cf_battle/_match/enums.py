# Area: Match
"""
cf_battle._match.enums — Match Lifecycle Enums
==============================================

Defines the phases and events of the match lifecycle state machine.
"""

from enum import Enum


class MatchPhase(Enum):
    """
    Phases of a match.

    Phase transitions:
    SCHEDULED -> LIVE (on START_TIME_REACHED)
    LIVE -> ENDED (on END_TIME_REACHED)
    SCHEDULED -> ABANDONED (on ABANDON)
    LIVE -> ABANDONED (on ABANDON)

    ENDED and ABANDONED are terminal. The final lap is not a phase; it is
    derived from the clock while LIVE.
    """
    SCHEDULED = "SCHEDULED"
    LIVE = "LIVE"
    ENDED = "ENDED"
    ABANDONED = "ABANDONED"


class MatchEvent(Enum):
    """
    Events that trigger phase transitions.

    Events are triggered by:
    - START_TIME_REACHED: clock tick with now >= start_time
    - END_TIME_REACHED: clock tick with now >= end_time
    - ABANDON: explicit user action
    """
    START_TIME_REACHED = "START_TIME_REACHED"
    END_TIME_REACHED = "END_TIME_REACHED"
    ABANDON = "ABANDON"
