"""
cf_battle.callbacks — Events the host can subscribe to
=======================================================

The host (a UI, a bot, a results page) subclasses MatchObserver and
overrides the events it cares about. Observers are handed to the engine
at construction or through ``MatchEngine.subscribe``.

Every event fires after the engine has finished the state change that
caused it, so reading ``engine.scores`` or ``engine.solves`` from inside
a handler always sees a consistent board.

An observer that raises is logged and skipped; it never stops the
engine or the other observers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ._match.enums import MatchPhase
    from ._match.results import MatchResults
    from .models import Verdict


class MatchObserver:
    """
    Base class for match event subscribers.

    All methods are no-ops by default.
    """

    # ──────────────────────────────────────────────────────────────
    # Scoring events
    # ──────────────────────────────────────────────────────────────
    def on_score_change(self, handle: str, new_points: int) -> None:
        """
        Called when a player's cumulative points change.

        A winner revision produces two calls in a row: one for the
        player who lost the solve, one for the player who gained it.
        """

    def on_solve(self, problem_id: str, winning_handle: str) -> None:
        """
        Called when a problem gets its first solve or a new winner.

        ``problem_id`` has the form ``"<contestId>-<index>"``.
        """

    def on_status_change(
        self, problem_id: str, handle: str, verdict: "Verdict"
    ) -> None:
        """Called when a player's last verdict on a problem changes."""

    # ──────────────────────────────────────────────────────────────
    # Lifecycle events
    # ──────────────────────────────────────────────────────────────
    def on_phase_change(self, phase: "MatchPhase") -> None:
        """Called after every lifecycle transition."""

    def on_match_ended(self, results: "MatchResults") -> None:
        """Called once with the frozen results when the match ends."""

    def on_judge_unavailable(self, failed_cycles: int) -> None:
        """
        Called when every player query failed for ``failed_cycles``
        consecutive poll cycles.
        """


class LoggingObserver(MatchObserver):
    """Observer that writes every event to the package log."""

    def __init__(self, logger_name: str = "cf_battle.events"):
        self._logger = logging.getLogger(logger_name)

    def on_score_change(self, handle: str, new_points: int) -> None:
        self._logger.info(f"Score: {handle} = {new_points}")

    def on_solve(self, problem_id: str, winning_handle: str) -> None:
        self._logger.info(f"Solve: {problem_id} by {winning_handle}")

    def on_status_change(self, problem_id: str, handle: str, verdict: "Verdict") -> None:
        self._logger.debug(f"Status: {problem_id} {handle} {verdict.value}")

    def on_phase_change(self, phase: "MatchPhase") -> None:
        self._logger.info(f"Phase: {phase.value}")

    def on_match_ended(self, results: "MatchResults") -> None:
        winner: Optional[str] = results.winner
        self._logger.info(
            f"Match {results.match_id} ended, winner: {winner or 'none'}"
        )
        for row in results.standings:
            self._logger.info(f"  #{row.rank} {row.handle}: {row.points}")

    def on_judge_unavailable(self, failed_cycles: int) -> None:
        self._logger.warning(
            f"Judge unavailable for {failed_cycles} consecutive poll cycles"
        )
