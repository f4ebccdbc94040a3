# Area: Match
"""
cf_battle._match.engine — Match Orchestration
=============================================

MatchEngine owns one match at a time. It is driven from outside:

- ``tick()`` compares the clock with the match window and applies the
  due transitions (the runner calls it at least once per second),
- the poller calls ``handle_submission()`` for every new submission,
- the host may call ``abandon_match()`` at any time.

All state changes are synchronous; observers are notified after each
change completes.

Flow:
    start_match(config) → SCHEDULED
    tick(now ≥ start)   → LIVE, poller started
    tick(now ≥ end)     → ENDED, poller stopped, results frozen
    abandon_match()     → ABANDONED, poller stopped, state discarded
"""

from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from ..callbacks import MatchObserver
from ..errors import MatchStateError
from ..models import MatchConfig, SolveRecord, Submission, load_match_config
from .. import scoring
from .._runner_config import RunnerSettings
from .enums import MatchEvent, MatchPhase
from .poller import SubmissionPoller
from .results import MatchResults, build_results
from .scoreboard import Scoreboard
from .state_machine import MatchStateMachine

logger = logging.getLogger("cf_battle.engine")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def format_clock(ms: float) -> str:
    """Format a duration as ``M:SS``, e.g. ``format_clock(754000) == "12:34"``."""
    total_seconds = max(0, int(ms // 1000))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


class MatchEngine:
    """
    Lifecycle, polling and scoring of a single match.

    Args:
        judge: JudgeClient used by the poller
        observers: Initial MatchObserver subscribers
        settings: Poll timing; defaults to RunnerSettings()
        clock: Returns epoch ms; defaults to the wall clock
        poller_factory: Builds the SubmissionPoller (swappable in tests)
    """

    def __init__(
        self,
        judge,
        observers: Iterable[MatchObserver] = (),
        settings: Optional[RunnerSettings] = None,
        clock: Callable[[], float] = now_ms,
        poller_factory: Callable[..., SubmissionPoller] = SubmissionPoller,
    ):
        self.judge = judge
        self.settings = settings or RunnerSettings()
        self._clock = clock
        self._poller_factory = poller_factory
        self._observers: List[MatchObserver] = list(observers)

        self.config: Optional[MatchConfig] = None
        self.state_machine: Optional[MatchStateMachine] = None
        self.scoreboard: Optional[Scoreboard] = None
        self.poller: Optional[SubmissionPoller] = None
        self._results: Optional[MatchResults] = None

    # ── Subscriptions ────────────────────────────────────────

    def subscribe(self, observer: MatchObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: MatchObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _emit(self, event: str, *args: Any) -> None:
        for observer in list(self._observers):
            handler = getattr(observer, event, None)
            if handler is None:
                continue
            try:
                handler(*args)
            except Exception:
                logger.error(
                    f"Observer {type(observer).__name__}.{event} failed",
                    exc_info=True,
                )

    # ── Lifecycle ────────────────────────────────────────────

    def start_match(self, config: Any) -> MatchPhase:
        """
        Validate a config and begin tracking its lifecycle.

        The match starts in SCHEDULED; the next ``tick()`` moves it on
        if its start time has already passed.

        Args:
            config: MatchConfig or raw config dict

        Returns:
            MatchPhase.SCHEDULED

        Raises:
            InvalidMatchConfigError: If the config is invalid
            MatchStateError: If another match is still scheduled or live
        """
        if self.state_machine is not None and not self.state_machine.is_terminal:
            raise MatchStateError(
                f"Match {self.config.match_id} is still "
                f"{self.state_machine.current_phase.value}"
            )

        config = load_match_config(config)

        self.config = config
        self.state_machine = MatchStateMachine(config.match_id)
        self.scoreboard = Scoreboard(config)
        self.poller = None
        self._results = None

        logger.info(
            f"[{config.match_id}] Match scheduled: {len(config.players)} players, "
            f"{len(config.problems)} problems, {format_clock(config.duration_ms)}"
        )
        return self.state_machine.current_phase

    def tick(self, now: Optional[float] = None) -> Optional[MatchPhase]:
        """
        Apply every transition due at ``now``.

        Args:
            now: Epoch ms; defaults to the engine clock

        Returns:
            The phase after the tick, or None when no match was started
        """
        if self.state_machine is None:
            return None
        if now is None:
            now = self._clock()

        event = self.state_machine.next_event(self.config, now)
        while event is not None:
            self._apply(event, now)
            event = self.state_machine.next_event(self.config, now)
        return self.state_machine.current_phase

    def _apply(self, event: MatchEvent, now: float) -> None:
        phase = self.state_machine.transition(event)

        if phase is MatchPhase.LIVE:
            if now < self.config.end_time:
                self._start_poller()
            else:
                logger.info(f"[{self.config.match_id}] Already past end time, not polling")
        elif phase is MatchPhase.ENDED:
            self._stop_poller()
            self._results = build_results(self.scoreboard, int(now))

        self._emit("on_phase_change", phase)
        if phase is MatchPhase.ENDED:
            self._emit("on_match_ended", self._results)

    def abandon_match(self) -> bool:
        """
        Abandon the current match without results.

        Returns:
            True if a scheduled or live match was abandoned, False if
            there was nothing to abandon
        """
        if self.state_machine is None or not self.state_machine.can_transition(MatchEvent.ABANDON):
            logger.debug("abandon_match: no scheduled or live match")
            return False

        self._stop_poller()
        phase = self.state_machine.transition(MatchEvent.ABANDON)
        self.scoreboard = None
        self._results = None
        self._emit("on_phase_change", phase)
        return True

    def _start_poller(self) -> None:
        s = self.settings
        self.poller = self._poller_factory(
            handles=self.config.handles,
            start_time_ms=self.config.start_time,
            end_time_ms=self.config.end_time,
            judge=self.judge,
            on_submission=self.handle_submission,
            interval_seconds=s.poll_interval_seconds,
            player_delay_seconds=s.player_delay_seconds,
            query_timeout_seconds=s.query_timeout_seconds,
            unavailable_warning_cycles=s.unavailable_warning_cycles,
            on_unavailable=self._on_judge_unavailable,
        )
        self.poller.start()

    def _stop_poller(self) -> None:
        if self.poller is not None:
            self.poller.stop()

    async def wait_poller_closed(self) -> None:
        """Wait for a stopped poller's task to exit."""
        if self.poller is not None:
            await self.poller.wait_closed()

    def _on_judge_unavailable(self, failed_cycles: int) -> None:
        logger.warning(
            f"Judge unavailable: every query failed for {failed_cycles} cycles"
        )
        self._emit("on_judge_unavailable", failed_cycles)

    # ── Submissions ──────────────────────────────────────────

    def handle_submission(self, handle: str, submission: Submission) -> None:
        """Fold one delivered submission into the board and notify observers."""
        if self.phase is not MatchPhase.LIVE or self.scoreboard is None:
            logger.debug(f"Dropped submission {submission.id}: match not live")
            return

        update = self.scoreboard.apply(handle, submission)

        if update.status_changed:
            self._emit("on_status_change", submission.problem_id, handle, submission.verdict)
        for changed_handle, points in update.score_changes.items():
            self._emit("on_score_change", changed_handle, points)
        if update.winner_changed:
            self._emit("on_solve", update.solve.problem_id, update.solve.winning_handle)

    # ── Read access ──────────────────────────────────────────

    @property
    def phase(self) -> Optional[MatchPhase]:
        if self.state_machine is None:
            return None
        return self.state_machine.current_phase

    @property
    def results(self) -> Optional[MatchResults]:
        """Frozen results once the match has ended."""
        return self._results

    @property
    def scores(self) -> Mapping[str, int]:
        if self.scoreboard is None:
            return MappingProxyType({})
        return self.scoreboard.scores

    @property
    def solves(self) -> Mapping[str, SolveRecord]:
        if self.scoreboard is None:
            return MappingProxyType({})
        return self.scoreboard.solves

    def standings(self) -> List[Tuple[str, int]]:
        if self.scoreboard is None:
            return []
        return self.scoreboard.standings()

    def display_status(self, problem_id: str) -> Optional[str]:
        if self.scoreboard is None:
            return None
        return self.scoreboard.display_status(problem_id)

    def is_final_lap(self, now: Optional[float] = None) -> bool:
        """True while live and inside the final-lap window."""
        if self.phase is not MatchPhase.LIVE:
            return False
        if now is None:
            now = self._clock()
        return scoring.is_final_lap(self.config, now)

    def problem_points(self, now: Optional[float] = None) -> Mapping[str, int]:
        """What each problem is worth if solved now."""
        if self.config is None:
            return {}
        if now is None:
            now = self._clock()
        return scoring.problem_points_table(self.config, now)

    def time_remaining(self, now: Optional[float] = None) -> int:
        """
        Milliseconds until the start while scheduled, until the end while
        live, and 0 afterwards.
        """
        phase = self.phase
        if now is None:
            now = self._clock()
        if phase is MatchPhase.SCHEDULED:
            return max(0, int(self.config.start_time - now))
        if phase is MatchPhase.LIVE:
            return max(0, int(self.config.end_time - now))
        return 0
