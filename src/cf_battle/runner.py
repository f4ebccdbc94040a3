"""
cf_battle.runner — Main event loop
==================================

MatchRunner hosts one match from creation to its end. It owns the
asyncio event loop, ticks the engine clock once per second, persists
the config and the final results, and abandons the match on SIGINT or
SIGTERM.

Usage
-----
    from cf_battle import MatchConfig, MatchRunner, LoggingObserver

    config = MatchConfig.create(
        players=[{"handle": "tourist"}, {"handle": "Petr"}],
        problems=[{"contestId": 1850, "index": "A", "rating": 800}],
        start_time=now_ms() + 60_000,
        duration_minutes=30,
        final_lap_enabled=True,
    )
    runner = MatchRunner(config, observers=[LoggingObserver()])
    results = runner.run()
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Any, Iterable, Optional

from ._judge import CodeforcesClient
from ._match import MatchEngine, MatchResults, format_clock, now_ms
from ._match.state_machine import TERMINAL_PHASES
from ._runner_config import RunnerSettings, load_settings
from ._shared import setup_logging
from ._store import MatchRepository
from .callbacks import MatchObserver
from .models import load_match_config

logger = logging.getLogger("cf_battle.runner")


class MatchRunner:
    """
    Runs a single match to completion.

    Args:
        config: MatchConfig or raw config dict
        settings: Runner settings; loaded from the environment when omitted
        observers: MatchObserver subscribers
        judge: JudgeClient; defaults to a CodeforcesClient built from settings
        repository: Match store; defaults to MatchRepository(settings.db_path),
            pass False to disable persistence
        clock: Epoch-ms clock used by the engine
        handle_signals: Install SIGINT/SIGTERM handlers while running
    """

    def __init__(
        self,
        config: Any,
        settings: Optional[RunnerSettings] = None,
        observers: Iterable[MatchObserver] = (),
        judge=None,
        repository=None,
        clock=now_ms,
        handle_signals: bool = True,
    ):
        self.settings = settings or load_settings()

        # Setup logging
        setup_logging(
            log_file_path=self.settings.log_file,
            level=self.settings.log_level,
        )

        # Validate config (raises InvalidMatchConfigError)
        self.config = load_match_config(config)

        self.judge = judge or CodeforcesClient(
            base_url=self.settings.judge_api_url,
            timeout_seconds=self.settings.query_timeout_seconds,
            min_request_interval=self.settings.min_request_interval_seconds,
        )
        if repository is None:
            repository = MatchRepository(self.settings.db_path)
        self.repository = repository or None

        self.engine = MatchEngine(
            judge=self.judge,
            observers=observers,
            settings=self.settings,
            clock=clock,
        )
        self.handle_signals = handle_signals
        self._stop_event: Optional[asyncio.Event] = None
        self._stop_requested = False

    def run(self) -> Optional[MatchResults]:
        """Run the match. Blocks until it ends or is abandoned."""
        return asyncio.run(self.run_async())

    async def run_async(self) -> Optional[MatchResults]:
        """
        Run the match on the current event loop.

        Returns:
            The final results, or None if the match was abandoned.
            A match with stored results is not run again; its stored
            results are returned unchanged.
        """
        if self.repository is not None:
            stored = self.repository.get_results(self.config.match_id)
            if stored is not None:
                logger.info(
                    f"Match {self.config.match_id} already finished, using stored results"
                )
                self._log_shutdown(stored)
                return stored

        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()
        loop = asyncio.get_running_loop()
        if self.handle_signals:
            self._install_signal_handlers(loop)

        self.engine.start_match(self.config)
        if self.repository is not None:
            self.repository.save_config(self.config)
        self._log_startup()

        try:
            await self._clock_loop()
        finally:
            # No-op when the match already ended
            self.engine.abandon_match()
            await self.engine.wait_poller_closed()
            if self.handle_signals:
                self._remove_signal_handlers(loop)

        results = self.engine.results
        if results is not None and self.repository is not None:
            self.repository.save_results(results)
        self._log_shutdown(results)
        return results

    async def _clock_loop(self) -> None:
        interval = self.settings.tick_interval_seconds
        while True:
            phase = self.engine.tick()
            if phase in TERMINAL_PHASES:
                return
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
            if self._stop_event.is_set():
                logger.info("Stop requested, abandoning match")
                self.engine.abandon_match()
                return

    def stop(self) -> None:
        """Abandon the match and return from ``run()``."""
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except (NotImplementedError, RuntimeError):
                logger.debug(f"Signal handler for {sig.name} not supported here")

    def _remove_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                pass

    def _log_startup(self) -> None:
        config = self.config
        logger.info("=" * 60)
        logger.info("  Codeforces Battle — Match Runner")
        logger.info(f"  Match:    {config.match_id}")
        logger.info(f"  Players:  {', '.join(config.handles)}")
        logger.info(f"  Problems: {', '.join(p.problem_id for p in config.problems)}")
        logger.info(f"  Duration: {format_clock(config.duration_ms)}")
        if config.final_lap_enabled:
            logger.info(f"  Final lap from {format_clock(config.final_lap_start - config.start_time)}")
        if config.mystery_problem_id:
            logger.info("  Mystery problem: yes")
        logger.info(f"  Poll:     every {self.settings.poll_interval_seconds}s")
        logger.info("=" * 60)

    def _log_shutdown(self, results: Optional[MatchResults]) -> None:
        if results is None:
            logger.info(f"Match {self.config.match_id} abandoned, no results.")
            return
        logger.info(f"Match {results.match_id} finished, winner: {results.winner or 'none'}")
        for row in results.standings:
            logger.info(f"  #{row.rank} {row.handle}: {row.points} ({row.solved} solved)")
