# Area: Match
"""
cf_battle._match.poller — Submission polling
============================================

Discovers new submissions by repeatedly reading every player's history
from the judge. Players are queried one after another within a cycle,
with a short pause in between, and each new submission is handed to the
``on_submission`` callback exactly once, per player, in ascending id order.

A per-handle watermark (highest id delivered) decides what is new. A
failed query leaves the watermark untouched, so the next cycle simply
retries that player. A submission still being judged stops delivery for
that player until the next cycle, which keeps it above the watermark
until it has a final verdict.

Once stopped, the poller never delivers again, even if a query that was
in flight when ``stop()`` was called completes afterwards.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Callable, Dict, Iterable, List, Optional

from ..models import Submission

logger = logging.getLogger("cf_battle.poller")

NO_SUBMISSION = -1

SubmissionHandler = Callable[[str, Submission], None]


class SubmissionPoller:
    """Polls the judge for every handle while a match is live."""

    def __init__(
        self,
        handles: Iterable[str],
        start_time_ms: int,
        judge,
        on_submission: SubmissionHandler,
        interval_seconds: float = 5.0,
        player_delay_seconds: float = 0.5,
        query_timeout_seconds: float = 10.0,
        unavailable_warning_cycles: int = 6,
        on_unavailable: Optional[Callable[[int], None]] = None,
        end_time_ms: Optional[int] = None,
    ):
        self.handles: List[str] = list(handles)
        self.start_time_ms = start_time_ms
        self.end_time_ms = end_time_ms
        self.interval_seconds = interval_seconds
        self.player_delay_seconds = player_delay_seconds
        self.query_timeout_seconds = query_timeout_seconds
        self.unavailable_warning_cycles = unavailable_warning_cycles
        self.last_seen_ids: Dict[str, int] = {h: NO_SUBMISSION for h in self.handles}
        self.failed_cycles = 0
        self.cycles_run = 0
        self._judge = judge
        self._on_submission = on_submission
        self._on_unavailable = on_unavailable
        self._stopped = False
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._stopped

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    # ── Lifecycle ────────────────────────────────────────────

    def start(self) -> None:
        """Start the periodic poll loop on the running event loop."""
        if self._stopped:
            raise RuntimeError("poller was stopped and cannot be restarted")
        if self._task is not None:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(
            f"Polling {len(self.handles)} players every {self.interval_seconds}s"
        )

    def stop(self) -> None:
        """Stop polling immediately. Safe to call at any time, more than once."""
        if self._stopped:
            return
        self._stopped = True
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.info("Polling stopped")

    async def wait_closed(self) -> None:
        """Wait until the poll task has fully exited."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while not self._stopped:
            try:
                await self.run_cycle()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Poll cycle error: {e}", exc_info=True)
            if self._stopped:
                break
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=self.interval_seconds
                )
            except asyncio.TimeoutError:
                pass

    # ── One cycle ────────────────────────────────────────────

    async def run_cycle(self) -> int:
        """
        Query every player once, in order, and deliver what is new.

        Returns:
            Number of submissions delivered
        """
        delivered = 0
        queried = 0
        failures = 0

        for position, handle in enumerate(self.handles):
            if self._stopped:
                return delivered
            if position > 0 and self.player_delay_seconds > 0:
                await asyncio.sleep(self.player_delay_seconds)
                if self._stopped:
                    return delivered

            queried += 1
            try:
                submissions = await self._query(handle)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                failures += 1
                logger.warning(f"Poll failed for {handle}: {e}")
                continue

            if self._stopped:
                return delivered
            delivered += self.deliver_new(handle, submissions)

        self.cycles_run += 1
        if queried and failures == queried:
            self._record_unavailable_cycle()
        else:
            self.failed_cycles = 0
        return delivered

    async def _query(self, handle: str) -> List[Submission]:
        fetch = self._judge.get_submissions
        if inspect.iscoroutinefunction(fetch):
            call = fetch(handle)
        else:
            call = asyncio.to_thread(fetch, handle)
        return await asyncio.wait_for(call, timeout=self.query_timeout_seconds)

    def deliver_new(self, handle: str, submissions: Iterable[Submission]) -> int:
        """
        Deliver a player's unseen submissions from the match window.

        Returns:
            Number of submissions delivered
        """
        watermark = self.last_seen_ids.get(handle, NO_SUBMISSION)
        fresh = sorted(
            (s for s in submissions if s.id > watermark and self._in_window(s)),
            key=lambda s: s.id,
        )

        delivered = 0
        for submission in fresh:
            if self._stopped:
                break
            if submission.id <= self.last_seen_ids[handle]:
                continue
            if submission.is_pending:
                logger.debug(f"{handle} #{submission.id} still judging, retry next cycle")
                break
            try:
                self._on_submission(handle, submission)
            except Exception:
                logger.error(
                    f"Submission handler failed for {handle} #{submission.id}",
                    exc_info=True,
                )
            self.last_seen_ids[handle] = submission.id
            delivered += 1

        if delivered:
            logger.debug(
                f"{handle}: delivered {delivered}, watermark {self.last_seen_ids[handle]}"
            )
        return delivered

    def _in_window(self, submission: Submission) -> bool:
        if submission.submission_time_ms < self.start_time_ms:
            return False
        return self.end_time_ms is None or submission.submission_time_ms < self.end_time_ms

    def _record_unavailable_cycle(self) -> None:
        self.failed_cycles += 1
        logger.warning(
            f"All {len(self.handles)} judge queries failed "
            f"({self.failed_cycles} cycles in a row)"
        )
        if (
            self._on_unavailable is not None
            and self.unavailable_warning_cycles > 0
            and self.failed_cycles % self.unavailable_warning_cycles == 0
        ):
            self._on_unavailable(self.failed_cycles)
