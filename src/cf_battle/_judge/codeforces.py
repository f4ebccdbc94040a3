# Area: Judge
"""
cf_battle._judge.codeforces — Codeforces judge client
=====================================================

Blocking client for the Codeforces ``user.status`` endpoint. The poller
calls ``get_submissions`` from a worker thread, one handle at a time.

Requests are spaced by at least ``min_request_interval`` seconds to stay
under the public API rate limit. Any transport or API failure surfaces as
JudgeQueryError; individual malformed records are dropped and logged.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, List, Optional, Protocol

import requests

from ..errors import JudgeQueryError, MalformedSubmissionError
from ..models import Submission, Verdict

logger = logging.getLogger("cf_battle.judge")

CODEFORCES_API_BASE = "https://codeforces.com/api"


class JudgeClient(Protocol):
    """Anything that can list a player's submissions, newest or oldest first."""

    def get_submissions(self, handle: str) -> List[Submission]:
        ...


def parse_submission(raw: Any, handle: str) -> Submission:
    """
    Build a Submission from one ``user.status`` record.

    Raises:
        MalformedSubmissionError: if a required field is missing or mistyped
    """
    if not isinstance(raw, dict):
        raise MalformedSubmissionError(raw, f"expected object, got {type(raw).__name__}")
    problem = raw.get("problem")
    if not isinstance(problem, dict):
        raise MalformedSubmissionError(raw, "missing 'problem'")

    try:
        sub_id = int(raw["id"])
        created = int(raw["creationTimeSeconds"])
        contest_id = int(problem.get("contestId", raw.get("contestId")))
        index = str(problem["index"])
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedSubmissionError(raw, f"bad field: {e}") from e

    return Submission(
        id=sub_id,
        handle=handle,
        contest_id=contest_id,
        problem_index=index,
        verdict=Verdict.from_judge(raw.get("verdict")),
        submission_time_seconds=created,
    )


def parse_submissions(records: Any, handle: str) -> List[Submission]:
    """Parse a whole ``user.status`` result, dropping malformed records."""
    if not isinstance(records, list):
        raise JudgeQueryError(handle, f"expected a list of submissions, got {type(records).__name__}")
    submissions = []
    for raw in records:
        try:
            submissions.append(parse_submission(raw, handle))
        except MalformedSubmissionError as e:
            logger.warning(f"Dropped submission for {handle}: {e.reason}")
    return submissions


class CodeforcesClient:
    """Rate-limited Codeforces API client."""

    def __init__(
        self,
        base_url: str = CODEFORCES_API_BASE,
        timeout_seconds: float = 10.0,
        min_request_interval: float = 2.0,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.min_request_interval = min_request_interval
        self._session = session or requests.Session()
        self._clock = clock
        self._sleep = sleep
        self._last_request: Optional[float] = None
        self._lock = threading.Lock()

    def get_submissions(self, handle: str) -> List[Submission]:
        """Full submission history of ``handle``."""
        result = self._request("user.status", {"handle": handle}, handle)
        return parse_submissions(result, handle)

    def _request(self, method: str, params: dict, handle: str) -> Any:
        with self._lock:
            self._wait_for_slot()
            try:
                response = self._session.get(
                    f"{self.base_url}/{method}",
                    params=params,
                    timeout=self.timeout_seconds,
                )
            except requests.RequestException as e:
                raise JudgeQueryError(handle, f"request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise JudgeQueryError(
                handle, f"HTTP {response.status_code}: response is not JSON"
            ) from e

        if not isinstance(payload, dict):
            raise JudgeQueryError(handle, "unexpected response shape")
        if payload.get("status") != "OK":
            comment = payload.get("comment") or f"HTTP {response.status_code}"
            raise JudgeQueryError(handle, f"Codeforces API error: {comment}")
        return payload.get("result")

    def _wait_for_slot(self) -> None:
        if self._last_request is not None:
            elapsed = self._clock() - self._last_request
            if elapsed < self.min_request_interval:
                self._sleep(self.min_request_interval - elapsed)
        self._last_request = self._clock()

    def close(self) -> None:
        self._session.close()
