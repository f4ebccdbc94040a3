"""
cf_battle.models — Match domain models
=======================================

MatchConfig is created once by the setup flow and is read-only afterwards.
It accepts both snake_case keys and the camelCase keys used by stored
configs and invite links (``startTime``, ``contestId``, ``finalLap`` ...).

Submission and SolveRecord are plain frozen dataclasses: they are created
on the hot path of every poll cycle and never need validation beyond the
judge-response parsing in ``cf_battle._judge``.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .errors import InvalidMatchConfigError

MIN_PLAYERS = 2
NO_MYSTERY = -1


def problem_key(contest_id: int, index: str) -> str:
    """Identifier of a problem, e.g. ``"1850-A"``."""
    return f"{contest_id}-{index}"


def generate_match_id(now_ms: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    """Generate ``match-<epoch ms>-<9 base-36 chars>``."""
    rng = rng or random.Random()
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    alphabet = string.digits + string.ascii_lowercase
    suffix = "".join(rng.choice(alphabet) for _ in range(9))
    return f"match-{now_ms}-{suffix}"


class _Model(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Player(_Model):
    """A participant, identified by their judge handle."""
    handle: str = Field(min_length=1)
    rating: Optional[int] = None


class Problem(_Model):
    """A judge problem taking part in the match."""
    contest_id: int
    index: str = Field(min_length=1)
    name: str = ""
    rating: Optional[int] = None

    @property
    def problem_id(self) -> str:
        return problem_key(self.contest_id, self.index)


class MatchConfig(_Model):
    """
    Immutable description of one match.

    Timestamps are epoch milliseconds. ``mystery_problem_index`` is an
    index into ``problems``; ``-1`` or ``None`` means no mystery problem.
    """
    match_id: str = Field(min_length=1)
    players: Tuple[Player, ...]
    problems: Tuple[Problem, ...]
    start_time: int
    end_time: int
    final_lap_enabled: bool = Field(
        default=False,
        validation_alias=AliasChoices("final_lap_enabled", "finalLapEnabled", "finalLap"),
        serialization_alias="finalLapEnabled",
    )
    mystery_problem_index: Optional[int] = None

    @model_validator(mode="after")
    def check_invariants(self) -> "MatchConfig":
        if len(self.players) < MIN_PLAYERS:
            raise ValueError(f"at least {MIN_PLAYERS} players are required")
        handles = [p.handle.casefold() for p in self.players]
        if len(set(handles)) != len(handles):
            raise ValueError("player handles must be unique")
        if not self.problems:
            raise ValueError("at least one problem is required")
        keys = [p.problem_id for p in self.problems]
        if len(set(keys)) != len(keys):
            raise ValueError("problems must be unique by (contest_id, index)")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        idx = self.mystery_problem_index
        if idx is not None and idx != NO_MYSTERY and not 0 <= idx < len(self.problems):
            raise ValueError(f"mystery_problem_index {idx} is out of range")
        return self

    # ── Derived values ───────────────────────────────────────

    @property
    def handles(self) -> Tuple[str, ...]:
        return tuple(p.handle for p in self.players)

    @property
    def duration_ms(self) -> int:
        return self.end_time - self.start_time

    @property
    def final_lap_start(self) -> float:
        """Start of the last quarter of the match."""
        return self.start_time + 0.75 * self.duration_ms

    @property
    def mystery_problem_id(self) -> Optional[str]:
        idx = self.mystery_problem_index
        if idx is None or idx == NO_MYSTERY:
            return None
        return self.problems[idx].problem_id

    def get_problem(self, problem_id: str) -> Optional[Problem]:
        for problem in self.problems:
            if problem.problem_id == problem_id:
                return problem
        return None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict using the camelCase wire keys."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def create(
        cls,
        players: Sequence[Any],
        problems: Sequence[Any],
        start_time: int,
        duration_minutes: float = 60,
        final_lap_enabled: bool = False,
        with_mystery: bool = False,
        match_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ) -> "MatchConfig":
        """
        Build a config the way the setup flow does.

        The end time is derived from the duration and, when requested,
        one problem is picked at random as the mystery problem.
        """
        rng = rng or random.Random()
        mystery = NO_MYSTERY
        if with_mystery and problems:
            mystery = rng.randrange(len(problems))
        return load_match_config({
            "match_id": match_id or generate_match_id(rng=rng),
            "players": list(players),
            "problems": list(problems),
            "start_time": start_time,
            "end_time": start_time + int(duration_minutes * 60 * 1000),
            "final_lap_enabled": final_lap_enabled,
            "mystery_problem_index": mystery,
        })


def load_match_config(data: Any) -> MatchConfig:
    """
    Validate raw data into a MatchConfig.

    Raises:
        InvalidMatchConfigError: with one readable message per problem found
    """
    if isinstance(data, MatchConfig):
        return data
    if not isinstance(data, dict):
        raise InvalidMatchConfigError(
            [f"expected a mapping, got {type(data).__name__}"]
        )
    try:
        return MatchConfig.model_validate(data)
    except ValidationError as e:
        raise InvalidMatchConfigError(
            _format_validation_errors(e), config_payload=data
        ) from e


def _format_validation_errors(exc: ValidationError) -> list:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return messages


# ── Judge-side records ───────────────────────────────────────


class Verdict(Enum):
    """Judge verdict of a finished submission."""
    ACCEPTED = "ACCEPTED"
    WRONG_ANSWER = "WRONG_ANSWER"
    TIME_LIMIT_EXCEEDED = "TIME_LIMIT_EXCEEDED"
    OTHER = "OTHER"

    @classmethod
    def from_judge(cls, raw: Optional[str]) -> Optional["Verdict"]:
        """
        Map a Codeforces verdict code.

        Returns None while the submission is still being judged.
        """
        if raw is None or raw == "TESTING":
            return None
        if raw == "OK":
            return cls.ACCEPTED
        if raw == "WRONG_ANSWER":
            return cls.WRONG_ANSWER
        if raw == "TIME_LIMIT_EXCEEDED":
            return cls.TIME_LIMIT_EXCEEDED
        return cls.OTHER


@dataclass(frozen=True)
class Submission:
    """One submission as reported by the judge for a single player."""
    id: int
    handle: str
    contest_id: int
    problem_index: str
    verdict: Optional[Verdict]
    submission_time_seconds: int

    @property
    def problem_id(self) -> str:
        return problem_key(self.contest_id, self.problem_index)

    @property
    def submission_time_ms(self) -> int:
        return self.submission_time_seconds * 1000

    @property
    def is_pending(self) -> bool:
        return self.verdict is None

    @property
    def is_accepted(self) -> bool:
        return self.verdict is Verdict.ACCEPTED


@dataclass(frozen=True)
class SolveRecord:
    """
    The current winning solve of one problem.

    ``points`` is exactly what was credited to ``winning_handle`` for it.
    """
    problem_id: str
    winning_handle: str
    winning_submission_id: int
    solve_time_millis: int
    points: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SolveRecord":
        return cls(
            problem_id=str(data["problem_id"]),
            winning_handle=str(data["winning_handle"]),
            winning_submission_id=int(data["winning_submission_id"]),
            solve_time_millis=int(data["solve_time_millis"]),
            points=int(data["points"]),
        )
