"""
cf_battle.errors — Custom exception classes
============================================

Defines the exception hierarchy for the battle engine.
Configuration errors carry their full context for structured logging.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import json


class BattleError(Exception):
    """Base exception for all cf_battle errors."""
    pass


class InvalidMatchConfigError(BattleError):
    """Raised when a match configuration cannot be started."""

    def __init__(
        self,
        errors: List[str],
        config_payload: Optional[Dict[str, Any]] = None,
    ):
        self.errors = errors
        self.config_payload = config_payload
        super().__init__(f"Invalid match configuration: {errors}")

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type="INVALID_MATCH_CONFIG",
            payload=self.config_payload,
            validation_errors=self.errors,
        )


class JudgeQueryError(BattleError):
    """Raised when the judge service cannot answer a submission query."""

    def __init__(self, handle: str, reason: str):
        self.handle = handle
        self.reason = reason
        super().__init__(f"Judge query for '{handle}' failed: {reason}")


class MalformedSubmissionError(BattleError):
    """Raised when a single judge submission record is missing fields."""

    def __init__(self, raw: Any, reason: str):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Malformed submission record: {reason}")


class MatchStateError(BattleError):
    """Raised on a lifecycle operation that the current phase does not allow."""
    pass


class InvalidInviteError(BattleError):
    """Raised when an invite code cannot be decoded into a match config."""
    pass


def _format_error_block(
    error_type: str,
    payload: Optional[Dict[str, Any]],
    validation_errors: Optional[List[str]],
) -> str:
    """Format a structured error block for terminal output."""
    from datetime import datetime, timezone

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    lines = [
        "",
        "=" * 64,
        " MATCH CONFIGURATION ERROR — MATCH NOT STARTED",
        "=" * 64,
        f" Timestamp:    {timestamp}",
        f" Error Type:   {error_type}",
    ]

    if payload is not None:
        lines.append("")
        lines.append(" ── CONFIG PAYLOAD " + "─" * 45)
        lines.append(_indent_json(payload))

    if validation_errors:
        lines.append("")
        lines.append(" ── VALIDATION ERRORS " + "─" * 42)
        for error in validation_errors:
            lines.append(f" • {error}")

    lines.append("")
    lines.append("=" * 64)
    lines.append("")

    return "\n".join(lines)


def _indent_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format JSON with indentation for error logs."""
    try:
        formatted = json.dumps(data, indent=indent, default=str)
        return "\n".join(" " + line for line in formatted.split("\n"))
    except (TypeError, ValueError):
        return f" {repr(data)}"
