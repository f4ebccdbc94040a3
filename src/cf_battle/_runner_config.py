# Area: Shared
"""
cf_battle._runner_config — Runner Configuration
===============================================

Settings and validation for MatchEngine and MatchRunner.

Values are resolved in this order, later wins:
    1. RunnerSettings defaults
    2. The settings dict (usually a JSON file passed with --settings)
    3. Environment variables, including those from a .env file
"""

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from dotenv import find_dotenv, load_dotenv

from ._judge import CODEFORCES_API_BASE

logger = logging.getLogger("cf_battle")


@dataclass
class RunnerSettings:
    """Timing, storage and judge settings for running matches."""
    poll_interval_seconds: float = 5.0
    tick_interval_seconds: float = 1.0
    player_delay_seconds: float = 0.5
    query_timeout_seconds: float = 10.0
    min_request_interval_seconds: float = 2.0
    unavailable_warning_cycles: int = 6
    judge_api_url: str = CODEFORCES_API_BASE
    db_path: str = "cf_battle.db"
    log_file: str = "cf_battle.log"
    log_level: str = "INFO"


# Environment variable -> (settings field, type)
ENV_MAPPINGS = {
    "POLL_INTERVAL_SECONDS": ("poll_interval_seconds", float),
    "TICK_INTERVAL_SECONDS": ("tick_interval_seconds", float),
    "PLAYER_DELAY_SECONDS": ("player_delay_seconds", float),
    "QUERY_TIMEOUT_SECONDS": ("query_timeout_seconds", float),
    "MIN_REQUEST_INTERVAL_SECONDS": ("min_request_interval_seconds", float),
    "UNAVAILABLE_WARNING_CYCLES": ("unavailable_warning_cycles", int),
    "JUDGE_API_URL": ("judge_api_url", str),
    "BATTLE_DB_PATH": ("db_path", str),
    "LOG_FILE": ("log_file", str),
    "LOG_LEVEL": ("log_level", str),
}

# Fields that must be strictly positive
POSITIVE_FIELDS = [
    "poll_interval_seconds",
    "tick_interval_seconds",
    "query_timeout_seconds",
    "unavailable_warning_cycles",
]

# Fields that may be zero but not negative
NON_NEGATIVE_FIELDS = [
    "player_delay_seconds",
    "min_request_interval_seconds",
]


def load_settings(
    config: Optional[Dict[str, Any]] = None,
    env_file: Optional[str] = None,
) -> RunnerSettings:
    """
    Build RunnerSettings from a config dict and the environment.

    Args:
        config: Settings dict; unknown keys are ignored
        env_file: Path of a .env file; defaults to searching for ``.env``

    Returns:
        Validated RunnerSettings

    Raises:
        ValueError: If a value has the wrong type or is out of range
    """
    load_dotenv(env_file or find_dotenv(usecwd=True), override=False)

    known = {f.name for f in fields(RunnerSettings)}
    values: Dict[str, Any] = {}
    for key, value in (config or {}).items():
        if key in known:
            values[key] = value
        else:
            logger.debug(f"Ignoring unknown setting '{key}'")

    for env_key, (field_name, cast) in ENV_MAPPINGS.items():
        if env_key in os.environ:
            raw = os.environ[env_key]
            try:
                values[field_name] = cast(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {env_key}: {raw!r}")

    settings = RunnerSettings(**values)
    validate_settings(settings)
    return settings


def validate_settings(settings: RunnerSettings) -> None:
    """
    Validate numeric ranges.

    Args:
        settings: Settings to check

    Raises:
        ValueError: If any interval is out of range
    """
    errors = []
    for name in POSITIVE_FIELDS:
        value = getattr(settings, name)
        if not isinstance(value, (int, float)) or value <= 0:
            errors.append(f"{name} must be positive, got {value!r}")
    for name in NON_NEGATIVE_FIELDS:
        value = getattr(settings, name)
        if not isinstance(value, (int, float)) or value < 0:
            errors.append(f"{name} must not be negative, got {value!r}")
    if not settings.judge_api_url:
        errors.append("judge_api_url must not be empty")
    if errors:
        raise ValueError(f"Invalid settings: {errors}")
