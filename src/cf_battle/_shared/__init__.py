# Area: Shared
"""
Shared utilities used by the engine, the store and the runner.

This package contains:
- Logging configuration
"""

from .logging_config import (
    JSONFormatter,
    TerminalFormatter,
    log_config_error,
    setup_logging,
)

__all__ = [
    "JSONFormatter",
    "TerminalFormatter",
    "log_config_error",
    "setup_logging",
]
