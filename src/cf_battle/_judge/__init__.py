# Area: Judge
"""
Judge - Access to the external judge service.

This package handles:
- Querying a player's submission history
- Parsing judge records into Submission objects
- Client-side rate limiting
"""

from .codeforces import (
    CODEFORCES_API_BASE,
    CodeforcesClient,
    JudgeClient,
    parse_submission,
    parse_submissions,
)

__all__ = [
    "CODEFORCES_API_BASE",
    "CodeforcesClient",
    "JudgeClient",
    "parse_submission",
    "parse_submissions",
]
