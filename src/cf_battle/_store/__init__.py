# Area: Store
"""
Store - SQLite persistence of match configs and results.
"""

from .database import BaseRepository, get_connection, init_database
from .repo_matches import MatchRepository

__all__ = [
    "BaseRepository",
    "get_connection",
    "init_database",
    "MatchRepository",
]
