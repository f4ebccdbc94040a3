# Area: Store
"""
cf_battle._store.database — Database Initialization
===================================================

SQLite connection handling for the match store. Every repository call
opens its own short-lived connection, so a repository can be shared
between the runner's event loop and worker threads.
"""

import sqlite3
import logging
from pathlib import Path
from typing import Iterable, Optional, Tuple

logger = logging.getLogger("cf_battle.store")

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def get_connection(db_path: str = "cf_battle.db") -> sqlite3.Connection:
    """
    Open a connection with dict-style rows and foreign keys enforced.

    Args:
        db_path: Path to the SQLite database file
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_database(db_path: str = "cf_battle.db") -> None:
    """
    Create the match tables if they do not exist yet.

    Args:
        db_path: Path to the SQLite database file; parent directories
            are created as needed
    """
    parent = Path(db_path).parent
    if str(parent) not in ("", "."):
        parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
        conn.commit()
        logger.debug(f"Match store ready at {db_path}")
    finally:
        conn.close()


class BaseRepository:
    """Shared query helpers for the match store repositories."""

    def __init__(self, db_path: str = "cf_battle.db"):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        return get_connection(self.db_path)

    def _execute(
        self, query: str, params: tuple = (), fetch: bool = False
    ) -> Optional[list]:
        """
        Run one statement.

        Returns:
            Rows as dicts if fetch=True, else None
        """
        conn = self._get_conn()
        try:
            cursor = conn.execute(query, params)
            if fetch:
                return [dict(row) for row in cursor.fetchall()]
            conn.commit()
            return None
        finally:
            conn.close()

    def _execute_one(self, query: str, params: tuple = ()) -> Optional[dict]:
        results = self._execute(query, params, fetch=True)
        return results[0] if results else None

    def _execute_all(self, statements: Iterable[Tuple[str, tuple]]) -> None:
        """Run several statements in a single transaction."""
        conn = self._get_conn()
        try:
            with conn:
                for query, params in statements:
                    conn.execute(query, params)
        finally:
            conn.close()
