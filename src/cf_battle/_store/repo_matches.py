# Area: Store
"""
cf_battle._store.repo_matches — Matches Repository
==================================================

Persists the two durable artifacts of a match: the configuration,
saved when the match is created, and the results snapshot, saved once
when it ends. Live state (scores, solve records, watermarks) is never
stored; an abandoned match simply has no results row.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ..models import MatchConfig, load_match_config
from .._match.results import MatchResults
from .database import BaseRepository, init_database

logger = logging.getLogger("cf_battle.store")


class MatchRepository(BaseRepository):
    """
    Repository for the matches and match_results tables.

    The schema is created on first use.
    """

    def __init__(self, db_path: str = "cf_battle.db"):
        super().__init__(db_path)
        init_database(db_path)

    def save_config(self, config: MatchConfig) -> None:
        """Insert or replace the config of ``config.match_id``."""
        query = """
            INSERT OR REPLACE INTO matches
            (match_id, config_json, start_time, end_time)
            VALUES (?, ?, ?, ?)
        """
        self._execute(query, (
            config.match_id,
            json.dumps(config.to_dict()),
            config.start_time,
            config.end_time,
        ))
        logger.debug(f"Saved config for {config.match_id}")

    def get_config(self, match_id: str) -> Optional[MatchConfig]:
        """
        Load a stored config.

        Returns:
            The MatchConfig, or None if the match is unknown

        Raises:
            InvalidMatchConfigError: If the stored config no longer validates
        """
        row = self._execute_one(
            "SELECT config_json FROM matches WHERE match_id = ?", (match_id,)
        )
        if row is None:
            return None
        return load_match_config(json.loads(row["config_json"]))

    def save_results(self, results: MatchResults) -> None:
        """
        Store the results snapshot, together with its config.

        The config row is written too, so results can be saved for a
        match whose config was never stored separately.
        """
        config = results.config
        self._execute_all([
            (
                """
                INSERT OR IGNORE INTO matches
                (match_id, config_json, start_time, end_time)
                VALUES (?, ?, ?, ?)
                """,
                (
                    config.match_id,
                    json.dumps(config.to_dict()),
                    config.start_time,
                    config.end_time,
                ),
            ),
            (
                """
                INSERT OR REPLACE INTO match_results
                (match_id, results_json, winner, ended_at)
                VALUES (?, ?, ?, ?)
                """,
                (
                    results.match_id,
                    json.dumps(results.to_dict()),
                    results.winner,
                    results.ended_at,
                ),
            ),
        ])
        logger.info(f"Saved results for {results.match_id}")

    def get_results(self, match_id: str) -> Optional[MatchResults]:
        row = self._execute_one(
            "SELECT results_json FROM match_results WHERE match_id = ?", (match_id,)
        )
        if row is None:
            return None
        return MatchResults.from_dict(json.loads(row["results_json"]))

    def list_matches(self) -> List[Dict[str, Any]]:
        """
        Summary rows of every stored match, newest start first.

        Returns:
            Dicts with match_id, start_time, end_time and winner
            (None while there are no results)
        """
        query = """
            SELECT m.match_id, m.start_time, m.end_time,
                   r.winner, r.ended_at
            FROM matches m
            LEFT JOIN match_results r ON r.match_id = m.match_id
            ORDER BY m.start_time DESC
        """
        return self._execute(query, fetch=True) or []

    def delete_match(self, match_id: str) -> None:
        """Remove a match and its results."""
        self._execute_all([
            ("DELETE FROM match_results WHERE match_id = ?", (match_id,)),
            ("DELETE FROM matches WHERE match_id = ?", (match_id,)),
        ])
        logger.info(f"Deleted match {match_id}")
