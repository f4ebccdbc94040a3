"""
cf_battle.cli — Command-line interface
======================================

Usage:
    python -m cf_battle run --config match.json           # Run a match
    python -m cf_battle run --invite v1.eyJ...            # Run a match from an invite
    python -m cf_battle invite --config match.json        # Print the invite code
    python -m cf_battle results MATCH_ID                  # Show stored standings
    python -m cf_battle list                              # List stored matches

Runner settings come from --settings (JSON), then environment variables
and a .env file (POLL_INTERVAL_SECONDS, JUDGE_API_URL, BATTLE_DB_PATH, ...).
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ._runner_config import RunnerSettings, load_settings
from ._shared import log_config_error
from .callbacks import LoggingObserver
from .errors import InvalidInviteError, InvalidMatchConfigError
from .invite import decode_invite, encode_invite, invite_link
from .models import MatchConfig, load_match_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cf-battle",
        description="Codeforces Battle - run timed multi-player matches",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cf_battle run --config match.json
  python -m cf_battle run --invite "https://host/#/?invite=v1.eyJ..."
  python -m cf_battle invite --config match.json --base-url https://host/#/
  POLL_INTERVAL_SECONDS=10 python -m cf_battle run --config match.json
        """,
    )
    parser.add_argument(
        "--settings",
        type=str,
        help="Path to JSON runner settings file",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a match until it ends")
    source = run.add_mutually_exclusive_group(required=True)
    source.add_argument("--config", type=str, help="Path to JSON match config")
    source.add_argument("--invite", type=str, help="Invite code or invite link")

    invite = sub.add_parser("invite", help="Print the invite code of a match config")
    invite.add_argument("--config", type=str, required=True, help="Path to JSON match config")
    invite.add_argument("--base-url", type=str, help="Print a full join link instead")

    results = sub.add_parser("results", help="Show the stored results of a match")
    results.add_argument("match_id", type=str)
    results.add_argument("--json", action="store_true", help="Print raw JSON")

    sub.add_parser("list", help="List stored matches")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def load_json_file(path: str) -> Dict[str, Any]:
    """Read a JSON object from ``path``."""
    with open(Path(path), encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return data


def load_runner_settings(path: Optional[str]) -> RunnerSettings:
    config: Dict[str, Any] = {}
    if path:
        config = load_json_file(path)
    return load_settings(config)


def read_match_config(args: argparse.Namespace) -> MatchConfig:
    """
    Build the MatchConfig from --config or --invite.

    Raises:
        InvalidMatchConfigError, InvalidInviteError, OSError, ValueError
    """
    if getattr(args, "invite", None):
        return decode_invite(args.invite)
    return load_match_config(load_json_file(args.config))


def cmd_run(args: argparse.Namespace, settings: RunnerSettings) -> int:
    from .runner import MatchRunner

    config = read_match_config(args)
    runner = MatchRunner(config, settings=settings, observers=[LoggingObserver()])
    results = runner.run()
    return 0 if results is not None else 2


def cmd_invite(args: argparse.Namespace) -> int:
    config = read_match_config(args)
    if args.base_url:
        print(invite_link(config, args.base_url))
    else:
        print(encode_invite(config))
    return 0


def cmd_results(args: argparse.Namespace, settings: RunnerSettings) -> int:
    from ._store import MatchRepository

    results = MatchRepository(settings.db_path).get_results(args.match_id)
    if results is None:
        print(f"No results stored for {args.match_id}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(results.to_dict(), indent=2))
        return 0

    print(f"Match {results.match_id}")
    print(f"Winner: {results.winner or 'none'}")
    for row in results.standings:
        print(f"  #{row.rank:<3} {row.handle:<24} {row.points:>6}  ({row.solved} solved)")
    return 0


def cmd_list(settings: RunnerSettings) -> int:
    from ._store import MatchRepository

    rows = MatchRepository(settings.db_path).list_matches()
    if not rows:
        print("No stored matches")
        return 0
    for row in rows:
        winner = row.get("winner") or ("-" if row.get("ended_at") else "not finished")
        print(f"{row['match_id']}  winner: {winner}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    try:
        settings = load_runner_settings(args.settings)
    except (OSError, ValueError) as e:
        print(f"Error: could not load settings: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == "run":
            return cmd_run(args, settings)
        if args.command == "invite":
            return cmd_invite(args)
        if args.command == "results":
            return cmd_results(args, settings)
        if args.command == "list":
            return cmd_list(settings)
    except InvalidMatchConfigError as e:
        log_config_error(e)
        return 1
    except InvalidInviteError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 1
