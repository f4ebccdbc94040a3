"""
main.py — Run a Codeforces battle
=================================

Configure the players and problems below, then run:

    python main.py

The runner will:
  1. Wait for the start time
  2. Poll Codeforces for each player's submissions
  3. Award every problem to its first accepted solve
  4. Print the final standings when the time is up

Press Ctrl+C to abandon the match.
"""

from cf_battle import (
    LoggingObserver,
    MatchConfig,
    MatchObserver,
    MatchRunner,
    encode_invite,
    now_ms,
)


class ScoreboardPrinter(MatchObserver):
    """Prints a one-line scoreboard whenever a score changes."""

    def __init__(self):
        self.scores = {}

    def on_score_change(self, handle, new_points):
        self.scores[handle] = new_points
        line = "  ".join(f"{h}: {p}" for h, p in sorted(self.scores.items(), key=lambda i: -i[1]))
        print(f"[scores] {line}")

    def on_solve(self, problem_id, winning_handle):
        print(f"[solve]  {problem_id} goes to {winning_handle}")


# ── Match setup ──
config = MatchConfig.create(
    players=[
        {"handle": "your-handle"},
        {"handle": "friend-handle"},
    ],
    problems=[
        {"contestId": 1850, "index": "A", "name": "To My Critics", "rating": 800},
        {"contestId": 1850, "index": "C", "name": "Word on the Paper", "rating": 800},
        {"contestId": 1850, "index": "D", "name": "Balanced Round", "rating": 900},
        {"contestId": 1850, "index": "E", "name": "Cardboard for Pictures", "rating": 1100},
    ],
    start_time=now_ms() + 60_000,   # one minute from now
    duration_minutes=30,
    final_lap_enabled=True,         # double points in the last quarter
    with_mystery=True,              # one random problem worth double
)

print(f"Invite code: {encode_invite(config)}")

# ── Run until the match ends ──
runner = MatchRunner(config, observers=[ScoreboardPrinter(), LoggingObserver()])
results = runner.run()

if results is None:
    print("Match abandoned.")
else:
    print(f"Winner: {results.winner or 'nobody'}")
