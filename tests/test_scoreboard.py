# Area: Match Tests
"""Tests for winner resolution and running scores."""

import itertools

from cf_battle._match.scoreboard import Scoreboard
from cf_battle.models import Submission, Verdict, load_match_config

T0 = 1_700_000_000_000
T0_S = T0 // 1000
HOUR = 3_600_000


def make_config(handles=("alice", "bob"), final_lap=False, mystery=-1):
    return load_match_config({
        "matchId": "match-board",
        "players": [{"handle": h} for h in handles],
        "problems": [
            {"contestId": 1850, "index": "A", "rating": 800},
            {"contestId": 1850, "index": "B", "rating": 1500},
        ],
        "startTime": T0,
        "endTime": T0 + HOUR,
        "finalLapEnabled": final_lap,
        "mysteryProblemIndex": mystery,
    })


def sub(sub_id, handle, index, offset_s, verdict=Verdict.ACCEPTED):
    return Submission(
        id=sub_id,
        handle=handle,
        contest_id=1850,
        problem_index=index,
        verdict=verdict,
        submission_time_seconds=T0_S + offset_s,
    )


class TestFirstSolve:
    """Tests for creating solve records."""

    def test_first_accept_creates_record(self):
        board = Scoreboard(make_config())
        update = board.apply("alice", sub(10, "alice", "B", 60))

        record = board.solves["1850-B"]
        assert record.winning_handle == "alice"
        assert record.winning_submission_id == 10
        assert record.solve_time_millis == T0 + 60_000
        assert record.points == 1321
        assert board.scores == {"alice": 1321, "bob": 0}
        assert update.winner_changed is True
        assert update.score_changes == {"alice": 1321}

    def test_everyone_starts_at_zero(self):
        board = Scoreboard(make_config(handles=("a", "b", "c")))
        assert dict(board.scores) == {"a": 0, "b": 0, "c": 0}

    def test_wrong_answer_only_updates_status(self):
        board = Scoreboard(make_config())
        update = board.apply("alice", sub(10, "alice", "A", 60, Verdict.WRONG_ANSWER))
        assert update.status_changed is True
        assert update.solve is None
        assert board.solves == {}
        assert board.statuses_for("1850-A") == {"alice": Verdict.WRONG_ANSWER}

    def test_final_lap_solve_doubled(self):
        board = Scoreboard(make_config(final_lap=True))
        board.apply("alice", sub(10, "alice", "A", 2700))
        assert board.scores["alice"] == 1000

    def test_mystery_final_lap_solve_x4(self):
        board = Scoreboard(make_config(final_lap=True, mystery=1))
        board.apply("bob", sub(10, "bob", "B", 3000))
        assert board.scores["bob"] == 5284


class TestRetroactiveCorrection:
    """Tests for winner revision when an earlier solve arrives late."""

    def test_earlier_solve_replaces_winner(self):
        board = Scoreboard(make_config())
        board.apply("alice", sub(200, "alice", "B", 120))
        assert board.scores == {"alice": 1321, "bob": 0}

        update = board.apply("bob", sub(150, "bob", "B", 60))

        assert board.scores == {"alice": 0, "bob": 1321}
        assert board.solves["1850-B"].winning_handle == "bob"
        assert update.previous_solve.winning_handle == "alice"
        assert update.score_changes == {"alice": 0, "bob": 1321}
        assert update.winner_changed is True

    def test_earlier_solve_with_larger_id_wins(self):
        config = load_match_config({
            "matchId": "match-revision",
            "players": [{"handle": "a"}, {"handle": "b"}],
            "problems": [{"contestId": 1850, "index": "C", "rating": 1000}],
            "startTime": T0,
            "endTime": T0 + HOUR,
        })
        board = Scoreboard(config)

        board.apply("a", sub(5, "a", "C", 10))
        assert board.scores == {"a": 660, "b": 0}

        update = board.apply("b", sub(7, "b", "C", 5))

        assert board.solves["1850-C"].winning_handle == "b"
        assert board.solves["1850-C"].winning_submission_id == 7
        assert board.scores == {"a": 0, "b": 660}
        assert update.previous_solve.winning_handle == "a"
        assert update.score_changes == {"a": 0, "b": 660}

    def test_debits_exactly_what_was_credited(self):
        board = Scoreboard(make_config(final_lap=True))
        # Final-lap solve worth double
        board.apply("alice", sub(300, "alice", "B", 2800))
        assert board.scores["alice"] == 2642

        board.apply("bob", sub(100, "bob", "B", 600))
        assert board.scores == {"alice": 0, "bob": 1321}

    def test_later_solve_does_not_replace(self):
        board = Scoreboard(make_config())
        board.apply("bob", sub(150, "bob", "B", 60))
        update = board.apply("alice", sub(200, "alice", "B", 120))
        assert update.solve is None
        assert board.scores == {"alice": 0, "bob": 1321}

    def test_equal_time_smaller_id_wins(self):
        board = Scoreboard(make_config())
        board.apply("alice", sub(21, "alice", "A", 90))
        board.apply("bob", sub(20, "bob", "A", 90))
        assert board.solves["1850-A"].winning_handle == "bob"

    def test_same_player_earlier_solve_keeps_points(self):
        board = Scoreboard(make_config())
        board.apply("alice", sub(30, "alice", "A", 90))
        update = board.apply("alice", sub(25, "alice", "A", 60))
        assert board.scores["alice"] == 500
        assert board.solves["1850-A"].winning_submission_id == 25
        assert update.winner_changed is False


class TestMatchWindow:
    """Tests for submissions made outside the match."""

    def test_solve_after_end_not_scored(self):
        board = Scoreboard(make_config(final_lap=True))
        update = board.apply("alice", sub(10, "alice", "A", 3630))
        assert update.solve is None
        assert update.status_changed is False
        assert board.solves == {}
        assert board.scores == {"alice": 0, "bob": 0}

    def test_solve_exactly_at_end_not_scored(self):
        board = Scoreboard(make_config())
        board.apply("alice", sub(10, "alice", "A", 3600))
        assert board.scores["alice"] == 0

    def test_late_solve_cannot_revise_winner(self):
        board = Scoreboard(make_config())
        board.apply("alice", sub(10, "alice", "A", 120))
        board.apply("bob", sub(9, "bob", "A", 3700))
        assert board.solves["1850-A"].winning_handle == "alice"

    def test_solve_before_start_not_scored(self):
        board = Scoreboard(make_config())
        board.apply("alice", sub(10, "alice", "A", -30))
        assert board.scores["alice"] == 0


class TestIdempotence:
    """Tests for redelivery of the same submission."""

    def test_redelivery_changes_nothing(self):
        board = Scoreboard(make_config())
        submission = sub(10, "alice", "B", 60)
        board.apply("alice", submission)
        update = board.apply("alice", submission)

        assert update.solve is None
        assert update.status_changed is False
        assert update.score_changes == {}
        assert board.scores == {"alice": 1321, "bob": 0}

    def test_repeated_verdict_is_not_a_status_change(self):
        board = Scoreboard(make_config())
        board.apply("alice", sub(10, "alice", "A", 60, Verdict.WRONG_ANSWER))
        update = board.apply("alice", sub(11, "alice", "A", 70, Verdict.WRONG_ANSWER))
        assert update.status_changed is False


class TestTieBreak:
    """Tests for full ties (same time, same id)."""

    def test_full_tie_goes_to_first_listed_player(self):
        for order in (("alice", "bob"), ("bob", "alice")):
            board = Scoreboard(make_config())
            for handle in order:
                board.apply(handle, sub(77, handle, "A", 90))
            assert board.solves["1850-A"].winning_handle == "alice"
            assert board.scores == {"alice": 500, "bob": 0}


class TestOrderIndependence:
    """Final state does not depend on how players' deliveries interleave."""

    SUBMISSIONS = [
        ("alice", sub(101, "alice", "A", 30, Verdict.WRONG_ANSWER)),
        ("alice", sub(105, "alice", "A", 90)),
        ("alice", sub(110, "alice", "B", 200)),
        ("bob", sub(102, "bob", "A", 90)),
        ("bob", sub(108, "bob", "B", 150)),
        ("carol", sub(103, "carol", "B", 150)),
        ("carol", sub(109, "carol", "A", 40, Verdict.TIME_LIMIT_EXCEEDED)),
    ]

    @staticmethod
    def _respects_per_player_order(sequence):
        last = {}
        for handle, submission in sequence:
            if submission.id < last.get(handle, -1):
                return False
            last[handle] = submission.id
        return True

    def test_all_interleavings_agree(self):
        config = make_config(handles=("alice", "bob", "carol"))
        outcomes = set()
        checked = 0
        for sequence in itertools.permutations(self.SUBMISSIONS):
            if not self._respects_per_player_order(sequence):
                continue
            board = Scoreboard(config)
            for handle, submission in sequence:
                board.apply(handle, submission)
            outcomes.add((
                tuple(sorted(board.scores.items())),
                tuple(sorted(
                    (pid, r.winning_handle, r.winning_submission_id)
                    for pid, r in board.solves.items()
                )),
            ))
            checked += 1

        assert checked == 7 * 6 * 5 * 4 // 2 // 2
        assert outcomes == {(
            (("alice", 0), ("bob", 500), ("carol", 1321)),
            (("1850-A", "bob", 102), ("1850-B", "carol", 103)),
        )}


class TestIgnoredSubmissions:
    """Tests for submissions that must not touch the board."""

    def test_unknown_handle(self):
        board = Scoreboard(make_config())
        update = board.apply("mallory", sub(1, "mallory", "A", 10))
        assert update.solve is None
        assert "mallory" not in board.scores

    def test_problem_not_in_match(self):
        board = Scoreboard(make_config())
        update = board.apply("alice", sub(1, "alice", "Z", 10))
        assert update.solve is None
        assert board.scores["alice"] == 0
        assert board.statuses_for("1850-Z") == {}

    def test_pending_submission(self):
        board = Scoreboard(make_config())
        update = board.apply("alice", sub(1, "alice", "A", 10, verdict=None))
        assert update.status_changed is False
        assert board.statuses_for("1850-A") == {}


class TestDisplay:
    """Tests for display_status() and standings()."""

    def test_display_status_priority(self):
        board = Scoreboard(make_config())
        assert board.display_status("1850-A") is None

        board.apply("alice", sub(1, "alice", "A", 10, Verdict.WRONG_ANSWER))
        assert board.display_status("1850-A") == "WA"

        board.apply("bob", sub(2, "bob", "A", 20, Verdict.TIME_LIMIT_EXCEEDED))
        assert board.display_status("1850-A") == "TLE"

        board.apply("bob", sub(3, "bob", "A", 30))
        assert board.display_status("1850-A") == "AC"

    def test_other_verdict_has_no_display(self):
        board = Scoreboard(make_config())
        board.apply("alice", sub(1, "alice", "A", 10, Verdict.OTHER))
        assert board.display_status("1850-A") is None

    def test_standings_sorted_with_player_order_ties(self):
        board = Scoreboard(make_config(handles=("alice", "bob", "carol")))
        board.apply("carol", sub(1, "carol", "A", 10))
        assert board.standings() == [("carol", 500), ("alice", 0), ("bob", 0)]

    def test_clear(self):
        board = Scoreboard(make_config())
        board.apply("alice", sub(1, "alice", "A", 10))
        board.clear()
        assert board.scores == {"alice": 0, "bob": 0}
        assert board.solves == {}
