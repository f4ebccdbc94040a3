# Area: Match Tests
"""Tests for the point formula and multipliers."""

import pytest

from cf_battle.models import load_match_config
from cf_battle.scoring import (
    awarded_points,
    base_points,
    is_final_lap,
    multiplier_for,
    problem_points_table,
    round_half_up,
    solve_points,
)

T0 = 1_700_000_000_000
HOUR = 3_600_000


def make_config(final_lap=True, mystery=-1):
    return load_match_config({
        "matchId": "match-scoring",
        "players": [{"handle": "alice"}, {"handle": "bob"}],
        "problems": [
            {"contestId": 1850, "index": "A", "rating": 800},
            {"contestId": 1850, "index": "B", "rating": 1500},
            {"contestId": 1850, "index": "C"},
        ],
        "startTime": T0,
        "endTime": T0 + HOUR,
        "finalLapEnabled": final_lap,
        "mysteryProblemIndex": mystery,
    })


class TestBasePoints:
    """Tests for base_points()."""

    def test_rating_800_is_500(self):
        assert base_points(800) == 500

    def test_rating_1000_is_660(self):
        assert base_points(1000) == 660

    def test_rating_1200(self):
        # 500 * 1.32^2 = 871.2
        assert base_points(1200) == 871

    def test_rating_1500(self):
        # 500 * 1.32^3.5 = 1321.2
        assert base_points(1500) == 1321

    def test_rating_below_floor_counts_as_800(self):
        assert base_points(600) == 500

    def test_missing_rating_counts_as_800(self):
        assert base_points(None) == 500

    def test_grows_with_rating(self):
        values = [base_points(r) for r in range(800, 3600, 100)]
        assert values == sorted(values)
        assert len(set(values)) == len(values)


class TestRounding:
    """Tests for half-up rounding."""

    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1

    def test_below_half_rounds_down(self):
        assert round_half_up(871.2) == 871

    def test_product_rounded_once(self):
        # 1321 * 4 exactly, no double rounding of 1321.23 * 4
        assert awarded_points(1500, 4) == 5284


class TestAwardedPoints:
    """Tests for awarded_points() multipliers."""

    def test_no_multiplier(self):
        assert awarded_points(1500) == 1321

    def test_doubled(self):
        assert awarded_points(1500, 2) == 2642

    def test_stacked(self):
        assert awarded_points(1500, 2 * 2) == 5284

    def test_floor_rating_stacked(self):
        assert awarded_points(600, 4) == 2000


class TestFinalLap:
    """Tests for is_final_lap() boundaries."""

    def test_final_lap_start_is_three_quarters(self):
        config = make_config()
        assert config.final_lap_start == T0 + 2_700_000

    def test_boundary_is_inclusive(self):
        config = make_config()
        assert is_final_lap(config, T0 + 2_700_000) is True

    def test_just_before_boundary(self):
        config = make_config()
        assert is_final_lap(config, T0 + 2_699_999) is False

    def test_disabled(self):
        config = make_config(final_lap=False)
        assert is_final_lap(config, T0 + HOUR - 1) is False


class TestMultiplier:
    """Tests for multiplier_for() and solve_points()."""

    def test_plain_solve(self):
        config = make_config(mystery=0)
        assert multiplier_for(config, "1850-B", T0 + 1000) == 1

    def test_mystery_doubles(self):
        config = make_config(mystery=1)
        assert multiplier_for(config, "1850-B", T0 + 1000) == 2

    def test_final_lap_doubles(self):
        config = make_config()
        assert multiplier_for(config, "1850-B", T0 + 3_000_000) == 2

    def test_mystery_in_final_lap_is_x4(self):
        config = make_config(mystery=1)
        assert multiplier_for(config, "1850-B", T0 + 3_000_000) == 4
        assert solve_points(config, "1850-B", T0 + 3_000_000) == 5284

    def test_multiplier_uses_solve_time(self):
        config = make_config()
        # An early solve keeps its plain value however late it is scored
        assert solve_points(config, "1850-B", T0 + 60_000) == 1321

    def test_unknown_problem_scores_zero(self):
        config = make_config()
        assert solve_points(config, "999-Z", T0 + 60_000) == 0


class TestProblemPointsTable:
    """Tests for problem_points_table()."""

    def test_before_final_lap(self):
        config = make_config(mystery=2)
        table = problem_points_table(config, T0 + 60_000)
        assert table == {"1850-A": 500, "1850-B": 1321, "1850-C": 1000}

    def test_in_final_lap(self):
        config = make_config(mystery=2)
        table = problem_points_table(config, T0 + 3_000_000)
        assert table == {"1850-A": 1000, "1850-B": 2642, "1850-C": 2000}

    @pytest.mark.parametrize("rating,expected", [(None, 500), (800, 500), (1000, 660)])
    def test_table_follows_base_points(self, rating, expected):
        config = load_match_config({
            "matchId": "m",
            "players": [{"handle": "a"}, {"handle": "b"}],
            "problems": [{"contestId": 1, "index": "A", "rating": rating}],
            "startTime": T0,
            "endTime": T0 + HOUR,
        })
        assert problem_points_table(config, T0) == {"1-A": expected}
