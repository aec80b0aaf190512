"""Tests for decoding solver assignments into rosters."""

import numpy as np
import pytest

from nba_optimizer.decoder import decode_assignment
from nba_optimizer.errors import ConsistencyError
from nba_optimizer.formulation import DecisionVariable, build_formulation
from nba_optimizer.models import PlayerPool, Position, Role
from tests.factories import make_player, make_pool, standard_assignment


@pytest.fixture
def pool():
    return make_pool()


@pytest.fixture
def formulation(pool):
    return build_formulation(pool, "BPM")


def test_decodes_starters_then_bench(pool, formulation):
    roster = decode_assignment(
        pool, formulation.variables, standard_assignment(pool), "BPM"
    )

    assert len(roster) == 15
    assert [s.role for s in roster.slots[:5]] == [Role.STARTER] * 5
    assert [s.role for s in roster.slots[5:]] == [Role.BENCH] * 10
    assert [p.player_id for p in roster.starters] == ["pg0", "sg0", "sf0", "pf0", "c0"]
    assert roster.metric == "BPM"


def test_bench_sorted_by_position_then_id(pool, formulation):
    roster = decode_assignment(
        pool, formulation.variables, standard_assignment(pool), "BPM"
    )

    assert [p.player_id for p in roster.bench] == [
        "pg1", "pg2", "sg1", "sg2", "sf1", "sf2", "pf1", "pf2", "c1", "c2",
    ]


def test_ordering_ignores_pool_order():
    """Same selection from a shuffled pool decodes to the same order."""
    players = list(make_pool())
    shuffled = PlayerPool(reversed(players))
    f = build_formulation(shuffled, "BPM")

    roster = decode_assignment(shuffled, f.variables, standard_assignment(shuffled), "BPM")
    reference_pool = make_pool()
    reference = decode_assignment(
        reference_pool,
        build_formulation(reference_pool, "BPM").variables,
        standard_assignment(reference_pool),
        "BPM",
    )

    assert [s.player.player_id for s in roster] == [s.player.player_id for s in reference]


def test_bench_ties_at_one_position_break_on_id():
    """Bench players at one position are ordered by id, not by metric."""
    players = [
        make_player("zz", Position.PG, bpm=9.0),
        make_player("aa", Position.PG, bpm=1.0),
    ]
    pool = PlayerPool(players)
    variables = [
        DecisionVariable("zz", Role.BENCH),
        DecisionVariable("aa", Role.BENCH),
    ]

    roster = decode_assignment(pool, variables, [1, 1], "BPM", num_starters=0)
    assert [p.player_id for p in roster.bench] == ["aa", "zz"]


def test_decoding_is_deterministic(pool, formulation):
    x = standard_assignment(pool)
    first = decode_assignment(pool, formulation.variables, x, "BPM")
    second = decode_assignment(pool, formulation.variables, list(x), "BPM")

    assert first == second
    assert repr(first) == repr(second)


def test_accepts_numpy_assignment(pool, formulation):
    x = np.array(standard_assignment(pool), dtype=float)
    roster = decode_assignment(pool, formulation.variables, x, "BPM")
    assert len(roster) == 15


def test_uses_descriptors_not_array_layout(pool):
    """Decoding follows each descriptor's player_id and role."""
    variables = [
        DecisionVariable("c0", Role.STARTER),
        DecisionVariable("pg0", Role.STARTER),
        DecisionVariable("sf0", Role.STARTER),
        DecisionVariable("sg0", Role.STARTER),
        DecisionVariable("pf0", Role.STARTER),
        DecisionVariable("pg3", Role.BENCH),
        DecisionVariable("c3", Role.STARTER),
    ]
    roster = decode_assignment(pool, variables, [1, 1, 1, 1, 1, 1, 0], "BPM")

    assert [p.player_id for p in roster.starters] == ["pg0", "sg0", "sf0", "pf0", "c0"]
    assert [p.player_id for p in roster.bench] == ["pg3"]


# =============================================================================
# CONSISTENCY ERRORS
# =============================================================================


def test_both_roles_raises(pool, formulation):
    n = len(pool)
    x = standard_assignment(pool)
    x[n + 0] = 1  # pg0 already starts

    with pytest.raises(ConsistencyError, match="both starter and bench"):
        decode_assignment(pool, formulation.variables, x, "BPM")


def test_wrong_starter_count_raises(pool, formulation):
    x = standard_assignment(pool)
    x[0] = 0  # drop pg0

    with pytest.raises(ConsistencyError, match="Expected 5 starters"):
        decode_assignment(pool, formulation.variables, x, "BPM")


def test_too_many_starters_raises(pool, formulation):
    n = len(pool)
    x = standard_assignment(pool)
    i = [p.player_id for p in pool].index("pg1")
    x[n + i] = 0
    x[i] = 1

    with pytest.raises(ConsistencyError, match="Expected 5 starters, assignment has 6"):
        decode_assignment(pool, formulation.variables, x, "BPM")


def test_oversized_roster_raises(pool, formulation):
    n = len(pool)
    x = standard_assignment(pool)
    i = [p.player_id for p in pool].index("c3")
    x[n + i] = 1

    with pytest.raises(ConsistencyError, match="16 players"):
        decode_assignment(pool, formulation.variables, x, "BPM")


def test_length_mismatch_raises(pool, formulation):
    with pytest.raises(ConsistencyError, match="entries"):
        decode_assignment(pool, formulation.variables, [1, 0, 1], "BPM")


def test_non_binary_raises(pool, formulation):
    x = standard_assignment(pool)
    x[3] = 0.5

    with pytest.raises(ConsistencyError, match="non-binary"):
        decode_assignment(pool, formulation.variables, x, "BPM")


def test_unknown_player_raises(pool):
    variables = [DecisionVariable("ghost", Role.STARTER)]
    with pytest.raises(ConsistencyError, match="ghost"):
        decode_assignment(pool, variables, [1], "BPM")
