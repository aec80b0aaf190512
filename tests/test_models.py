"""Tests for player records, the player pool and position parsing."""

import numpy as np
import pandas as pd
import pytest

from nba_optimizer.models import (
    MinutesAllocation,
    PlayerPool,
    Position,
    Role,
    Roster,
    RosterSlot,
    parse_position,
)
from tests.factories import MILLION, make_player, make_pool


class TestParsePosition:
    """Tests for parse_position function."""

    def test_single_positions(self):
        assert parse_position("PG") is Position.PG
        assert parse_position("SG") is Position.SG
        assert parse_position("SF") is Position.SF
        assert parse_position("PF") is Position.PF
        assert parse_position("C") is Position.C

    def test_multi_position_takes_first(self):
        """Only the first listed position counts."""
        assert parse_position("SG-PG") is Position.SG
        assert parse_position("PF-C") is Position.PF
        assert parse_position("C,PF") is Position.C
        assert parse_position("SF/SG") is Position.SF

    def test_case_and_whitespace(self):
        assert parse_position("  pf ") is Position.PF
        assert parse_position("c - pf") is Position.C

    def test_unknown_position_raises(self):
        with pytest.raises(ValueError, match="Unknown position"):
            parse_position("G-F")

    def test_missing_position_raises(self):
        with pytest.raises(ValueError):
            parse_position("")
        with pytest.raises(ValueError):
            parse_position(np.nan)

    def test_canonical_order(self):
        """Enum order is PG, SG, SF, PF, C."""
        assert [p.value for p in Position] == ["PG", "SG", "SF", "PF", "C"]
        assert [p.order for p in Position] == [0, 1, 2, 3, 4]


class TestPlayer:
    def test_metric_lookup(self):
        p = make_player("a", bpm=4.5, vorp=2.1)
        assert p.metric("BPM") == 4.5
        assert p.metric("VORP") == 2.1
        with pytest.raises(KeyError):
            p.metric("WS")

    def test_player_is_immutable(self):
        p = make_player("a")
        with pytest.raises(AttributeError):
            p.salary = 0
        with pytest.raises(TypeError):
            p.metrics["BPM"] = 99.0

    def test_players_hashable(self):
        """Players can be put in sets despite carrying a metrics mapping."""
        p = make_player("a")
        assert len({p, p}) == 1


class TestPlayerPool:
    def test_from_players_filters_minutes_and_salary(self):
        players = [
            make_player("ok", minutes_played=100),
            make_player("few_minutes", minutes_played=99.9),
            make_player("no_salary", salary=np.nan),
            make_player("none_salary", salary=None),
        ]
        pool = PlayerPool.from_players(players, min_minutes=100)

        assert [p.player_id for p in pool] == ["ok"]

    def test_default_minimum_minutes_is_100(self):
        players = [make_player("a", minutes_played=100), make_player("b", minutes_played=50)]
        pool = PlayerPool.from_players(players)
        assert "a" in pool
        assert "b" not in pool

    def test_preserves_order(self):
        players = [make_player(pid) for pid in ["z", "a", "m"]]
        pool = PlayerPool(players)
        assert [p.player_id for p in pool] == ["z", "a", "m"]
        assert pool[1].player_id == "a"

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate player ids"):
            PlayerPool([make_player("a"), make_player("a")])

    def test_by_position_includes_empty_positions(self):
        pool = PlayerPool([make_player("a", Position.C), make_player("b", Position.C)])
        groups = pool.by_position()

        assert set(groups) == set(Position)
        assert [p.player_id for p in groups[Position.C]] == ["a", "b"]
        assert groups[Position.PG] == ()
        assert pool.position_counts()[Position.C] == 2

    def test_get(self):
        pool = make_pool()
        assert pool.get("sf2").position is Position.SF
        with pytest.raises(KeyError):
            pool.get("missing")

    def test_to_frame(self):
        pool = make_pool()
        df = pool.to_frame()

        assert isinstance(df, pd.DataFrame)
        assert len(df) == 20
        assert {"player_id", "name", "position", "salary", "BPM", "VORP"} <= set(df.columns)
        assert df.iloc[0]["position"] == "PG"


class TestRoster:
    def _roster(self):
        starter = make_player("s", Position.PG, bpm=5.0, salary=10 * MILLION)
        bench_a = make_player("b1", Position.PG, bpm=1.0, salary=2 * MILLION)
        bench_b = make_player("b2", Position.C, bpm=-0.5, salary=3 * MILLION)
        return Roster(
            slots=(
                RosterSlot(starter, Role.STARTER),
                RosterSlot(bench_a, Role.BENCH),
                RosterSlot(bench_b, Role.BENCH),
            ),
            metric="BPM",
        )

    def test_role_views(self):
        roster = self._roster()
        assert [p.player_id for p in roster.starters] == ["s"]
        assert [p.player_id for p in roster.bench] == ["b1", "b2"]
        assert len(roster) == 3

    def test_totals(self):
        roster = self._roster()
        assert roster.total_salary == 15 * MILLION
        assert roster.bench_salary == 5 * MILLION
        assert roster.total_metric == pytest.approx(5.5)

    def test_position_counts(self):
        counts = self._roster().position_counts()
        assert counts[Position.PG] == 2
        assert counts[Position.C] == 1
        assert counts[Position.SF] == 0


def test_minutes_allocation_mapping():
    allocation = MinutesAllocation({"a": 32.0, "b": 16.0, "c": 0.0})

    assert allocation["a"] == 32.0
    assert list(allocation) == ["a", "b", "c"]
    assert len(allocation) == 3
    assert allocation.total == 48.0

    df = allocation.to_frame()
    assert list(df.columns) == ["player_id", "minutes"]
    assert df["minutes"].tolist() == [32.0, 16.0, 0.0]
