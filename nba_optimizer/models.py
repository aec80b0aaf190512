"""
Typed records passed between pipeline stages.

Every record here is immutable: the PlayerPool is built once per run and
each stage (formulation, solve, decode, rotation) produces a new value
instead of modifying the one it was given.
"""

import math
import re
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

import pandas as pd

from .config import MIN_MINUTES_PLAYED


class Position(Enum):
    """Canonical playing positions, declared in canonical sort order."""

    PG = "PG"
    SG = "SG"
    SF = "SF"
    PF = "PF"
    C = "C"

    @property
    def order(self) -> int:
        return _POSITION_ORDER[self]


_POSITION_ORDER = {pos: i for i, pos in enumerate(Position)}

_POSITION_SEPARATORS = re.compile(r"[-,/\s]+")


def parse_position(raw: str) -> Position:
    """
    Map a raw position string to its canonical Position.

    Multi-position strings such as "SG-PG" or "SF,PF" resolve to the FIRST
    listed position. This is a simplification for roster building, not a
    judgment about where the player actually plays.

    Raises:
        ValueError: If the string is empty or the first token is not a position
    """
    if raw is None or (isinstance(raw, float) and math.isnan(raw)):
        raise ValueError("Missing position")

    tokens = [t for t in _POSITION_SEPARATORS.split(str(raw).strip().upper()) if t]
    if not tokens:
        raise ValueError(f"Empty position string: {raw!r}")

    try:
        return Position(tokens[0])
    except ValueError:
        raise ValueError(f"Unknown position {tokens[0]!r} in {raw!r}") from None


class Role(Enum):
    STARTER = "starter"
    BENCH = "bench"


@dataclass(frozen=True)
class Player:
    player_id: str
    name: str
    position: Position
    metrics: Mapping[str, float] = field(hash=False)
    salary: float
    minutes_played: float
    games_played: int = 0

    def __post_init__(self):
        # Freeze the metrics mapping so a Player cannot change after loading
        object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))

    def metric(self, name: str) -> float:
        """Return the named metric, raising KeyError if the player lacks it."""
        return self.metrics[name]


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


class PlayerPool:
    """
    Ordered, read-only collection of players eligible for selection.

    Order matters: it fixes the layout of decision variables in the
    formulation. Use from_players() to apply the eligibility filter.
    """

    def __init__(self, players: Iterable[Player]):
        self._players = tuple(players)
        self._by_id = {p.player_id: p for p in self._players}
        if len(self._by_id) != len(self._players):
            counts = Counter(p.player_id for p in self._players)
            dupes = sorted(pid for pid, n in counts.items() if n > 1)
            raise ValueError(f"Duplicate player ids in pool: {dupes[:5]}")

    @classmethod
    def from_players(
        cls,
        players: Iterable[Player],
        min_minutes: float = MIN_MINUTES_PLAYED,
    ) -> "PlayerPool":
        """
        Build a pool keeping only players with a known salary and at least
        `min_minutes` minutes played in the reference season.
        """
        return cls(
            p
            for p in players
            if not _is_missing(p.salary) and p.minutes_played >= min_minutes
        )

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(self._players)

    def __getitem__(self, index: int) -> Player:
        return self._players[index]

    def __contains__(self, player_id: str) -> bool:
        return player_id in self._by_id

    @property
    def players(self) -> tuple[Player, ...]:
        return self._players

    def get(self, player_id: str) -> Player:
        """Look up a player by id. Raises KeyError if absent."""
        return self._by_id[player_id]

    def by_position(self) -> dict[Position, tuple[Player, ...]]:
        """Group players by canonical position (every position present, possibly empty)."""
        groups = {pos: [] for pos in Position}
        for p in self._players:
            groups[p.position].append(p)
        return {pos: tuple(members) for pos, members in groups.items()}

    def position_counts(self) -> dict[Position, int]:
        return {pos: len(members) for pos, members in self.by_position().items()}

    def to_frame(self) -> pd.DataFrame:
        """Flatten the pool into a DataFrame, one metric column per metric."""
        records = []
        for p in self._players:
            records.append(
                {
                    "player_id": p.player_id,
                    "name": p.name,
                    "position": p.position.value,
                    "salary": p.salary,
                    "minutes_played": p.minutes_played,
                    "games_played": p.games_played,
                    **dict(p.metrics),
                }
            )
        return pd.DataFrame(records)


@dataclass(frozen=True)
class RosterSlot:
    player: Player
    role: Role


@dataclass(frozen=True)
class Roster:
    """
    A decoded roster: starters first, then bench, each block ordered by
    canonical position and then player id.
    """

    slots: tuple[RosterSlot, ...]
    metric: str

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[RosterSlot]:
        return iter(self.slots)

    @property
    def players(self) -> tuple[Player, ...]:
        return tuple(s.player for s in self.slots)

    @property
    def starters(self) -> tuple[Player, ...]:
        return tuple(s.player for s in self.slots if s.role is Role.STARTER)

    @property
    def bench(self) -> tuple[Player, ...]:
        return tuple(s.player for s in self.slots if s.role is Role.BENCH)

    @property
    def total_salary(self) -> float:
        return sum(p.salary for p in self.players)

    @property
    def bench_salary(self) -> float:
        return sum(p.salary for p in self.bench)

    @property
    def total_metric(self) -> float:
        return sum(p.metric(self.metric) for p in self.players)

    def position_counts(self) -> dict[Position, int]:
        counts = {pos: 0 for pos in Position}
        for p in self.players:
            counts[p.position] += 1
        return counts


class MinutesAllocation(Mapping):
    """Read-only mapping of player id to estimated minutes per game."""

    def __init__(self, minutes: Mapping[str, float]):
        self._minutes = dict(minutes)

    def __getitem__(self, player_id: str) -> float:
        return self._minutes[player_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._minutes)

    def __len__(self) -> int:
        return len(self._minutes)

    def __repr__(self) -> str:
        return f"MinutesAllocation({self._minutes!r})"

    @property
    def total(self) -> float:
        return sum(self._minutes.values())

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {"player_id": list(self._minutes), "minutes": list(self._minutes.values())}
        )
