"""Minutes-per-game estimate for a selected roster."""

import math

from .config import GAME_LENGTH, MINUTES_CAP
from .errors import DegenerateMetricError
from .models import MinutesAllocation, Player, Position, Roster

# Players per position who receive minutes
ROTATION_DEPTH = 2


def clip_minutes(
    minutes: float,
    game_length: float = GAME_LENGTH,
    minutes_cap: float = MINUTES_CAP,
) -> float:
    """
    Clip into [game_length - minutes_cap, minutes_cap].

    With the defaults (48, 35) that is [13, 35]: nobody in the rotation plays
    more than 35 minutes, so the partner plays at least 13.
    """
    return min(max(minutes, game_length - minutes_cap), minutes_cap)


def split_minutes(
    values: list[float],
    game_length: float = GAME_LENGTH,
) -> list[float]:
    """
    Split one position's game minutes in proportion to metric values.

    Formula:
        minutes_i = game_length * value_i / sum(values)

    Examples:
        [10, 5] -> [32, 16]
        [34, 1] -> [46.6, 1.4] before clipping

    Raises:
        DegenerateMetricError: If any value is non-positive or not finite,
            since the proportional split is undefined or negative
    """
    if any(not math.isfinite(v) or v <= 0 for v in values):
        raise DegenerateMetricError(f"Cannot split minutes proportionally for {values}")

    total = sum(values)
    return [game_length * v / total for v in values]


def rotation_players(members: list[Player], metric: str) -> list[Player]:
    """Top ROTATION_DEPTH players by metric, ties broken by player_id ascending."""
    ranked = sorted(members, key=lambda p: (-p.metric(metric), p.player_id))
    return ranked[:ROTATION_DEPTH]


def allocate_minutes(
    roster: Roster,
    metric: str | None = None,
    *,
    game_length: float = GAME_LENGTH,
    minutes_cap: float = MINUTES_CAP,
) -> MinutesAllocation:
    """
    Estimate minutes per game for every roster member.

    Within each position, the top two players by metric share the
    position's game_length minutes in proportion to their metric, clipped
    to [game_length - minutes_cap, minutes_cap]. Everyone else gets 0.

    If a pair's metrics are zero, negative or NaN, the pair falls back to an
    equal split (24/24 with the defaults). This never raises.

    Args:
        roster: Decoded roster
        metric: Metric to rank and weight by (defaults to roster.metric)

    Returns:
        MinutesAllocation keyed by player_id, in roster order
    """
    if metric is None:
        metric = roster.metric

    groups: dict[Position, list[Player]] = {}
    for p in roster.players:
        groups.setdefault(p.position, []).append(p)

    estimated: dict[str, float] = {}
    for pos, members in groups.items():
        pair = rotation_players(members, metric)
        values = [p.metric(metric) for p in pair]

        try:
            shares = split_minutes(values, game_length)
        except DegenerateMetricError:
            print(
                f"  Note: degenerate {metric} values at {pos.value} {values}; "
                f"splitting minutes equally"
            )
            shares = [game_length / len(pair)] * len(pair)

        for p, share in zip(pair, shares):
            estimated[p.player_id] = clip_minutes(share, game_length, minutes_cap)

    return MinutesAllocation(
        {p.player_id: estimated.get(p.player_id, 0.0) for p in roster.players}
    )
