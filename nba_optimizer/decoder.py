"""Turn a solver assignment vector back into a role-labeled Roster."""

from collections.abc import Sequence

import numpy as np

from .config import NUM_STARTERS, ROSTER_SIZE
from .errors import ConsistencyError
from .formulation import DecisionVariable
from .models import Player, PlayerPool, Role, Roster, RosterSlot


def _slot_sort_key(player: Player) -> tuple[int, str]:
    return (player.position.order, player.player_id)


def decode_assignment(
    pool: PlayerPool,
    variables: Sequence[DecisionVariable],
    assignment: Sequence[int] | np.ndarray,
    metric: str,
    *,
    num_starters: int = NUM_STARTERS,
    roster_size: int = ROSTER_SIZE,
) -> Roster:
    """
    Build a Roster from a 0/1 assignment.

    Each entry of `assignment` is matched to the descriptor at the same index
    in `variables`; players are looked up by the descriptor's player_id.

    Output order is canonical: starters, then bench, each sorted by position
    (PG, SG, SF, PF, C) and then player_id.

    Raises:
        ConsistencyError: Length mismatch, non-binary values, unknown player
            ids, a player holding both roles, wrong starter count, or an
            oversized roster
    """
    values = np.asarray(assignment)
    if len(values) != len(variables):
        raise ConsistencyError(
            f"Assignment has {len(values)} entries for {len(variables)} variables"
        )
    if not np.isin(values, (0, 1)).all():
        raise ConsistencyError("Assignment contains non-binary values")

    roles: dict[str, Role] = {}
    for var, flag in zip(variables, values):
        if not flag:
            continue
        if var.player_id not in pool:
            raise ConsistencyError(f"Unknown player id in assignment: {var.player_id}")
        if var.player_id in roles:
            raise ConsistencyError(
                f"Player {var.player_id} selected as both starter and bench"
            )
        roles[var.player_id] = var.role

    starters = sorted(
        (pool.get(pid) for pid, role in roles.items() if role is Role.STARTER),
        key=_slot_sort_key,
    )
    bench = sorted(
        (pool.get(pid) for pid, role in roles.items() if role is Role.BENCH),
        key=_slot_sort_key,
    )

    if len(starters) != num_starters:
        raise ConsistencyError(
            f"Expected {num_starters} starters, assignment has {len(starters)}"
        )
    if len(roles) > roster_size:
        raise ConsistencyError(
            f"Roster has {len(roles)} players, limit is {roster_size}"
        )

    slots = [RosterSlot(p, Role.STARTER) for p in starters]
    slots += [RosterSlot(p, Role.BENCH) for p in bench]
    return Roster(slots=tuple(slots), metric=metric)
