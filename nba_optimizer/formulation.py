"""
Roster construction as a binary integer program.

Each player gets two binary decision variables: one for starting and one
for coming off the bench. Both score the player's metric; only the
constraints distinguish them. Variables are laid out as

    [starter_0, ..., starter_{n-1}, bench_0, ..., bench_{n-1}]

in pool order, and every variable carries a DecisionVariable descriptor
(player_id, role) so decoding never depends on that layout.
"""

import math
from dataclasses import dataclass

import numpy as np

from .config import (
    BENCH_SALARY_FRACTION,
    MAX_POSITION_DEPTH,
    MIN_POSITION_DEPTH,
    NUM_STARTERS,
    ROSTER_SIZE,
    SALARY_CAP,
)
from .errors import FormulationError
from .models import PlayerPool, Position, Role

# Relational operators accepted by the solver
LE = "<="
EQ = "=="
GE = ">="
SENSES = (LE, EQ, GE)

# Slack on the metric floor in the salary tie-break stage
TIEBREAK_TOLERANCE = 1e-6


@dataclass(frozen=True)
class DecisionVariable:
    player_id: str
    role: Role

    @property
    def name(self) -> str:
        return f"{self.role.value}_{self.player_id}"


@dataclass(frozen=True, eq=False)
class Constraint:
    """One row of the constraint system: coefficients . x (sense) rhs."""

    name: str
    coefficients: np.ndarray
    sense: str
    rhs: float

    def __post_init__(self):
        assert self.sense in SENSES, f"Unknown sense {self.sense!r}"

    def evaluate(self, assignment: np.ndarray) -> float:
        return float(self.coefficients @ assignment)

    def is_satisfied(self, assignment: np.ndarray, tol: float = 1e-6) -> bool:
        lhs = self.evaluate(assignment)
        if self.sense == LE:
            return lhs <= self.rhs + tol
        if self.sense == GE:
            return lhs >= self.rhs - tol
        return abs(lhs - self.rhs) <= tol


@dataclass(frozen=True, eq=False)
class Formulation:
    """
    A maximization problem over binary variables.

    Attributes:
        metric: Metric the objective was built from
        variables: One descriptor per decision variable
        objective: Objective coefficients, same length as variables
        constraints: Constraint rows in a fixed order
        bench_salary_limit: Bench salary bound used in the BenchSalary row
    """

    metric: str
    variables: tuple[DecisionVariable, ...]
    objective: np.ndarray
    constraints: tuple[Constraint, ...]
    bench_salary_limit: float

    @property
    def n_variables(self) -> int:
        return len(self.variables)

    @property
    def matrix(self) -> np.ndarray:
        """Constraint matrix, one row per constraint."""
        return np.vstack([c.coefficients for c in self.constraints])

    @property
    def senses(self) -> list[str]:
        return [c.sense for c in self.constraints]

    @property
    def rhs(self) -> np.ndarray:
        return np.array([c.rhs for c in self.constraints], dtype=float)

    def constraint(self, name: str) -> Constraint:
        for c in self.constraints:
            if c.name == name:
                return c
        raise KeyError(name)

    def violated_constraints(self, assignment: np.ndarray) -> list[str]:
        """Names of constraints the assignment breaks."""
        return [c.name for c in self.constraints if not c.is_satisfied(assignment)]


# === STATIC VALIDATION ===


def _validate_pool(pool: PlayerPool, metric: str, min_position_depth: int) -> None:
    """Raise FormulationError for problems detectable without solving."""
    if len(pool) == 0:
        raise FormulationError("Player pool is empty")

    missing = [p.player_id for p in pool if metric not in p.metrics]
    if missing:
        raise FormulationError(
            f"Metric {metric!r} missing for {len(missing)} players: {missing[:5]}"
        )

    bad = [p.player_id for p in pool if not math.isfinite(p.metric(metric))]
    if bad:
        raise FormulationError(
            f"Metric {metric!r} is not finite for {len(bad)} players: {bad[:5]}"
        )

    # Minimum depth is unsatisfiable if a position cannot supply enough players
    for pos, count in pool.position_counts().items():
        if count < min_position_depth:
            raise FormulationError(
                f"Only {count} eligible players at {pos.value}; "
                f"need at least {min_position_depth}"
            )


# === FORMULATION ===


def build_formulation(
    pool: PlayerPool,
    metric: str,
    *,
    salary_cap: float = SALARY_CAP,
    bench_salary_fraction: float = BENCH_SALARY_FRACTION,
    roster_size: int = ROSTER_SIZE,
    num_starters: int = NUM_STARTERS,
    min_position_depth: int = MIN_POSITION_DEPTH,
    max_position_depth: int = MAX_POSITION_DEPTH,
) -> Formulation:
    """
    Encode the roster rules for `pool` as a binary integer program.

    Constraint rows, in order:
        1. TotalSalary       sum(salary * x) over all variables <= cap
        2. BenchSalary       sum(salary * x) over bench variables <= cap * fraction
        3. StarterCount      sum(starter x) == num_starters
        4. RosterSize        sum(x) <= roster_size
        5. Starter_<POS>     sum(starter x at POS) == 1, per position
        6. MinDepth_<POS>    sum(x at POS) >= min_position_depth, per position
        7. MaxDepth_<POS>    sum(x at POS) <= max_position_depth, per position
        8. OneRole_<id>      starter + bench <= 1, per player

    Raises:
        FormulationError: Empty pool, unknown or non-finite metric, or a
            position with fewer than min_position_depth players
    """
    _validate_pool(pool, metric, min_position_depth)

    n = len(pool)
    players = pool.players
    starter = slice(0, n)
    bench = slice(n, 2 * n)

    variables = tuple(
        [DecisionVariable(p.player_id, Role.STARTER) for p in players]
        + [DecisionVariable(p.player_id, Role.BENCH) for p in players]
    )

    values = np.array([p.metric(metric) for p in players], dtype=float)
    salaries = np.array([p.salary for p in players], dtype=float)
    objective = np.concatenate([values, values])

    def row() -> np.ndarray:
        return np.zeros(2 * n)

    constraints = []

    # C1: Total salary
    coef = np.concatenate([salaries, salaries])
    constraints.append(Constraint("TotalSalary", coef, LE, float(salary_cap)))

    # C2: Bench salary
    bench_limit = salary_cap * bench_salary_fraction
    coef = row()
    coef[bench] = salaries
    constraints.append(Constraint("BenchSalary", coef, LE, float(bench_limit)))

    # C3: Exactly num_starters starters
    coef = row()
    coef[starter] = 1.0
    constraints.append(Constraint("StarterCount", coef, EQ, float(num_starters)))

    # C4: Roster size
    constraints.append(Constraint("RosterSize", np.ones(2 * n), LE, float(roster_size)))

    at_position = {
        pos: np.array([p.position is pos for p in players], dtype=float)
        for pos in Position
    }

    # C5: One starter per position
    for pos in Position:
        coef = row()
        coef[starter] = at_position[pos]
        constraints.append(Constraint(f"Starter_{pos.value}", coef, EQ, 1.0))

    # C6/C7: Position depth bounds (starters + bench)
    for pos in Position:
        coef = np.concatenate([at_position[pos], at_position[pos]])
        constraints.append(
            Constraint(f"MinDepth_{pos.value}", coef, GE, float(min_position_depth))
        )
    for pos in Position:
        coef = np.concatenate([at_position[pos], at_position[pos]])
        constraints.append(
            Constraint(f"MaxDepth_{pos.value}", coef, LE, float(max_position_depth))
        )

    # C8: A player holds at most one role
    for i, p in enumerate(players):
        coef = row()
        coef[i] = 1.0
        coef[n + i] = 1.0
        constraints.append(Constraint(f"OneRole_{p.player_id}", coef, LE, 1.0))

    return Formulation(
        metric=metric,
        variables=variables,
        objective=objective,
        constraints=tuple(constraints),
        bench_salary_limit=float(bench_limit),
    )


def with_salary_tiebreak(
    formulation: Formulation,
    optimal_value: float,
    tolerance: float = TIEBREAK_TOLERANCE,
) -> Formulation:
    """
    Second-stage problem: cheapest roster among those reaching `optimal_value`.

    Keeps every constraint of `formulation`, adds a MetricFloor row pinning
    the metric sum to its optimum, and replaces the objective with negative
    salary (maximizing it minimizes payroll). Ties between equally good
    rosters are then settled by salary instead of solver internals.
    """
    salary_row = formulation.constraint("TotalSalary").coefficients
    floor = Constraint(
        "MetricFloor",
        formulation.objective.copy(),
        GE,
        float(optimal_value) - tolerance * max(1.0, abs(optimal_value)),
    )
    return Formulation(
        metric=formulation.metric,
        variables=formulation.variables,
        objective=-salary_row,
        constraints=formulation.constraints + (floor,),
        bench_salary_limit=formulation.bench_salary_limit,
    )
