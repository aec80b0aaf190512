"""
MILP solver adapter.

The pipeline only needs something with a `solve(formulation)` method that
returns a SolverResult or raises InfeasibleError. PulpSolver is the default
implementation; any other library can be substituted without touching the
formulation or decoding code.
"""

import time
from dataclasses import dataclass
from typing import Protocol

import numpy as np
import pulp
from pulp import LpVariable, lpSum, value

from .config import PREFERRED_SOLVERS, SOLVER_GAP_REL, SOLVER_MSG, SOLVER_TIME_LIMIT
from .errors import InfeasibleError
from .formulation import EQ, GE, LE, Formulation


@dataclass(frozen=True, eq=False)
class SolverResult:
    assignment: np.ndarray
    objective_value: float
    status: str
    solve_time: float = 0.0


class Solver(Protocol):
    def solve(self, formulation: Formulation) -> SolverResult: ...


class PulpSolver:
    """
    Solve a Formulation with PuLP.

    Tries the solvers named in `preferred` in order (HiGHS first, CBC second
    by default) and falls back to PuLP's default solver if none is installed.
    The MIP gap defaults to zero so "Optimal" means proven optimal.
    """

    def __init__(
        self,
        time_limit: float | None = SOLVER_TIME_LIMIT,
        msg: bool = SOLVER_MSG,
        preferred: list[str] | None = None,
        gap_rel: float = SOLVER_GAP_REL,
    ):
        self.time_limit = time_limit
        self.msg = msg
        self.preferred = list(PREFERRED_SOLVERS if preferred is None else preferred)
        self.gap_rel = gap_rel

    def _make_backend(self):
        available_solvers = pulp.listSolvers(onlyAvailable=True)

        for name in self.preferred:
            if name in available_solvers:
                return pulp.getSolver(
                    name, msg=self.msg, timeLimit=self.time_limit, gapRel=self.gap_rel
                )

        # Use default solver
        return None

    def build_problem(
        self, formulation: Formulation
    ) -> tuple[pulp.LpProblem, list[LpVariable]]:
        """Translate a Formulation into a PuLP problem with one variable per descriptor."""
        prob = pulp.LpProblem(f"Roster_{formulation.metric}", pulp.LpMaximize)

        x = [
            LpVariable(f"x_{k}", cat="Binary")
            for k in range(formulation.n_variables)
        ]

        prob += (
            lpSum(float(c) * x[k] for k, c in enumerate(formulation.objective) if c != 0),
            "Objective",
        )

        for j, con in enumerate(formulation.constraints):
            (nonzero,) = np.nonzero(con.coefficients)
            lhs = lpSum(float(con.coefficients[k]) * x[k] for k in nonzero)
            # Row index keeps names unique after PuLP sanitizes player ids
            name = f"c{j}_{con.name}"
            if con.sense == LE:
                prob += lhs <= con.rhs, name
            elif con.sense == GE:
                prob += lhs >= con.rhs, name
            elif con.sense == EQ:
                prob += lhs == con.rhs, name

        return prob, x

    def solve(self, formulation: Formulation) -> SolverResult:
        """
        Solve to optimality.

        Raises:
            InfeasibleError: If the solver does not report an optimal solution,
                including a feasible incumbent left by a time limit
        """
        prob, x = self.build_problem(formulation)

        start_time = time.time()
        status = prob.solve(self._make_backend())
        solve_time = time.time() - start_time

        status_str = pulp.LpStatus[status]
        if status != pulp.LpStatusOptimal:
            raise InfeasibleError(
                f"No feasible roster for {formulation.metric}: solver status {status_str}",
                status=status_str,
            )

        # CBC and HiGHS report status Optimal for a time-limited incumbent
        if prob.sol_status != pulp.LpSolutionOptimal:
            sol_status_str = pulp.LpSolution[prob.sol_status]
            raise InfeasibleError(
                f"No proven optimal roster for {formulation.metric}: "
                f"solver stopped with {sol_status_str} after {solve_time:.1f}s",
                status=sol_status_str,
            )

        assignment = np.array(
            [1 if value(v) is not None and value(v) > 0.5 else 0 for v in x],
            dtype=int,
        )
        objective = float(formulation.objective @ assignment)

        return SolverResult(
            assignment=assignment,
            objective_value=objective,
            status=status_str,
            solve_time=solve_time,
        )
