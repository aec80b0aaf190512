# NBA Roster Optimizer
#
# This package builds a salary-capped basketball roster that maximizes a
# performance metric (BPM or VORP):
# - models: Player, PlayerPool, Roster and position parsing
# - data_loader: Load stats and salaries into a PlayerPool
# - formulation: Encode roster rules as a binary integer program
# - solver: PuLP-backed MILP solver
# - decoder: Assignment vector -> ordered, role-labeled Roster
# - rotation: Minutes-per-game estimate for a Roster
# - roster_optimizer: End-to-end pipeline and output tables

from .data_loader import (
    build_player_pool,
    load_player_pool,
    load_salaries,
    load_stats,
    parse_salary,
)
from .decoder import decode_assignment
from .errors import (
    ConsistencyError,
    DegenerateMetricError,
    FormulationError,
    InfeasibleError,
    OptimizerError,
)
from .formulation import (
    Constraint,
    DecisionVariable,
    Formulation,
    build_formulation,
    with_salary_tiebreak,
)
from .models import (
    MinutesAllocation,
    Player,
    PlayerPool,
    Position,
    Role,
    Roster,
    RosterSlot,
    parse_position,
)
from .roster_optimizer import (
    RosterResult,
    check_roster,
    minutes_to_frame,
    optimize_all_metrics,
    optimize_roster,
    print_roster_summary,
    roster_to_frame,
    write_results,
)
from .rotation import allocate_minutes, clip_minutes, split_minutes
from .solver import PulpSolver, Solver, SolverResult
