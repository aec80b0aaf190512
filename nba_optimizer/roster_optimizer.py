"""
Roster Optimizer using Mixed-Integer Linear Programming (MILP).

This module answers the question: "Given a pool of eligible players, which
15-man roster maximizes total BPM (or VORP) without breaking the salary cap,
the bench salary limit or the positional rules?"

Pipeline per metric:
    PlayerPool -> build_formulation -> Solver -> decode_assignment
               -> check_roster -> allocate_minutes
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from tqdm.auto import tqdm

from .config import (
    BENCH_SALARY_LIMIT,
    MAX_POSITION_DEPTH,
    METRICS,
    MIN_POSITION_DEPTH,
    NUM_STARTERS,
    ROSTER_SIZE,
    SALARY_CAP,
    TIE_BREAK,
)
from .decoder import decode_assignment
from .errors import ConsistencyError, FormulationError, InfeasibleError
from .formulation import build_formulation, with_salary_tiebreak
from .models import MinutesAllocation, PlayerPool, Position, Role, Roster
from .rotation import allocate_minutes
from .solver import PulpSolver, Solver


@dataclass(frozen=True)
class RosterResult:
    metric: str
    roster: Roster
    minutes: MinutesAllocation
    objective_value: float
    solve_time: float
    status: str


# === ROSTER VALIDATION ===


def check_roster(
    roster: Roster,
    salary_cap: float = SALARY_CAP,
    bench_salary_limit: float = BENCH_SALARY_LIMIT,
    num_starters: int = NUM_STARTERS,
    roster_size: int = ROSTER_SIZE,
    min_position_depth: int = MIN_POSITION_DEPTH,
    max_position_depth: int = MAX_POSITION_DEPTH,
) -> None:
    """
    Verify every roster rule holds.

    Raises:
        ConsistencyError: Listing each rule the roster breaks
    """
    problems = []

    ids = [p.player_id for p in roster.players]
    if len(ids) != len(set(ids)):
        problems.append("a player appears more than once")
    if len(roster) > roster_size:
        problems.append(f"{len(roster)} players exceeds roster size {roster_size}")
    if len(roster.starters) != num_starters:
        problems.append(f"{len(roster.starters)} starters, expected {num_starters}")
    if roster.total_salary > salary_cap + 1e-6:
        problems.append(f"total salary {roster.total_salary:,.0f} exceeds cap {salary_cap:,.0f}")
    if roster.bench_salary > bench_salary_limit + 1e-6:
        problems.append(
            f"bench salary {roster.bench_salary:,.0f} exceeds limit {bench_salary_limit:,.0f}"
        )

    starter_positions = sorted(p.position.order for p in roster.starters)
    if starter_positions != sorted(pos.order for pos in Position):
        problems.append("starters do not cover each position exactly once")

    for pos, count in roster.position_counts().items():
        if not min_position_depth <= count <= max_position_depth:
            problems.append(
                f"{count} players at {pos.value}, "
                f"allowed {min_position_depth}-{max_position_depth}"
            )

    if problems:
        raise ConsistencyError("Invalid roster: " + "; ".join(problems))


# === MILP BUILDING AND SOLVING ===


def optimize_roster(
    pool: PlayerPool,
    metric: str,
    solver: Solver | None = None,
    *,
    tie_break: str = TIE_BREAK,
) -> RosterResult:
    """
    Select the roster maximizing the total of `metric`.

    Args:
        pool: Eligible players
        metric: Metric name, e.g. "BPM" or "VORP"
        solver: Anything with solve(formulation) (defaults to PulpSolver)
        tie_break: "salary" re-solves for the cheapest roster among those
            with the optimal metric total; "none" keeps the first solution

    Returns:
        RosterResult with the decoded roster and its minutes allocation

    Raises:
        FormulationError: Pool cannot satisfy the rules (solver not called)
        InfeasibleError: Solver found no feasible roster
        ConsistencyError: Solver output breaks a roster rule
    """
    assert tie_break in ["salary", "none"], "tie_break must be 'salary' or 'none'"
    if solver is None:
        solver = PulpSolver()

    print(f"Building MILP for {metric} with {len(pool)} players...")
    formulation = build_formulation(pool, metric)
    print(
        f"  Variables: {formulation.n_variables}, "
        f"Constraints: {len(formulation.constraints)}"
    )

    print("Solving...")
    solution = solver.solve(formulation)
    objective = solution.objective_value
    solve_time = solution.solve_time

    if tie_break == "salary":
        second = with_salary_tiebreak(formulation, objective)
        solution = solver.solve(second)
        solve_time += solution.solve_time
        objective = float(formulation.objective @ solution.assignment)

    print(f"Solved in {solve_time:.1f}s, total {metric}: {objective:.2f}")

    roster = decode_assignment(
        pool, formulation.variables, solution.assignment, metric
    )
    check_roster(roster, bench_salary_limit=formulation.bench_salary_limit)
    minutes = allocate_minutes(roster, metric)

    return RosterResult(
        metric=metric,
        roster=roster,
        minutes=minutes,
        objective_value=objective,
        solve_time=solve_time,
        status=solution.status,
    )


def optimize_all_metrics(
    pool: PlayerPool,
    metrics: list[str] | None = None,
    solver: Solver | None = None,
    *,
    tie_break: str = TIE_BREAK,
    max_workers: int = 1,
) -> tuple[dict[str, RosterResult], dict[str, Exception]]:
    """
    Run optimize_roster once per metric.

    Runs are independent: a FormulationError or InfeasibleError for one
    metric is recorded and the remaining metrics still run. The pool is
    read-only, so max_workers > 1 runs metrics on a thread pool.

    Returns:
        results: metric -> RosterResult for successful runs
        failures: metric -> exception for failed runs
    """
    if metrics is None:
        metrics = METRICS

    def _run(metric: str) -> RosterResult | Exception:
        try:
            return optimize_roster(pool, metric, solver, tie_break=tie_break)
        except (FormulationError, InfeasibleError) as exc:
            return exc

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(
                tqdm(executor.map(_run, metrics), total=len(metrics), desc="Optimizing")
            )
    else:
        outcomes = [_run(m) for m in tqdm(metrics, desc="Optimizing")]

    results: dict[str, RosterResult] = {}
    failures: dict[str, Exception] = {}
    for metric, outcome in zip(metrics, outcomes):
        if isinstance(outcome, Exception):
            print(f"  {metric}: {type(outcome).__name__}: {outcome}")
            failures[metric] = outcome
        else:
            results[metric] = outcome

    return results, failures


# === SOLUTION OUTPUT ===


def roster_to_frame(roster: Roster) -> pd.DataFrame:
    """
    Roster table in roster order.

    Columns: role, player_id, name, position, metric, salary
    """
    return pd.DataFrame(
        [
            {
                "role": slot.role.value,
                "player_id": slot.player.player_id,
                "name": slot.player.name,
                "position": slot.player.position.value,
                "metric": slot.player.metric(roster.metric),
                "salary": slot.player.salary,
            }
            for slot in roster
        ],
        columns=["role", "player_id", "name", "position", "metric", "salary"],
    )


def minutes_to_frame(allocation: MinutesAllocation) -> pd.DataFrame:
    """Minutes table. Columns: player_id, minutes"""
    return allocation.to_frame()


def write_results(result: RosterResult, output_dir: Path | str) -> tuple[Path, Path]:
    """Write roster_<metric>.csv and minutes_<metric>.csv; return both paths."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    roster_path = output_dir / f"roster_{result.metric}.csv"
    minutes_path = output_dir / f"minutes_{result.metric}.csv"

    roster_to_frame(result.roster).to_csv(roster_path, index=False)
    minutes_to_frame(result.minutes).to_csv(minutes_path, index=False)

    return roster_path, minutes_path


def print_roster_summary(result: RosterResult) -> None:
    """
    Print a formatted summary of the optimal roster.

    Sections:
        1. ROSTER - starters then bench, with estimated minutes
        2. SUMMARY - metric total, payroll, bench payroll
    """
    roster = result.roster
    metric = result.metric

    print("\n" + "=" * 70)
    print(f"ROSTER ({metric})")
    print("=" * 70)

    for role in Role:
        players = roster.starters if role is Role.STARTER else roster.bench
        label = "STARTERS" if role is Role.STARTER else "BENCH"
        print(f"\n{label} ({len(players)})")
        print("-" * 66)
        print(f"{'Pos':<4} {'Name':<28} {metric:>7} {'Salary':>14} {'MPG':>6}")
        print("-" * 66)
        for p in players:
            print(
                f"{p.position.value:<4} {p.name:<28} {p.metric(metric):>7.2f} "
                f"{p.salary:>14,.0f} {result.minutes[p.player_id]:>6.1f}"
            )

    print("\n" + "=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Total {metric}: {roster.total_metric:.2f}")
    print(f"Payroll: {roster.total_salary:,.0f} / {SALARY_CAP:,.0f}")
    print(f"Bench payroll: {roster.bench_salary:,.0f} / {BENCH_SALARY_LIMIT:,.0f}")
    print(f"Rotation minutes: {result.minutes.total:.1f}")
    print("=" * 70 + "\n")
