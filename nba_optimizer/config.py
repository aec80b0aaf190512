"""
Roster optimizer settings.

Reads config.json from the project root once at import and exposes league
rules, pool eligibility, rotation minutes, metrics, solver options and data
paths as module-level constants.
"""

import json
from pathlib import Path

_CONFIG_PATH = Path(__file__).parent.parent / "config.json"


def load_config(config_path: Path | str | None = None) -> dict:
    """
    Read league rules, pool filter, rotation, metrics, solver and data settings.

    Checks that every section is present, that solver.tie_break is either
    "salary" (run the cheapest-roster second solve) or "none", and that at
    least one metric is listed. Numeric league and rotation bounds are
    checked once at import, below.

    Args:
        config_path: Path to config.json file (defaults to project root)

    Raises:
        AssertionError: If the file is missing or a check fails
    """
    if config_path is None:
        config_path = _CONFIG_PATH
    else:
        config_path = Path(config_path)

    assert config_path.exists(), f"Config file not found: {config_path}"

    with open(config_path) as f:
        config = json.load(f)

    # Validate required sections
    for section in ["league", "pool", "rotation", "metrics", "solver", "data"]:
        assert section in config, f"Config must have '{section}' section"

    assert config["solver"]["tie_break"] in ["salary", "none"], (
        "solver.tie_break must be 'salary' or 'none'"
    )
    assert len(config["metrics"]) > 0, "Config must list at least one metric"

    return config


# Load config at module level
_CONFIG = load_config()

# Expose config sections
LEAGUE = _CONFIG["league"]
POOL_CONFIG = _CONFIG["pool"]
ROTATION_CONFIG = _CONFIG["rotation"]
SOLVER_CONFIG = _CONFIG["solver"]
DATA_CONFIG = _CONFIG["data"]

# League rules
SALARY_CAP = LEAGUE["salary_cap"]
BENCH_SALARY_FRACTION = LEAGUE["bench_salary_fraction"]
BENCH_SALARY_LIMIT = SALARY_CAP * BENCH_SALARY_FRACTION
ROSTER_SIZE = LEAGUE["roster_size"]
NUM_STARTERS = LEAGUE["num_starters"]
MIN_POSITION_DEPTH = LEAGUE["min_position_depth"]
MAX_POSITION_DEPTH = LEAGUE["max_position_depth"]
POSITIONS = LEAGUE["positions"]

# Player pool
SEASON = POOL_CONFIG["season"]
MIN_MINUTES_PLAYED = POOL_CONFIG["min_minutes_played"]

# Rotation heuristic
GAME_LENGTH = ROTATION_CONFIG["game_length"]
MINUTES_CAP = ROTATION_CONFIG["minutes_cap"]

METRICS = _CONFIG["metrics"]

# Solver
PREFERRED_SOLVERS = SOLVER_CONFIG["preferred"]
SOLVER_TIME_LIMIT = SOLVER_CONFIG["time_limit"]
SOLVER_MSG = SOLVER_CONFIG["msg"]
SOLVER_GAP_REL = SOLVER_CONFIG["gap_rel"]
TIE_BREAK = SOLVER_CONFIG["tie_break"]

# Data paths
STATS_PATH = DATA_CONFIG["stats_path"]
SALARIES_PATH = DATA_CONFIG["salaries_path"]
OUTPUT_DIR = DATA_CONFIG["output_dir"]
STATS_COLUMNS = DATA_CONFIG["columns"]

# Validation assertions
assert len(POSITIONS) == 5, "Must have exactly 5 canonical positions"
assert len(set(POSITIONS)) == len(POSITIONS), "Positions must be unique"
assert NUM_STARTERS == len(POSITIONS), "One starter per position"
assert 0 < BENCH_SALARY_FRACTION < 1, "bench_salary_fraction must be in (0, 1)"
assert 0 < MIN_POSITION_DEPTH <= MAX_POSITION_DEPTH, "Position depth bounds invalid"
assert MIN_POSITION_DEPTH * len(POSITIONS) <= ROSTER_SIZE, (
    "Minimum position depth must fit roster"
)
assert NUM_STARTERS <= ROSTER_SIZE, "Starters must fit roster"
assert GAME_LENGTH / 2 <= MINUTES_CAP <= GAME_LENGTH, (
    "minutes_cap must be between half a game and a full game"
)
assert SOLVER_GAP_REL >= 0, "solver.gap_rel must be non-negative"
