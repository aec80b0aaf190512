"""
Data loading for the NBA Roster Optimizer.

This module handles:
- Loading season advanced statistics
- Loading the salary schedule and parsing currency strings
- Joining the two on player id and building the PlayerPool
"""

from pathlib import Path

import numpy as np
import pandas as pd

from .config import (
    METRICS,
    MIN_MINUTES_PLAYED,
    SALARIES_PATH,
    SEASON,
    STATS_COLUMNS,
    STATS_PATH,
)
from .models import Player, PlayerPool, parse_position


# === UTILITY FUNCTIONS ===


def parse_salary(raw) -> float:
    """
    Parse a salary cell to float.

    Accepts numbers and strings like "$47,607,350". Blank or unparseable
    values become NaN (the player is then not eligible).
    """
    if raw is None:
        return np.nan
    if isinstance(raw, (int, float, np.number)):
        return float(raw)

    cleaned = str(raw).replace("$", "").replace(",", "").strip()
    if not cleaned:
        return np.nan
    try:
        return float(cleaned)
    except ValueError:
        return np.nan


# === LOADING ===


def load_stats(
    filepath: str | Path,
    metrics: list[str] | None = None,
) -> pd.DataFrame:
    """
    Load per-player season advanced statistics.

    Args:
        filepath: Path to advanced stats CSV
        metrics: Metric columns to keep (defaults to config metrics)

    Returns:
        DataFrame with columns:
            player_id, name, raw_position, minutes_played, games_played,
            plus one column per metric

    Note:
        Players traded mid-season appear once per team plus a season total
        row listed first. The first row per player id is kept.
    """
    if metrics is None:
        metrics = METRICS

    df = pd.read_csv(filepath)

    required_cols = list(STATS_COLUMNS.values()) + list(metrics)
    for col in required_cols:
        assert col in df.columns, f"Missing required column in stats CSV: {col}"

    df = df[required_cols].rename(
        columns={
            STATS_COLUMNS["player_id"]: "player_id",
            STATS_COLUMNS["name"]: "name",
            STATS_COLUMNS["position"]: "raw_position",
            STATS_COLUMNS["minutes_played"]: "minutes_played",
            STATS_COLUMNS["games_played"]: "games_played",
        }
    )

    df["player_id"] = df["player_id"].astype(str)

    # Handle duplicate ids (keep first occurrence)
    duplicates = df[df["player_id"].duplicated(keep="first")]["player_id"].unique()
    if len(duplicates) > 0:
        print(
            f"  Note: Dropping extra rows for {len(duplicates)} players listed more than once: "
            f"{list(duplicates)[:5]}..."
        )
        df = df.drop_duplicates(subset="player_id", keep="first")

    df["minutes_played"] = pd.to_numeric(df["minutes_played"], errors="coerce").fillna(0.0)
    df["games_played"] = (
        pd.to_numeric(df["games_played"], errors="coerce").fillna(0).astype(int)
    )
    for metric in metrics:
        df[metric] = pd.to_numeric(df[metric], errors="coerce")

    print(f"Loaded stats for {len(df)} players from {filepath}")
    return df.reset_index(drop=True)


def load_salaries(
    filepath: str | Path,
    season: str = SEASON,
) -> pd.DataFrame:
    """
    Load the salary schedule for one season.

    Args:
        filepath: Path to salaries CSV with a player_id column and one
                  column per season (e.g. "2023-24")
        season: Season column to read

    Returns:
        DataFrame with columns: player_id, salary (float, NaN if missing)
    """
    df = pd.read_csv(filepath)

    for col in [STATS_COLUMNS["player_id"], season]:
        assert col in df.columns, f"Missing required column in salaries CSV: {col}"

    df = df[[STATS_COLUMNS["player_id"], season]].rename(
        columns={STATS_COLUMNS["player_id"]: "player_id", season: "salary"}
    )
    df["player_id"] = df["player_id"].astype(str)
    df["salary"] = df["salary"].map(parse_salary)
    df = df.drop_duplicates(subset="player_id", keep="first")

    n_missing = df["salary"].isna().sum()
    print(f"Loaded {season} salaries for {len(df)} players ({n_missing} missing)")
    return df.reset_index(drop=True)


def build_player_pool(
    stats: pd.DataFrame,
    salaries: pd.DataFrame,
    metrics: list[str] | None = None,
    min_minutes: float = MIN_MINUTES_PLAYED,
) -> PlayerPool:
    """
    Join stats and salaries and keep eligible players.

    Eligible: non-missing salary and at least `min_minutes` minutes played.
    Players whose position cannot be parsed, or with a blank value for any
    requested metric, are dropped with a note.

    Args:
        stats: DataFrame from load_stats()
        salaries: DataFrame from load_salaries()
        metrics: Metric columns carried onto each Player
        min_minutes: Minimum season minutes played

    Returns:
        PlayerPool in stats file order
    """
    if metrics is None:
        metrics = METRICS

    merged = stats.merge(salaries, on="player_id", how="inner")

    players = []
    unparsed = []
    missing_metric = []
    for row in merged.to_dict("records"):
        try:
            position = parse_position(row["raw_position"])
        except ValueError:
            unparsed.append(row["player_id"])
            continue

        values = {m: float(row[m]) for m in metrics}
        if not all(np.isfinite(v) for v in values.values()):
            missing_metric.append(row["player_id"])
            continue

        players.append(
            Player(
                player_id=row["player_id"],
                name=str(row["name"]),
                position=position,
                metrics=values,
                salary=float(row["salary"]),
                minutes_played=float(row["minutes_played"]),
                games_played=int(row["games_played"]),
            )
        )

    if unparsed:
        print(f"  Note: Dropping {len(unparsed)} players with unknown positions: {unparsed[:5]}")
    if missing_metric:
        print(
            f"  Note: Dropping {len(missing_metric)} players with blank "
            f"{'/'.join(metrics)}: {missing_metric[:5]}"
        )

    pool = PlayerPool.from_players(players, min_minutes=min_minutes)
    print(
        f"Player pool: {len(pool)} eligible of {len(merged)} matched "
        f"(salary known, MP >= {min_minutes})"
    )
    return pool


def load_player_pool(
    stats_path: str | Path = STATS_PATH,
    salaries_path: str | Path = SALARIES_PATH,
    metrics: list[str] | None = None,
    season: str = SEASON,
    min_minutes: float = MIN_MINUTES_PLAYED,
) -> PlayerPool:
    """Load both sources and build the PlayerPool."""
    stats = load_stats(stats_path, metrics)
    salaries = load_salaries(salaries_path, season)
    return build_player_pool(stats, salaries, metrics, min_minutes)
