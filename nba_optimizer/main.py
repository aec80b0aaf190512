"""CLI entry point for roster optimization."""

import argparse
import sys
from pathlib import Path

from .config import METRICS, OUTPUT_DIR, SALARIES_PATH, STATS_PATH, TIE_BREAK
from .data_loader import load_player_pool
from .roster_optimizer import optimize_all_metrics, print_roster_summary, write_results


def main(argv: list[str] | None = None) -> int:
    """
    Build the optimal roster for each metric and write the results.

    Usage:
        python -m nba_optimizer.main
        python -m nba_optimizer.main --metric BPM --output results/
        python -m nba_optimizer.main --no-tiebreak --workers 2
    """
    parser = argparse.ArgumentParser(
        description="Select the best roster under the salary cap"
    )
    parser.add_argument(
        "--stats",
        type=Path,
        default=Path(STATS_PATH),
        help=f"Path to advanced stats CSV (default: {STATS_PATH})",
    )
    parser.add_argument(
        "--salaries",
        type=Path,
        default=Path(SALARIES_PATH),
        help=f"Path to salaries CSV (default: {SALARIES_PATH})",
    )
    parser.add_argument(
        "--metric",
        action="append",
        dest="metrics",
        help=f"Metric to maximize, repeatable (default: {', '.join(METRICS)})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path(OUTPUT_DIR),
        help=f"Output directory (default: {OUTPUT_DIR})",
    )
    parser.add_argument(
        "--no-tiebreak",
        action="store_true",
        help="Skip the cheapest-roster tie-break solve",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Metrics to optimize in parallel (default: 1)",
    )
    args = parser.parse_args(argv)

    metrics = args.metrics or METRICS

    print("=== NBA Roster Optimization ===\n")

    # Step 1: Build player pool
    print("Step 1: Loading player pool...")
    pool = load_player_pool(args.stats, args.salaries, metrics)

    # Step 2: Solve each metric
    print(f"\nStep 2: Optimizing {', '.join(metrics)}...")
    results, failures = optimize_all_metrics(
        pool,
        metrics,
        tie_break="none" if args.no_tiebreak else TIE_BREAK,
        max_workers=args.workers,
    )

    # Step 3: Report and write output
    print(f"\nStep 3: Writing to {args.output}...")
    for metric, result in results.items():
        print_roster_summary(result)
        roster_path, minutes_path = write_results(result, args.output)
        print(f"  Wrote {roster_path} and {minutes_path}")

    for metric, exc in failures.items():
        print(f"  FAILED {metric}: {exc}")

    print("\n=== Done ===")
    return 1 if not results else 0


if __name__ == "__main__":
    sys.exit(main())
