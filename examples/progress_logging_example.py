"""Example demonstrating progress logging for longer solves."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver import (  # noqa: E402
    ProgressInfo,
    generate_random_problem,
    solve_transportation,
)


def main() -> None:
    """Demonstrate progress callbacks on a random 15x20 problem."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 70)
    print("PROGRESS LOGGING DEMONSTRATION")
    print("=" * 70)

    problem = generate_random_problem(15, 20, seed=2024)
    print(f"\nRandom problem: {problem.rows} sources, {problem.cols} destinations")
    print(f"  Total supply: {problem.total_supply:g}")

    def progress_callback(info: ProgressInfo) -> None:
        kind = "degenerate" if info.degenerate else f"theta={info.theta:g}"
        print(
            f"  Pivot {info.pivots:4d}/{info.max_iterations} | "
            f"Cost: {info.total_cost:10,.0f} | {kind:>12} | "
            f"Time: {info.elapsed_time:6.3f}s"
        )

    print("\nSolving with progress logging (every 5 pivots)...")
    print("-" * 70)
    result = solve_transportation(problem, progress_callback=progress_callback, progress_interval=5)
    print("-" * 70)

    print("\nSolution found:")
    print(f"  Status: {result.status}")
    print(f"  Objective: {result.objective:,.0f}")
    print(f"  Pivots: {result.iterations} ({result.degenerate_pivots} degenerate)")
    print(f"  Shipping routes used: {len(result.allocations)}")


if __name__ == "__main__":
    main()
