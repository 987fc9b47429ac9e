"""Example script demonstrating usage of the transportation solver."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver import load_problem, save_result, solve_transportation  # noqa: E402


def main() -> None:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    base_dir = Path(__file__).resolve().parent
    problem_path = base_dir / "three_by_four.json"
    output_path = base_dir / "three_by_four_solution.json"

    problem = load_problem(problem_path)
    result = solve_transportation(problem)
    save_result(output_path, result)

    print(f"Solved {problem_path.name}: status={result.status}, objective={result.objective}")
    print(f"Pivots: {result.iterations} ({result.degenerate_pivots} degenerate)")

    print("\nShipments:")
    for (row, col), quantity in sorted(result.allocations.items()):
        print(f"  source {row} -> destination {col}: {quantity:g}")

    # Potentials are the shadow prices of each source and destination
    print("\nPotentials:")
    print("  u = " + ", ".join(f"{value:g}" for value in result.u))
    print("  v = " + ", ".join(f"{value:g}" for value in result.v))


if __name__ == "__main__":
    main()
