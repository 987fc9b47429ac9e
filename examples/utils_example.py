"""
Demonstrates helpers for preparing and checking transportation plans.

This example shows how to:
- Balance a problem whose supply exceeds demand with a dummy destination
- Validate that a tableau ships exactly the supply and demand
- Read the plan back, ignoring the dummy column
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver import (  # noqa: E402
    IterationOrchestrator,
    balance_problem,
    validate_allocation,
)


def main():
    """Balance, solve and validate a small supply chain."""
    costs = [
        [2.5, 3.0, 1.5],  # factory A
        [1.8, 2.2, 2.8],  # factory B
    ]
    supply = [120.0, 150.0]
    demand = [80.0, 120.0, 50.0]

    print("=" * 80)
    print("TRANSPORTATION UTILITY FUNCTIONS DEMONSTRATION")
    print("=" * 80)
    print()

    problem, info = balance_problem(costs, supply, demand)
    print(f"Balancing: {info.kind} (difference {info.difference:g})")
    print(f"Balanced problem: {problem.rows} sources x {problem.cols} destinations")
    print()

    orchestrator = IterationOrchestrator(problem)
    result = orchestrator.solve()
    print(f"Status: {result.status}")
    print(f"Total cost: ${result.objective:,.2f}")
    print(f"Pivots: {result.iterations}")
    print()

    validation = validate_allocation(problem, orchestrator.state.grid)
    print(f"Plan valid: {validation.is_valid}")
    for error in validation.errors:
        print(f"  - {error}")
    print()

    real_cols = len(demand)
    print("Shipments:")
    for (row, col), quantity in sorted(result.allocations.items()):
        if col < real_cols:
            print(f"  factory {row} -> warehouse {col}: {quantity:g}")
    if info.added_dummy:
        unused = sum(q for (_, col), q in result.allocations.items() if col >= real_cols)
        print(f"  left at factories (dummy destination): {unused:g}")


if __name__ == "__main__":
    main()
