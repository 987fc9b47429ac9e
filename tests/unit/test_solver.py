"""Tests for the public solve_transportation entry point."""

import itertools
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver import SolverOptions, build_problem, solve_transportation  # noqa: E402


def test_two_by_two_optimal_cost():
    problem = build_problem([[4, 6], [8, 2]], supply=[10, 10], demand=[12, 8])
    result = solve_transportation(problem)

    assert result.status == "optimal"
    assert result.objective == pytest.approx(72.0)
    assert result.allocations == {(0, 0): 10.0, (1, 0): 2.0, (1, 1): 8.0}
    assert result.iterations == 0


def test_two_by_two_matches_enumeration():
    # With x00 = a the plan is fixed: x01 = 10 - a, x10 = 12 - a, x11 = a - 2.
    costs = [[4, 6], [8, 2]]
    best = min(
        4 * a + 6 * (10 - a) + 8 * (12 - a) + 2 * (a - 2) for a in range(2, 11)
    )
    result = solve_transportation(build_problem(costs, supply=[10, 10], demand=[12, 8]))

    assert best == 72
    assert result.objective == pytest.approx(best)


def test_degenerate_zero_supply_and_demand():
    problem = build_problem([[1, 2], [3, 4]], supply=[5, 0], demand=[5, 0])
    result = solve_transportation(problem)

    assert result.status == "optimal"
    assert result.objective == pytest.approx(5.0)
    assert result.allocations == {(0, 0): 5.0}
    assert len(result.basis) == 3


def test_three_by_three_against_brute_force():
    # Integral data has an integral optimum, so an exhaustive search over
    # integer plans finds the true minimum.
    costs = [[8, 6, 10], [9, 12, 13], [14, 9, 16]]
    supply = [3, 4, 2]
    demand = [4, 2, 3]

    best = None
    for x00, x01 in itertools.product(range(4), repeat=2):
        x02 = supply[0] - x00 - x01
        if x02 < 0:
            continue
        for x10, x11 in itertools.product(range(5), repeat=2):
            x12 = supply[1] - x10 - x11
            x20 = demand[0] - x00 - x10
            x21 = demand[1] - x01 - x11
            x22 = demand[2] - x02 - x12
            if min(x12, x20, x21, x22) < 0 or x20 + x21 + x22 != supply[2]:
                continue
            plan = [[x00, x01, x02], [x10, x11, x12], [x20, x21, x22]]
            cost = sum(costs[r][c] * plan[r][c] for r in range(3) for c in range(3))
            best = cost if best is None else min(best, cost)

    result = solve_transportation(build_problem(costs, supply, demand))

    assert result.status == "optimal"
    assert result.objective == pytest.approx(best)


def test_result_potentials_certify_optimality():
    costs = [[19, 30, 50, 10], [70, 30, 40, 60], [40, 8, 70, 20]]
    supply = [7, 9, 18]
    demand = [5, 8, 7, 14]
    result = solve_transportation(build_problem(costs, supply, demand))

    dual = sum(u * s for u, s in zip(result.u, supply)) + sum(
        v * d for v, d in zip(result.v, demand)
    )
    assert dual == pytest.approx(result.objective)
    for r, c in itertools.product(range(3), range(4)):
        assert costs[r][c] - result.u[r] - result.v[c] >= -1e-9


def test_single_cell_problem():
    result = solve_transportation(build_problem([[7]], supply=[3], demand=[3]))

    assert result.status == "optimal"
    assert result.objective == pytest.approx(21.0)
    assert result.basis == frozenset({(0, 0)})


def test_fractional_quantities():
    problem = build_problem([[1.5, 2.25], [0.5, 3.0]], supply=[2.5, 1.5], demand=[1.0, 3.0])
    result = solve_transportation(problem, options=SolverOptions(tolerance=1e-12))

    assert result.status == "optimal"
    shipped = sum(result.allocations.values())
    assert shipped == pytest.approx(4.0)
