"""Tests for random problem generation and balancing."""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver.exceptions import InvalidProblemError  # noqa: E402
from transport_solver.generator import (  # noqa: E402
    BalanceInfo,
    balance_problem,
    generate_random_problem,
)


class TestGenerateRandomProblem:
    def test_shape_and_balance(self):
        problem = generate_random_problem(3, 5, seed=11)

        assert (problem.rows, problem.cols) == (3, 5)
        assert problem.total_supply == problem.total_demand

    def test_values_within_ranges(self):
        problem = generate_random_problem(6, 4, seed=3)

        for row in problem.costs:
            assert all(2 <= cost <= 15 for cost in row)
            assert all(float(cost).is_integer() for cost in row)
        # Only the single adjusted entry may exceed the upper bound.
        quantities = list(problem.supply) + list(problem.demand)
        assert all(q >= 20 for q in quantities)
        assert sum(q > 69 for q in quantities) <= 1

    def test_same_seed_same_problem(self):
        first = generate_random_problem(4, 4, seed=42)
        second = generate_random_problem(4, 4, seed=42)
        other = generate_random_problem(4, 4, seed=43)

        assert first == second
        assert first != other

    def test_custom_ranges(self):
        problem = generate_random_problem(2, 3, seed=0, cost_range=(0, 0), quantity_range=(5, 5))

        assert problem.costs == ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        assert problem.total_supply == problem.total_demand == 15.0

    def test_rejects_empty_shape(self):
        with pytest.raises(InvalidProblemError):
            generate_random_problem(0, 3)

    def test_rejects_inverted_range(self):
        with pytest.raises(InvalidProblemError, match="cost_range"):
            generate_random_problem(2, 2, cost_range=(10, 1))


class TestBalanceProblem:
    def test_excess_supply_adds_dummy_column(self):
        problem, info = balance_problem([[3, 1], [2, 4]], [30, 20], [15, 25])

        assert info == BalanceInfo(kind="dummy_column", difference=10.0)
        assert info.added_dummy
        assert problem.cols == 3
        assert problem.demand == (15.0, 25.0, 10.0)
        assert [row[-1] for row in problem.costs] == [0.0, 0.0]

    def test_excess_demand_adds_dummy_row(self):
        problem, info = balance_problem([[3, 1], [2, 4]], [10, 20], [15, 25])

        assert info == BalanceInfo(kind="dummy_row", difference=10.0)
        assert problem.rows == 3
        assert problem.supply == (10.0, 20.0, 10.0)
        assert problem.costs[-1] == (0.0, 0.0)

    def test_balanced_input_is_unchanged(self):
        problem, info = balance_problem([[3, 1], [2, 4]], [20, 20], [15, 25])

        assert info == BalanceInfo(kind="balanced", difference=0.0)
        assert not info.added_dummy
        assert (problem.rows, problem.cols) == (2, 2)

    def test_inputs_are_not_mutated(self):
        costs = [[3, 1], [2, 4]]
        supply = [30, 20]
        demand = [15, 25]

        balance_problem(costs, supply, demand)

        assert costs == [[3, 1], [2, 4]]
        assert demand == [15, 25]
