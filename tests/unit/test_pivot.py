"""Tests for pivot execution along a stepping-stone loop."""

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver.data import build_problem  # noqa: E402
from transport_solver.exceptions import BasisInvariantError  # noqa: E402
from transport_solver.initial import build_initial_solution  # noqa: E402
from transport_solver.loop import find_loop  # noqa: E402
from transport_solver.pivot import apply_pivot, select_leaving  # noqa: E402
from transport_solver.tableau import Grid, LoopNode  # noqa: E402


def _grid(costs, allocation, basic):
    return Grid(
        costs=np.array(costs, dtype=float),
        allocation=np.array(allocation, dtype=float),
        basic=np.array(basic, dtype=bool),
    )


@pytest.fixture
def least_cost_grid():
    problem = build_problem(
        [[19, 30, 50, 10], [70, 30, 40, 60], [40, 8, 70, 20]],
        supply=[7, 9, 18],
        demand=[5, 8, 7, 14],
    )
    return build_initial_solution(problem)


def test_select_leaving_picks_smallest_minus_cell(least_cost_grid):
    loop = find_loop((0, 0), least_cost_grid)
    theta, leaving = select_leaving(least_cost_grid, loop)

    # Minus cells are (0,3) holding 7 and (2,0) holding 3.
    assert theta == 3.0
    assert leaving == LoopNode(2, 0)


def test_pivot_shifts_theta_and_swaps_basis(least_cost_grid):
    loop = find_loop((0, 0), least_cost_grid)
    result = apply_pivot(least_cost_grid, loop)
    grid = result.grid

    assert result.theta == 3.0
    assert result.entering == LoopNode(0, 0)
    assert result.leaving == LoopNode(2, 0)
    assert not result.is_degenerate
    assert grid.to_matrix() == [
        [3.0, None, None, 4.0],
        [2.0, None, 7.0, None],
        [None, 8.0, None, 10.0],
    ]
    # Cost falls by theta times the entering cell's opportunity cost (3 * 11).
    assert grid.total_cost() == pytest.approx(least_cost_grid.total_cost() - 33.0)
    assert grid.basic_count == least_cost_grid.basic_count
    assert grid.is_spanning_tree()


def test_pivot_leaves_input_grid_untouched(least_cost_grid):
    before = least_cost_grid.to_matrix()
    apply_pivot(least_cost_grid, find_loop((0, 0), least_cost_grid))
    assert least_cost_grid.to_matrix() == before


def test_degenerate_pivot_keeps_cost_and_swaps_one_cell():
    grid = _grid(
        [[1, 4, 2], [5, 3, 6]],
        [[5, 0, 0], [0, 5, 5]],
        [[True, True, False], [False, True, True]],
    )
    loop = find_loop((0, 2), grid)
    result = apply_pivot(grid, loop)

    assert result.theta == 0.0
    assert result.is_degenerate
    assert result.leaving == LoopNode(0, 1)
    assert result.grid.total_cost() == pytest.approx(grid.total_cost())
    assert set(result.grid.basic_cells()) == {(0, 0), (0, 2), (1, 1), (1, 2)}
    assert result.grid.cell(0, 2).allocation == 0.0
    assert result.grid.cell(0, 1).allocation is None


def test_first_minus_cell_wins_ties():
    # Both minus cells hold 5; the first in loop order leaves.
    grid = _grid([[4, 6], [8, 2]], [[5, 0], [0, 5]], [[True, False], [True, True]])
    loop = find_loop((0, 1), grid)
    theta, leaving = select_leaving(grid, loop)

    assert loop == ((0, 1), (0, 0), (1, 0), (1, 1))
    assert theta == 5.0
    assert leaving == LoopNode(0, 0)
    result = apply_pivot(grid, loop)
    # (1,1) also reaches zero but stays basic.
    assert result.grid.to_matrix() == [[None, 5.0], [5.0, 0.0]]


@pytest.mark.parametrize(
    "loop, message",
    [
        ([(0, 1), (0, 0), (1, 0)], "even length"),
        ([(0, 1), (0, 0), (0, 0), (1, 1)], "revisits"),
        ([(0, 0), (0, 1), (1, 1), (1, 0)], "already basic"),
        ([(0, 1), (0, 0), (1, 1), (1, 0)], "alternate"),
    ],
)
def test_invalid_loops_raise(loop, message):
    grid = _grid([[4, 6], [8, 2]], [[10, 0], [2, 8]], [[True, False], [True, True]])
    with pytest.raises(BasisInvariantError, match=message) as excinfo:
        apply_pivot(grid, loop)
    assert excinfo.value.phase == "pivot"
