"""Tests for the tableau value types: Grid, Cell, Potentials and DisjointSet."""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver.data import build_problem  # noqa: E402
from transport_solver.tableau import DisjointSet, Grid, LoopNode, Potentials  # noqa: E402


def _grid(costs, allocation, basic):
    return Grid(
        costs=np.array(costs, dtype=float),
        allocation=np.array(allocation, dtype=float),
        basic=np.array(basic, dtype=bool),
    )


class TestGrid:
    def test_empty_grid_from_problem(self):
        problem = build_problem([[4, 6], [8, 2]], supply=[10, 10], demand=[12, 8])
        grid = Grid.empty(problem)

        assert (grid.rows, grid.cols) == (2, 2)
        assert grid.basic_count == 0
        assert grid.required_basic_count == 3
        assert grid.total_cost() == 0.0
        assert grid.to_matrix() == [[None, None], [None, None]]

    def test_arrays_are_immutable_copies(self):
        allocation = np.array([[10.0, 0.0], [2.0, 8.0]])
        grid = _grid([[4, 6], [8, 2]], allocation, [[True, False], [True, True]])

        allocation[0, 0] = 99.0
        assert grid.allocation[0, 0] == 10.0
        with pytest.raises(ValueError):
            grid.allocation[0, 0] = 1.0
        with pytest.raises(ValueError):
            grid.basic[0, 1] = True

    def test_non_basic_cells_hold_no_quantity(self):
        grid = _grid([[1, 2], [3, 4]], [[5, 7], [0, 5]], [[True, False], [True, True]])

        assert grid.allocation[0, 1] == 0.0
        assert grid.cell(0, 1).allocation is None
        assert grid.cell(1, 0).allocation == 0.0

    def test_cells_iterate_row_major(self):
        grid = _grid([[4, 6], [8, 2]], [[10, 0], [2, 8]], [[True, False], [True, True]])

        coords = [(cell.row, cell.col) for cell in grid.cells()]
        assert coords == [(0, 0), (0, 1), (1, 0), (1, 1)]
        assert grid.basic_cells() == [LoopNode(0, 0), LoopNode(1, 0), LoopNode(1, 1)]

    def test_totals_and_cost(self):
        grid = _grid([[4, 6], [8, 2]], [[10, 0], [2, 8]], [[True, False], [True, True]])

        assert grid.total_cost() == pytest.approx(72.0)
        assert list(grid.row_totals()) == [10.0, 10.0]
        assert list(grid.col_totals()) == [12.0, 8.0]
        assert grid.to_matrix() == [[10.0, None], [2.0, 8.0]]

    def test_spanning_tree_check(self):
        tree = _grid([[1, 2], [3, 4]], [[5, 0], [0, 5]], [[True, True], [False, True]])
        too_few = _grid([[1, 2], [3, 4]], [[5, 0], [0, 5]], [[True, False], [False, True]])
        cycle = _grid(
            [[1, 2, 3], [4, 5, 6]],
            [[1, 1, 0], [1, 1, 0]],
            [[True, True, False], [True, True, False]],
        )

        assert tree.is_spanning_tree()
        assert not too_few.is_spanning_tree()
        # Right cell count, but the four cells form a cycle and column 2 is cut off.
        assert cycle.basic_count == cycle.required_basic_count
        assert not cycle.is_spanning_tree()

    def test_opportunity_costs_only_reported_when_defined(self):
        grid = _grid([[4, 6], [8, 2]], [[10, 0], [2, 8]], [[True, False], [True, True]])
        annotated = grid.with_opportunity(np.array([[np.nan, 6.0], [np.nan, np.nan]]))

        assert grid.cell(0, 1).opportunity_cost is None
        assert annotated.cell(0, 1).opportunity_cost == 6.0
        assert annotated.cell(0, 0).opportunity_cost is None
        # New allocations drop stale opportunity costs.
        cleared = annotated.with_allocations(annotated.allocation, annotated.basic)
        assert cleared.cell(0, 1).opportunity_cost is None


class TestPotentials:
    def test_unknown_potentials(self):
        potentials = Potentials.unknown(2, 3)
        assert potentials.u == (None, None)
        assert potentials.v == (None, None, None)
        assert not potentials.is_complete

    def test_as_arrays_uses_nan_for_unknown(self):
        u, v = Potentials(u=(0.0, None), v=(4.0, 2.0)).as_arrays()
        assert u[0] == 0.0
        assert math.isnan(u[1])
        assert list(v) == [4.0, 2.0]


class TestDisjointSet:
    def test_union_reports_merges(self):
        components = DisjointSet(4)
        assert components.union(0, 1)
        assert components.union(2, 3)
        assert components.union(1, 3)
        assert not components.union(0, 2)
        assert components.find(0) == components.find(3)
