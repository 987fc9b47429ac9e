"""Initial basic feasible solution via the least-cost method."""

from __future__ import annotations

import logging

import numpy as np

from .data import TransportationProblem
from .exceptions import BasisInvariantError
from .tableau import DisjointSet, Grid

logger = logging.getLogger(__name__)


def _cells_by_cost(costs: np.ndarray) -> list[tuple[int, int]]:
    # Stable sort keeps row-major scan order among equal costs.
    order = np.argsort(costs, axis=None, kind="stable")
    cols = costs.shape[1]
    return [divmod(int(flat), cols) for flat in order]


def build_initial_solution(problem: TransportationProblem) -> Grid:
    """Build a starting tableau whose basis is a spanning tree.

    Cells are visited in ascending cost order. Each cell whose row still has
    supply and whose column still has demand receives min(supply, demand)
    and becomes basic. When an allocation exhausts a row and a column at the
    same time the basis ends up short; it is then topped up with
    zero-allocation cells, again cheapest first, choosing only cells that join
    two separate parts of the basis so the result stays a spanning tree.

    Args:
        problem: A validated, balanced transportation problem.

    Returns:
        Grid with exactly rows + cols - 1 basic cells whose row and column
        totals equal the problem's supply and demand.

    Raises:
        BasisInvariantError: If the basis cannot be completed (only possible
            for an empty tableau, which validation rejects).

    Examples:
        >>> problem = build_problem([[4, 6], [8, 2]], [10, 10], [12, 8])
        >>> grid = build_initial_solution(problem)
        >>> grid.to_matrix()
        [[10.0, None], [2.0, 8.0]]
    """
    costs = problem.cost_matrix
    rows, cols = costs.shape
    order = _cells_by_cost(costs)

    allocation = np.zeros((rows, cols))
    basic = np.zeros((rows, cols), dtype=bool)
    remaining_supply = np.array(problem.supply, dtype=float)
    remaining_demand = np.array(problem.demand, dtype=float)

    for r, c in order:
        if remaining_supply[r] > 0 and remaining_demand[c] > 0:
            quantity = min(remaining_supply[r], remaining_demand[c])
            allocation[r, c] = quantity
            basic[r, c] = True
            remaining_supply[r] -= quantity
            remaining_demand[c] -= quantity

    required = rows + cols - 1
    allocated = int(np.count_nonzero(basic))
    needed = required - allocated
    if needed > 0:
        components = DisjointSet(rows + cols)
        for r, c in zip(*np.nonzero(basic)):
            components.union(int(r), rows + int(c))
        for r, c in order:
            if needed == 0:
                break
            if basic[r, c]:
                continue
            # Only bridge separate components; a cell inside one would close a cycle.
            if components.union(r, rows + c):
                basic[r, c] = True
                needed -= 1
        if needed > 0:
            raise BasisInvariantError(
                f"Could not complete the initial basis: {required - needed} of {required} "
                f"basic cells placed on a {rows}x{cols} tableau.",
                phase="initial",
            )
        logger.debug(
            "Degenerate initial solution repaired with zero allocations",
            extra={"allocated_cells": allocated, "artificial_cells": required - allocated},
        )

    grid = Grid(costs=costs, allocation=allocation, basic=basic)
    logger.info(
        "Built least-cost initial solution",
        extra={
            "rows": rows,
            "cols": cols,
            "basic_cells": grid.basic_count,
            "total_cost": grid.total_cost(),
        },
    )
    return grid
