"""Pivot execution: shift theta units around the loop and swap basis cells."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .exceptions import BasisInvariantError
from .loop import MIN_LOOP_LENGTH
from .tableau import Grid, LoopNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PivotResult:
    """Outcome of a pivot.

    Attributes:
        grid: New tableau after the pivot.
        theta: Quantity moved around the loop (0.0 for a degenerate pivot).
        entering: Cell that entered the basis.
        leaving: Cell that left the basis.
    """

    grid: Grid
    theta: float
    entering: LoopNode
    leaving: LoopNode

    @property
    def is_degenerate(self) -> bool:
        return self.theta == 0.0


def _validate_loop(grid: Grid, loop: Sequence[LoopNode]) -> None:
    if len(loop) < MIN_LOOP_LENGTH or len(loop) % 2 != 0:
        raise BasisInvariantError(
            f"Loop must have an even length of at least {MIN_LOOP_LENGTH}, got {len(loop)}.",
            phase="pivot",
        )
    if len(set(loop)) != len(loop):
        raise BasisInvariantError(f"Loop revisits a cell: {list(loop)}", phase="pivot")
    if grid.basic[loop[0].row, loop[0].col]:
        raise BasisInvariantError(
            f"Entering cell {tuple(loop[0])} is already basic.", phase="pivot"
        )
    for node in loop[1:]:
        if not grid.basic[node.row, node.col]:
            raise BasisInvariantError(
                f"Loop passes through non-basic cell {tuple(node)}.", phase="pivot"
            )
    # Consecutive cells (including the closing pair) alternate shared row / shared column.
    shares_row = [
        loop[idx].row == loop[(idx + 1) % len(loop)].row for idx in range(len(loop))
    ]
    for idx, node in enumerate(loop):
        nxt = loop[(idx + 1) % len(loop)]
        if shares_row[idx] == (node.col == nxt.col) or shares_row[idx] == shares_row[idx - 1]:
            raise BasisInvariantError(
                f"Loop does not alternate row and column moves at {tuple(node)} -> {tuple(nxt)}.",
                phase="pivot",
            )


def select_leaving(grid: Grid, loop: Sequence[LoopNode]) -> tuple[float, LoopNode]:
    """Return (theta, leaving cell) for a loop.

    theta is the smallest allocation among the minus (odd) positions; the
    first minus cell in loop order holding that amount leaves the basis.
    """
    theta = np.inf
    leaving = loop[1]
    for node in loop[1::2]:
        quantity = float(grid.allocation[node.row, node.col])
        if quantity < theta:
            theta = quantity
            leaving = node
    return float(theta), LoopNode(*leaving)


def apply_pivot(grid: Grid, loop: Sequence[tuple[int, int]]) -> PivotResult:
    """Apply one stepping-stone pivot along a loop.

    Plus cells (positions 0, 2, ...) gain theta and are basic afterwards;
    minus cells (positions 1, 3, ...) lose theta. The leaving cell drops out
    of the basis and is emptied. The entering cell (position 0) is basic even
    when theta is 0, so a degenerate pivot still swaps exactly one basic cell.

    Args:
        grid: Current tableau.
        loop: Loop as returned by find_loop().

    Returns:
        PivotResult with the new grid, theta, and the entering/leaving cells.

    Raises:
        BasisInvariantError: If the loop is not a valid stepping-stone loop on
            this grid.
    """
    nodes = [LoopNode(int(r), int(c)) for r, c in loop]
    _validate_loop(grid, nodes)
    theta, leaving = select_leaving(grid, nodes)
    entering = nodes[0]

    allocation = np.array(grid.allocation, dtype=float)
    basic = np.array(grid.basic, dtype=bool)
    for idx, node in enumerate(nodes):
        if idx % 2 == 0:
            allocation[node.row, node.col] += theta
            basic[node.row, node.col] = True
        else:
            allocation[node.row, node.col] -= theta

    basic[leaving.row, leaving.col] = False
    basic[entering.row, entering.col] = True
    allocation[~basic] = 0.0

    new_grid = grid.with_allocations(allocation, basic)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Pivot applied",
            extra={
                "entering_cell": entering,
                "leaving_cell": leaving,
                "theta": theta,
                "loop_length": len(nodes),
                "total_cost": new_grid.total_cost(),
            },
        )
    return PivotResult(grid=new_grid, theta=theta, entering=entering, leaving=leaving)
