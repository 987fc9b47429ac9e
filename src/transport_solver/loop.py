"""Closed-loop (stepping-stone cycle) search through the basis.

Adding the entering cell to a spanning-tree basis closes exactly one cycle
in the bipartite row/column graph. On the tableau that cycle is a sequence
of cells where consecutive cells share a row, then a column, then a row, and
so on, returning to the entering cell. The search below follows only basic
cells, so its cost is bounded by the size of the basis tree rather than by
the tableau area.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from .tableau import Grid, LoopNode

logger = logging.getLogger(__name__)

MIN_LOOP_LENGTH = 4


def _moves(node: LoopNode, start: LoopNode, grid: Grid, along_row: bool) -> Iterator[LoopNode]:
    """Cells reachable from node in one row-move (along_row) or column-move."""
    if along_row:
        for col in range(grid.cols):
            if col == node.col:
                continue
            candidate = LoopNode(node.row, col)
            if candidate == start or grid.basic[node.row, col]:
                yield candidate
    else:
        for row in range(grid.rows):
            if row == node.row:
                continue
            candidate = LoopNode(row, node.col)
            if candidate == start or grid.basic[row, node.col]:
                yield candidate


def _search(start: LoopNode, grid: Grid, row_move_first: bool) -> tuple[LoopNode, ...] | None:
    path: list[LoopNode] = [start]
    visited = {start}
    # One candidate iterator per path position; the move direction alternates with depth.
    frontier: list[Iterator[LoopNode]] = [_moves(start, start, grid, row_move_first)]

    while frontier:
        nxt = next(frontier[-1], None)
        if nxt is None:
            frontier.pop()
            visited.discard(path.pop())
            continue
        if nxt == start:
            # The closing move must alternate with the first one, so the length is even.
            if len(path) >= MIN_LOOP_LENGTH and len(path) % 2 == 0:
                return tuple(path)
            continue
        if len(path) >= 2 and nxt == path[-2]:
            continue
        if nxt in visited:
            continue
        path.append(nxt)
        visited.add(nxt)
        depth = len(path) - 1
        along_row = row_move_first if depth % 2 == 0 else not row_move_first
        frontier.append(_moves(nxt, start, grid, along_row))
    return None


def find_loop(entering: tuple[int, int], grid: Grid) -> tuple[LoopNode, ...] | None:
    """Find the closed loop through the entering cell.

    Depth-first search with backtracking, alternating row-moves and
    column-moves. Intermediate hops land only on basic cells; the entering
    cell is the single non-basic cell of the loop. A row-move first search is
    tried before a column-move first one. Candidates are scanned in ascending
    column (row-moves) or row (column-moves) order.

    Args:
        entering: (row, col) of the entering cell.
        grid: Tableau whose basis is a spanning tree.

    Returns:
        Tuple of distinct cells starting at the entering cell, of even length
        >= 4, where position 0, 2, 4, ... are "plus" cells and 1, 3, 5, ...
        are "minus" cells. The closing move from the last cell back to the
        entering cell is implied. None if no loop exists, which means the
        basis is not a spanning tree.

    Examples:
        >>> # basis {(0,0), (1,0), (1,1)}; entering (0,1)
        >>> find_loop((0, 1), grid)
        (LoopNode(row=0, col=1), LoopNode(row=0, col=0), LoopNode(row=1, col=0), LoopNode(row=1, col=1))
    """
    start = LoopNode(int(entering[0]), int(entering[1]))
    for row_move_first in (True, False):
        loop = _search(start, grid, row_move_first)
        if loop is not None:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Found loop",
                    extra={
                        "entering_cell": start,
                        "loop": loop,
                        "row_move_first": row_move_first,
                    },
                )
            return loop
    logger.warning(
        "No closed loop through entering cell",
        extra={"entering_cell": start, "basic_cells": grid.basic_count},
    )
    return None
