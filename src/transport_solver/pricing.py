"""Opportunity cost (reduced cost) evaluation and entering cell selection.

The entering cell is chosen Dantzig-style: the non-basic cell with the most
negative opportunity cost. Ties go to the first such cell in row-major scan
order, which makes the choice reproducible on degenerate inputs.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .tableau import Grid, LoopNode, Potentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingResult:
    """Outcome of pricing the non-basic cells.

    Attributes:
        grid: Copy of the input grid annotated with opportunity costs.
        min_delta: Smallest opportunity cost, or math.inf when no non-basic
                   cell could be priced.
        entering: First row-major cell attaining min_delta, or None.
    """

    grid: Grid
    min_delta: float
    entering: LoopNode | None

    def is_optimal(self, tolerance: float = 0.0) -> bool:
        return self.min_delta >= -tolerance


def evaluate_opportunity_costs(
    grid: Grid,
    u: Sequence[float | None],
    v: Sequence[float | None],
) -> PricingResult:
    """Price every non-basic cell against the current potentials.

    opportunity_cost[r][c] = cost[r][c] - (u[r] + v[c]) for non-basic cells
    whose potentials are both known; undefined for every other cell.

    Args:
        grid: Current tableau.
        u: Row potentials (None = unknown).
        v: Column potentials (None = unknown).

    Returns:
        PricingResult with the annotated grid, the minimum opportunity cost
        and the entering cell candidate.
    """
    u_arr, v_arr = Potentials(u=tuple(u), v=tuple(v)).as_arrays()

    # Vectorized reduced costs: delta[r, c] = cost[r, c] - u[r] - v[c]
    reduced = grid.costs - (u_arr[:, np.newaxis] + v_arr[np.newaxis, :])
    candidates = ~grid.basic & ~np.isnan(reduced)
    opportunity = np.where(candidates, reduced, np.nan)
    annotated = grid.with_opportunity(opportunity)

    if not candidates.any():
        return PricingResult(grid=annotated, min_delta=math.inf, entering=None)

    # argmin returns the first occurrence in the flattened (row-major) order.
    flat = int(np.argmin(np.where(candidates, reduced, np.inf)))
    row, col = divmod(flat, grid.cols)
    min_delta = float(reduced[row, col])
    entering = LoopNode(row, col)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Priced non-basic cells",
            extra={
                "candidates": int(np.count_nonzero(candidates)),
                "min_delta": min_delta,
                "entering_cell": entering,
            },
        )
    return PricingResult(grid=annotated, min_delta=min_delta, entering=entering)
