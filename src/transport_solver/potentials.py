"""Dual potential propagation over the spanning-tree basis."""

from __future__ import annotations

import logging

from .exceptions import BasisInvariantError
from .tableau import Grid, Potentials

logger = logging.getLogger(__name__)


def compute_potentials(grid: Grid) -> Potentials:
    """Derive row potentials u and column potentials v from the basis.

    Every basic cell must satisfy u[r] + v[c] = cost[r][c]. With u[0] pinned
    to 0 the remaining values follow by repeatedly sweeping the basic cells
    and filling whichever side of a cell is still unknown, until a sweep
    changes nothing. On a spanning tree this reaches every node within
    rows + cols sweeps.

    Args:
        grid: Tableau whose basis is a spanning tree.

    Returns:
        Fully populated Potentials.

    Raises:
        BasisInvariantError: If the basis has the wrong size or leaves a
            potential unknown, i.e. it is not a spanning tree.
    """
    if grid.basic_count != grid.required_basic_count:
        raise BasisInvariantError(
            f"Basis has {grid.basic_count} basic cells, expected "
            f"{grid.required_basic_count} (rows + cols - 1).",
            phase="potentials",
        )

    u: list[float | None] = [None] * grid.rows
    v: list[float | None] = [None] * grid.cols
    u[0] = 0.0
    basic_cells = grid.basic_cells()

    sweeps = 0
    changed = True
    while changed:
        changed = False
        sweeps += 1
        for r, c in basic_cells:
            cost = float(grid.costs[r, c])
            ur, vc = u[r], v[c]
            if ur is not None and vc is None:
                v[c] = cost - ur
                changed = True
            elif vc is not None and ur is None:
                u[r] = cost - vc
                changed = True

    missing = [f"u[{r}]" for r, value in enumerate(u) if value is None]
    missing += [f"v[{c}]" for c, value in enumerate(v) if value is None]
    if missing:
        raise BasisInvariantError(
            f"Potentials incomplete after propagation: {', '.join(missing)} unknown. "
            f"The basic cells do not connect every row and column.",
            phase="potentials",
        )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Computed potentials", extra={"u": u, "v": v, "sweeps": sweeps})
    return Potentials(u=tuple(u), v=tuple(v))
