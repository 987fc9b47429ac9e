"""Problem construction helpers: random instances and balancing."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .data import TransportationProblem, build_problem
from .exceptions import InvalidProblemError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceInfo:
    """What balance_problem() did.

    Attributes:
        kind: "balanced" (nothing added), "dummy_column" (excess supply) or
              "dummy_row" (excess demand).
        difference: Quantity given to the dummy destination or source.
    """

    kind: str
    difference: float

    @property
    def added_dummy(self) -> bool:
        return self.kind != "balanced"


def generate_random_problem(
    rows: int,
    cols: int,
    seed: int | None = None,
    cost_range: tuple[int, int] = (2, 15),
    quantity_range: tuple[int, int] = (20, 69),
) -> TransportationProblem:
    """Draw a random balanced transportation problem.

    Costs and quantities are integers drawn uniformly from the inclusive
    ranges. The shortfall between total supply and total demand is added to
    one randomly chosen demand entry (or supply entry), so no dummy row or
    column is needed.

    Args:
        rows: Number of sources.
        cols: Number of destinations.
        seed: Seed for numpy's Generator; the same seed gives the same problem.
        cost_range: Inclusive (low, high) unit cost bounds (default: (2, 15)).
        quantity_range: Inclusive (low, high) supply/demand bounds (default: (20, 69)).

    Returns:
        A validated, balanced TransportationProblem.

    Examples:
        >>> problem = generate_random_problem(3, 4, seed=7)
        >>> problem.total_supply == problem.total_demand
        True
    """
    if rows < 1 or cols < 1:
        raise InvalidProblemError(
            f"Problem must have at least one source and one destination, got {rows}x{cols}."
        )
    for label, (low, high) in (("cost_range", cost_range), ("quantity_range", quantity_range)):
        if low < 0 or high < low:
            raise InvalidProblemError(
                f"{label} must satisfy 0 <= low <= high, got ({low}, {high})."
            )

    rng = np.random.default_rng(seed)
    costs = rng.integers(cost_range[0], cost_range[1], size=(rows, cols), endpoint=True)
    supply = rng.integers(quantity_range[0], quantity_range[1], size=rows, endpoint=True)
    demand = rng.integers(quantity_range[0], quantity_range[1], size=cols, endpoint=True)

    difference = int(supply.sum() - demand.sum())
    if difference > 0:
        demand[rng.integers(cols)] += difference
    elif difference < 0:
        supply[rng.integers(rows)] += -difference

    logger.debug(
        "Generated random problem",
        extra={"rows": rows, "cols": cols, "seed": seed, "adjustment": difference},
    )
    return build_problem(costs.tolist(), supply.tolist(), demand.tolist())


def balance_problem(
    costs: Sequence[Sequence[float]],
    supply: Sequence[float],
    demand: Sequence[float],
    tolerance: float = 1e-3,
) -> tuple[TransportationProblem, BalanceInfo]:
    """Balance supply and demand with a zero-cost dummy destination or source.

    Excess supply becomes a dummy column (goods that stay at the source);
    excess demand becomes a dummy row (demand that goes unmet). Inputs are
    not modified.

    Returns:
        (problem, info): the validated balanced problem and a BalanceInfo
        describing the dummy that was added, if any.

    Examples:
        >>> problem, info = balance_problem([[3, 1], [2, 4]], [30, 20], [15, 25])
        >>> info
        BalanceInfo(kind='dummy_column', difference=10.0)
        >>> problem.cols
        3
    """
    cost_rows = [[float(value) for value in row] for row in costs]
    supply_vals = [float(value) for value in supply]
    demand_vals = [float(value) for value in demand]
    difference = math.fsum(supply_vals) - math.fsum(demand_vals)

    if difference > tolerance:
        for row in cost_rows:
            row.append(0.0)
        demand_vals.append(difference)
        info = BalanceInfo(kind="dummy_column", difference=difference)
    elif difference < -tolerance:
        cost_rows.append([0.0] * len(demand_vals))
        supply_vals.append(-difference)
        info = BalanceInfo(kind="dummy_row", difference=-difference)
    else:
        info = BalanceInfo(kind="balanced", difference=0.0)

    if info.added_dummy:
        logger.info(
            "Added dummy %s to balance the problem",
            "destination" if info.kind == "dummy_column" else "source",
            extra={"difference": info.difference},
        )
    problem = build_problem(cost_rows, supply_vals, demand_vals, tolerance=tolerance)
    return problem, info
