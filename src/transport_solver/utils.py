"""Utility functions for analyzing transportation plans and solver snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .data import TransportationProblem
from .tableau import Grid, LoopNode

if TYPE_CHECKING:
    from .orchestrator import IterationState


class Highlight(Enum):
    """Role of a cell in the current iteration, for renderers."""

    ENTERING = "entering"
    LEAVING = "leaving"
    LOOP_PLUS = "loop-plus"
    LOOP_MINUS = "loop-minus"


@dataclass
class ValidationResult:
    """Results from validating an allocation.

    Attributes:
        is_valid: True if the allocation satisfies all constraints.
        errors: List of validation error messages (empty if valid).
        row_residuals: supply[r] minus the quantity shipped from source r.
        col_residuals: demand[c] minus the quantity shipped to destination c.
        negative_cells: Cells holding a negative quantity.
    """

    is_valid: bool
    errors: list[str]
    row_residuals: list[float]
    col_residuals: list[float]
    negative_cells: list[tuple[int, int]]


def validate_allocation(
    problem: TransportationProblem,
    grid: Grid,
    tolerance: float = 1e-6,
) -> ValidationResult:
    """Validate that a tableau is a basic feasible solution of the problem.

    Checks:
    - Every source ships exactly its supply
    - Every destination receives exactly its demand
    - No cell holds a negative quantity
    - The basic cells form a spanning tree (rows + cols - 1 cells, no cycle)

    Args:
        problem: Problem definition.
        grid: Tableau to validate.
        tolerance: Numerical tolerance for residuals (default: 1e-6).

    Returns:
        ValidationResult with detailed information about any violations.
    """
    errors: list[str] = []
    if grid.costs.shape != (problem.rows, problem.cols):
        errors.append(
            f"Grid shape {grid.costs.shape} does not match problem shape "
            f"({problem.rows}, {problem.cols})"
        )
        return ValidationResult(
            is_valid=False, errors=errors, row_residuals=[], col_residuals=[], negative_cells=[]
        )

    row_totals = grid.row_totals()
    col_totals = grid.col_totals()
    row_residuals = [float(problem.supply[r] - row_totals[r]) for r in range(problem.rows)]
    col_residuals = [float(problem.demand[c] - col_totals[c]) for c in range(problem.cols)]

    for r, residual in enumerate(row_residuals):
        if abs(residual) > tolerance:
            errors.append(
                f"Source {r}: ships {row_totals[r]:.6f} but supply is {problem.supply[r]:.6f}"
            )
    for c, residual in enumerate(col_residuals):
        if abs(residual) > tolerance:
            errors.append(
                f"Destination {c}: receives {col_totals[c]:.6f} but demand is "
                f"{problem.demand[c]:.6f}"
            )

    negative_cells: list[tuple[int, int]] = []
    for row, col in grid.basic_cells():
        quantity = float(grid.allocation[row, col])
        if quantity < -tolerance:
            negative_cells.append((row, col))
            errors.append(f"Cell ({row}, {col}): negative quantity {quantity:.6f}")

    if not grid.is_spanning_tree():
        errors.append(
            f"Basis has {grid.basic_count} cells (expected {grid.required_basic_count}) "
            f"or contains a cycle; it is not a spanning tree"
        )

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        row_residuals=row_residuals,
        col_residuals=col_residuals,
        negative_cells=negative_cells,
    )


def highlight_cells(state: IterationState) -> dict[LoopNode, Highlight]:
    """Map cells of a snapshot to their highlight role.

    The entering cell is marked as soon as pricing selects it. While a loop is
    present, its plus positions (2, 4, ...) and minus positions (1, 3, ...)
    are marked too, and the leaving cell replaces its minus marker.
    """
    highlights: dict[LoopNode, Highlight] = {}
    for idx, node in enumerate(state.loop):
        if idx == 0:
            continue
        highlights[LoopNode(*node)] = Highlight.LOOP_MINUS if idx % 2 else Highlight.LOOP_PLUS
    if state.loop and state.leaving is not None and state.leaving in highlights:
        highlights[LoopNode(*state.leaving)] = Highlight.LEAVING
    if state.entering is not None:
        highlights[LoopNode(*state.entering)] = Highlight.ENTERING
    return highlights
