"""Core data structures for balanced transportation problems."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np

from .exceptions import InvalidProblemError, SolverConfigurationError


@dataclass(frozen=True)
class TransportationProblem:
    """Encapsulates a balanced transportation problem.

    Rows are sources (factories, warehouses) and columns are destinations
    (stores, customers). Shipping one unit from source r to destination c
    costs costs[r][c]. Use solve_transportation() to find an optimal plan.

    Attributes:
        costs: Unit shipping cost per (source, destination) pair, row-major.
        supply: Quantity available at each source.
        demand: Quantity required at each destination.
        tolerance: Tolerance used when checking that supply balances demand
                   (default: 1e-3).

    Examples:
        >>> problem = TransportationProblem(
        ...     costs=((4.0, 6.0), (8.0, 2.0)),
        ...     supply=(10.0, 10.0),
        ...     demand=(12.0, 8.0),
        ... )
        >>> problem.validate()
        >>> problem.rows, problem.cols
        (2, 2)

    Note:
        The solver core assumes a validated, balanced problem. build_problem()
        and load_problem() always validate; construct the dataclass directly
        only when you call validate() yourself.

    See Also:
        - build_problem(): Construct and validate from plain lists.
        - generate_random_problem(): Random balanced instances.
        - balance_problem(): Add a dummy source or destination.
    """

    costs: tuple[tuple[float, ...], ...]
    supply: tuple[float, ...]
    demand: tuple[float, ...]
    tolerance: float = 1e-3

    @property
    def rows(self) -> int:
        return len(self.supply)

    @property
    def cols(self) -> int:
        return len(self.demand)

    @property
    def cost_matrix(self) -> np.ndarray:
        """Costs as a read-only (rows, cols) float array."""
        matrix = np.array(self.costs, dtype=float).reshape(self.rows, self.cols)
        matrix.flags.writeable = False
        return matrix

    @property
    def total_supply(self) -> float:
        return math.fsum(self.supply)

    @property
    def total_demand(self) -> float:
        return math.fsum(self.demand)

    def validate(self) -> None:
        # Reject malformed input here so the solver phases can assume a balanced tableau.
        if self.rows == 0 or self.cols == 0:
            raise InvalidProblemError(
                f"Problem must have at least one source and one destination, got "
                f"{self.rows} sources and {self.cols} destinations."
            )
        if len(self.costs) != self.rows:
            raise InvalidProblemError(
                f"Cost matrix has {len(self.costs)} rows but supply has {self.rows} entries. "
                f"There must be one cost row per source."
            )
        for r, row in enumerate(self.costs):
            if len(row) != self.cols:
                raise InvalidProblemError(
                    f"Cost row {r} has {len(row)} entries but demand has {self.cols} entries. "
                    f"Every cost row must have one entry per destination."
                )
            for c, cost in enumerate(row):
                if not math.isfinite(cost):
                    raise InvalidProblemError(
                        f"Cost at ({r}, {c}) is {cost}. Banned routes (infinite cost) are "
                        f"not supported; all costs must be finite."
                    )
                if cost < 0:
                    raise InvalidProblemError(
                        f"Cost at ({r}, {c}) is negative ({cost}). Costs must be non-negative."
                    )
        for label, values in (("Supply", self.supply), ("Demand", self.demand)):
            for idx, value in enumerate(values):
                if not math.isfinite(value) or value < 0:
                    raise InvalidProblemError(
                        f"{label} at index {idx} is {value}. Quantities must be finite and "
                        f"non-negative."
                    )
        difference = self.total_supply - self.total_demand
        if abs(difference) > self.tolerance:
            raise InvalidProblemError(
                f"Problem is unbalanced: total supply {self.total_supply:.6f} != total demand "
                f"{self.total_demand:.6f} (difference {difference:.6f} exceeds tolerance "
                f"{self.tolerance}). Balance the problem first, e.g. with balance_problem()."
            )


@dataclass(frozen=True)
class ProgressInfo:
    """Progress information provided after each completed iteration.

    Attributes:
        iteration: Current iteration number (the initial solution is iteration 1).
        max_iterations: Maximum allowed pivots.
        pivots: Pivots performed so far.
        total_cost: Total cost of the current allocation.
        theta: Quantity shifted by the most recent pivot.
        degenerate: Whether the most recent pivot was degenerate (theta == 0).
        elapsed_time: Elapsed time in seconds since solve started.
    """

    iteration: int
    max_iterations: int
    pivots: int
    total_cost: float
    theta: float
    degenerate: bool
    elapsed_time: float


# Type alias for progress callback function
ProgressCallback = Callable[[ProgressInfo], None]


@dataclass(frozen=True)
class LogEntry:
    """One line of the human-readable solve log.

    Attributes:
        iteration: Iteration the event belongs to.
        phase: Short phase label ("initial", "check", "pivot", "error").
        description: What happened, suitable for display or narration.
        cost: Total cost at the time of the event.
        level: "info", "success", "warning" or "error".
    """

    iteration: int
    phase: str
    description: str
    cost: float
    level: str = "info"


@dataclass
class SolverOptions:
    """Configuration options for the transportation simplex solver.

    Attributes:
        max_iterations: Maximum number of pivots.
                        If None, defaults to max(100, 10 * rows * cols).
        tolerance: Optimality tolerance (default: 1e-9). The current plan is
                   optimal when every opportunity cost is >= -tolerance; 0.0
                   asks for the exact rule (every opportunity cost >= 0).
        verify_basis: Check the spanning-tree invariant after every pivot
                      (default: True). A violation ends the solve in the error state.
        raise_on_iteration_limit: Raise IterationLimitError instead of returning a
                                  result with status "iteration_limit" (default: False).

    Examples:
        >>> # Default options
        >>> options = SolverOptions()

        >>> # Cap the number of pivots and fail loudly when it is reached
        >>> options = SolverOptions(max_iterations=50, raise_on_iteration_limit=True)
    """

    max_iterations: int | None = None
    tolerance: float = 1e-9
    verify_basis: bool = True
    raise_on_iteration_limit: bool = False

    def __post_init__(self) -> None:
        if self.tolerance < 0:
            raise SolverConfigurationError(
                f"Tolerance must be non-negative, got {self.tolerance}. "
                f"Tolerance controls the optimality check on opportunity costs."
            )
        if self.max_iterations is not None and self.max_iterations <= 0:
            raise SolverConfigurationError(
                f"max_iterations must be positive, got {self.max_iterations}."
            )

    def resolve_max_iterations(self, problem: TransportationProblem) -> int:
        if self.max_iterations is not None:
            return self.max_iterations
        return max(100, 10 * problem.rows * problem.cols)


@dataclass
class TransportResult:
    """Represents the output of a transportation solve.

    Attributes:
        objective: Total shipping cost of the final plan (sum of cost * quantity).
        allocations: Mapping (row, col) -> shipped quantity for cells with a
                     non-zero shipment.
        status: Solution status:
                - 'optimal': No opportunity cost is negative
                - 'iteration_limit': Pivot limit reached before optimality
                - 'stopped': stop() was requested between iterations
                - 'error': A basis invariant was violated (see error_phase)
        iterations: Number of pivots performed.
        degenerate_pivots: Number of pivots with theta == 0.
        u: Row potentials of the final basis (None where unknown).
        v: Column potentials of the final basis (None where unknown).
        basis: Basic cells of the final tableau, including zero-allocation ones.
        error_phase: Phase that detected an invariant violation, if any.
        message: Short description of how the solve ended.
        history: Human-readable log of the solve.

    Examples:
        >>> problem = build_problem([[4, 6], [8, 2]], [10, 10], [12, 8])
        >>> result = solve_transportation(problem)
        >>> result.status, result.objective
        ('optimal', 72.0)
    """

    objective: float
    allocations: dict[tuple[int, int], float] = field(default_factory=dict)
    status: str = "optimal"
    iterations: int = 0
    degenerate_pivots: int = 0
    u: tuple[float | None, ...] = ()
    v: tuple[float | None, ...] = ()
    basis: frozenset[tuple[int, int]] = frozenset()
    error_phase: str | None = None
    message: str = ""
    history: list[LogEntry] = field(default_factory=list)


def build_problem(
    costs: Iterable[Iterable[float]],
    supply: Sequence[float],
    demand: Sequence[float],
    tolerance: float = 1e-3,
) -> TransportationProblem:
    """Factory helper used by the IO layer and generator to assemble a problem."""
    try:
        cost_rows = tuple(tuple(float(value) for value in row) for row in costs)
        supply_vals = tuple(float(value) for value in supply)
        demand_vals = tuple(float(value) for value in demand)
    except (TypeError, ValueError) as exc:
        raise InvalidProblemError(
            f"Costs, supply and demand must be numeric: {exc}"
        ) from exc

    problem = TransportationProblem(
        costs=cost_rows,
        supply=supply_vals,
        demand=demand_vals,
        tolerance=float(tolerance),
    )
    problem.validate()
    return problem
