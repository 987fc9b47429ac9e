"""Iteration state machine for the transportation simplex (MODI) method.

Each call to step_once() performs exactly one phase:

    input -> ready -> potentials -> deltas -> loop -> ready ... -> optimal

and returns a new immutable IterationState. run_full_iteration() chains the
phases of one iteration for unattended runs. IterationOrchestrator wraps the
state machine with logging, a human-readable history, convergence
diagnostics, progress callbacks and cooperative stopping.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum

from .data import (
    LogEntry,
    ProgressCallback,
    ProgressInfo,
    SolverOptions,
    TransportationProblem,
    TransportResult,
)
from .diagnostics import BasisHistory, ConvergenceMonitor
from .exceptions import BasisInvariantError, IterationLimitError, SolverConfigurationError
from .initial import build_initial_solution
from .loop import find_loop
from .pivot import apply_pivot, select_leaving
from .potentials import compute_potentials
from .pricing import evaluate_opportunity_costs
from .tableau import Grid, LoopNode, Potentials


class SolverStatus(Enum):
    """Phases of the state machine."""

    INPUT = "input"
    READY = "ready"
    POTENTIALS = "potentials"
    DELTAS = "deltas"
    LOOP = "loop"
    OPTIMAL = "optimal"
    ERROR = "error"


DEFAULT_TOLERANCE = 1e-9

TERMINAL_STATUSES = frozenset({SolverStatus.OPTIMAL, SolverStatus.ERROR})


@dataclass(frozen=True)
class IterationState:
    """Immutable snapshot of the solver after a phase.

    Renderers and narration services read this snapshot; they never change
    it. Every transition returns a new IterationState.

    Attributes:
        problem: The problem being solved.
        status: Current phase.
        grid: Tableau for this phase. In the optimal state it carries the
              opportunity costs that proved optimality.
        potentials: Row/column potentials; all unknown outside the potentials,
                    deltas, loop and optimal phases.
        iteration: 0 before the initial solution, 1 for the initial solution,
                   then incremented by every pivot.
        total_cost: Total cost of the grid's allocations.
        entering: Entering cell (deltas and loop phases).
        min_delta: Most negative opportunity cost found by the last pricing.
        loop: Loop through the entering cell (loop phase).
        theta: Quantity to shift (loop phase) or shifted by the last pivot (ready);
               None in every other phase.
        leaving: Cell leaving the basis (loop phase) or that left it (ready);
                 None in every other phase.
        message: Short natural-language description of the phase.
        error_phase: Phase that detected a basis invariant violation.
    """

    problem: TransportationProblem
    status: SolverStatus
    grid: Grid
    potentials: Potentials
    iteration: int = 0
    total_cost: float = 0.0
    entering: LoopNode | None = None
    min_delta: float | None = None
    loop: tuple[LoopNode, ...] = ()
    theta: float | None = None
    leaving: LoopNode | None = None
    message: str = ""
    error_phase: str | None = None

    @property
    def u(self) -> tuple[float | None, ...]:
        return self.potentials.u

    @property
    def v(self) -> tuple[float | None, ...]:
        return self.potentials.v

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


def _fmt(value: float) -> str:
    return f"{value:g}"


def initial_state(problem: TransportationProblem) -> IterationState:
    """State before any solution exists: empty tableau, status input."""
    return IterationState(
        problem=problem,
        status=SolverStatus.INPUT,
        grid=Grid.empty(problem),
        potentials=Potentials.unknown(problem.rows, problem.cols),
        message=(
            f"Transportation tableau with {problem.rows} sources and {problem.cols} "
            f"destinations is ready; request the initial solution to begin."
        ),
    )


def _build_initial(state: IterationState, options: SolverOptions) -> IterationState:
    grid = build_initial_solution(state.problem)
    total = grid.total_cost()
    return replace(
        state,
        status=SolverStatus.READY,
        grid=grid,
        potentials=Potentials.unknown(grid.rows, grid.cols),
        iteration=1,
        total_cost=total,
        message=(
            f"Initial basic feasible solution from the least-cost method: cheapest routes "
            f"are filled first. Total cost {_fmt(total)}."
        ),
    )


def _compute_potentials(state: IterationState, options: SolverOptions) -> IterationState:
    potentials = compute_potentials(state.grid)
    return replace(
        state,
        status=SolverStatus.POTENTIALS,
        potentials=potentials,
        theta=None,
        leaving=None,
        message=(
            f"Iteration {state.iteration}: potentials solved from u[i] + v[j] = c[i][j] "
            f"on every basic cell, with u[0] = 0."
        ),
    )


def _price(state: IterationState, options: SolverOptions) -> IterationState:
    pricing = evaluate_opportunity_costs(state.grid, state.u, state.v)
    if pricing.entering is None or pricing.is_optimal(options.tolerance):
        return replace(
            state,
            status=SolverStatus.OPTIMAL,
            grid=pricing.grid,
            total_cost=pricing.grid.total_cost(),
            min_delta=pricing.min_delta,
            entering=None,
            message=(
                f"All opportunity costs are non-negative; the plan is optimal with total "
                f"cost {_fmt(pricing.grid.total_cost())}."
            ),
        )
    entering = pricing.entering
    return replace(
        state,
        status=SolverStatus.DELTAS,
        grid=pricing.grid,
        min_delta=pricing.min_delta,
        entering=entering,
        message=(
            f"Iteration {state.iteration}: most negative opportunity cost "
            f"{_fmt(pricing.min_delta)} at cell ({entering.row}, {entering.col}); "
            f"it enters the basis."
        ),
    )


def _search_loop(state: IterationState, options: SolverOptions) -> IterationState:
    if state.entering is None:
        raise BasisInvariantError("No entering cell recorded for the loop search.", phase="loop")
    loop = find_loop(state.entering, state.grid)
    if loop is None:
        raise BasisInvariantError(
            f"No closed loop through entering cell ({state.entering.row}, "
            f"{state.entering.col}); the basis is not a spanning tree.",
            phase="loop",
        )
    theta, leaving = select_leaving(state.grid, loop)
    return replace(
        state,
        status=SolverStatus.LOOP,
        loop=loop,
        theta=theta,
        leaving=leaving,
        message=(
            f"Iteration {state.iteration}: closed loop of {len(loop)} cells found. Plus "
            f"cells gain and minus cells lose theta = {_fmt(theta)}; cell "
            f"({leaving.row}, {leaving.col}) leaves the basis."
        ),
    )


def _pivot(state: IterationState, options: SolverOptions) -> IterationState:
    result = apply_pivot(state.grid, state.loop)
    if options.verify_basis and not result.grid.is_spanning_tree():
        raise BasisInvariantError(
            f"Basis is not a spanning tree after pivoting on "
            f"({result.entering.row}, {result.entering.col}).",
            phase="pivot",
        )
    total = result.grid.total_cost()
    return replace(
        state,
        status=SolverStatus.READY,
        grid=result.grid,
        potentials=Potentials.unknown(result.grid.rows, result.grid.cols),
        iteration=state.iteration + 1,
        total_cost=total,
        entering=None,
        min_delta=None,
        loop=(),
        theta=result.theta,
        leaving=result.leaving,
        message=(
            f"Iteration {state.iteration + 1}: shifted theta = {_fmt(result.theta)} along "
            f"the loop; total cost is now {_fmt(total)}."
        ),
    )


_TRANSITIONS: dict[SolverStatus, Callable[[IterationState, SolverOptions], IterationState]] = {
    SolverStatus.INPUT: _build_initial,
    SolverStatus.READY: _compute_potentials,
    SolverStatus.POTENTIALS: _price,
    SolverStatus.DELTAS: _search_loop,
    SolverStatus.LOOP: _pivot,
}


def step_once(
    state: IterationState,
    tolerance: float = DEFAULT_TOLERANCE,
    verify_basis: bool = True,
) -> IterationState:
    """Advance the state machine by exactly one phase.

    Args:
        state: Current snapshot.
        tolerance: Optimality tolerance on opportunity costs.
        verify_basis: Check the spanning-tree invariant after a pivot.

    Returns:
        The next snapshot. Terminal states (optimal, error) are returned
        unchanged. A basis invariant violation yields the error state with
        error_phase set; the grid stays at the last consistent tableau.
    """
    options = SolverOptions(tolerance=tolerance, verify_basis=verify_basis)
    transition = _TRANSITIONS.get(state.status)
    if transition is None:
        return state
    try:
        return transition(state, options)
    except BasisInvariantError as exc:
        return replace(
            state,
            status=SolverStatus.ERROR,
            error_phase=exc.phase,
            message=f"Solver stopped during the {exc.phase} phase: {exc}",
        )


def run_full_iteration(
    state: IterationState,
    tolerance: float = DEFAULT_TOLERANCE,
    verify_basis: bool = True,
) -> IterationState:
    """Run the remaining phases of the current iteration.

    From ready this performs potentials, deltas, loop and pivot and returns
    the next ready state, or stops early at optimal/error. It produces the
    same state as the equivalent sequence of step_once() calls.

    Raises:
        SolverConfigurationError: If no initial solution has been built yet.
    """
    if state.status is SolverStatus.INPUT:
        raise SolverConfigurationError(
            "Cannot run an iteration before the initial solution is built. "
            "Call step_once() on the input state first."
        )
    while not state.is_terminal:
        state = step_once(state, tolerance, verify_basis)
        if state.status is SolverStatus.READY:
            break
    return state


StepCallback = Callable[[IterationState], None]


@dataclass
class IterationOrchestrator:
    """Drives the state machine for one problem and keeps its history.

    Attributes:
        problem: Problem being solved.
        options: Solver configuration (defaults when None).
        on_step: Optional callback receiving each new snapshot after a step
                 completes (renderers, narration).
        state: Current snapshot.
        history: Human-readable log of notable events.
        monitor: Cost/degeneracy tracking across pivots.
        basis_history: Visited bases, for cycling detection.

    Examples:
        >>> orchestrator = IterationOrchestrator(problem)
        >>> orchestrator.start().status
        <SolverStatus.READY: 'ready'>
        >>> orchestrator.step().status
        <SolverStatus.POTENTIALS: 'potentials'>
        >>> result = orchestrator.solve()
        >>> result.status
        'optimal'
    """

    problem: TransportationProblem
    options: SolverOptions | None = None
    on_step: StepCallback | None = None
    state: IterationState = field(init=False)
    history: list[LogEntry] = field(default_factory=list, init=False)
    monitor: ConvergenceMonitor = field(default_factory=ConvergenceMonitor, init=False)
    basis_history: BasisHistory = field(default_factory=BasisHistory, init=False)

    def __post_init__(self) -> None:
        if self.options is None:
            self.options = SolverOptions()
        self.logger = logging.getLogger(__name__)
        self.state = initial_state(self.problem)
        self._stop_requested = False

    def start(self) -> IterationState:
        """Build the initial solution (input -> ready)."""
        if self.state.status is not SolverStatus.INPUT:
            raise SolverConfigurationError(
                f"Initial solution already built (status '{self.state.status.value}')."
            )
        return self.step()

    def step(self) -> IterationState:
        """Advance by one phase."""
        previous = self.state
        self.state = step_once(previous, self.options.tolerance, self.options.verify_basis)
        self._record_transition(previous, self.state)
        if self.on_step is not None and self.state is not previous:
            self.on_step(self.state)
        return self.state

    def run_iteration(self) -> IterationState:
        """Finish the current iteration (see run_full_iteration)."""
        if self.state.status is SolverStatus.INPUT:
            raise SolverConfigurationError(
                "Cannot run an iteration before the initial solution is built. Call start() first."
            )
        while not self.state.is_terminal:
            self.step()
            if self.state.status is SolverStatus.READY:
                break
        return self.state

    def stop(self) -> None:
        """Ask solve() to return before the next iteration starts."""
        self._stop_requested = True

    def solve(
        self,
        max_iterations: int | None = None,
        progress_callback: ProgressCallback | None = None,
        progress_interval: int = 1,
    ) -> TransportResult:
        """Iterate until optimal, error, stop request or the pivot limit.

        Args:
            max_iterations: Maximum number of pivots. Overrides
                            options.max_iterations when provided.
            progress_callback: Called with ProgressInfo after every
                               progress_interval committed pivots.
            progress_interval: Pivots between progress callbacks (default: 1).

        Returns:
            TransportResult describing the final plan.

        Raises:
            IterationLimitError: If the limit is reached before optimality and
                options.raise_on_iteration_limit is set.
        """
        if progress_interval <= 0:
            raise SolverConfigurationError(
                f"progress_interval must be positive, got {progress_interval}."
            )
        if max_iterations is None:
            max_iterations = self.options.resolve_max_iterations(self.problem)
        self._stop_requested = False
        start_time = time.time()

        self.logger.info(
            "Starting transportation simplex solver",
            extra={
                "rows": self.problem.rows,
                "cols": self.problem.cols,
                "total_supply": self.problem.total_supply,
                "max_iterations": max_iterations,
                "tolerance": self.options.tolerance,
            },
        )

        if self.state.status is SolverStatus.INPUT:
            self.start()

        pivots_at_start = self.monitor.total_pivots
        limit_reached = False
        while not self.state.is_terminal:
            if self._stop_requested:
                break
            if self.monitor.total_pivots - pivots_at_start >= max_iterations:
                limit_reached = True
                break
            pivots_before = self.monitor.total_pivots
            self.run_iteration()
            pivots_done = self.monitor.total_pivots - pivots_at_start
            if (
                progress_callback is not None
                and self.monitor.total_pivots > pivots_before
                and pivots_done % progress_interval == 0
            ):
                progress_callback(
                    ProgressInfo(
                        iteration=self.state.iteration,
                        max_iterations=max_iterations,
                        pivots=self.monitor.total_pivots,
                        total_cost=self.state.total_cost,
                        theta=self.state.theta if self.state.theta is not None else 0.0,
                        degenerate=self.state.theta == 0.0,
                        elapsed_time=time.time() - start_time,
                    )
                )

        if limit_reached:
            # The last pivot may already have reached optimality; price once more to check.
            while self.state.status in (SolverStatus.READY, SolverStatus.POTENTIALS):
                self.step()

        status = self._result_status(limit_reached)
        elapsed_ms = (time.time() - start_time) * 1000
        if status == "iteration_limit":
            self.logger.warning(
                "Iteration limit reached before optimality",
                extra={"iterations": self.monitor.total_pivots, "max_iterations": max_iterations},
            )
            if self.options.raise_on_iteration_limit:
                raise IterationLimitError(
                    f"Iteration limit reached: {self.monitor.total_pivots} pivots completed "
                    f"without proving optimality.",
                    iterations=self.monitor.total_pivots,
                    objective=self.state.total_cost,
                )

        self.logger.info(
            "Solver complete",
            extra={
                "status": status,
                "objective": self.state.total_cost,
                "iterations": self.monitor.total_pivots,
                "degenerate_pivots": self.monitor.degenerate_pivots,
                "elapsed_ms": elapsed_ms,
            },
        )
        return self.result(status)

    def result(self, status: str | None = None) -> TransportResult:
        """Summarize the current state as a TransportResult."""
        if status is None:
            status = self._result_status(limit_reached=False)
        grid = self.state.grid
        allocations: dict[tuple[int, int], float] = {}
        for row, col in grid.basic_cells():
            quantity = float(grid.allocation[row, col])
            if quantity != 0.0:
                allocations[(row, col)] = float(round(quantity, 12))
        return TransportResult(
            objective=float(round(grid.total_cost(), 12)),
            allocations=allocations,
            status=status,
            iterations=self.monitor.total_pivots,
            degenerate_pivots=self.monitor.degenerate_pivots,
            u=self.state.u,
            v=self.state.v,
            basis=frozenset((row, col) for row, col in grid.basic_cells()),
            error_phase=self.state.error_phase,
            message=self.state.message,
            history=list(self.history),
        )

    def _result_status(self, limit_reached: bool) -> str:
        if self.state.status is SolverStatus.OPTIMAL:
            return "optimal"
        if self.state.status is SolverStatus.ERROR:
            return "error"
        if limit_reached:
            return "iteration_limit"
        if self._stop_requested:
            return "stopped"
        return self.state.status.value

    def _log(self, phase: str, description: str, level: str = "info") -> None:
        self.history.append(
            LogEntry(
                iteration=self.state.iteration,
                phase=phase,
                description=description,
                cost=self.state.total_cost,
                level=level,
            )
        )

    def _record_transition(self, previous: IterationState, current: IterationState) -> None:
        if current is previous:
            return
        status = current.status

        if status is SolverStatus.ERROR:
            self._log("error", current.message, level="error")
            self.logger.error(
                "Basis invariant violated",
                extra={
                    "phase": current.error_phase,
                    "iteration": current.iteration,
                    "detail": current.message,
                },
            )
        elif previous.status is SolverStatus.INPUT:
            self._log("initial", "Initial solution built with the least-cost method")
            self.basis_history.record_basis(current.grid.basic_cells())
            self.logger.info(
                "Initial solution ready",
                extra={"total_cost": current.total_cost, "basic_cells": current.grid.basic_count},
            )
        elif status is SolverStatus.OPTIMAL:
            self._log("check", "All opportunity costs are non-negative; optimal", level="success")
            self.logger.info(
                "Optimal solution found",
                extra={"iteration": current.iteration, "total_cost": current.total_cost},
            )
        elif status is SolverStatus.DELTAS:
            self._log(
                "check",
                f"Negative opportunity cost {_fmt(current.min_delta)} found; plan can improve",
                level="warning",
            )
        elif status is SolverStatus.READY and previous.status is SolverStatus.LOOP:
            self._record_pivot(previous, current)

    def _record_pivot(self, previous: IterationState, current: IterationState) -> None:
        theta = current.theta if current.theta is not None else 0.0
        self._log(
            "pivot",
            f"Shifted theta = {_fmt(theta)}; total cost now {_fmt(current.total_cost)}",
        )
        self.monitor.record_pivot(current.total_cost, theta, iteration=current.iteration)
        visits = self.basis_history.record_basis(current.grid.basic_cells())
        self.logger.info(
            "Pivot complete",
            extra={
                "iteration": previous.iteration,
                "entering_cell": previous.entering,
                "leaving_cell": current.leaving,
                "theta": theta,
                "total_cost": current.total_cost,
                "degenerate": theta == 0.0,
            },
        )
        if visits > 1:
            self.logger.warning(
                "Basis revisited; the solver may be cycling",
                extra={"visits": visits, "iteration": current.iteration},
            )
        if self.monitor.consecutive_no_improvement == 10:
            self.logger.warning(
                "No cost improvement for 10 consecutive pivots",
                extra=self.monitor.get_diagnostic_summary(),
            )
