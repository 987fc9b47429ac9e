"""Public solver entrypoints."""

from __future__ import annotations

from pathlib import Path

from .data import ProgressCallback, SolverOptions, TransportationProblem, TransportResult
from .io import load_problem as load_problem_file
from .io import save_result as save_result_file
from .orchestrator import IterationOrchestrator


def solve_transportation(
    problem: TransportationProblem,
    options: SolverOptions | None = None,
    max_iterations: int | None = None,
    progress_callback: ProgressCallback | None = None,
    progress_interval: int = 1,
) -> TransportResult:
    """Solve a balanced transportation problem with the stepping-stone (MODI) method.

    This is the main entry point for unattended solves. It builds a least-cost
    initial solution, then repeats potentials, opportunity costs, loop search
    and pivot until no opportunity cost is negative.

    Args:
        problem: The transportation problem to solve. Must be balanced
                 (total supply equals total demand).
        options: Solver configuration options. If None, uses defaults.
                 See SolverOptions for tuning parameters.
        max_iterations: Maximum number of pivots. Overrides options.max_iterations
                        if provided. If None, defaults to max(100, 10*rows*cols).
        progress_callback: Optional callback receiving ProgressInfo after every
                           progress_interval pivots.
        progress_interval: Number of pivots between progress callbacks (default: 1).

    Returns:
        TransportResult containing:
        - objective: Total shipping cost of the final plan
        - allocations: Shipped quantity per (row, col) cell
        - status: 'optimal', 'iteration_limit', 'stopped' or 'error'
        - iterations: Number of pivots performed
        - u, v: Row and column potentials (shadow prices)
        - basis: Basic cells, including degenerate zero-allocation ones

    Raises:
        IterationLimitError: If options.raise_on_iteration_limit is set and the
            limit is reached before optimality.
        SolverConfigurationError: If progress_interval is not positive.

    Examples:
        >>> from transport_solver import build_problem, solve_transportation
        >>> problem = build_problem([[4, 6], [8, 2]], supply=[10, 10], demand=[12, 8])
        >>> result = solve_transportation(problem)
        >>> print(f"Status: {result.status}, Cost: {result.objective:.0f}")
        Status: optimal, Cost: 72
        >>> result.allocations
        {(0, 0): 10.0, (1, 0): 2.0, (1, 1): 8.0}

    See Also:
        - TransportationProblem: Problem definition structure
        - IterationOrchestrator: Phase-by-phase control with snapshots
        - balance_problem(): Prepare unbalanced data
    """
    # A fresh orchestrator per call keeps runs independent.
    orchestrator = IterationOrchestrator(problem, options=options)
    return orchestrator.solve(
        max_iterations=max_iterations,
        progress_callback=progress_callback,
        progress_interval=progress_interval,
    )


def load_problem(path: str | Path) -> TransportationProblem:
    """Load a transportation problem from a JSON file.

    Args:
        path: Path to a JSON file with "costs", "supply", "demand" and an
              optional "tolerance".

    Returns:
        TransportationProblem instance ready to solve.

    Raises:
        FileNotFoundError: If file does not exist.
        InvalidProblemError: If JSON is malformed or the problem is invalid.

    Examples:
        >>> from transport_solver import load_problem, solve_transportation
        >>> problem = load_problem("examples/three_by_four.json")
        >>> print(f"Loaded {problem.rows} sources, {problem.cols} destinations")
        Loaded 3 sources, 4 destinations
    """
    return load_problem_file(path)


def save_result(path: str | Path, result: TransportResult) -> None:
    """Save a transportation plan to a JSON file.

    Args:
        path: Path where JSON file will be written.
        result: TransportResult from solve_transportation().

    Raises:
        OSError: If file cannot be written.

    See Also:
        - load_problem(): Load problem from JSON
    """
    save_result_file(path, result)
