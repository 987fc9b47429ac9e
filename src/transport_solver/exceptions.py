"""Custom exceptions for the transportation solver library."""

from __future__ import annotations


class TransportSolverError(Exception):
    """Base exception for all transportation solver errors.

    All custom exceptions in the transport_solver package inherit from this class,
    allowing users to catch all solver-related errors with a single except clause.

    Example:
        try:
            result = solve_transportation(problem)
        except TransportSolverError as e:
            print(f"Solver error: {e}")
    """


class InvalidProblemError(TransportSolverError):
    """Raised when a problem definition is invalid or malformed.

    This includes:
    - Unbalanced supply/demand (total supply ≠ total demand)
    - Empty problems (no sources or no destinations)
    - Ragged cost matrices or vectors of the wrong length
    - Negative or non-finite costs, negative supply or demand
    - Malformed JSON input

    Example:
        InvalidProblemError("Problem is unbalanced: total supply 30.0 != total demand 25.0")
    """


class BasisInvariantError(TransportSolverError):
    """Raised when the spanning-tree basis invariant is found to be violated.

    A valid basis has exactly rows + cols - 1 basic cells forming a spanning
    tree of the bipartite source/destination graph. When it does not, the
    potentials cannot be fully propagated, or no closed loop exists through
    the entering cell. None of these are properties of the input: they mean
    the tableau state is corrupted, so the current solve cannot continue.

    Attributes:
        phase: Name of the phase that detected the violation
               ("initial", "potentials", "loop" or "pivot").

    Example:
        BasisInvariantError(
            "Potentials incomplete after propagation: u[2] unknown",
            phase="potentials",
        )
    """

    def __init__(self, message: str, phase: str = "unknown"):
        """Initialize with message and the phase that failed."""
        super().__init__(message)
        self.phase = phase


class IterationLimitError(TransportSolverError):
    """Raised when the solver reaches the iteration limit before converging.

    Note: By default, the solver returns a TransportResult with
    status="iteration_limit" rather than raising this exception. Set
    SolverOptions(raise_on_iteration_limit=True) to get the exception instead.

    Example:
        IterationLimitError(
            "Iteration limit reached: 100 pivots completed",
            iterations=100,
            objective=1234.0,
        )
    """

    def __init__(
        self,
        message: str,
        iterations: int = 0,
        objective: float | None = None,
    ):
        """Initialize with message and solution state."""
        super().__init__(message)
        self.iterations = iterations
        self.objective = objective


class SolverConfigurationError(TransportSolverError):
    """Raised when solver configuration or usage is invalid.

    This includes:
    - Invalid option values (non-positive iteration limit or tolerance)
    - Driving the state machine from a state that does not allow the request

    Example:
        SolverConfigurationError("max_iterations must be positive, got -1")
    """
