"""High-level entrypoints for the transportation simplex solver library."""

from .data import (
    LogEntry,
    ProgressCallback,
    ProgressInfo,
    SolverOptions,
    TransportationProblem,
    TransportResult,
    build_problem,
)
from .diagnostics import BasisHistory, ConvergenceMonitor
from .exceptions import (
    BasisInvariantError,
    InvalidProblemError,
    IterationLimitError,
    SolverConfigurationError,
    TransportSolverError,
)
from .generator import BalanceInfo, balance_problem, generate_random_problem
from .initial import build_initial_solution
from .loop import find_loop
from .orchestrator import (
    IterationOrchestrator,
    IterationState,
    SolverStatus,
    initial_state,
    run_full_iteration,
    step_once,
)
from .pivot import PivotResult, apply_pivot, select_leaving
from .potentials import compute_potentials
from .pricing import PricingResult, evaluate_opportunity_costs
from .solver import load_problem, save_result, solve_transportation
from .tableau import Cell, Grid, LoopNode, Potentials
from .utils import Highlight, ValidationResult, highlight_cells, validate_allocation

__version__ = "0.1.0"

__all__ = [
    # Main API
    "build_problem",
    "load_problem",
    "solve_transportation",
    "save_result",
    "TransportationProblem",
    "TransportResult",
    # Configuration
    "SolverOptions",
    # Progress tracking
    "ProgressCallback",
    "ProgressInfo",
    "LogEntry",
    # Tableau
    "Cell",
    "Grid",
    "LoopNode",
    "Potentials",
    # Solver phases
    "build_initial_solution",
    "compute_potentials",
    "evaluate_opportunity_costs",
    "PricingResult",
    "find_loop",
    "apply_pivot",
    "select_leaving",
    "PivotResult",
    # State machine
    "SolverStatus",
    "IterationState",
    "IterationOrchestrator",
    "initial_state",
    "step_once",
    "run_full_iteration",
    # Problem construction
    "generate_random_problem",
    "balance_problem",
    "BalanceInfo",
    # Utilities
    "validate_allocation",
    "ValidationResult",
    "highlight_cells",
    "Highlight",
    # Diagnostics
    "ConvergenceMonitor",
    "BasisHistory",
    # Exceptions
    "TransportSolverError",
    "InvalidProblemError",
    "BasisInvariantError",
    "IterationLimitError",
    "SolverConfigurationError",
    # Version
    "__version__",
]
