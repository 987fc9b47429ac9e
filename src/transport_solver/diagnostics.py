"""Convergence diagnostics for the transportation simplex.

Degenerate pivots (theta == 0) leave the total cost unchanged while still
swapping a basis cell. A run of them is normal, but a long run or a basis
that keeps coming back points at stalling or cycling. These helpers track
both so the orchestrator can report them.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class ConvergenceMonitor:
    """Tracks total cost across pivots and detects stalling.

    Attributes:
        window_size: Number of recent pivots to keep.
        stall_threshold: Cost change below which a pivot counts as no progress.
        degeneracy_threshold: Degenerate pivot ratio considered high.

    Examples:
        >>> monitor = ConvergenceMonitor(window_size=20)
        >>> monitor.record_pivot(total_cost=120.0, theta=5.0, iteration=1)
        >>> monitor.record_pivot(total_cost=120.0, theta=0.0, iteration=2)
        >>> monitor.degenerate_pivots
        1
    """

    window_size: int = 50
    stall_threshold: float = 1e-9
    degeneracy_threshold: float = 0.5

    cost_history: deque[float] = field(default_factory=lambda: deque(maxlen=50))
    degenerate_pivots: int = 0
    total_pivots: int = 0
    consecutive_no_improvement: int = 0
    last_improvement_iteration: int = 0

    def __post_init__(self) -> None:
        self.cost_history = deque(maxlen=self.window_size)

    def record_pivot(self, total_cost: float, theta: float, iteration: int = 0) -> None:
        """Record the total cost after a pivot that moved theta units."""
        previous = self.cost_history[-1] if self.cost_history else None
        self.cost_history.append(total_cost)
        self.total_pivots += 1
        if theta == 0.0:
            self.degenerate_pivots += 1

        if previous is None:
            return
        if previous - total_cost <= self.stall_threshold:
            self.consecutive_no_improvement += 1
        else:
            self.consecutive_no_improvement = 0
            self.last_improvement_iteration = iteration

    def is_stalled(self, min_consecutive: int = 10) -> bool:
        return self.consecutive_no_improvement >= min_consecutive

    def get_degeneracy_ratio(self) -> float:
        if self.total_pivots == 0:
            return 0.0
        return self.degenerate_pivots / self.total_pivots

    def is_highly_degenerate(self) -> bool:
        # Too few pivots to call it either way.
        if self.total_pivots < 10:
            return False
        return self.get_degeneracy_ratio() > self.degeneracy_threshold

    def get_recent_improvement(self) -> float | None:
        """Cost reduction from the oldest to the newest pivot in the window."""
        if len(self.cost_history) < 2:
            return None
        return self.cost_history[0] - self.cost_history[-1]

    def get_diagnostic_summary(self) -> dict[str, float | bool | int]:
        return {
            "total_pivots": self.total_pivots,
            "degenerate_pivots": self.degenerate_pivots,
            "degeneracy_ratio": self.get_degeneracy_ratio(),
            "is_stalled": self.is_stalled(),
            "is_highly_degenerate": self.is_highly_degenerate(),
            "consecutive_no_improvement": self.consecutive_no_improvement,
            "recent_improvement": self.get_recent_improvement() or 0.0,
        }


@dataclass
class BasisHistory:
    """Tracks which bases have been visited to detect cycling.

    Attributes:
        max_history: Number of recent bases to remember.

    Examples:
        >>> history = BasisHistory(max_history=100)
        >>> history.record_basis(grid.basic_cells())
        >>> history.is_cycling()
        False
    """

    max_history: int = 100
    history: deque[frozenset[tuple[int, int]]] = field(default_factory=lambda: deque(maxlen=100))
    visit_counts: dict[frozenset[tuple[int, int]], int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.history = deque(maxlen=self.max_history)

    def record_basis(self, basic_cells: Iterable[tuple[int, int]]) -> int:
        """Record a basis and return how many times it has now been seen."""
        key = frozenset((int(r), int(c)) for r, c in basic_cells)
        self.history.append(key)
        self.visit_counts[key] = self.visit_counts.get(key, 0) + 1

        # Forget counts for bases that fell out of the window.
        if len(self.visit_counts) > self.max_history * 2:
            current = set(self.history)
            for stale in [k for k in self.visit_counts if k not in current]:
                del self.visit_counts[stale]
        return self.visit_counts[key]

    def is_cycling(self, min_revisits: int = 2) -> bool:
        if not self.history:
            return False
        return any(self.visit_counts.get(key, 0) >= min_revisits for key in self.history)

    def get_most_frequent_basis_count(self) -> int:
        if not self.visit_counts:
            return 0
        return max(self.visit_counts.values())
