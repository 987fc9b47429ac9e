"""Tableau state for the transportation simplex: cells, grid and potentials."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

if TYPE_CHECKING:
    from .data import TransportationProblem


class LoopNode(NamedTuple):
    """Coordinate of a tableau cell, used for loops and entering/leaving cells."""

    row: int
    col: int


@dataclass(frozen=True)
class Cell:
    """Read-only view of one tableau cell.

    Attributes:
        row: Source index.
        col: Destination index.
        cost: Unit shipping cost.
        allocation: Shipped quantity, or None when the cell is empty (non-basic).
        is_basic: Whether the cell belongs to the current spanning-tree basis.
        opportunity_cost: Reduced cost cost - (u + v); only defined for non-basic
                          cells once potentials are known.
    """

    row: int
    col: int
    cost: float
    allocation: float | None
    is_basic: bool
    opportunity_cost: float | None = None


class Potentials(NamedTuple):
    """Row potentials u and column potentials v. None marks an unknown value."""

    u: tuple[float | None, ...]
    v: tuple[float | None, ...]

    @classmethod
    def unknown(cls, rows: int, cols: int) -> Potentials:
        return cls(u=(None,) * rows, v=(None,) * cols)

    @property
    def is_complete(self) -> bool:
        return all(value is not None for value in self.u) and all(
            value is not None for value in self.v
        )

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """Return (u, v) as float arrays with NaN for unknown potentials."""
        u = np.array([math.nan if value is None else value for value in self.u], dtype=float)
        v = np.array([math.nan if value is None else value for value in self.v], dtype=float)
        return u, v


class DisjointSet:
    """Union-find over the rows + cols nodes of the bipartite basis graph."""

    def __init__(self, size: int) -> None:
        self.parent = list(range(size))
        self.rank = [0] * size

    def find(self, x: int) -> int:
        while self.parent[x] != x:
            self.parent[x] = self.parent[self.parent[x]]
            x = self.parent[x]
        return x

    def union(self, a: int, b: int) -> bool:
        """Merge the sets of a and b. Returns False if they were already joined."""
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        if self.rank[ra] < self.rank[rb]:
            ra, rb = rb, ra
        self.parent[rb] = ra
        if self.rank[ra] == self.rank[rb]:
            self.rank[ra] += 1
        return True


def _read_only(values: np.ndarray, dtype: type) -> np.ndarray:
    array = np.array(values, dtype=dtype, copy=True)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class Grid:
    """The working tableau: a rows x cols array of cells.

    A Grid is an immutable value. Every solver phase returns a new Grid built
    from copies of these arrays, so snapshots handed to renderers can never
    change underneath them.

    Attributes:
        costs: (rows, cols) unit costs.
        allocation: (rows, cols) shipped quantities; 0.0 for non-basic cells.
        basic: (rows, cols) basis membership.
        opportunity: (rows, cols) opportunity costs, NaN where undefined.

    Invariant (stable states): exactly rows + cols - 1 basic cells, which as
    edges between row nodes and column nodes form a spanning tree. Basic
    cells may hold a zero allocation.
    """

    costs: np.ndarray
    allocation: np.ndarray
    basic: np.ndarray
    opportunity: np.ndarray | None = None

    def __post_init__(self) -> None:
        costs = _read_only(self.costs, float)
        object.__setattr__(self, "costs", costs)
        basic = _read_only(self.basic, bool)
        object.__setattr__(self, "basic", basic)
        # Empty cells never carry a quantity.
        allocation = np.where(basic, np.asarray(self.allocation, dtype=float), 0.0)
        object.__setattr__(self, "allocation", _read_only(allocation, float))
        if self.opportunity is None:
            opportunity = np.full(costs.shape, math.nan)
        else:
            opportunity = self.opportunity
        object.__setattr__(self, "opportunity", _read_only(opportunity, float))

    @classmethod
    def empty(cls, problem: TransportationProblem) -> Grid:
        """Tableau with costs filled in and no allocations."""
        costs = problem.cost_matrix
        return cls(
            costs=costs,
            allocation=np.zeros(costs.shape),
            basic=np.zeros(costs.shape, dtype=bool),
        )

    @property
    def rows(self) -> int:
        return int(self.costs.shape[0])

    @property
    def cols(self) -> int:
        return int(self.costs.shape[1])

    @property
    def basic_count(self) -> int:
        return int(np.count_nonzero(self.basic))

    @property
    def required_basic_count(self) -> int:
        return self.rows + self.cols - 1

    def is_basic(self, row: int, col: int) -> bool:
        return bool(self.basic[row, col])

    def cell(self, row: int, col: int) -> Cell:
        opportunity = float(self.opportunity[row, col])
        is_basic = bool(self.basic[row, col])
        return Cell(
            row=row,
            col=col,
            cost=float(self.costs[row, col]),
            allocation=float(self.allocation[row, col]) if is_basic else None,
            is_basic=is_basic,
            opportunity_cost=None if math.isnan(opportunity) else opportunity,
        )

    def cells(self) -> Iterator[Cell]:
        """Iterate all cells in row-major order."""
        for row in range(self.rows):
            for col in range(self.cols):
                yield self.cell(row, col)

    def basic_cells(self) -> list[LoopNode]:
        """Basic cell coordinates in row-major order."""
        rows, cols = np.nonzero(self.basic)
        return [LoopNode(int(r), int(c)) for r, c in zip(rows, cols)]

    def total_cost(self) -> float:
        return float(np.sum(self.allocation * self.costs))

    def row_totals(self) -> np.ndarray:
        return self.allocation.sum(axis=1)

    def col_totals(self) -> np.ndarray:
        return self.allocation.sum(axis=0)

    def is_spanning_tree(self) -> bool:
        """Check the basis invariant: rows + cols - 1 basic cells, no cycle."""
        if self.basic_count != self.required_basic_count:
            return False
        components = DisjointSet(self.rows + self.cols)
        for row, col in self.basic_cells():
            if not components.union(row, self.rows + col):
                return False
        # n - 1 edges without a cycle connect all n nodes.
        return True

    def with_allocations(self, allocation: np.ndarray, basic: np.ndarray) -> Grid:
        """New grid with the given allocations/basis and opportunity costs cleared."""
        return Grid(costs=self.costs, allocation=allocation, basic=basic)

    def with_opportunity(self, opportunity: np.ndarray) -> Grid:
        return Grid(
            costs=self.costs,
            allocation=self.allocation,
            basic=self.basic,
            opportunity=opportunity,
        )

    def to_matrix(self) -> list[list[float | None]]:
        """Allocations as nested lists, None for empty cells."""
        return [
            [float(self.allocation[r, c]) if self.basic[r, c] else None for c in range(self.cols)]
            for r in range(self.rows)
        ]
