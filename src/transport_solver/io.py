"""File I/O helpers for transportation problems."""

from __future__ import annotations

import json
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from .data import TransportationProblem, TransportResult, build_problem
from .exceptions import InvalidProblemError


def load_problem(path: str | Path) -> TransportationProblem:
    """Load a transportation instance from a JSON file."""
    with Path(path).open("r", encoding="utf-8") as fh:
        payload: MutableMapping[str, Any] = json.load(fh)
    if not isinstance(payload, dict):
        raise InvalidProblemError(
            f"Invalid problem format: expected a JSON object, got {type(payload).__name__}."
        )
    costs = payload.get("costs")
    supply = payload.get("supply")
    demand = payload.get("demand")
    if not isinstance(costs, list) or not all(isinstance(row, list) for row in costs):
        raise InvalidProblemError(
            "Invalid problem format: JSON must include 'costs' as an array of arrays. "
            f"Got costs type: {type(costs).__name__}"
        )
    if not isinstance(supply, list) or not isinstance(demand, list):
        raise InvalidProblemError(
            "Invalid problem format: JSON must include 'supply' and 'demand' arrays. "
            f"Got supply type: {type(supply).__name__}, demand type: {type(demand).__name__}"
        )
    tolerance = float(payload.get("tolerance", 1e-3))
    # Validation lives in build_problem so files and in-memory input follow the same rules.
    return build_problem(costs=costs, supply=supply, demand=demand, tolerance=tolerance)


def save_result(path: str | Path, result: TransportResult) -> None:
    """Persist a solver result to JSON."""
    # Sorted cell order keeps fixtures easy to diff.
    data = {
        "status": result.status,
        "objective": result.objective,
        "iterations": result.iterations,
        "degenerate_pivots": result.degenerate_pivots,
        "allocations": [
            {"row": row, "col": col, "quantity": quantity}
            for (row, col), quantity in sorted(result.allocations.items())
        ],
        "basis": [[row, col] for row, col in sorted(result.basis)],
        "u": list(result.u),
        "v": list(result.v),
    }
    if result.error_phase is not None:
        data["error_phase"] = result.error_phase
        data["message"] = result.message
    with Path(path).open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, sort_keys=False)
