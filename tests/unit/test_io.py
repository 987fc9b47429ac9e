import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver.data import TransportResult  # noqa: E402
from transport_solver.exceptions import InvalidProblemError  # noqa: E402
from transport_solver.io import load_problem, save_result  # noqa: E402

# These tests pin the JSON contract implemented by transport_solver.io.


def _write_payload(tmp_path: Path, payload) -> Path:
    path = tmp_path / "problem.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_problem_reads_costs_supply_demand(tmp_path: Path):
    payload = {
        "tolerance": 1e-4,
        "costs": [[4, 6], [8, 2]],
        "supply": [10, 10],
        "demand": [12, 8],
    }

    problem = load_problem(_write_payload(tmp_path, payload))

    assert problem.costs == ((4.0, 6.0), (8.0, 2.0))
    assert problem.supply == (10.0, 10.0)
    assert problem.demand == (12.0, 8.0)
    assert pytest.approx(problem.tolerance) == 1e-4


def test_load_problem_default_tolerance(tmp_path: Path):
    payload = {"costs": [[1]], "supply": [3], "demand": [3]}
    problem = load_problem(_write_payload(tmp_path, payload))
    assert problem.tolerance == pytest.approx(1e-3)


def test_load_problem_requires_cost_matrix(tmp_path: Path):
    payload = {"costs": [1, 2], "supply": [3], "demand": [1, 2]}

    with pytest.raises(InvalidProblemError, match="'costs' as an array of arrays"):
        load_problem(_write_payload(tmp_path, payload))


def test_load_problem_requires_list_payloads(tmp_path: Path):
    payload = {"costs": [[1, 2]], "supply": {"a": 3}, "demand": [1, 2]}

    with pytest.raises(InvalidProblemError, match="'supply' and 'demand' arrays"):
        load_problem(_write_payload(tmp_path, payload))


def test_load_problem_rejects_non_object(tmp_path: Path):
    with pytest.raises(InvalidProblemError, match="expected a JSON object"):
        load_problem(_write_payload(tmp_path, [[1, 2]]))


def test_load_problem_validates_balance(tmp_path: Path):
    payload = {"costs": [[1, 2]], "supply": [4], "demand": [1, 2]}

    with pytest.raises(InvalidProblemError, match="unbalanced"):
        load_problem(_write_payload(tmp_path, payload))


def test_save_result_writes_sorted_allocations(tmp_path: Path):
    result = TransportResult(
        objective=72.0,
        allocations={(1, 1): 8.0, (0, 0): 10.0, (1, 0): 2.0},
        status="optimal",
        iterations=0,
        u=(0.0, 4.0),
        v=(4.0, -2.0),
        basis=frozenset({(1, 1), (0, 0), (1, 0)}),
    )
    path = tmp_path / "result.json"

    save_result(path, result)
    saved = json.loads(path.read_text(encoding="utf-8"))

    assert saved == {
        "status": "optimal",
        "objective": 72.0,
        "iterations": 0,
        "degenerate_pivots": 0,
        "allocations": [
            {"row": 0, "col": 0, "quantity": 10.0},
            {"row": 1, "col": 0, "quantity": 2.0},
            {"row": 1, "col": 1, "quantity": 8.0},
        ],
        "basis": [[0, 0], [1, 0], [1, 1]],
        "u": [0.0, 4.0],
        "v": [4.0, -2.0],
    }


def test_save_result_includes_error_details(tmp_path: Path):
    result = TransportResult(
        objective=0.0,
        status="error",
        u=(None, None),
        v=(None, None),
        error_phase="potentials",
        message="Solver stopped during the potentials phase",
    )
    path = tmp_path / "result.json"

    save_result(path, result)
    saved = json.loads(path.read_text(encoding="utf-8"))

    assert saved["status"] == "error"
    assert saved["error_phase"] == "potentials"
    assert saved["u"] == [None, None]
    assert "potentials phase" in saved["message"]
