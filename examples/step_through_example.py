"""Walk through the stepping-stone method one phase at a time.

Each call to IterationOrchestrator.step() performs a single phase and hands
back an immutable snapshot. The on_step hook prints the tableau with the
entering cell, loop cells and leaving cell marked, the way a classroom
tableau would be annotated.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver import (  # noqa: E402
    Highlight,
    IterationOrchestrator,
    IterationState,
    build_problem,
    highlight_cells,
)

MARKERS = {
    Highlight.ENTERING: "*",
    Highlight.LEAVING: "x",
    Highlight.LOOP_PLUS: "+",
    Highlight.LOOP_MINUS: "-",
}


def render(state: IterationState) -> None:
    print(f"\n[{state.status.value}] {state.message}")
    marks = highlight_cells(state)
    for row in range(state.grid.rows):
        cells = []
        for cell in (state.grid.cell(row, col) for col in range(state.grid.cols)):
            marker = MARKERS.get(marks.get((cell.row, cell.col)), " ")
            if cell.is_basic:
                body = f"{cell.allocation:g}"
            elif cell.opportunity_cost is not None:
                body = f"({cell.opportunity_cost:g})"
            else:
                body = "."
            cells.append(f"{marker}{body:>7}")
        u = state.u[row]
        print("  " + " ".join(cells) + ("" if u is None else f"   u={u:g}"))
    if any(value is not None for value in state.v):
        print("  " + " ".join(f" v={value:<6g}" for value in state.v if value is not None))


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    problem = build_problem(
        costs=[[3, 1, 7, 4], [2, 6, 5, 9], [8, 3, 3, 2]],
        supply=[300, 400, 500],
        demand=[250, 350, 400, 200],
    )
    orchestrator = IterationOrchestrator(problem, on_step=render)
    render(orchestrator.state)

    orchestrator.start()
    while not orchestrator.state.is_terminal:
        orchestrator.step()

    print("\nSolve log:")
    for entry in orchestrator.history:
        print(f"  [{entry.level:>7}] it {entry.iteration}: {entry.description} (cost {entry.cost:g})")


if __name__ == "__main__":
    main()
