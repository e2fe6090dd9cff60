"""Result types returned by the grid integrators."""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd


@dataclass(frozen=True, slots=True)
class IterationRecord:
    """One refinement step of an integration.

    Attributes:
        iteration: Zero-based iteration index.
        n_points: Grid shape used in this iteration.
        new_evaluations: Function evaluations made in this iteration (cache misses).
        estimate: Simpson estimate on this grid.
        error_pct: Relative error against the previous estimate, in percent.
            None for the first iteration.
    """

    iteration: int
    n_points: tuple[int, ...]
    new_evaluations: int
    estimate: float
    error_pct: float | None


@dataclass
class IntegrationResult:
    """Outcome of an integration.

    Attributes:
        value: Last integral estimate. Only trustworthy when ``converged``.
        converged: Whether the estimate met the error threshold.
        iterations: Number of refinement iterations performed.
        function_calls: Number of function evaluations (each grid point once).
        error_pct: Last estimated relative error in percent, or None if no
            comparison was made.
        history: Per-iteration records.
    """

    value: float
    converged: bool
    iterations: int
    function_calls: int
    error_pct: float | None
    history: list[IterationRecord] = field(default_factory=list)

    @property
    def n_points(self) -> tuple[int, ...]:
        """Grid shape of the last iteration."""
        if not self.history:
            return ()
        return self.history[-1].n_points

    def to_dataframe(self) -> pd.DataFrame:
        """Return the iteration history as a DataFrame, one row per iteration."""
        columns = ["iteration", "n_points", "new_evaluations", "estimate", "error_pct"]
        rows = [
            {
                "iteration": record.iteration,
                "n_points": record.n_points,
                "new_evaluations": record.new_evaluations,
                "estimate": record.estimate,
                "error_pct": record.error_pct,
            }
            for record in self.history
        ]
        return pd.DataFrame(rows, columns=columns)
