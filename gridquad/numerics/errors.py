"""Exceptions raised by the grid integrators."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gridquad.numerics.results import IntegrationResult


class IntegrationError(Exception):
    """Base class for integration failures."""


class ContractViolation(IntegrationError, ValueError):
    """Raised when a function does not match the integrator's dimensionality.

    This is a wiring error on the caller's side and is raised before any grid
    is built or any function value is computed.
    """

    def __init__(self, integrator: str, expected: int, actual: int):
        self.integrator = integrator
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{integrator} requires a {expected}-D function, got one with {actual} parameters"
        )


class ConvergenceFailure(IntegrationError, RuntimeError):
    """Raised when the estimate never converges within the iteration budget.

    Attributes:
        result: The full IntegrationResult, including the iteration history.
        iterations: Number of refinement iterations performed.
        error_pct: Last estimated relative error, in percent.
        estimate: Last (unconverged) integral estimate.
        n_points: Grid shape at the last iteration.
    """

    def __init__(self, result: IntegrationResult, max_error: float):
        self.result = result
        self.iterations = result.iterations
        self.error_pct = result.error_pct
        self.estimate = result.value
        self.n_points = result.n_points
        self.max_error = max_error
        super().__init__(
            f"Integral did not converge to {max_error} % after {self.iterations} iterations: "
            f"estimated error = {self.error_pct} % at grid {self.n_points}"
        )
