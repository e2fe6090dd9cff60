"""Grid-refining composite Simpson integrators.

The integrators evaluate the function on a uniform grid of ``2**n + 1``
points per axis, integrate it with the composite Simpson rule and refine the
grid until two successive estimates agree within ``max_error`` percent.
Function values are cached in a FunctionMap, so each refinement only
evaluates the newly inserted midpoints.

A non-converged estimate is never returned as a plain number: ``integrate``
raises ConvergenceFailure, while ``integrate_info`` returns an
IntegrationResult whose ``converged`` flag is False.

Example:
    config = IntegratorConfig(max_iterations=10, initial_nstep=2, max_error=0.01)
    f = FunctionAdapter(lambda x, y: x * y, bounds=[(0, 1), (0, 1)])
    Simpson2D(config).integrate(f)  # 0.25
"""

from __future__ import annotations

import logging
import math

from gridquad.logging_config import NOTICE
from gridquad.numerics.config import IntegratorConfig
from gridquad.numerics.errors import ContractViolation, ConvergenceFailure
from gridquad.numerics.function_map import FunctionMap
from gridquad.numerics.functions import IntegrableFunction
from gridquad.numerics.grid import Grid, Spacing, points_at_level
from gridquad.numerics.results import IntegrationResult, IterationRecord
from gridquad.numerics.simpson import simpson_rule


class SimpsonIntegrator:
    """Adaptive composite Simpson integrator for functions of any dimensionality.

    Refinement schedule, starting from ``2**initial_nstep + 1`` points per axis
    (iteration 0 integrates that initial grid):

    - fast density increase: every later iteration doubles the intervals on
      all axes at once.
    - slow density increase: every later iteration doubles the intervals on a
      single axis, cycling through axes ``0, 1, ..., N-1``. The grid as a whole
      reaches the next density level once per full cycle of N iterations.

    With log spacing the grid is uniform in ``ln(x)`` and each value is
    multiplied by the product of the point's coordinates, since
    ``integral f(x) dx = integral x f(x) dln(x)`` on every axis.

    Args:
        config: Iteration budget, tolerance and grid options.
        logger: Logger for diagnostics. Defaults to this module's logger.
    """

    name = "SimpsonIntegrator"
    required_ndim: int | None = None

    def __init__(self, config: IntegratorConfig, logger: logging.Logger | None = None):
        self._config = config
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    @property
    def config(self) -> IntegratorConfig:
        return self._config

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._config!r})"

    def integrate(self, function: IntegrableFunction) -> float:
        """Return the integral of ``function`` over its declared domain.

        Raises:
            ContractViolation: If the function's dimensionality does not match
                this integrator. Raised before any evaluation.
            ConvergenceFailure: If the estimate does not converge within
                ``max_iterations`` iterations.
        """
        result = self.integrate_info(function)
        if not result.converged:
            self._logger.error("Maximum numerical error allowed = %g %%", self._config.max_error)
            self._logger.critical(
                "Estimated error = %s %% - aborting at grid %s", result.error_pct, result.n_points
            )
            raise ConvergenceFailure(result, self._config.max_error)
        return result.value

    def integrate_info(self, function: IntegrableFunction) -> IntegrationResult:
        """Integrate ``function`` and return the estimate with its history.

        Unlike ``integrate`` this does not raise on non-convergence; check
        ``result.converged`` before using ``result.value``.

        Raises:
            ContractViolation: If the function's dimensionality does not match
                this integrator.
        """
        ndim = self._check_dimensionality(function)
        config = self._config
        log = self._logger

        levels = [config.initial_nstep] * ndim
        grid = Grid.from_function(function, config.spacing, points_at_level(config.initial_nstep))
        fmap = FunctionMap(grid, logger=self._logger)

        history: list[IterationRecord] = []
        function_calls = 0
        estimate = 0.0
        previous: float | None = None
        error_pct: float | None = None

        for iteration in range(config.max_iterations):
            self._refine(fmap, levels, iteration)
            log.info("%s: iter = %d, using grid: %s", self.name, iteration, grid)

            new_evaluations = self._fill(fmap, function)
            function_calls += new_evaluations

            estimate = simpson_rule(fmap)

            if previous is None:
                error_pct = None
                log.info("Integral = %g (first estimate)", estimate)
            else:
                if estimate + previous == 0:
                    history.append(
                        IterationRecord(iteration, grid.shape, new_evaluations, 0.0, 0.0)
                    )
                    log.log(NOTICE, "Integral = 0 (estimates cancel exactly)")
                    return IntegrationResult(
                        value=0.0,
                        converged=True,
                        iterations=iteration + 1,
                        function_calls=function_calls,
                        error_pct=0.0,
                        history=history,
                    )
                error_pct = 200.0 * abs((estimate - previous) / (estimate + previous))
                log.info(
                    "Integral = %g (prev = %g) / Estimated err = %g %%",
                    estimate,
                    previous,
                    error_pct,
                )

            history.append(
                IterationRecord(iteration, grid.shape, new_evaluations, estimate, error_pct)
            )

            if error_pct is not None and error_pct < config.max_error:
                log.log(NOTICE, "Integral = %g / Estimated err = %g %%", estimate, error_pct)
                return IntegrationResult(
                    value=estimate,
                    converged=True,
                    iterations=iteration + 1,
                    function_calls=function_calls,
                    error_pct=error_pct,
                    history=history,
                )
            previous = estimate

        log.warning(
            "Integral didn't converge to %g %% after %d iterations",
            config.max_error,
            config.max_iterations,
        )
        return IntegrationResult(
            value=estimate,
            converged=False,
            iterations=config.max_iterations,
            function_calls=function_calls,
            error_pct=error_pct,
            history=history,
        )

    def _check_dimensionality(self, function: IntegrableFunction) -> int:
        ndim = function.n_params
        if self.required_ndim is not None and ndim != self.required_ndim:
            raise ContractViolation(self.name, self.required_ndim, ndim)
        if ndim < 1:
            raise ContractViolation(self.name, 1, ndim)
        return ndim

    def _refine(self, fmap: FunctionMap, levels: list[int], iteration: int) -> None:
        """Apply the refinement for ``iteration``; ``levels`` is updated in place."""
        if iteration == 0:
            return
        if self._config.fast_density_increase:
            for axis in range(len(levels)):
                levels[axis] += 1
            fmap.increase_grid_density(points_at_level(levels[0]))
        else:
            axis = (iteration - 1) % len(levels)
            levels[axis] += 1
            fmap.increase_grid_density(points_at_level(levels[axis]), axis)

    def _fill(self, fmap: FunctionMap, function: IntegrableFunction) -> int:
        """Evaluate ``function`` on every grid point not cached yet.

        Returns:
            Number of function evaluations made.
        """
        grid = fmap.grid
        loge = self._config.spacing is Spacing.LOGE
        log = self._logger
        shape = grid.shape
        n_evals = 0

        for indices in grid.indices():
            if fmap.value_is_set(indices):
                log.debug("grid point %s/%s : computed at previous step", indices, shape)
                continue
            x = grid.coordinates(indices)
            y = function(x)
            log.debug("grid point %s/%s : func(x = %s) = %g", indices, shape, x, y)
            if loge:
                y *= math.prod(x)
            fmap.set_value(y, indices)
            n_evals += 1

        return n_evals


class Simpson1D(SimpsonIntegrator):
    """Adaptive composite Simpson integrator for 1-D functions."""

    name = "Simpson1D"
    required_ndim = 1


class Simpson2D(SimpsonIntegrator):
    """The 2-D extended Simpson rule.

    Integrates along the second parameter for every grid value of the first,
    then integrates the partial sums along the first parameter, refining the
    grid until successive estimates agree within ``max_error`` percent.
    Functions with other than two parameters are rejected with
    ContractViolation.
    """

    name = "Simpson2D"
    required_ndim = 2
