"""Unit tests for the adaptive Simpson integrators."""

import itertools
import logging
import math
from collections import Counter

import pytest

from gridquad.numerics.config import IntegratorConfig
from gridquad.numerics.errors import ContractViolation, ConvergenceFailure, IntegrationError
from gridquad.numerics.function_map import FunctionMap
from gridquad.numerics.functions import FunctionAdapter, IntegrableFunction
from gridquad.numerics.grid import Grid, Spacing
from gridquad.numerics.integrators import Simpson1D, Simpson2D, SimpsonIntegrator

UNIT_SQUARE = [(0.0, 1.0), (0.0, 1.0)]


class CountingFunction(IntegrableFunction):
    """Wraps a callable and records every evaluation."""

    def __init__(self, func, bounds):
        self._func = func
        self._bounds = tuple(bounds)
        self.calls = 0
        self.calls_per_point: Counter = Counter()

    @property
    def n_params(self) -> int:
        return len(self._bounds)

    @property
    def domain(self):
        return self._bounds

    def __call__(self, x):
        self.calls += 1
        self.calls_per_point[tuple(x)] += 1
        return self._func(*x)


class NoDomainFunction(IntegrableFunction):
    """A 3-parameter function that fails if anything tries to build a grid from it."""

    n_params = 3

    @property
    def domain(self):
        raise AssertionError("domain must not be read")

    def __call__(self, x):
        raise AssertionError("function must not be evaluated")


def never_settles(bounds=UNIT_SQUARE) -> CountingFunction:
    """Each new evaluation returns a larger value than all previous ones."""
    counter = itertools.count(1)
    return CountingFunction(lambda *x: float(next(counter)), bounds)


def _config(**overrides) -> IntegratorConfig:
    params = dict(max_iterations=10, initial_nstep=1, max_error=0.01)
    params.update(overrides)
    return IntegratorConfig(**params)


class TestKnownIntegrals:
    """Integrals with closed-form values."""

    def test_product_over_unit_square(self):
        """int x*y over [0,1]^2 = 0.25, within max_error percent."""
        config = _config()
        value = Simpson2D(config).integrate(FunctionAdapter(lambda x, y: x * y, UNIT_SQUARE))

        assert abs(value - 0.25) / 0.25 * 100 < config.max_error

    def test_constant_over_rectangle(self):
        """A constant c over area A integrates to c*A."""
        result = Simpson2D(_config()).integrate_info(
            FunctionAdapter(lambda x, y: 3.0, [(0.0, 2.0), (1.0, 4.0)])
        )

        assert result.converged
        assert result.value == pytest.approx(18.0, rel=1e-12)
        assert result.iterations == 2

    def test_gaussian(self):
        """int exp(-(x^2 + y^2)) over [0,1]^2 = (sqrt(pi)/2 * erf(1))^2."""
        expected = (math.sqrt(math.pi) / 2 * math.erf(1.0)) ** 2
        value = Simpson2D(_config(max_error=1e-3, max_iterations=20)).integrate(
            FunctionAdapter(lambda x, y: math.exp(-(x * x + y * y)), UNIT_SQUARE)
        )

        assert value == pytest.approx(expected, rel=1e-5)

    def test_fast_density_increase_gives_same_value(self):
        f = FunctionAdapter(lambda x, y: math.sin(x) * math.cos(y), [(0.0, math.pi), (0.0, 1.0)])
        slow = Simpson2D(_config(max_error=1e-5, max_iterations=20)).integrate(f)
        fast = Simpson2D(
            _config(max_error=1e-5, max_iterations=20, fast_density_increase=True)
        ).integrate(f)

        expected = 2.0 * math.sin(1.0)
        assert slow == pytest.approx(expected, rel=1e-5)
        assert fast == pytest.approx(expected, rel=1e-5)

    def test_zero_function_returns_exact_zero(self):
        result = Simpson2D(_config()).integrate_info(FunctionAdapter(lambda x, y: 0.0, UNIT_SQUARE))

        assert result.converged
        assert result.value == 0.0
        assert result.iterations == 2

    def test_coarsest_initial_grid(self):
        """initial_nstep = 0 starts from the bounds only."""
        result = Simpson2D(_config(initial_nstep=0)).integrate_info(
            FunctionAdapter(lambda x, y: x * y, UNIT_SQUARE)
        )

        assert result.history[0].n_points == (2, 2)
        assert result.value == pytest.approx(0.25)

    def test_coarsest_grid_curved_along_unrefined_axis(self):
        """int y^2 over [0,1]^2 = 1/3, while axis 1 stays at 2 points for a step.

        Bounds-only weights are h/3, so the first estimate is 2/9 and refining
        only x0 moves it to 1/3; the run cannot settle on the 2-point value.
        """
        config = _config(initial_nstep=0)
        result = Simpson2D(config).integrate_info(
            FunctionAdapter(lambda x, y: y * y, UNIT_SQUARE)
        )

        assert result.converged
        assert [r.n_points for r in result.history][:2] == [(2, 2), (3, 2)]
        assert result.history[0].estimate == pytest.approx(2.0 / 9.0)
        assert result.history[1].error_pct == pytest.approx(40.0)
        assert result.iterations == 3
        assert abs(result.value - 1.0 / 3.0) * 3.0 * 100 < config.max_error

    def test_one_dimension(self):
        value = Simpson1D(_config(max_error=1e-4, max_iterations=20)).integrate(
            FunctionAdapter(math.sin, [(0.0, math.pi)])
        )

        assert value == pytest.approx(2.0, rel=1e-5)

    def test_three_dimensions(self):
        f = FunctionAdapter(lambda x, y, z: x * y * z, [(0.0, 1.0)] * 3)
        value = SimpsonIntegrator(_config()).integrate(f)

        assert value == pytest.approx(0.125)


class TestLogSpacing:
    """Tests for integration on grids uniform in ln(x)."""

    def test_cached_value_includes_jacobian(self):
        """With log spacing the cache holds f(x0, x1) * x0 * x1."""
        raw = lambda x, y: x + 2.0 * y  # noqa: E731
        integrator = Simpson2D(_config(in_loge=True))
        grid = Grid.from_bounds([(1.0, 10.0), (2.0, 8.0)], n_points=3, spacing=Spacing.LOGE)
        fmap = FunctionMap(grid)

        integrator._fill(fmap, FunctionAdapter(raw, [(1.0, 10.0), (2.0, 8.0)]))

        for idx in grid.indices():
            x0, x1 = grid.coordinates(idx)
            assert fmap.value(idx) == pytest.approx(raw(x0, x1) * x0 * x1)

    def test_linear_spacing_stores_raw_values(self):
        raw = lambda x, y: x + 2.0 * y  # noqa: E731
        integrator = Simpson2D(_config())
        grid = Grid.from_bounds(UNIT_SQUARE, n_points=3)
        fmap = FunctionMap(grid)

        integrator._fill(fmap, FunctionAdapter(raw, UNIT_SQUARE))

        assert fmap.value((2, 1)) == pytest.approx(raw(1.0, 0.5))

    def test_reciprocal_is_exact_in_log_space(self):
        """int_1^10 dx/x = ln(10); in ln(x) the integrand is constant."""
        result = Simpson1D(_config(in_loge=True)).integrate_info(
            FunctionAdapter(lambda x: 1.0 / x, [(1.0, 10.0)])
        )

        assert result.value == pytest.approx(math.log(10.0), rel=1e-12)
        assert result.iterations == 2

    def test_constant_over_log_square(self):
        """int 1 over [1,e]^2 = (e - 1)^2."""
        value = Simpson2D(_config(in_loge=True, max_error=1e-4, max_iterations=20)).integrate(
            FunctionAdapter(lambda x, y: 1.0, [(1.0, math.e), (1.0, math.e)])
        )

        assert value == pytest.approx((math.e - 1.0) ** 2, rel=1e-5)


class TestCaching:
    """Each grid point is evaluated once across all refinements."""

    def test_every_point_evaluated_exactly_once(self):
        f = never_settles()
        result = Simpson2D(_config(max_iterations=4, fast_density_increase=True)).integrate_info(f)

        assert f.calls == 17 * 17
        assert result.function_calls == f.calls
        assert max(f.calls_per_point.values()) == 1

    def test_new_evaluations_per_iteration(self):
        f = never_settles()
        result = Simpson2D(_config(max_iterations=4, fast_density_increase=True)).integrate_info(f)

        assert [r.new_evaluations for r in result.history] == [9, 25 - 9, 81 - 25, 289 - 81]

    def test_refilling_a_cached_grid_does_not_evaluate(self):
        f = CountingFunction(lambda x, y: x - y, UNIT_SQUARE)
        integrator = Simpson2D(_config())
        fmap = FunctionMap(Grid.from_bounds(UNIT_SQUARE, n_points=5))

        assert integrator._fill(fmap, f) == 25
        assert integrator._fill(fmap, f) == 0
        assert f.calls == 25

    def test_refinement_only_evaluates_midpoints(self):
        f = CountingFunction(lambda x, y: x - y, UNIT_SQUARE)
        integrator = Simpson2D(_config())
        fmap = FunctionMap(Grid.from_bounds(UNIT_SQUARE, n_points=3))

        integrator._fill(fmap, f)
        fmap.increase_grid_density(5, dimension=0)

        assert integrator._fill(fmap, f) == 15 - 9


class TestRefinementSchedule:
    """Tests for fast and slow density increase."""

    def test_slow_mode_refines_one_axis_per_iteration(self):
        result = Simpson2D(_config(max_iterations=5)).integrate_info(never_settles())

        assert [r.n_points for r in result.history] == [
            (3, 3),
            (5, 3),
            (5, 5),
            (9, 5),
            (9, 9),
        ]

    def test_fast_mode_refines_all_axes(self):
        result = Simpson2D(_config(max_iterations=3, fast_density_increase=True)).integrate_info(
            never_settles()
        )

        assert [r.n_points for r in result.history] == [(3, 3), (5, 5), (9, 9)]

    def test_slow_mode_cycles_through_three_axes(self):
        f = never_settles([(0.0, 1.0)] * 3)
        result = SimpsonIntegrator(_config(max_iterations=5)).integrate_info(f)

        assert [r.n_points for r in result.history] == [
            (3, 3, 3),
            (5, 3, 3),
            (5, 5, 3),
            (5, 5, 5),
            (9, 5, 5),
        ]

    def test_initial_nstep_sets_first_grid(self):
        result = Simpson2D(_config(initial_nstep=3, max_iterations=1)).integrate_info(
            never_settles()
        )

        assert result.history[0].n_points == (9, 9)


class TestNonConvergence:
    """A function that never stabilizes exhausts the iteration budget."""

    def test_raises_convergence_failure(self):
        with pytest.raises(ConvergenceFailure) as exc_info:
            Simpson2D(_config(max_iterations=6)).integrate(never_settles())

        err = exc_info.value
        assert err.iterations == 6
        assert len(err.result.history) == 6
        assert err.error_pct > err.max_error
        assert err.n_points == (17, 9)
        assert not err.result.converged

    def test_failure_is_an_integration_error(self):
        with pytest.raises(IntegrationError):
            Simpson2D(_config(max_iterations=3)).integrate(never_settles())

    def test_single_iteration_cannot_converge(self):
        with pytest.raises(ConvergenceFailure) as exc_info:
            Simpson2D(_config(max_iterations=1)).integrate(
                FunctionAdapter(lambda x, y: 1.0, UNIT_SQUARE)
            )

        assert exc_info.value.error_pct is None

    def test_integrate_info_reports_without_raising(self):
        result = Simpson2D(_config(max_iterations=4)).integrate_info(never_settles())

        assert not result.converged
        assert result.iterations == 4
        assert result.value == result.history[-1].estimate

    def test_failure_is_logged(self, caplog):
        caplog.set_level(logging.ERROR, logger="gridquad")

        with pytest.raises(ConvergenceFailure):
            Simpson2D(_config(max_iterations=3)).integrate(never_settles())

        levels = [record.levelno for record in caplog.records]
        assert logging.ERROR in levels
        assert logging.CRITICAL in levels


class TestDimensionality:
    """Tests for the dimensionality precondition."""

    def test_simpson2d_rejects_three_parameters(self):
        with pytest.raises(ContractViolation, match="requires a 2-D function"):
            Simpson2D(_config()).integrate(NoDomainFunction())

    def test_rejected_before_any_evaluation(self):
        f = CountingFunction(lambda x, y, z: 1.0, [(0.0, 1.0)] * 3)

        with pytest.raises(ContractViolation):
            Simpson2D(_config()).integrate_info(f)

        assert f.calls == 0

    def test_simpson1d_rejects_two_parameters(self):
        with pytest.raises(ContractViolation) as exc_info:
            Simpson1D(_config()).integrate(FunctionAdapter(lambda x, y: 1.0, UNIT_SQUARE))

        assert exc_info.value.expected == 1
        assert exc_info.value.actual == 2

    def test_contract_violation_is_value_error(self):
        with pytest.raises(ValueError):
            Simpson2D(_config()).integrate(NoDomainFunction())


class TestLogging:
    """Tests for diagnostic logging."""

    def test_injected_logger_receives_records(self, caplog):
        injected = logging.getLogger("tests.injected")
        caplog.set_level(logging.INFO, logger="tests.injected")

        Simpson2D(_config(), logger=injected).integrate(FunctionAdapter(lambda x, y: x, UNIT_SQUARE))

        names = {record.name for record in caplog.records}
        assert names == {"tests.injected"}
        assert any("iter = 0" in record.getMessage() for record in caplog.records)

    def test_debug_reports_cached_points(self, caplog):
        caplog.set_level(logging.DEBUG, logger="gridquad")

        Simpson2D(_config()).integrate(FunctionAdapter(lambda x, y: x + y, UNIT_SQUARE))

        messages = [record.getMessage() for record in caplog.records]
        assert any("computed at previous step" in m for m in messages)
        assert any("func(x = " in m for m in messages)

    def test_densification_uses_injected_logger(self, caplog):
        injected = logging.getLogger("tests.injected")
        caplog.set_level(logging.DEBUG, logger="tests.injected")

        Simpson2D(_config(), logger=injected).integrate(FunctionAdapter(lambda x, y: x, UNIT_SQUARE))

        messages = [record.getMessage() for record in caplog.records]
        assert any("Grid density increased" in m for m in messages)
        assert {record.name for record in caplog.records} == {"tests.injected"}

    def test_integrate_info_failure_is_a_warning(self, caplog):
        caplog.set_level(logging.DEBUG, logger="gridquad")

        result = Simpson2D(_config(max_iterations=3)).integrate_info(never_settles())

        assert not result.converged
        levels = {record.levelno for record in caplog.records}
        assert logging.WARNING in levels
        assert not levels & {logging.ERROR, logging.CRITICAL}
