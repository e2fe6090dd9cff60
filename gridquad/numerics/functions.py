"""Scalar functions of N parameters, as seen by the integrators.

An integrator only needs three things from the function it integrates: how
many parameters it takes, the integration range of each parameter, and its
value at a coordinate vector. ``IntegrableFunction`` is that contract;
``FunctionAdapter`` wraps a plain callable to satisfy it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence


class IntegrableFunction(ABC):
    """Base class for functions handed to an integrator."""

    @property
    @abstractmethod
    def n_params(self) -> int:
        """Number of function parameters (the integration dimensionality)."""

    @property
    @abstractmethod
    def domain(self) -> Sequence[tuple[float, float]]:
        """Integration range ``(lower, upper)`` of each parameter."""

    @abstractmethod
    def __call__(self, x: Sequence[float]) -> float:
        """Evaluate the function at the coordinate vector ``x``."""


class FunctionAdapter(IntegrableFunction):
    """Adapts a plain callable ``func(x0, x1, ...)`` to IntegrableFunction.

    Args:
        func: Callable taking one float per parameter and returning a float.
        bounds: ``(lower, upper)`` per parameter. Its length sets ``n_params``.

    Raises:
        ValueError: If ``bounds`` is empty or any range is empty or reversed.

    Example:
        f = FunctionAdapter(lambda x, y: x * y, bounds=[(0.0, 1.0), (0.0, 1.0)])
        f((0.5, 0.5))  # 0.25
    """

    def __init__(self, func: Callable[..., float], bounds: Sequence[tuple[float, float]]):
        if not bounds:
            raise ValueError("bounds must contain at least one (lower, upper) pair")
        domain = tuple((float(lo), float(hi)) for lo, hi in bounds)
        for lo, hi in domain:
            if not lo < hi:
                raise ValueError(f"bounds must have upper > lower, got ({lo}, {hi})")
        self._func = func
        self._domain = domain

    @property
    def n_params(self) -> int:
        return len(self._domain)

    @property
    def domain(self) -> tuple[tuple[float, float], ...]:
        return self._domain

    def __call__(self, x: Sequence[float]) -> float:
        return float(self._func(*x))

    def __repr__(self) -> str:
        name = getattr(self._func, "__name__", type(self._func).__name__)
        return f"FunctionAdapter({name}, bounds={list(self._domain)})"
