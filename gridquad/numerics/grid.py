"""Uniform sampling grids for the Simpson integrators.

A Grid is the Cartesian product of one-dimensional uniform samplings, one
``GridDimension`` per function parameter. Each axis is spaced either linearly
or uniformly in ``ln(x)``.

Every axis holds ``2**n + 1`` points. Raising an axis from ``2**n + 1`` to
``2**(n+1) + 1`` points only inserts midpoints, so every sample of the coarse
grid is still a sample of the refined one. FunctionMap relies on this to keep
cached values across refinements.
"""

from __future__ import annotations

import itertools
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gridquad.numerics.functions import IntegrableFunction


class Spacing(Enum):
    """Placement of sample points along an axis."""

    LINEAR = "linear"
    LOGE = "loge"


def is_refinable_count(n_points: int) -> bool:
    """Return True if ``n_points`` has the form ``2**n + 1`` with ``n >= 0``."""
    if n_points < 2:
        return False
    m = n_points - 1
    return m & (m - 1) == 0


def refinement_level(n_points: int) -> int:
    """Return ``n`` for an axis of ``2**n + 1`` points."""
    if not is_refinable_count(n_points):
        raise ValueError(f"n_points must be of the form 2**n + 1, got {n_points}")
    return (n_points - 1).bit_length() - 1


def points_at_level(level: int) -> int:
    """Return ``2**level + 1``."""
    if level < 0:
        raise ValueError(f"level must be non-negative, got {level}")
    return 2**level + 1


@dataclass(slots=True)
class GridDimension:
    """One axis of a Grid.

    Attributes:
        lower: Lower integration bound (linear coordinate).
        upper: Upper integration bound (linear coordinate).
        n_points: Number of samples, including both bounds.
        spacing: LINEAR or LOGE.
    """

    lower: float
    upper: float
    n_points: int
    spacing: Spacing = Spacing.LINEAR

    def __post_init__(self) -> None:
        if not self.lower < self.upper:
            raise ValueError(
                f"lower bound must be below upper bound, got [{self.lower}, {self.upper}]"
            )
        if self.spacing is Spacing.LOGE and self.lower <= 0:
            raise ValueError(
                f"logarithmic spacing needs positive bounds, got [{self.lower}, {self.upper}]"
            )
        if not is_refinable_count(self.n_points):
            raise ValueError(f"n_points must be of the form 2**n + 1, got {self.n_points}")

    @property
    def level(self) -> int:
        return refinement_level(self.n_points)

    @property
    def _start(self) -> float:
        return math.log(self.lower) if self.spacing is Spacing.LOGE else self.lower

    @property
    def _stop(self) -> float:
        return math.log(self.upper) if self.spacing is Spacing.LOGE else self.upper

    @property
    def step(self) -> float:
        """Distance between neighbouring samples (in ``ln(x)`` for LOGE axes)."""
        return (self._stop - self._start) / (self.n_points - 1)

    def point(self, k: int) -> float:
        """Return the linear coordinate of the k-th sample."""
        if not 0 <= k < self.n_points:
            raise IndexError(f"point index {k} out of range for {self.n_points} points")
        # Pin the bounds so they do not drift with the step size.
        if k == 0:
            return self.lower
        if k == self.n_points - 1:
            return self.upper
        u = self._start + k * self.step
        return math.exp(u) if self.spacing is Spacing.LOGE else u

    def points(self) -> list[float]:
        return [self.point(k) for k in range(self.n_points)]

    def __str__(self) -> str:
        return (
            f"[{self.lower:g}, {self.upper:g}] N = {self.n_points}, "
            f"step = {self.step:g} ({self.spacing.value})"
        )


class Grid:
    """Rectangular sampling domain built from one GridDimension per axis.

    Args:
        dimensions: The axes of the grid, in function-parameter order.

    Example:
        grid = Grid.from_bounds([(0.0, 1.0), (1.0, 10.0)], n_points=5)
        grid.point(1, 4)   # 10.0
        grid.shape         # (5, 5)
    """

    def __init__(self, dimensions: Sequence[GridDimension]):
        if not dimensions:
            raise ValueError("a grid needs at least one dimension")
        self._dimensions = list(dimensions)

    @classmethod
    def from_bounds(
        cls,
        bounds: Sequence[tuple[float, float]],
        n_points: int,
        spacing: Spacing = Spacing.LINEAR,
    ) -> Grid:
        """Build a grid with the same point count and spacing on every axis."""
        return cls([GridDimension(lo, hi, n_points, spacing) for lo, hi in bounds])

    @classmethod
    def from_function(
        cls,
        function: IntegrableFunction,
        spacing: Spacing,
        n_points: int,
    ) -> Grid:
        """Build a grid spanning the declared domain of ``function``."""
        return cls.from_bounds(function.domain, n_points, spacing)

    @property
    def ndim(self) -> int:
        return len(self._dimensions)

    def __len__(self) -> int:
        return len(self._dimensions)

    def __getitem__(self, i: int) -> GridDimension:
        return self._dimensions[i]

    def dimension(self, i: int) -> GridDimension:
        return self._dimensions[i]

    def n_points(self, i: int) -> int:
        return self._dimensions[i].n_points

    def step(self, i: int) -> float:
        return self._dimensions[i].step

    def point(self, i: int, k: int) -> float:
        """Return the coordinate of the k-th sample along axis i."""
        return self._dimensions[i].point(k)

    def points(self, i: int) -> list[float]:
        return self._dimensions[i].points()

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(dim.n_points for dim in self._dimensions)

    @property
    def n_total_points(self) -> int:
        return math.prod(self.shape)

    @property
    def spacing(self) -> tuple[Spacing, ...]:
        return tuple(dim.spacing for dim in self._dimensions)

    def indices(self) -> Iterator[tuple[int, ...]]:
        """Iterate over all index tuples, last axis varying fastest."""
        return itertools.product(*(range(n) for n in self.shape))

    def coordinates(self, indices: Sequence[int]) -> tuple[float, ...]:
        """Return the coordinate vector of the sample at ``indices``."""
        if len(indices) != self.ndim:
            raise ValueError(f"expected {self.ndim} indices, got {len(indices)}")
        return tuple(dim.point(k) for dim, k in zip(self._dimensions, indices))

    def set_n_points(self, n_points: int, dimension: int | None = None) -> None:
        """Resample one axis (or all axes when ``dimension`` is None) with ``n_points``."""
        if not is_refinable_count(n_points):
            raise ValueError(f"n_points must be of the form 2**n + 1, got {n_points}")
        targets = self._dimensions if dimension is None else [self._dimensions[dimension]]
        for dim in targets:
            dim.n_points = n_points

    def __str__(self) -> str:
        return " x ".join(f"({dim})" for dim in self._dimensions)

    def __repr__(self) -> str:
        return f"Grid(shape={self.shape})"
