"""Sparse cache of function values on a refinable Grid."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from gridquad.numerics.grid import Grid

# Per axis: (odd numerator, level), or (0, 0) / (1, 0) for the two bounds.
_AxisKey = tuple[int, int]


def _canonical_axis_key(k: int, level: int) -> _AxisKey:
    """Reduce index ``k`` on a ``2**level + 1`` point axis to its coarsest form.

    The sample sits at fraction ``k / 2**level`` of the axis. Dividing out
    common factors of two gives a key that is the same at every density on
    which the sample exists.
    """
    while level > 0 and k % 2 == 0:
        k //= 2
        level -= 1
    return k, level


class FunctionMap:
    """Caches function values across refinements of a Grid.

    Values are addressed by index tuples on the *current* grid. Internally the
    indices are mapped to canonical integer keys, so a value stored on a
    coarse grid is found again after ``increase_grid_density`` without
    comparing floating-point coordinates.

    Args:
        grid: The grid to cache values for. The map refines it in place.
        logger: Logger for densification messages. Defaults to this module's
            logger.

    Example:
        fmap = FunctionMap(Grid.from_bounds([(0, 1), (0, 1)], n_points=3))
        fmap.set_value(2.0, (1, 1))         # centre of the domain
        fmap.increase_grid_density(5)
        fmap.value((2, 2))                  # 2.0, same point on the finer grid
    """

    def __init__(self, grid: Grid, logger: logging.Logger | None = None):
        self._grid = grid
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._values: dict[tuple[_AxisKey, ...], float] = {}

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def n_values(self) -> int:
        """Number of cached values."""
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def _key(self, indices: Sequence[int]) -> tuple[_AxisKey, ...]:
        grid = self._grid
        if len(indices) != grid.ndim:
            raise ValueError(f"expected {grid.ndim} indices, got {len(indices)}")
        key = []
        for axis, k in enumerate(indices):
            dim = grid.dimension(axis)
            if not 0 <= k < dim.n_points:
                raise IndexError(
                    f"index {k} out of range for axis {axis} with {dim.n_points} points"
                )
            key.append(_canonical_axis_key(k, dim.level))
        return tuple(key)

    def increase_grid_density(self, n_points: int, dimension: int | None = None) -> None:
        """Refine one axis, or all axes when ``dimension`` is None, to ``n_points``.

        Args:
            n_points: New point count, of the form ``2**n + 1``.
            dimension: Axis to refine, or None for every axis.

        Raises:
            ValueError: If ``n_points`` is not ``2**n + 1`` or is lower than the
                current point count of a targeted axis.
            IndexError: If ``dimension`` is not an axis of the grid.
        """
        grid = self._grid
        if dimension is None:
            axes = list(range(grid.ndim))
        else:
            if not 0 <= dimension < grid.ndim:
                raise IndexError(f"dimension {dimension} out of range for a {grid.ndim}-D grid")
            axes = [dimension]

        for axis in axes:
            current = grid.n_points(axis)
            if n_points < current:
                raise ValueError(
                    f"cannot reduce axis {axis} from {current} to {n_points} points"
                )

        grid.set_n_points(n_points, dimension)
        self._logger.debug("Grid density increased to %s (axis = %s)", grid.shape, dimension)

    def value_is_set(self, indices: Sequence[int]) -> bool:
        return self._key(indices) in self._values

    def set_value(self, value: float, indices: Sequence[int]) -> None:
        self._values[self._key(indices)] = float(value)

    def value(self, indices: Sequence[int]) -> float:
        """Return the cached value at ``indices``.

        Raises:
            KeyError: If no value was stored for this grid point.
        """
        key = self._key(indices)
        try:
            return self._values[key]
        except KeyError:
            raise KeyError(
                f"no value computed at grid point {tuple(indices)} "
                f"(x = {self._grid.coordinates(indices)})"
            ) from None
