"""Composite Simpson quadrature over cached grid values.

For an axis of ``N = 2**n + 1`` points and step ``h`` the 1-D weights are

    2h/3 * [1/2, 2, 1, 2, 1, ..., 1, 2, 1/2]

i.e. the familiar ``h/3 * [1, 4, 2, 4, ..., 2, 4, 1]``. A multi-dimensional
grid is reduced one axis at a time: the last axis is integrated for every fixed
value of the leading axes, giving an array of partial sums one dimension
smaller, and the same 1-D rule is applied again until a scalar remains.
"""

from __future__ import annotations

from collections.abc import Sequence

from gridquad.numerics.function_map import FunctionMap


def simpson_weights(n_points: int, step: float) -> list[float]:
    """Return the composite Simpson weights of an axis.

    Args:
        n_points: Number of samples, ``2**n + 1``. The coarsest axis
            (``n = 0``) has just its two bounds, each weighted ``h/3``.
        step: Distance between samples.

    Raises:
        ValueError: If ``n_points`` is not usable by the rule.
    """
    if n_points != 2 and (n_points < 3 or n_points % 2 == 0):
        raise ValueError(
            f"Simpson rule needs 2 or an odd number (>= 3) of points, got {n_points}"
        )

    scale = 2.0 * step / 3.0
    weights = [scale * (k % 2 + 1) for k in range(n_points)]
    weights[0] = weights[-1] = 0.5 * scale
    return weights


def simpson_1d(values: Sequence[float], step: float) -> float:
    """Integrate equally spaced samples with the composite Simpson rule."""
    weights = simpson_weights(len(values), step)
    return sum(w * v for w, v in zip(weights, values))


def simpson_rule(fmap: FunctionMap) -> float:
    """Integrate the values cached in ``fmap`` over its whole grid.

    Every point of the current grid must already be set.

    Raises:
        KeyError: If a grid point has no cached value.
    """
    grid = fmap.grid
    ndim = grid.ndim
    weights = [simpson_weights(grid.n_points(i), grid.step(i)) for i in range(ndim)]

    def reduce(prefix: tuple[int, ...]) -> float:
        axis = len(prefix)
        if axis == ndim - 1:
            return sum(w * fmap.value(prefix + (k,)) for k, w in enumerate(weights[axis]))
        return sum(w * reduce(prefix + (k,)) for k, w in enumerate(weights[axis]))

    return reduce(())
