"""Configuration of the grid-refining integrators."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from gridquad.numerics.grid import Spacing

_REQUIRED_KEYS = ("max-iterations", "initial-nstep", "max-error", "in-loge")

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    if isinstance(value, int):
        return bool(value)
    raise ValueError(f"{key} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class IntegratorConfig:
    """Immutable parameters of one integrator.

    Attributes:
        max_iterations: Refinement iterations allowed before giving up.
        initial_nstep: Exponent n of the initial ``2**n + 1`` points per axis.
        max_error: Convergence threshold on the relative error, in percent.
        in_loge: Space grid points uniformly in ``ln(x)`` instead of ``x``.
        fast_density_increase: Refine all axes every iteration instead of
            one axis per iteration.

    Raises:
        ValueError: If any value is out of range.
    """

    max_iterations: int
    initial_nstep: int
    max_error: float
    in_loge: bool = False
    fast_density_increase: bool = False

    def __post_init__(self) -> None:
        if self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.initial_nstep < 0:
            raise ValueError(f"initial_nstep must be non-negative, got {self.initial_nstep}")
        if not self.max_error > 0:
            raise ValueError(f"max_error must be positive, got {self.max_error}")

    @property
    def spacing(self) -> Spacing:
        return Spacing.LOGE if self.in_loge else Spacing.LINEAR

    @classmethod
    def from_registry(cls, registry: Mapping[str, Any]) -> IntegratorConfig:
        """Build a config from registry-style hyphenated keys.

        Reads ``max-iterations``, ``initial-nstep``, ``max-error`` and
        ``in-loge`` (all required) and ``fast-density-increase`` (optional,
        default False). String values such as ``"10"`` or ``"true"`` are
        accepted.

        Raises:
            ValueError: If a required key is missing or a value is invalid.
        """
        missing = [key for key in _REQUIRED_KEYS if key not in registry]
        if missing:
            raise ValueError(f"missing integrator config keys: {', '.join(missing)}")

        try:
            max_iterations = int(registry["max-iterations"])
            initial_nstep = int(registry["initial-nstep"])
            max_error = float(registry["max-error"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"invalid integrator config: {e}") from e

        return cls(
            max_iterations=max_iterations,
            initial_nstep=initial_nstep,
            max_error=max_error,
            in_loge=_as_bool("in-loge", registry["in-loge"]),
            fast_density_increase=_as_bool(
                "fast-density-increase", registry.get("fast-density-increase", False)
            ),
        )

    def to_registry(self) -> dict[str, Any]:
        return {
            "max-iterations": self.max_iterations,
            "initial-nstep": self.initial_nstep,
            "max-error": self.max_error,
            "in-loge": self.in_loge,
            "fast-density-increase": self.fast_density_increase,
        }
