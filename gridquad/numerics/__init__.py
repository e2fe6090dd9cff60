"""Grid-refining numerical integration.

This module provides:
- Uniform linear and logarithmic sampling grids (Grid, GridDimension)
- A sparse cache of function values that survives grid refinement (FunctionMap)
- Composite Simpson quadrature over cached grid values
- Adaptive Simpson integrators in 1-D, 2-D and N-D
"""

from gridquad.numerics.config import IntegratorConfig
from gridquad.numerics.errors import ContractViolation, ConvergenceFailure, IntegrationError
from gridquad.numerics.function_map import FunctionMap
from gridquad.numerics.functions import FunctionAdapter, IntegrableFunction
from gridquad.numerics.grid import Grid, GridDimension, Spacing
from gridquad.numerics.integrators import Simpson1D, Simpson2D, SimpsonIntegrator
from gridquad.numerics.results import IntegrationResult, IterationRecord
from gridquad.numerics.simpson import simpson_1d, simpson_rule, simpson_weights

__all__ = [
    "ContractViolation",
    "ConvergenceFailure",
    "FunctionAdapter",
    "FunctionMap",
    "Grid",
    "GridDimension",
    "IntegrableFunction",
    "IntegrationError",
    "IntegrationResult",
    "IntegratorConfig",
    "IterationRecord",
    "Simpson1D",
    "Simpson2D",
    "SimpsonIntegrator",
    "Spacing",
    "simpson_1d",
    "simpson_rule",
    "simpson_weights",
]
