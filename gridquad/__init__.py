"""gridquad: adaptive grid quadrature for Monte Carlo event generators.

The library is silent by default. Enable logging with one of the helpers
re-exported from ``gridquad.logging_config``.
"""

import logging

from gridquad.logging_config import (
    NOTICE,
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)
from gridquad.numerics import (
    ContractViolation,
    ConvergenceFailure,
    FunctionAdapter,
    FunctionMap,
    Grid,
    GridDimension,
    IntegrableFunction,
    IntegrationError,
    IntegrationResult,
    IntegratorConfig,
    IterationRecord,
    Simpson1D,
    Simpson2D,
    SimpsonIntegrator,
    Spacing,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Logging
    "NOTICE",
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
    # Grids and caching
    "FunctionMap",
    "Grid",
    "GridDimension",
    "Spacing",
    # Functions
    "FunctionAdapter",
    "IntegrableFunction",
    # Integrators
    "IntegratorConfig",
    "IntegrationResult",
    "IterationRecord",
    "Simpson1D",
    "Simpson2D",
    "SimpsonIntegrator",
    # Errors
    "ContractViolation",
    "ConvergenceFailure",
    "IntegrationError",
]
