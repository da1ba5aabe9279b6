"""
Core infrastructure for PyParameters.

This module provides shared abstractions and utilities used by the
inference engine and the model adapters.

Key components:
    protocols: FittedModel, DofMethod protocols
    capabilities: optional model accessors
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
"""

from pyparameters.core.protocols import FittedModel, DofMethod
from pyparameters.core.result import Result
from pyparameters.core.exceptions import (
    PyParametersError,
    ValidationError,
    DimensionError,
    MissingAccessorError,
)

__all__ = [
    # Protocols
    "FittedModel",
    "DofMethod",
    # Result
    "Result",
    # Exceptions
    "PyParametersError",
    "ValidationError",
    "DimensionError",
    "MissingAccessorError",
]
