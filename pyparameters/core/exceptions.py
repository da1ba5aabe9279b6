"""
Exception hierarchy for PyParameters.

All exceptions inherit from PyParametersError to allow catching any
library-specific error.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Numeric degeneracies (zero variance, non-positive df) are NOT
      exceptions; they surface as None in result rows
"""


class PyParametersError(Exception):
    """Base exception for all PyParameters errors."""
    pass


class ValidationError(PyParametersError):
    """
    Input validation failed.

    Raised when user-provided inputs (confidence level, component name,
    dof method, covariance shape) fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when the covariance matrix is not square, or when the number
    of coefficients, covariance rows and dof entries disagree.
    """
    pass


class MissingAccessorError(ValidationError):
    """
    A fitted model does not expose an accessor the computation requires.

    This is the one structural failure that halts computation: without
    coefficients or a covariance matrix no inference is possible.

    Attributes:
        accessor: Name of the missing accessor (e.g. 'covariance_matrix')
        model_type: Type name of the offending model object
    """

    def __init__(
        self,
        message: str,
        accessor: str | None = None,
        model_type: str | None = None,
    ):
        super().__init__(message)
        self.accessor = accessor
        self.model_type = model_type

