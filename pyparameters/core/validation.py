"""
Input validation utilities for PyParameters.

Structural problems (non-numeric input, wrong shapes, a confidence level
outside (0, 1)) raise immediately with the offending parameter named in
the message.

Numeric degeneracies inside otherwise well-formed inputs (a zero or NaN
variance on the covariance diagonal) are NOT validation errors; they are
carried through to the result as missing values.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pyparameters.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Convert estimates, covariances or df to a float64 array.

    NaN and Inf pass through; callers decide what they mean.

    Raises:
        ValidationError: If the input is not numeric (strings, mixed
            types, ragged nesting)
    """
    try:
        arr = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: not convertible to a numeric array ({e})") from e

    if arr.dtype == object or not np.issubdtype(arr.dtype, np.number):
        raise ValidationError(
            f"{name}: expected numeric values, got dtype {arr.dtype}"
        )
    return arr.astype(np.float64, copy=False)


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """Raise DimensionError unless ``array`` has ``ndim`` dimensions."""
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim} dimension(s), got shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 1, name)


def check_square(array: NDArray[np.floating[Any]], size: int, name: str) -> None:
    """
    Verify a covariance-like matrix is (size, size).

    Args:
        array: Matrix to check
        size: Number of coefficients it must cover
        name: Parameter name for error messages

    Raises:
        DimensionError: If the matrix is not 2D or not size x size
    """
    check_ndim(array, 2, name)
    if array.shape != (size, size):
        raise DimensionError(
            f"{name}: expected shape ({size}, {size}), got {array.shape}"
        )


def check_ci_level(level: float, name: str = "level") -> float:
    """
    Verify a confidence level lies strictly between 0 and 1.

    Args:
        level: Confidence level, e.g. 0.95
        name: Parameter name for error messages

    Returns:
        The level as a Python float

    Raises:
        ValidationError: If level is not a finite number in (0, 1)
    """
    try:
        value = float(level)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name}: expected a number, got {level!r}") from e
    if not np.isfinite(value) or not 0.0 < value < 1.0:
        raise ValidationError(f"{name}: must be in (0, 1), got {value}")
    return value
