"""
Generic result container for all PyParameters computations.

The Result class provides a standardized envelope that inference results
use. It carries the immutable payload together with the metadata that
explains how it was produced (dof method, confidence level, component)
and any non-fatal warnings raised along the way.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (method, ci level, classifications)
    - Immutable (frozen=True) for reproducibility
    - provenance records library versions for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

import numpy as np
import scipy

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, str]:
    from pyparameters import __version__
    return {
        'pyparameters_version': __version__,
        'numpy_version': np.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for inference computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific payload (rows, dof tables, ...)
        info: Structured metadata (method, ci_level, component)
        method_name: Identifier of the dof method that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions used to compute the result

    Examples:
        >>> Result(
        ...     params=InferenceParams(rows=rows),
        ...     info={'ci_level': 0.95, 'component': 'all'},
        ...     method_name='ml1',
        ... )
    """
    params: P
    info: dict[str, Any]
    method_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, str] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
