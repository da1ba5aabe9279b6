"""
Core protocols for PyParameters.

These define structural interfaces that fitted-model adapters and dof
methods must satisfy. We use Protocol (structural typing) rather than ABC
(nominal typing) so that any object exposing the right accessors works,
whichever library fitted it.

Design Principles:
    - Minimal contracts: prescribe only what inference truly needs
    - Capability-driven: optional accessors are checked with supports()
    - Type-safe: use generics to preserve type information through pipelines
"""

from __future__ import annotations

from typing import Protocol, TypeVar, Any, Sequence, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    import pandas as pd
    from pyparameters.inference._common import ComponentTag, GroupingFactor

# Type variables for generic payloads
P = TypeVar('P', covariant=True)  # Payload type
D = TypeVar('D', contravariant=True)  # Design type

# Accessors every FittedModel must expose, checked by InferenceDesign
REQUIRED_ACCESSORS = (
    'coefficients',
    'covariance_matrix',
    'grouping_factors',
    'original_data',
    'component_of',
    'n_observations',
)


@runtime_checkable
class FittedModel(Protocol):
    """
    Minimal protocol for a model that some external library has fitted.

    Implemented per model family by adapters (see pyparameters.models).
    The inference core is written once against this interface.
    """

    @property
    def n_observations(self) -> int:
        """Number of observations the model was fitted on."""
        ...

    def coefficients(self) -> dict[str, float]:
        """Fixed-effect point estimates, in parameter-vector order."""
        ...

    def covariance_matrix(self) -> 'pd.DataFrame':
        """
        Variance-covariance matrix of the fixed effects.

        Square, symmetric, positive-semidefinite, indexed on both axes by
        coefficient name.
        """
        ...

    def grouping_factors(self) -> Sequence['GroupingFactor']:
        """Random-effect grouping factors; empty for non-mixed models."""
        ...

    def original_data(self) -> 'pd.DataFrame | None':
        """The data frame used for fitting, or None if unavailable."""
        ...

    def component_of(self, name: str) -> 'ComponentTag':
        """Linear predictor a coefficient belongs to."""
        ...


@runtime_checkable
class DofMethod(Protocol[D, P]):
    """
    Protocol for degrees-of-freedom approximations.

    Every method takes the same validated design and returns the same
    kind of table, so the inference engine does not care which heuristic
    produced the values.

    Type Parameters:
        D: The design type this method accepts
        P: The dof table type this method produces
    """

    @property
    def name(self) -> str:
        """
        Method identifier.

        Examples: 'ml1', 'residual', 'wald', 'kenward', 'satterthwaite'
        """
        ...

    @property
    def strict(self) -> bool:
        """Whether a missing dof must propagate to p-values and intervals."""
        ...

    def compute(self, design: D) -> Any:
        """
        Compute one dof value per coefficient of the design.

        Returns:
            Dof table of type P
        """
        ...
