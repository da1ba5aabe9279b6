"""
Generic FittedModel adapter.

ModelSnapshot holds what the inference core needs from a fitted model
(estimates, covariance, grouping factors, data, component tags) and is
the target of every adapter in this package. Construct it through
from_arrays() or an adapter like from_statsmodels(), not directly.

Usage:
    from pyparameters.models import from_arrays

    model = from_arrays(
        coefficients={'(Intercept)': 1.2, 'x': 0.4},
        covariance=vcov,
        data=df,
        groups=['subject'],
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike

from pyparameters.core.exceptions import DimensionError, ValidationError
from pyparameters.inference._common import ComponentTag, GroupingFactor
from pyparameters.inference._components import parse_component_tag


@dataclass(frozen=True)
class ModelSnapshot:
    """
    Immutable FittedModel implementation.

    Attributes:
        estimates: Coefficient name -> estimate, parameter order.
        vcov: Covariance matrix labelled by coefficient name.
        groups: Random-effect grouping factors.
        data: Original data frame, or None.
        components: Coefficient name -> component tag.
        design: Fixed-effect model matrix, or None.
        n_obs: Number of observations.
        df_resid: Residual df reported by the fitting library, or None.
        responses: Coefficient name -> response, for multi-response models.
    """
    estimates: dict[str, float]
    vcov: pd.DataFrame = field(repr=False)
    groups: tuple[GroupingFactor, ...] = ()
    data: pd.DataFrame | None = field(default=None, repr=False)
    components: dict[str, ComponentTag] = field(default_factory=dict, repr=False)
    design: pd.DataFrame | None = field(default=None, repr=False)
    n_obs: int = 0
    df_resid: float | None = None
    responses: dict[str, str] | None = field(default=None, repr=False)

    @property
    def n_observations(self) -> int:
        return self.n_obs

    @property
    def df_residual(self) -> float | None:
        return self.df_resid

    @property
    def response_of(self):
        if self.responses is None:
            return None
        return self.responses.get

    def coefficients(self) -> dict[str, float]:
        return dict(self.estimates)

    def covariance_matrix(self) -> pd.DataFrame:
        return self.vcov

    def grouping_factors(self) -> tuple[GroupingFactor, ...]:
        return self.groups

    def original_data(self) -> pd.DataFrame | None:
        return self.data

    def component_of(self, name: str) -> ComponentTag:
        return self.components.get(name, ComponentTag.CONDITIONAL)

    def design_matrix(self) -> pd.DataFrame | None:
        return self.design


def _grouping_factors(
    groups: Any,
    data: pd.DataFrame | None,
) -> tuple[GroupingFactor, ...]:
    if groups is None:
        return ()
    if isinstance(groups, GroupingFactor):
        return (groups,)
    if isinstance(groups, str):
        groups = [groups]
    if isinstance(groups, Mapping):
        return tuple(GroupingFactor.from_labels(k, v) for k, v in groups.items())

    factors = []
    for g in groups:
        if isinstance(g, GroupingFactor):
            factors.append(g)
        elif data is not None and g in data.columns:
            factors.append(GroupingFactor.from_labels(g, data[g].to_numpy()))
        else:
            raise ValidationError(
                f"Grouping factor {g!r} is neither a GroupingFactor nor a "
                f"column of data"
            )
    return tuple(factors)


def from_arrays(
    coefficients: Mapping[str, float] | ArrayLike,
    covariance: pd.DataFrame | ArrayLike,
    *,
    names: Sequence[str] | None = None,
    data: pd.DataFrame | None = None,
    groups: Any = None,
    components: Mapping[str, str | ComponentTag] | Sequence[str | ComponentTag] | None = None,
    design_matrix: pd.DataFrame | ArrayLike | None = None,
    n_observations: int | None = None,
    df_residual: float | None = None,
    responses: Mapping[str, str] | Sequence[str] | None = None,
) -> ModelSnapshot:
    """Build a FittedModel from plain estimates and a covariance matrix.

    Args:
        coefficients: Mapping name -> estimate, or an array with ``names``.
        covariance: Covariance matrix; a DataFrame labelled by name, or a
            square array in coefficient order.
        names: Coefficient names when ``coefficients`` is an array.
        data: Original data frame used for fitting.
        groups: Grouping factors: column names of ``data``, a mapping
            name -> labels, or GroupingFactor objects.
        components: Component per coefficient (mapping or sequence);
            default conditional. Accepts aliases such as 'zi'.
        design_matrix: Fixed-effect model matrix (n, p).
        n_observations: Number of observations; defaults to the number
            of rows of ``design_matrix`` or ``data``.
        df_residual: Residual df reported by the fitting library.
        responses: Response per coefficient for multi-response models.

    Returns:
        ModelSnapshot implementing FittedModel.

    Raises:
        ValidationError: If names, covariance and components disagree or
            the number of observations cannot be determined.
    """
    if isinstance(coefficients, Mapping):
        estimates = {str(k): float(v) for k, v in coefficients.items()}
    else:
        values = np.asarray(coefficients, dtype=np.float64).ravel()
        if names is None:
            raise ValidationError("names are required when coefficients is an array")
        if len(names) != len(values):
            raise DimensionError(
                f"names has {len(names)} entries, coefficients has {len(values)}"
            )
        estimates = {str(n): float(v) for n, v in zip(names, values)}
    if len(estimates) == 0:
        raise ValidationError("coefficients is empty")
    keys = list(estimates)

    if isinstance(covariance, pd.DataFrame):
        vcov = covariance
    else:
        arr = np.asarray(covariance, dtype=np.float64)
        if arr.shape != (len(keys), len(keys)):
            raise DimensionError(
                f"covariance: expected shape ({len(keys)}, {len(keys)}), got {arr.shape}"
            )
        vcov = pd.DataFrame(arr, index=keys, columns=keys)

    if components is None:
        tags = {}
    elif isinstance(components, Mapping):
        tags = {str(k): parse_component_tag(v) for k, v in components.items()}
    else:
        components = list(components)
        if len(components) != len(keys):
            raise DimensionError(
                f"components has {len(components)} entries, expected {len(keys)}"
            )
        tags = {k: parse_component_tag(c) for k, c in zip(keys, components)}

    design = None
    if design_matrix is not None:
        if isinstance(design_matrix, pd.DataFrame):
            design = design_matrix
        else:
            X = np.asarray(design_matrix, dtype=np.float64)
            if X.ndim == 1:
                X = X.reshape(-1, 1)
            design = pd.DataFrame(X, columns=keys[:X.shape[1]])

    if n_observations is None:
        if design is not None:
            n_observations = len(design)
        elif data is not None:
            n_observations = len(data)
        else:
            raise ValidationError(
                "n_observations is required when neither data nor "
                "design_matrix is given"
            )

    if responses is not None and not isinstance(responses, Mapping):
        responses = dict(zip(keys, responses))

    return ModelSnapshot(
        estimates=estimates,
        vcov=vcov,
        groups=_grouping_factors(groups, data),
        data=data,
        components=tags,
        design=design,
        n_obs=int(n_observations),
        df_resid=None if df_residual is None else float(df_residual),
        responses=None if responses is None else dict(responses),
    )
